"""Recursive mirroring of source trees into a destination directory."""

import logging
import threading
from pathlib import Path
from typing import List, Optional, Union

from ..errors import ArgumentError, CopyCancelled, FilesystemError
from ..utils.file_utils import FileHelper
from ..utils.logging import TimedOperation
from .entry_probe import DEFAULT_CHUNK_SIZE, Comparison, EntryProbe
from .lister import DirectoryLister
from .removal import TreeRemover
from .reporter import ActionMarker, ConsoleReporter, ReportLine, Reporter
from .results import JobStatus, RunSummary

# Module logger
logger = logging.getLogger(__name__)

# Appended to destination entries whose source was deleted.
DELETE_MARK = "#deleted#"


class BackupEngine:
    """Mirrors registered sources into one destination.

    Destination files at least as fresh as their source are kept, stale ones
    are overwritten and entries removed at the source are renamed with
    DELETE_MARK (or hard-deleted when ``mark_deleted_files`` is off).
    With ``dry_run`` every decision is made and reported but nothing on
    disk changes.

    Usage::

        engine = BackupEngine(dry_run=False)
        engine.add_source("/home/me/Documents")
        engine.set_destination("/mnt/backup")
        status = engine.run()
    """

    def __init__(self, dry_run: bool = True, reporter: Optional[Reporter] = None):
        self.dry_run = dry_run
        self.reporter = reporter or ConsoleReporter()
        self.mark_deleted_files = True
        self.ignore_symlinks = False
        self.chunk_size = DEFAULT_CHUNK_SIZE

        self.sources: List[EntryProbe] = []
        self.destination: Optional[EntryProbe] = None
        self._summary = RunSummary()
        self._cancel_event: Optional[threading.Event] = None

    @property
    def summary(self) -> RunSummary:
        return self._summary

    @property
    def suppress_progress(self) -> bool:
        return self.reporter.suppress_progress

    def add_source(self, source_path: Union[str, Path]) -> EntryProbe:
        """Register a source directory.

        Raises:
            ArgumentError: if the path is missing, not a directory or unreadable
        """
        logger.debug(f"add source: {source_path} (dry-run={self.dry_run})")
        source = EntryProbe(source_path, self.dry_run)
        if not (source.exists and source.is_directory):
            raise ArgumentError(f"The source path must be a directory\n{source.describe()}")
        if not source.can_read:
            raise ArgumentError(f"The source directory is not readable\n{source.describe()}")

        self.sources.append(source)
        return source

    def set_destination(self, destination_path: Union[str, Path]) -> EntryProbe:
        """Set the backup destination, creating it if allowed.

        Raises:
            ArgumentError: if the path cannot serve as a destination
            FilesystemError: if creating the directory fails
        """
        logger.debug(f"set destination: {destination_path} (dry-run={self.dry_run})")
        destination = EntryProbe(destination_path, self.dry_run)
        if not destination.exists:
            if not destination.can_create:
                raise ArgumentError(f"The destination directory does not exist ({destination.path})")
            destination.make_directory()

        if destination.exists and not destination.is_directory:
            raise ArgumentError(f"The destination path does not point to a directory\n{destination.describe()}")
        if destination.exists and not destination.can_write:
            raise ArgumentError(f"The destination path exists but is not writable\n{destination.describe()}")

        self.destination = destination
        return destination

    def run(self, cancel_event: Optional[threading.Event] = None) -> JobStatus:
        """Back up every registered source in registration order.

        Per-entry failures are reported and counted; the run goes on. Errors
        creating or listing directories, and cancellation, abort it.

        Returns:
            FAILURE if any entry operation could not be carried out
        """
        if self.destination is None:
            raise ArgumentError("No destination has been set")

        self._summary = RunSummary()
        self._cancel_event = cancel_event
        try:
            for source in self.sources:
                self._check_cancelled()
                snapshot = source.refresh()
                if not snapshot.exists or not snapshot.can_read:
                    logger.warning(f"Source {source.path} is no longer available, skipping")
                    continue

                with TimedOperation(logger, f"backup of {source.path}", "DEBUG"):
                    if snapshot.is_directory:
                        dest_child = self.destination.resolve_child(source.name)
                        if not dest_child.exists:
                            dest_child.make_directory()
                        if self.backup_directory(source, dest_child) is JobStatus.FAILURE:
                            logger.info(f"Some entries under {source.path} were skipped or failed")
                    else:
                        self._backup_file_source(source)
        finally:
            self.reporter.end_progress()
            self._cancel_event = None

        if self._summary.has_errors:
            logger.warning(f"Backup finished with {len(self._summary.errors)} errors")
            return JobStatus.FAILURE
        return JobStatus.SUCCESS

    def _backup_file_source(self, source: EntryProbe) -> None:
        # The destination root tracks exactly this one file.
        for child_name in sorted(self._lister().list_children(self.destination.path)):
            self._check_cancelled()
            if child_name == source.name or child_name.endswith(DELETE_MARK):
                continue
            self._guard(self.mark_deleted_file, self.destination.resolve_child(child_name))

        if self.ignore_symlinks and source.is_symlink:
            logger.debug(f"Ignoring symbolic link {source.path}")
            return
        self._check_cancelled()
        self._guard(self.backup_file, source, self.destination.resolve_child(source.name))

    def backup_file(self, src: EntryProbe, dest: EntryProbe) -> JobStatus:
        """Synchronize one file.

        A destination newer than its source is never overwritten.

        Raises:
            FilesystemError: if the copy fails
        """
        path = self._display(dest.path)
        if dest.exists:
            if not dest.can_write:
                return self._skip(path, "destination is not writable")
            comparison = src.compare_modified_to(dest)
            if comparison is Comparison.OLDER:
                return self._skip(path, "destination is newer")
            if comparison is Comparison.EQUAL:
                self.reporter.report(ReportLine(ActionMarker.UNCHANGED, path))
                self._summary.unchanged += 1
                return JobStatus.SUCCESS
            marker = ActionMarker.UPDATE
        else:
            marker = ActionMarker.CREATE

        progress = None
        if not self.suppress_progress:
            def progress(done: int, total: int) -> None:
                self.reporter.progress(marker, path, done, total)

        src.copy_to(dest, overwrite=marker is ActionMarker.UPDATE, progress=progress,
                    cancel_event=self._cancel_event, chunk_size=self.chunk_size)

        self.reporter.report(ReportLine(marker, path, simulated=self.dry_run))
        if marker is ActionMarker.CREATE:
            self._summary.created += 1
        else:
            self._summary.updated += 1
        self._summary.bytes_copied += src.snapshot.size
        return JobStatus.SUCCESS

    def backup_directory(self, src: EntryProbe, dest: EntryProbe) -> JobStatus:
        """Mirror the contents of ``src`` into ``dest`` recursively.

        Returns:
            FAILURE if any entry below was skipped or failed. This is
            informational; the outcome of ``run`` comes from ``summary.errors``.

        Raises:
            FilesystemError: if a directory cannot be listed or created
            CopyCancelled: if the cancel event is set
        """
        lister = self._lister()
        src_children = lister.list_children(src.path)
        dest_children = lister.list_children(dest.path)
        status = JobStatus.SUCCESS

        for child_name in sorted(src_children):
            self._check_cancelled()
            src_child = src.resolve_child(child_name)
            dest_child = dest.resolve_child(child_name)
            if self.ignore_symlinks and src_child.is_symlink:
                logger.debug(f"Ignoring symbolic link {src_child.path}")
                continue

            if src_child.is_directory:
                if not dest_child.exists:
                    dest_child.make_directory()
                child_status = self.backup_directory(src_child, dest_child)
            else:
                child_status = self._guard(self.backup_file, src_child, dest_child)
            if child_status is JobStatus.FAILURE:
                status = JobStatus.FAILURE

        for removed_name in sorted(dest_children - src_children):
            self._check_cancelled()
            removed = dest.resolve_child(removed_name)
            if self.ignore_symlinks and removed.is_symlink:
                continue
            if self.mark_deleted_files:
                if removed_name.endswith(DELETE_MARK):
                    continue
                child_status = self._guard(self.mark_deleted_file, removed)
            elif removed.is_directory and not removed.is_symlink:
                child_status = self._remover().delete_directory(removed)
            else:
                child_status = self._remover().delete_file(removed)
            if child_status is JobStatus.FAILURE:
                status = JobStatus.FAILURE

        return status

    def mark_deleted_file(self, entry: EntryProbe) -> JobStatus:
        """Rename a destination entry whose source is gone.

        Raises:
            FilesystemError: if the rename fails
        """
        path = self._display(entry.path)
        if not entry.can_write:
            logger.warning(f"Cannot mark {entry.path} as deleted: not writable")
            return self._skip(path, "restricted, cannot mark as deleted")

        new_name = entry.name + DELETE_MARK
        entry.rename(new_name)
        self.reporter.report(ReportLine(ActionMarker.DELETE, path, f"marked {new_name}", self.dry_run))
        self._summary.marked_deleted += 1
        return JobStatus.SUCCESS

    def _check_cancelled(self) -> None:
        if self._cancel_event is not None and self._cancel_event.is_set():
            raise CopyCancelled("Backup cancelled")

    def _guard(self, operation, *entries: EntryProbe) -> JobStatus:
        """Run a per-entry operation, turning its I/O errors into a failure."""
        try:
            return operation(*entries)
        except CopyCancelled:
            raise
        except FilesystemError as e:
            logger.error(str(e))
            self.reporter.failure(self._display(entries[-1].path), str(e))
            self._summary.errors.append(str(e))
            return JobStatus.FAILURE

    def _skip(self, path: str, reason: str) -> JobStatus:
        logger.info(f"Skipping {path}: {reason}")
        self.reporter.failure(path, reason)
        self._summary.skipped += 1
        return JobStatus.FAILURE

    def _display(self, path: Path) -> str:
        if self.destination is None:
            return str(path)
        return FileHelper.get_relative_path(path, self.destination.path)

    def _lister(self) -> DirectoryLister:
        return DirectoryLister(self.dry_run)

    def _remover(self) -> TreeRemover:
        return TreeRemover(self.reporter, self._summary, self._lister(), self._display,
                           self._cancel_event)
