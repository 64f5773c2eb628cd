"""Permission-aware recursive hard delete."""

import logging
import threading
from pathlib import Path
from typing import Callable, Optional

from ..errors import CopyCancelled, FilesystemError
from .entry_probe import EntryProbe
from .lister import DirectoryLister
from .reporter import ActionMarker, ReportLine, Reporter
from .results import JobStatus, RunSummary

logger = logging.getLogger(__name__)


class TreeRemover:
    """Depth-first removal of destination entries.

    Unlike the sync traversal this one only aborts on cancellation:
    entries that cannot be deleted are reported and skipped, and the
    parent directory then fails its own deletion as a per-entry failure.
    """

    def __init__(self, reporter: Reporter, summary: RunSummary,
                 lister: DirectoryLister, display: Callable[[Path], str],
                 cancel_event: Optional[threading.Event] = None):
        self.reporter = reporter
        self.summary = summary
        self.lister = lister
        self.display = display
        self.cancel_event = cancel_event

    def delete_file(self, entry: EntryProbe) -> JobStatus:
        """Delete a file or symbolic link.

        Raises:
            CopyCancelled: if the cancel event is set
        """
        self._check_cancelled(entry)
        path = self.display(entry.path)
        if not entry.can_delete:
            logger.warning(f"Cannot delete {entry.path}: permission denied")
            self.reporter.failure(path, "cannot delete")
            self.summary.skipped += 1
            return JobStatus.FAILURE

        try:
            entry.delete()
        except FilesystemError as e:
            logger.error(str(e))
            self.reporter.failure(path, str(e))
            self.summary.errors.append(str(e))
            return JobStatus.FAILURE

        self.reporter.report(ReportLine(ActionMarker.DELETE, path, "deleted", entry.dry_run))
        self.summary.deleted += 1
        return JobStatus.SUCCESS

    def delete_directory(self, entry: EntryProbe) -> JobStatus:
        """Delete a directory and everything deletable below it."""
        self._check_cancelled(entry)
        status = JobStatus.SUCCESS
        for child_name in sorted(self.lister.list_children(entry.path)):
            child = entry.resolve_child(child_name)
            if not child.can_delete:
                logger.warning(f"Skipping {child.path}: permission denied")
                self.reporter.failure(self.display(child.path), "skip to delete")
                self.summary.skipped += 1
                status = JobStatus.FAILURE
                continue
            if child.is_directory and not child.is_symlink:
                child_status = self.delete_directory(child)
            else:
                child_status = self.delete_file(child)
            if child_status is JobStatus.FAILURE:
                status = JobStatus.FAILURE

        if self.delete_file(entry) is JobStatus.FAILURE:
            return JobStatus.FAILURE
        return status

    def _check_cancelled(self, entry: EntryProbe) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise CopyCancelled(f"Delete cancelled ({entry.path})")
