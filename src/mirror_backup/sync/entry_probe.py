"""Metadata snapshots and effectful operations over single filesystem paths."""

import logging
import os
import shutil
import stat
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

from ..errors import ArgumentError, CopyCancelled, FilesystemError
from ..utils.file_utils import FileHelper

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024 * 1024  # 1MB

ProgressCallback = Callable[[int, int], None]


class Comparison(Enum):
    """Result of comparing two modification times."""
    OLDER = -1
    EQUAL = 0
    NEWER = 1


def _yesno(value: bool) -> str:
    return "yes" if value else "no"


def _has_access(path: Path, mode: int) -> bool:
    return os.access(path, mode)


def _owner_name(path: Path) -> Optional[str]:
    try:
        return path.owner()
    except (NotImplementedError, KeyError, OSError):
        return None


@dataclass(frozen=True)
class EntrySnapshot:
    """Immutable view of one path at the moment it was probed."""
    path: Path
    exists: bool
    is_directory: bool
    is_symlink: bool
    is_hidden: bool
    can_read: bool
    can_write: bool
    can_delete: bool
    can_create: bool
    modified_at: int  # whole seconds since the epoch
    size: int
    owner: Optional[str]

    @classmethod
    def take(cls, path: Path, dry_run: bool = False) -> "EntrySnapshot":
        """Probe ``path`` now.

        Directory-ness, size and modification time follow symbolic links;
        a dangling link reports ``exists=False`` with ``is_symlink=True``.
        """
        try:
            lst = path.lstat()
        except (FileNotFoundError, NotADirectoryError):
            lst = None
        except OSError as e:
            raise FilesystemError(f"File info is not available ({path}): {e}") from e
        is_symlink = lst is not None and stat.S_ISLNK(lst.st_mode)

        try:
            st = path.stat()
        except (FileNotFoundError, NotADirectoryError):
            st = None
        except OSError as e:
            if not is_symlink:
                raise FilesystemError(f"File info is not available ({path}): {e}") from e
            st = None

        parent_writable = _has_access(path.parent, os.W_OK | os.X_OK)
        exists = st is not None

        return cls(
            path=path,
            exists=exists,
            is_directory=exists and stat.S_ISDIR(st.st_mode),
            is_symlink=is_symlink,
            is_hidden=FileHelper.is_hidden_file(path),
            can_read=exists and _has_access(path, os.R_OK),
            can_write=exists and _has_access(path, os.W_OK),
            can_delete=(exists or is_symlink) and parent_writable,
            can_create=dry_run or parent_writable,
            modified_at=st.st_mtime_ns // 1_000_000_000 if exists else 0,
            size=st.st_size if exists and stat.S_ISREG(st.st_mode) else 0,
            owner=_owner_name(path) if exists else None,
        )

    def describe(self) -> str:
        """Multi-line dump used in diagnostics."""
        return (
            "file info:\n"
            f"  path: {self.path}\n"
            f"  owner-user: {self.owner}\n"
            f"  exists: {_yesno(self.exists)}\n"
            f"  is-directory: {_yesno(self.is_directory)}\n"
            f"  can-read: {_yesno(self.can_read)}\n"
            f"  can-write: {_yesno(self.can_write)}\n"
            f"  can-delete: {_yesno(self.can_delete)}\n"
            f"  is-symbolic-link: {_yesno(self.is_symlink)}\n"
            f"  is-hidden: {_yesno(self.is_hidden)}\n"
            f"  time-modified: {self.modified_at}\n"
        )


class EntryProbe:
    """A path plus a lazily taken, explicitly refreshed snapshot.

    Mutating operations are suppressed when ``dry_run`` is set. Each one
    returns a freshly taken snapshot; nothing else invalidates the cached
    one, so callers must use the returned value or call ``refresh()``.
    """

    def __init__(self, path: Union[str, Path], dry_run: bool = False):
        self.path = Path(os.path.abspath(path))
        self.dry_run = dry_run
        self._snapshot: Optional[EntrySnapshot] = None

        # The planned destination of a simulation may hang off anything.
        if not dry_run and self.path.parent == self.path:
            raise ArgumentError(f"The specified path does not have a parent ({self.path})")

    def __repr__(self) -> str:
        return f"EntryProbe({str(self.path)!r}, dry_run={self.dry_run})"

    @property
    def snapshot(self) -> EntrySnapshot:
        if self._snapshot is None:
            self._snapshot = EntrySnapshot.take(self.path, self.dry_run)
        return self._snapshot

    def refresh(self) -> EntrySnapshot:
        """Discard the cached snapshot and probe the path again."""
        self._snapshot = EntrySnapshot.take(self.path, self.dry_run)
        return self._snapshot

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def exists(self) -> bool:
        return self.snapshot.exists

    @property
    def is_directory(self) -> bool:
        return self.snapshot.is_directory

    @property
    def is_symlink(self) -> bool:
        return self.snapshot.is_symlink

    @property
    def can_read(self) -> bool:
        return self.snapshot.can_read

    @property
    def can_write(self) -> bool:
        return self.snapshot.can_write

    @property
    def can_delete(self) -> bool:
        return self.snapshot.can_delete

    @property
    def can_create(self) -> bool:
        return self.snapshot.can_create

    @property
    def modified_at(self) -> int:
        return self.snapshot.modified_at

    @property
    def owner(self) -> Optional[str]:
        return self.snapshot.owner

    def describe(self) -> str:
        return self.snapshot.describe()

    def compare_modified_to(self, other: "EntryProbe") -> Comparison:
        """Compare modification times in whole seconds, without tolerance."""
        if self.modified_at == other.modified_at:
            return Comparison.EQUAL
        if self.modified_at < other.modified_at:
            return Comparison.OLDER
        return Comparison.NEWER

    def resolve_child(self, name: str) -> "EntryProbe":
        return EntryProbe(self.path / name, self.dry_run)

    def make_directory(self) -> EntrySnapshot:
        if not self.dry_run:
            try:
                self.path.mkdir()
            except OSError as e:
                raise FilesystemError(f"Failed to make directory ({self.path}): {e}") from e
            logger.debug(f"Created directory {self.path}")
        return self.refresh()

    def rename(self, new_name: str) -> EntrySnapshot:
        """Rename in place, never replacing an existing entry.

        Returns:
            Snapshot of the renamed path
        """
        target = self.path.with_name(new_name)
        if not self.dry_run:
            if os.path.lexists(target):
                raise FilesystemError(f"Cannot rename {self.path}: {target} already exists")
            try:
                os.rename(self.path, target)
            except OSError as e:
                raise FilesystemError(f"Failed to rename {self.path} to {new_name}: {e}") from e
            logger.debug(f"Renamed {self.path} to {target}")
        self.refresh()
        return EntrySnapshot.take(target, self.dry_run)

    def delete(self) -> EntrySnapshot:
        """Remove a file, a symbolic link or an empty directory."""
        if not self.dry_run:
            try:
                if self.path.is_dir() and not self.path.is_symlink():
                    self.path.rmdir()
                else:
                    self.path.unlink()
            except OSError as e:
                raise FilesystemError(f"Failed to delete {self.path}: {e}") from e
            logger.debug(f"Deleted {self.path}")
        return self.refresh()

    def copy_to(self, dest: "EntryProbe", overwrite: bool = False,
                progress: Optional[ProgressCallback] = None,
                cancel_event: Optional[threading.Event] = None,
                chunk_size: int = DEFAULT_CHUNK_SIZE) -> EntrySnapshot:
        """Copy file content, modification time and mode to ``dest``.

        Blocks until done. ``progress(bytes_done, bytes_total)`` is called
        between chunks on the calling thread. A set ``cancel_event`` stops
        the copy with CopyCancelled and leaves the partial file behind.

        Returns:
            Fresh snapshot of the destination
        """
        if self.dry_run:
            return dest.refresh()

        mode = 'wb' if overwrite else 'xb'
        try:
            with open(self.path, 'rb') as fsrc, open(dest.path, mode) as fdst:
                total = os.fstat(fsrc.fileno()).st_size
                done = 0
                if progress:
                    progress(done, total)
                while True:
                    if cancel_event is not None and cancel_event.is_set():
                        raise CopyCancelled(f"Copy cancelled ({self.path} -> {dest.path})")
                    chunk = fsrc.read(chunk_size)
                    if not chunk:
                        break
                    fdst.write(chunk)
                    done += len(chunk)
                    if progress:
                        progress(done, total)
            shutil.copystat(self.path, dest.path)
        except FileExistsError as e:
            raise FilesystemError(f"Failed to copy {self.path}: {dest.path} already exists") from e
        except OSError as e:
            raise FilesystemError(f"Failed to copy {self.path} to {dest.path}: {e}") from e

        return dest.refresh()
