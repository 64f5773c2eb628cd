"""Exception types shared by the backup engine and its callers."""


class BackupError(Exception):
    """Base class for all mirror-backup errors."""


class ArgumentError(BackupError):
    """Invalid source or destination discovered before traversal starts."""


class FilesystemError(BackupError):
    """An I/O operation on the local filesystem failed."""


class CopyCancelled(FilesystemError):
    """A copy was interrupted through its cancellation event."""
