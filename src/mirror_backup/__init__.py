"""
Mirror Backup

Mirrors source directories into a destination tree. Up-to-date copies are
kept, stale ones are updated and entries removed at the source are renamed
with a '#deleted#' suffix instead of being deleted.
"""

__version__ = "1.0.0"
__author__ = "Mirror Backup"
__description__ = "Mirror directories into a backup tree, marking deletions instead of removing them"

from .config.settings import BackupConfig
from .errors import ArgumentError, BackupError, FilesystemError
from .sync.backup_engine import BackupEngine
from .sync.backup_manager import BackupManager

__all__ = [
    "BackupConfig",
    "BackupEngine",
    "BackupManager",
    "BackupError",
    "ArgumentError",
    "FilesystemError",
]
