"""Sync engine for backup operations."""

from .backup_engine import DELETE_MARK, BackupEngine
from .backup_manager import BackupManager
from .entry_probe import Comparison, EntryProbe, EntrySnapshot
from .lister import DirectoryLister
from .removal import TreeRemover
from .reporter import ActionMarker, ConsoleReporter, LogFileReporter, ReportLine, Reporter
from .results import JobStatus, RunSummary

__all__ = [
    "BackupEngine",
    "BackupManager",
    "DELETE_MARK",
    "Comparison",
    "EntryProbe",
    "EntrySnapshot",
    "DirectoryLister",
    "TreeRemover",
    "ActionMarker",
    "Reporter",
    "ReportLine",
    "ConsoleReporter",
    "LogFileReporter",
    "JobStatus",
    "RunSummary",
]
