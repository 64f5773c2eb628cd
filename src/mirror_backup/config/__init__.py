"""Configuration management for the mirror backup application."""

from .settings import BackupConfig, BackupJobConfig, SyncOptions

__all__ = ["BackupConfig", "BackupJobConfig", "SyncOptions"]
