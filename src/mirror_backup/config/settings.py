"""Configuration settings and models for the backup application."""

from pathlib import Path
from typing import List, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator


class SyncOptions(BaseModel):
    """Synchronization options shared by all jobs."""
    mark_deleted_files: bool = True
    dry_run: bool = True
    ignore_symlinks: bool = False
    chunk_size: int = 1024 * 1024  # 1MB

    @field_validator('chunk_size')
    @classmethod
    def validate_chunk_size(cls, v):
        if v <= 0:
            raise ValueError('chunk_size must be positive')
        return v


class BackupJobConfig(BaseModel):
    """Configuration for individual backup jobs."""
    name: str
    sources: List[str]
    destination: str
    enabled: bool = True

    @field_validator('sources')
    @classmethod
    def validate_sources(cls, v):
        if not v:
            raise ValueError('at least one source is required')
        return v

    @field_validator('destination')
    @classmethod
    def validate_destination(cls, v):
        if not v.strip():
            raise ValueError('destination must not be empty')
        return v


class BackupConfig(BaseModel):
    """Main configuration class."""
    backup_jobs: List[BackupJobConfig]
    sync_options: SyncOptions = Field(default_factory=SyncOptions)

    @classmethod
    def from_yaml(cls, config_path: Union[str, Path]) -> "BackupConfig":
        """Load configuration from YAML file."""
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**config_data)

    def to_yaml(self, config_path: Union[str, Path]) -> None:
        """Save configuration to YAML file."""
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self.model_dump(exclude_none=True), f, default_flow_style=False,
                           indent=2, sort_keys=False)

    def get_job_by_name(self, name: str) -> Optional[BackupJobConfig]:
        """Get job configuration by name."""
        for job in self.backup_jobs:
            if job.name == name:
                return job
        return None

    def get_enabled_jobs(self) -> List[BackupJobConfig]:
        """Get all enabled backup jobs."""
        return [job for job in self.backup_jobs if job.enabled]
