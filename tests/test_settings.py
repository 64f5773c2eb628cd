"""Tests for the configuration models."""

import pytest
import yaml
from pydantic import ValidationError

from mirror_backup.config.settings import BackupConfig, BackupJobConfig, SyncOptions


def _config():
    return BackupConfig(
        backup_jobs=[
            BackupJobConfig(name="docs", sources=["/home/me/Documents"], destination="/mnt/backup"),
            BackupJobConfig(name="music", sources=["/home/me/Music"], destination="/mnt/backup",
                            enabled=False),
        ],
    )


def test_sync_option_defaults():
    options = SyncOptions()

    assert options.mark_deleted_files
    assert options.dry_run
    assert not options.ignore_symlinks
    assert options.chunk_size == 1024 * 1024


def test_chunk_size_must_be_positive():
    with pytest.raises(ValidationError):
        SyncOptions(chunk_size=0)


def test_job_requires_sources_and_destination():
    with pytest.raises(ValidationError):
        BackupJobConfig(name="empty", sources=[], destination="/mnt/backup")
    with pytest.raises(ValidationError):
        BackupJobConfig(name="nowhere", sources=["/src"], destination="  ")


def test_job_lookup():
    config = _config()

    assert config.get_job_by_name("music").sources == ["/home/me/Music"]
    assert config.get_job_by_name("missing") is None
    assert [job.name for job in config.get_enabled_jobs()] == ["docs"]


def test_yaml_roundtrip(tmp_path):
    path = tmp_path / "nested" / "config.yaml"
    config = _config()
    config.sync_options.mark_deleted_files = False

    config.to_yaml(path)
    loaded = BackupConfig.from_yaml(path)

    assert loaded == config
    assert list(yaml.safe_load(path.read_text())) == ["backup_jobs", "sync_options"]


def test_yaml_sync_options_are_optional(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("backup_jobs:\n  - name: docs\n    sources: [/src]\n    destination: /dest\n")

    config = BackupConfig.from_yaml(path)

    assert config.sync_options == SyncOptions()
    assert config.backup_jobs[0].enabled


def test_missing_or_empty_yaml(tmp_path):
    with pytest.raises(FileNotFoundError):
        BackupConfig.from_yaml(tmp_path / "missing.yaml")

    empty = tmp_path / "empty.yaml"
    empty.write_text("")
    with pytest.raises(ValidationError):
        BackupConfig.from_yaml(empty)
