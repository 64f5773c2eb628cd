"""Shared fixtures for the mirror backup tests."""

import os
import sys
from pathlib import Path

import pytest

# Add src to Python path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mirror_backup.sync import entry_probe
from mirror_backup.sync.backup_engine import BackupEngine
from mirror_backup.sync.reporter import Reporter


class RecordingReporter(Reporter):
    """Keeps every line in memory."""

    def __init__(self, suppress_progress=False):
        self.suppress_progress = suppress_progress
        self.lines = []
        self.failures = []
        self.progress_calls = []

    def report(self, line):
        self.lines.append(line)

    def failure(self, path, reason):
        self.failures.append((path, reason))

    def progress(self, marker, path, done, total):
        self.progress_calls.append((marker, path, done, total))

    def entries(self):
        return [(line.marker.value, line.path, line.note) for line in self.lines]

    def markers(self):
        return [(line.marker.value, line.path) for line in self.lines]


def write_file(path: Path, content: str = "data", mtime: float = 10) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def src_root(tmp_path):
    root = tmp_path / "src"
    root.mkdir()
    return root


@pytest.fixture
def dest_root(tmp_path):
    root = tmp_path / "dest"
    root.mkdir()
    return root


@pytest.fixture
def make_engine(reporter, dest_root):
    """Build a real (non dry-run) engine backing up the given sources into dest_root."""

    def _make(*sources, dry_run=False, destination=None, **options):
        engine = BackupEngine(dry_run=dry_run, reporter=reporter)
        for name, value in options.items():
            setattr(engine, name, value)
        for source in sources:
            engine.add_source(source)
        engine.set_destination(destination or dest_root)
        return engine

    return _make


@pytest.fixture
def deny_access(monkeypatch):
    """Make permission probes fail for one path and access mode."""
    real_access = entry_probe._has_access
    denied = []

    def fake_access(path, mode):
        for target, mask in denied:
            if Path(path) == Path(target) and mode & mask:
                return False
        return real_access(path, mode)

    monkeypatch.setattr(entry_probe, "_has_access", fake_access)

    def _deny(path, mask):
        denied.append((Path(path), mask))

    return _deny
