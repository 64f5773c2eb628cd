"""Tests for EntrySnapshot and EntryProbe."""

import os
import threading
from pathlib import Path

import pytest

from conftest import write_file
from mirror_backup.errors import ArgumentError, CopyCancelled, FilesystemError
from mirror_backup.sync.entry_probe import Comparison, EntryProbe, EntrySnapshot


def test_snapshot_of_existing_file(tmp_path):
    path = write_file(tmp_path / "file.txt", "hello", mtime=100)

    snapshot = EntrySnapshot.take(path)

    assert snapshot.exists
    assert not snapshot.is_directory
    assert not snapshot.is_symlink
    assert snapshot.can_read
    assert snapshot.can_create
    assert snapshot.modified_at == 100
    assert snapshot.size == 5


def test_snapshot_of_missing_path(tmp_path):
    snapshot = EntrySnapshot.take(tmp_path / "missing")

    assert not snapshot.exists
    assert not snapshot.can_read
    assert not snapshot.can_write
    assert not snapshot.can_delete
    assert snapshot.modified_at == 0
    assert snapshot.owner is None


def test_snapshot_of_dangling_symlink(tmp_path):
    link = tmp_path / "link"
    link.symlink_to(tmp_path / "nowhere")

    snapshot = EntrySnapshot.take(link)

    assert not snapshot.exists
    assert snapshot.is_symlink
    assert snapshot.can_delete


def test_hidden_file_detected(tmp_path):
    assert EntrySnapshot.take(write_file(tmp_path / ".hidden")).is_hidden
    assert not EntrySnapshot.take(write_file(tmp_path / "shown")).is_hidden


def test_root_path_rejected_outside_dry_run():
    with pytest.raises(ArgumentError):
        EntryProbe(Path("/").anchor)

    probe = EntryProbe(Path("/").anchor, dry_run=True)
    assert probe.dry_run


def test_snapshot_is_not_invalidated_implicitly(tmp_path):
    probe = EntryProbe(tmp_path / "later.txt")
    assert not probe.exists

    write_file(tmp_path / "later.txt")

    assert not probe.exists
    assert probe.refresh().exists
    assert probe.exists


def test_can_create_follows_parent_permission(tmp_path, deny_access):
    deny_access(tmp_path, os.W_OK)

    assert not EntryProbe(tmp_path / "new").can_create
    assert EntryProbe(tmp_path / "new", dry_run=True).can_create


def test_make_directory(tmp_path):
    probe = EntryProbe(tmp_path / "made")

    snapshot = probe.make_directory()

    assert snapshot.exists and snapshot.is_directory
    assert probe.is_directory
    with pytest.raises(FilesystemError):
        probe.make_directory()


def test_mutations_are_suppressed_in_dry_run(tmp_path):
    existing = write_file(tmp_path / "keep.txt")
    target = tmp_path / "copy.txt"

    EntryProbe(tmp_path / "made", dry_run=True).make_directory()
    EntryProbe(existing, dry_run=True).rename("renamed.txt")
    EntryProbe(existing, dry_run=True).copy_to(EntryProbe(target, dry_run=True))
    EntryProbe(existing, dry_run=True).delete()

    assert sorted(os.listdir(tmp_path)) == ["keep.txt"]


def test_rename_returns_snapshot_of_new_path(tmp_path):
    path = write_file(tmp_path / "a.txt")
    probe = EntryProbe(path)

    renamed = probe.rename("a.txt#deleted#")

    assert renamed.path == tmp_path / "a.txt#deleted#"
    assert renamed.exists
    assert not probe.exists


def test_rename_never_replaces_existing_entry(tmp_path):
    write_file(tmp_path / "a.txt", "new")
    write_file(tmp_path / "a.txt#deleted#", "old")

    with pytest.raises(FilesystemError):
        EntryProbe(tmp_path / "a.txt").rename("a.txt#deleted#")

    assert (tmp_path / "a.txt#deleted#").read_text() == "old"


def test_delete_file_and_empty_directory(tmp_path):
    path = write_file(tmp_path / "gone.txt")
    empty = tmp_path / "empty"
    empty.mkdir()

    assert not EntryProbe(path).delete().exists
    assert not EntryProbe(empty).delete().exists


def test_delete_is_not_recursive(tmp_path):
    write_file(tmp_path / "full" / "child.txt")

    with pytest.raises(FilesystemError):
        EntryProbe(tmp_path / "full").delete()

    assert (tmp_path / "full" / "child.txt").exists()


def test_delete_symlink_leaves_target(tmp_path):
    target = tmp_path / "target"
    write_file(target / "inside.txt")
    link = tmp_path / "link"
    link.symlink_to(target, target_is_directory=True)

    EntryProbe(link).delete()

    assert not os.path.lexists(link)
    assert (target / "inside.txt").exists()


def test_copy_preserves_content_and_mtime(tmp_path):
    src = write_file(tmp_path / "src.bin", "x" * 5000, mtime=1234)
    dest = EntryProbe(tmp_path / "dest.bin")
    calls = []

    snapshot = EntryProbe(src).copy_to(dest, progress=lambda done, total: calls.append((done, total)),
                                       chunk_size=1024)

    assert (tmp_path / "dest.bin").read_text() == "x" * 5000
    assert snapshot.exists
    assert snapshot.modified_at == 1234
    assert calls[0] == (0, 5000)
    assert calls[-1] == (5000, 5000)
    assert len(calls) == 6


def test_copy_without_overwrite_refuses_existing_destination(tmp_path):
    src = write_file(tmp_path / "src.txt", "new")
    dest = write_file(tmp_path / "dest.txt", "old")

    with pytest.raises(FilesystemError):
        EntryProbe(src).copy_to(EntryProbe(dest), overwrite=False)
    assert dest.read_text() == "old"

    EntryProbe(src).copy_to(EntryProbe(dest), overwrite=True)
    assert dest.read_text() == "new"


def test_copy_cancelled_between_chunks(tmp_path):
    src = write_file(tmp_path / "src.txt", "abc")
    cancel_event = threading.Event()
    cancel_event.set()

    with pytest.raises(CopyCancelled) as excinfo:
        EntryProbe(src).copy_to(EntryProbe(tmp_path / "dest.txt"), cancel_event=cancel_event)

    assert isinstance(excinfo.value, FilesystemError)


def test_copy_of_missing_source_fails(tmp_path):
    with pytest.raises(FilesystemError):
        EntryProbe(tmp_path / "missing").copy_to(EntryProbe(tmp_path / "dest"))


def test_compare_modified_to(tmp_path):
    old = EntryProbe(write_file(tmp_path / "old", mtime=10))
    same = EntryProbe(write_file(tmp_path / "same", mtime=10))
    new = EntryProbe(write_file(tmp_path / "new", mtime=11))

    assert old.compare_modified_to(new) is Comparison.OLDER
    assert new.compare_modified_to(old) is Comparison.NEWER
    assert old.compare_modified_to(same) is Comparison.EQUAL


def test_resolve_child_keeps_mode(tmp_path):
    child = EntryProbe(tmp_path, dry_run=True).resolve_child("name")

    assert child.path == tmp_path / "name"
    assert child.dry_run


def test_describe_lists_permissions(tmp_path):
    text = EntryProbe(write_file(tmp_path / "f")).describe()

    assert f"path: {tmp_path / 'f'}" in text
    assert "can-read: yes" in text
    assert "is-directory: no" in text


def test_compare_ignores_sub_second_precision(tmp_path):
    precise = EntryProbe(write_file(tmp_path / "precise", mtime=10.4))
    truncated = EntryProbe(write_file(tmp_path / "truncated", mtime=10))
    later = EntryProbe(write_file(tmp_path / "later", mtime=11))

    assert precise.compare_modified_to(truncated) is Comparison.EQUAL
    assert precise.compare_modified_to(later) is Comparison.OLDER


def test_unsearchable_parent_is_a_filesystem_error(tmp_path, monkeypatch):
    blocked = write_file(tmp_path / "locked" / "f.txt")
    real_lstat = Path.lstat

    def fake_lstat(self, *args, **kwargs):
        if self == blocked:
            raise PermissionError(13, "Permission denied", str(self))
        return real_lstat(self, *args, **kwargs)

    monkeypatch.setattr(Path, "lstat", fake_lstat)

    with pytest.raises(FilesystemError):
        EntrySnapshot.take(blocked)
