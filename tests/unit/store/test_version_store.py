"""Unit tests for the sequential version store."""

from __future__ import annotations

import os
import time
from datetime import datetime, timezone
from pathlib import Path

import pytest

from core.errors import (
    MongoDiffConfigError,
    MongoDiffPersistConflictError,
    MongoDiffStorageUnavailableError,
    MongoDiffStoreError,
)
from store.version_store import VersionStore


def test_latest_returns_none_without_creating_directories(tmp_path: Path) -> None:
    """Reading an unknown name should not touch the filesystem."""
    data_dir = tmp_path / "data"
    store = VersionStore(data_dir)

    assert store.latest("mongodb") is None
    assert store.list_versions("mongodb") == []
    assert not data_dir.exists()


def test_save_assigns_increasing_sequences(tmp_path: Path) -> None:
    """Each save should take the next sequence number."""
    store = VersionStore(tmp_path / "data")

    sequences = [store.save("mongodb", f"DB: v{index}\n").sequence for index in range(3)]

    assert sequences == [1, 2, 3]
    assert [record.sequence for record in store.list_versions("mongodb")] == [1, 2, 3]
    latest = store.latest("mongodb")
    assert latest is not None
    assert latest.content == "DB: v2\n"


def test_save_round_trips_content_exactly(tmp_path: Path) -> None:
    """Stored content should come back byte-for-byte."""
    store = VersionStore(tmp_path / "data")
    content = "DB: admin\r\nUSER: db=ü, user=ä\n\tSETTING:  trailing  "
    captured_at = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    saved = store.save("mongodb", content, captured_at)
    loaded = store.load_version("mongodb", saved.sequence)

    assert loaded == saved
    assert loaded.content == content
    assert loaded.captured_at == captured_at


def test_names_keep_separate_histories(tmp_path: Path) -> None:
    """Versions of one name should not affect another name."""
    store = VersionStore(tmp_path / "data")
    store.save("prod", "DB: a\n")
    store.save("prod", "DB: b\n")

    staging = store.save("staging", "DB: c\n")

    assert staging.sequence == 1
    latest = store.latest("prod")
    assert latest is not None
    assert latest.sequence == 2


def test_load_version_raises_for_missing_sequence(tmp_path: Path) -> None:
    """Loading an unknown sequence should raise a store error."""
    store = VersionStore(tmp_path / "data")
    store.save("mongodb", "DB: admin\n")

    with pytest.raises(MongoDiffStoreError, match="not found"):
        store.load_version("mongodb", 7)


def test_save_retries_after_sequence_collision(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A writer holding a stale sequence should retry with the next number."""
    data_dir = tmp_path / "data"
    VersionStore(data_dir).save("mongodb", "first\n")
    racing_store = VersionStore(data_dir)
    allocations = iter([1, 2])
    monkeypatch.setattr(racing_store, "_next_sequence", lambda name: next(allocations))

    saved = racing_store.save("mongodb", "second\n")

    assert saved.sequence == 2
    assert racing_store.load_version("mongodb", 1).content == "first\n"
    assert racing_store.load_version("mongodb", 2).content == "second\n"


def test_save_raises_persist_conflict_when_retries_run_out(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Exhausted allocation attempts should fail without damaging versions."""
    data_dir = tmp_path / "data"
    VersionStore(data_dir).save("mongodb", "first\n")
    racing_store = VersionStore(data_dir, max_save_attempts=3)
    monkeypatch.setattr(racing_store, "_next_sequence", lambda name: 1)

    with pytest.raises(MongoDiffPersistConflictError, match="after 3 attempts"):
        racing_store.save("mongodb", "second\n")

    assert [record.content for record in racing_store.list_versions("mongodb")] == ["first\n"]
    assert list((data_dir / "mongodb" / ".staging").iterdir()) == []


def test_delete_before_removes_older_versions_idempotently(tmp_path: Path) -> None:
    """Deleting below a bound should be repeatable with the same end state."""
    store = VersionStore(tmp_path / "data")
    for index in range(4):
        store.save("mongodb", f"v{index}\n")

    first = store.delete_before("mongodb", 3)
    second = store.delete_before("mongodb", 3)

    assert first.deleted == (1, 2)
    assert first.failed == ()
    assert second.deleted == ()
    assert [record.sequence for record in store.list_versions("mongodb")] == [3, 4]


def test_delete_before_never_removes_newest_version(tmp_path: Path) -> None:
    """A bound above every sequence should still keep the latest version."""
    store = VersionStore(tmp_path / "data")
    for index in range(3):
        store.save("mongodb", f"v{index}\n")

    outcome = store.delete_before("mongodb", 100)

    assert outcome.deleted == (1, 2)
    latest = store.latest("mongodb")
    assert latest is not None
    assert latest.sequence == 3


def test_latest_rejects_tampered_content(tmp_path: Path) -> None:
    """A content file edited outside the store should fail digest checks."""
    data_dir = tmp_path / "data"
    store = VersionStore(data_dir)
    store.save("mongodb", "DB: admin\n")
    content_path = data_dir / "mongodb" / "versions" / "0000000001" / "content.txt"
    content_path.write_text("DB: hacked\n", encoding="utf-8")

    with pytest.raises(MongoDiffStoreError, match="digest mismatch"):
        store.latest("mongodb")


def test_listing_ignores_staging_leftovers_and_foreign_entries(tmp_path: Path) -> None:
    """Half-written staging directories should never count as versions."""
    data_dir = tmp_path / "data"
    leftover = data_dir / "mongodb" / ".staging" / "stage-0000000001-abc"
    leftover.mkdir(parents=True)
    (leftover / "content.txt").write_text("partial", encoding="utf-8")
    (data_dir / "mongodb" / "versions" / "notes").mkdir(parents=True)
    store = VersionStore(data_dir)

    assert store.latest("mongodb") is None
    assert store.save("mongodb", "DB: admin\n").sequence == 1


def test_storage_unavailable_when_data_dir_is_a_file(tmp_path: Path) -> None:
    """A data directory path occupied by a file should be reported clearly."""
    data_dir = tmp_path / "data"
    data_dir.write_text("not a directory", encoding="utf-8")
    store = VersionStore(data_dir)

    with pytest.raises(MongoDiffStorageUnavailableError):
        store.latest("mongodb")
    with pytest.raises(MongoDiffStorageUnavailableError):
        store.save("mongodb", "DB: admin\n")


def test_store_rejects_path_like_names(tmp_path: Path) -> None:
    """Names escaping the data directory should be rejected."""
    store = VersionStore(tmp_path / "data")

    with pytest.raises(MongoDiffConfigError):
        store.save("../outside", "DB: admin\n")
    with pytest.raises(MongoDiffConfigError):
        store.latest(".staging")


def test_save_sweeps_stale_staging_leftovers(tmp_path: Path) -> None:
    """Old crashed writes and retired copies should be removed on save."""
    staging_root = tmp_path / "data" / "mongodb" / ".staging"
    stale_stage = staging_root / "stage-0000000001-old"
    stale_retired = staging_root / "retired-0000000002-old"
    fresh_stage = staging_root / "stage-0000000003-new"
    unrelated = staging_root / "operator-notes"
    for entry in (stale_stage, stale_retired, fresh_stage, unrelated):
        entry.mkdir(parents=True)
    two_hours_ago = time.time() - 7200
    for entry in (stale_stage, stale_retired, unrelated):
        os.utime(entry, (two_hours_ago, two_hours_ago))
    store = VersionStore(tmp_path / "data")

    store.save("mongodb", "DB: admin\n")

    assert not stale_stage.exists()
    assert not stale_retired.exists()
    assert fresh_stage.exists()
    assert unrelated.exists()
