"""Version directory staging, publish, and read helpers.

This module isolates on-disk IO for the version store. A version is
fully written under a staging directory and then published with one
directory rename, so readers never observe a partial version.
"""

from __future__ import annotations

import errno
import hashlib
import json
import os
import shutil
import tempfile
import time
from datetime import datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from core.constants import (
    CONTENT_ENCODING,
    CONTENT_FILE_NAME,
    MANIFEST_FILE_NAME,
    SEQUENCE_NAME_WIDTH,
    STAGING_ENTRY_PREFIXES,
)
from core.errors import MongoDiffStoreError
from core.logging_config import get_logger
from core.types import VersionRecord

_LOGGER = get_logger(__name__)
_COLLISION_ERRNOS = (errno.EEXIST, errno.ENOTEMPTY)


def sequence_dir_name(sequence: int) -> str:
    """Return the zero-padded directory name for a sequence number."""
    return f"{sequence:0{SEQUENCE_NAME_WIDTH}d}"


def parse_sequence_dir_name(dir_name: str) -> int | None:
    """Parse a version directory name; None for anything else."""
    if len(dir_name) != SEQUENCE_NAME_WIDTH or not dir_name.isdigit():
        return None
    return int(dir_name)


def stage_version(staging_root: Path, record: VersionRecord) -> Path:
    """Write a complete version directory under the staging root.

    Args:
        staging_root: Per-name staging directory.
        record: Version to write.

    Returns:
        Path of the staged directory.

    Raises:
        OSError: If any file cannot be written; the staged copy is removed.
    """
    staged_dir = Path(
        tempfile.mkdtemp(prefix=f"stage-{sequence_dir_name(record.sequence)}-", dir=staging_root)
    )
    try:
        payload = record.content.encode(CONTENT_ENCODING)
        _write_durable(staged_dir / CONTENT_FILE_NAME, payload)
        manifest = _manifest_payload(record, payload)
        _write_durable(
            staged_dir / MANIFEST_FILE_NAME,
            (json.dumps(manifest, indent=2) + "\n").encode("utf-8"),
        )
    except OSError:
        discard_dir(staged_dir)
        raise
    return staged_dir


def publish_staged_version(staged_dir: Path, version_dir: Path) -> bool:
    """Atomically publish a staged version directory.

    Args:
        staged_dir: Fully written staged directory.
        version_dir: Final ``versions/<sequence>`` path.

    Returns:
        True when published; False when the sequence is already taken.

    Raises:
        OSError: For failures other than a sequence collision.
    """
    try:
        os.rename(staged_dir, version_dir)
    except OSError as error:
        if error.errno in _COLLISION_ERRNOS:
            return False
        raise
    fsync_directory(version_dir.parent)
    return True


def retire_version_dir(version_dir: Path, staging_root: Path) -> bool:
    """Unpublish a version with one rename, then remove its files.

    Args:
        version_dir: Published version directory.
        staging_root: Per-name staging directory that receives the retired copy.

    Returns:
        True when this call unpublished the version; False if it was absent.

    Raises:
        OSError: If the version could not be unpublished.
    """
    retired_dir = staging_root / f"retired-{version_dir.name}-{uuid4().hex}"
    try:
        os.rename(version_dir, retired_dir)
    except FileNotFoundError:
        return False
    fsync_directory(version_dir.parent)
    try:
        shutil.rmtree(retired_dir)
    except OSError as error:
        _LOGGER.warning(
            "retired_version_cleanup_failed",
            retired_dir=str(retired_dir),
            error=str(error),
        )
    return True


def read_version_record(version_dir: Path) -> VersionRecord:
    """Read and verify one published version.

    Args:
        version_dir: Published version directory.

    Returns:
        Version record with its exact stored content.

    Raises:
        FileNotFoundError: If the version vanished.
        MongoDiffStoreError: If the version is unreadable or corrupt.
    """
    manifest_path = version_dir / MANIFEST_FILE_NAME
    try:
        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
        payload = (version_dir / CONTENT_FILE_NAME).read_bytes()
    except FileNotFoundError:
        raise
    except json.JSONDecodeError as error:
        raise MongoDiffStoreError(
            f"Failed to parse version manifest at {manifest_path}: {error.msg}. "
            "Remove the corrupt version directory and rerun."
        ) from error
    except OSError as error:
        raise MongoDiffStoreError(
            f"Failed to read version at {version_dir}: {error}. Check directory permissions."
        ) from error
    return _record_from_manifest(manifest, payload, manifest_path)


def sweep_stale_staging(staging_root: Path, max_age_seconds: float) -> int:
    """Remove staged and retired leftovers older than a cutoff.

    Crashed writers leave ``stage-*`` directories behind, and retired versions
    stay when their removal failed. Entries younger than the cutoff may belong
    to a writer that is still running and are left alone.

    Args:
        staging_root: Per-name staging directory.
        max_age_seconds: Minimum age, by modification time, of removed entries.

    Returns:
        Number of entries removed.
    """
    cutoff = time.time() - max_age_seconds
    removed = 0
    try:
        entries = list(staging_root.iterdir())
    except FileNotFoundError:
        return 0
    except OSError as error:
        _LOGGER.warning("staging_sweep_failed", path=str(staging_root), error=str(error))
        return 0
    for entry in entries:
        if not entry.name.startswith(STAGING_ENTRY_PREFIXES):
            continue
        try:
            if entry.stat().st_mtime > cutoff:
                continue
        except FileNotFoundError:
            continue
        discard_dir(entry)
        if not entry.exists():
            removed += 1
    if removed:
        _LOGGER.info("staging_swept", path=str(staging_root), removed=removed)
    return removed


def discard_dir(target_dir: Path) -> None:
    """Remove a staged or retired directory; leftovers are only logged."""
    try:
        shutil.rmtree(target_dir)
    except FileNotFoundError:
        return
    except OSError as error:
        _LOGGER.warning("staging_cleanup_failed", path=str(target_dir), error=str(error))


def fsync_directory(dir_path: Path) -> None:
    """Sync directory entries to disk where the platform allows it."""
    if not hasattr(os, "O_DIRECTORY"):
        return
    try:
        fd = os.open(str(dir_path), os.O_RDONLY | os.O_DIRECTORY)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)
    except OSError as error:
        _LOGGER.warning("directory_fsync_failed", path=str(dir_path), error=str(error))


def _write_durable(file_path: Path, payload: bytes) -> None:
    with open(file_path, "wb") as handle:
        handle.write(payload)
        handle.flush()
        os.fsync(handle.fileno())


def _manifest_payload(record: VersionRecord, payload: bytes) -> dict[str, Any]:
    return {
        "name": record.name,
        "sequence": record.sequence,
        "captured_at": record.captured_at.isoformat(),
        "content_sha256": hashlib.sha256(payload).hexdigest(),
        "content_bytes": len(payload),
    }


def _record_from_manifest(
    manifest: object, payload: bytes, manifest_path: Path
) -> VersionRecord:
    """Deserialize a manifest and verify the content digest."""
    if not isinstance(manifest, dict):
        raise MongoDiffStoreError(
            f"Invalid version manifest at {manifest_path}: expected JSON object."
        )
    try:
        expected_digest = str(manifest["content_sha256"])
        record = VersionRecord(
            name=str(manifest["name"]),
            sequence=int(manifest["sequence"]),
            captured_at=datetime.fromisoformat(str(manifest["captured_at"])),
            content=payload.decode(CONTENT_ENCODING),
        )
    except KeyError as error:
        raise MongoDiffStoreError(
            f"Invalid version manifest at {manifest_path}: "
            f"missing required field {error.args[0]!r}."
        ) from error
    except (TypeError, ValueError) as error:
        raise MongoDiffStoreError(
            f"Invalid version manifest at {manifest_path}: {error}."
        ) from error
    if hashlib.sha256(payload).hexdigest() != expected_digest:
        raise MongoDiffStoreError(
            f"Content digest mismatch for version at {manifest_path.parent}. "
            "The stored snapshot was modified outside mongo-diff."
        )
    return record
