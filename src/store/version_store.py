"""Sequentially versioned snapshot store.

This module persists immutable inventory snapshots per name under the
data directory. It provides latest lookup, save, list, load, and
oldest-first deletion for the drift pipeline and retention manager.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from core.config import validate_snapshot_name
from core.constants import (
    DEFAULT_SAVE_MAX_ATTEMPTS,
    STAGING_DIR_NAME,
    STALE_STAGING_SECONDS,
    VERSIONS_DIR_NAME,
)
from core.errors import (
    MongoDiffPersistConflictError,
    MongoDiffStorageUnavailableError,
    MongoDiffStoreError,
)
from core.logging_config import get_logger
from core.types import VersionRecord
from store.version_io import (
    discard_dir,
    parse_sequence_dir_name,
    publish_staged_version,
    read_version_record,
    retire_version_dir,
    sequence_dir_name,
    stage_version,
    sweep_stale_staging,
)

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class DeletionOutcome:
    """Sequences removed and sequences that could not be removed."""

    deleted: tuple[int, ...]
    failed: tuple[int, ...]


class VersionStore:
    """Filesystem-backed version store.

    Each name owns ``<data_dir>/<name>/versions/<sequence>`` directories.
    Reads never create directories; the first save does.
    """

    def __init__(
        self,
        data_dir: Path,
        max_save_attempts: int = DEFAULT_SAVE_MAX_ATTEMPTS,
        stale_staging_seconds: float = STALE_STAGING_SECONDS,
    ) -> None:
        """Initialize the store without touching the filesystem.

        Args:
            data_dir: Root directory holding one namespace per name.
            max_save_attempts: Sequence allocation attempts before giving up.
            stale_staging_seconds: Age after which staging leftovers are swept.
        """
        self._data_dir = data_dir
        self._max_save_attempts = max_save_attempts
        self._stale_staging_seconds = stale_staging_seconds

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def latest(self, name: str) -> VersionRecord | None:
        """Return the highest-sequence version for a name.

        Args:
            name: Snapshot name.

        Returns:
            Latest version, or None when the name was never written.

        Raises:
            MongoDiffStorageUnavailableError: If the data directory is inaccessible.
            MongoDiffStoreError: If the latest version is corrupt.
        """
        validate_snapshot_name(name)
        for _ in range(self._max_save_attempts):
            sequences = self._list_sequences(name)
            if not sequences:
                return None
            try:
                return read_version_record(self._version_dir(name, sequences[-1]))
            except FileNotFoundError:
                _LOGGER.debug("latest_version_vanished", name=name, sequence=sequences[-1])
        raise MongoDiffStoreError(
            f"Latest version for '{name}' kept disappearing while being read. "
            "Another process may be deleting versions; retry the run."
        )

    def save(
        self, name: str, content: str, captured_at: datetime | None = None
    ) -> VersionRecord:
        """Persist content as the next version of a name.

        Args:
            name: Snapshot name.
            content: Raw snapshot text, stored byte-for-byte.
            captured_at: Capture timestamp; defaults to now in UTC.

        Returns:
            The persisted version record.

        Raises:
            MongoDiffStorageUnavailableError: If the namespace cannot be created.
            MongoDiffPersistConflictError: If concurrent writers exhaust retries.
            MongoDiffStoreError: If the version cannot be written.
        """
        validate_snapshot_name(name)
        timestamp = captured_at or datetime.now(timezone.utc)
        versions_root, staging_root = self._prepare_namespace(name)
        for attempt in range(1, self._max_save_attempts + 1):
            record = VersionRecord(
                name=name,
                sequence=self._next_sequence(name),
                captured_at=timestamp,
                content=content,
            )
            staged_dir = self._stage(staging_root, record)
            version_dir = versions_root / sequence_dir_name(record.sequence)
            try:
                published = publish_staged_version(staged_dir, version_dir)
            except OSError as error:
                discard_dir(staged_dir)
                raise MongoDiffStoreError(
                    f"Failed to publish version {record.sequence} of '{name}' "
                    f"at {version_dir}: {error}. Check directory permissions and retry."
                ) from error
            if published:
                _LOGGER.info(
                    "version_saved",
                    name=name,
                    sequence=record.sequence,
                    content_chars=len(content),
                    attempt=attempt,
                )
                return record
            discard_dir(staged_dir)
            _LOGGER.warning(
                "sequence_collision", name=name, sequence=record.sequence, attempt=attempt
            )
        raise MongoDiffPersistConflictError(
            f"Could not allocate a version number for '{name}' after "
            f"{self._max_save_attempts} attempts. Concurrent runs keep racing; retry later."
        )

    def list_versions(self, name: str) -> list[VersionRecord]:
        """List versions of a name in ascending sequence order.

        Args:
            name: Snapshot name.

        Returns:
            Ordered version records; empty for an unknown name.
        """
        validate_snapshot_name(name)
        records: list[VersionRecord] = []
        for sequence in self._list_sequences(name):
            try:
                records.append(read_version_record(self._version_dir(name, sequence)))
            except FileNotFoundError:
                continue
        return records

    def list_sequences(self, name: str) -> list[int]:
        """List published sequence numbers without reading version contents.

        Args:
            name: Snapshot name.

        Returns:
            Ascending sequence numbers; empty for an unknown name.
        """
        validate_snapshot_name(name)
        return self._list_sequences(name)

    def load_version(self, name: str, sequence: int) -> VersionRecord:
        """Load one version by sequence number.

        Raises:
            MongoDiffStoreError: If the version does not exist or is corrupt.
        """
        validate_snapshot_name(name)
        version_dir = self._version_dir(name, sequence)
        try:
            return read_version_record(version_dir)
        except FileNotFoundError as error:
            raise MongoDiffStoreError(
                f"Version {sequence} of '{name}' not found at {version_dir}. "
                "Use list_versions to discover stored sequences."
            ) from error

    def delete_before(self, name: str, sequence: int) -> DeletionOutcome:
        """Remove versions with a sequence strictly below a bound.

        The highest sequence on disk is never removed. Absent versions are
        skipped; each removal is attempted independently.

        Args:
            name: Snapshot name.
            sequence: Exclusive upper bound of sequences to remove.

        Returns:
            Deleted and failed sequence numbers.
        """
        validate_snapshot_name(name)
        sequences = self._list_sequences(name)
        if not sequences:
            return DeletionOutcome(deleted=(), failed=())
        newest = sequences[-1]
        candidates = [item for item in sequences if item < sequence and item != newest]
        if not candidates:
            return DeletionOutcome(deleted=(), failed=())
        _, staging_root = self._prepare_namespace(name)
        deleted: list[int] = []
        failed: list[int] = []
        for candidate in candidates:
            try:
                removed = retire_version_dir(self._version_dir(name, candidate), staging_root)
            except OSError as error:
                failed.append(candidate)
                _LOGGER.warning(
                    "version_delete_failed", name=name, sequence=candidate, error=str(error)
                )
                continue
            if removed:
                deleted.append(candidate)
        return DeletionOutcome(deleted=tuple(deleted), failed=tuple(failed))

    def _next_sequence(self, name: str) -> int:
        sequences = self._list_sequences(name)
        return sequences[-1] + 1 if sequences else 1

    def _list_sequences(self, name: str) -> list[int]:
        """Return published sequence numbers in ascending order.

        Raises:
            MongoDiffStorageUnavailableError: If the directory cannot be listed.
        """
        versions_root = self._data_dir / name / VERSIONS_DIR_NAME
        try:
            entries = list(versions_root.iterdir())
        except FileNotFoundError:
            if self._data_dir.exists() and not self._data_dir.is_dir():
                raise MongoDiffStorageUnavailableError(
                    f"Data directory {self._data_dir} is not a directory. "
                    "Point --data-dir at a directory."
                ) from None
            return []
        except OSError as error:
            raise MongoDiffStorageUnavailableError(
                f"Cannot read versions of '{name}' at {versions_root}: {error}. "
                "Check that --data-dir exists and is readable."
            ) from error
        sequences: list[int] = []
        for entry in entries:
            sequence = parse_sequence_dir_name(entry.name)
            if sequence is not None:
                sequences.append(sequence)
        return sorted(sequences)

    def _prepare_namespace(self, name: str) -> tuple[Path, Path]:
        """Create the versions and staging directories for a name.

        Stale staging leftovers are swept on the way.

        Raises:
            MongoDiffStorageUnavailableError: If the directories cannot be created.
        """
        namespace_root = self._data_dir / name
        versions_root = namespace_root / VERSIONS_DIR_NAME
        staging_root = namespace_root / STAGING_DIR_NAME
        try:
            versions_root.mkdir(parents=True, exist_ok=True)
            staging_root.mkdir(parents=True, exist_ok=True)
        except OSError as error:
            raise MongoDiffStorageUnavailableError(
                f"Cannot initialize version namespace for '{name}' at {namespace_root}: "
                f"{error}. Check that --data-dir is writable."
            ) from error
        sweep_stale_staging(staging_root, self._stale_staging_seconds)
        return versions_root, staging_root

    def _stage(self, staging_root: Path, record: VersionRecord) -> Path:
        try:
            return stage_version(staging_root, record)
        except OSError as error:
            raise MongoDiffStoreError(
                f"Failed to write version {record.sequence} of '{record.name}' "
                f"under {staging_root}: {error}. Check free space and permissions."
            ) from error

    def _version_dir(self, name: str, sequence: int) -> Path:
        return self._data_dir / name / VERSIONS_DIR_NAME / sequence_dir_name(sequence)
