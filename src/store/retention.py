"""Version retention enforcement.

This module bounds per-name history by removing the oldest versions.
Failures are reported back to the caller instead of aborting a run.
"""

from __future__ import annotations

from core.errors import MongoDiffConfigError, MongoDiffRetentionError, MongoDiffStoreError
from core.logging_config import get_logger
from core.types import RetentionPolicy, RetentionReport
from store.version_store import VersionStore

_LOGGER = get_logger(__name__)


class RetentionManager:
    """Keeps at most ``keep_count`` most recent versions per name."""

    def __init__(self, store: VersionStore) -> None:
        self._store = store

    def enforce(self, name: str, keep_count: int) -> RetentionReport:
        """Delete the oldest versions beyond the retention count.

        The current latest version always survives, so ``keep_count=0``
        behaves like ``keep_count=1``.

        Args:
            name: Snapshot name.
            keep_count: Number of most recent versions to keep.

        Returns:
            Report of kept, deleted, and failed sequences.

        Raises:
            MongoDiffConfigError: If ``keep_count`` is negative.
            MongoDiffRetentionError: If versions cannot be listed or removed.
        """
        if keep_count < 0:
            raise MongoDiffConfigError(
                f"Invalid keep-version count {keep_count}: expected a value >= 0."
            )
        policy = RetentionPolicy(keep_count=keep_count)
        try:
            sequences = self._store.list_sequences(name)
            retained = policy.retained_count
            if len(sequences) <= retained:
                return RetentionReport(name=name, kept=tuple(sequences), deleted=())
            outcome = self._store.delete_before(name, sequences[-retained])
        except MongoDiffStoreError as error:
            raise MongoDiffRetentionError(
                f"Retention for '{name}' could not run: {error}"
            ) from error
        report = RetentionReport(
            name=name,
            kept=tuple(item for item in sequences if item not in outcome.deleted),
            deleted=outcome.deleted,
            failed=outcome.failed,
        )
        _LOGGER.info(
            "retention_enforced",
            name=name,
            keep_count=keep_count,
            deleted=list(report.deleted),
            failed=list(report.failed),
        )
        if report.failed:
            _LOGGER.warning(
                "retention_incomplete", name=name, failed=list(report.failed)
            )
        return report
