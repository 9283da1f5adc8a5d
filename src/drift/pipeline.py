"""Drift check orchestration for one run.

This module coordinates inventory sampling, the diff against the latest
stored version, report output, version persistence, and retention.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, TextIO

from core.config import MongoDiffConfig
from core.errors import MongoDiffError, MongoDiffRetentionError
from core.logging_config import get_logger
from core.types import DriftRunResult, DriftRunState, RetentionReport, Snapshot
from diffing.diff_engine import compute_diff
from diffing.unified_render import render_unified_diff
from drift.run_state import validate_transition
from sampling.mongo_sampler import InventorySampler
from store.retention import RetentionManager
from store.version_store import VersionStore

_LOGGER = get_logger(__name__)


class DriftPipelineRunner:
    """Linear state machine running one drift check.

    ``idle -> sampling -> comparing -> reporting -> persisting -> retaining
    -> done``; report-only runs go ``sampling -> reporting -> done``. Fatal
    errors move the run to ``failed`` and propagate to the caller.
    """

    def __init__(
        self,
        config: MongoDiffConfig,
        sampler: InventorySampler,
        store: VersionStore | None = None,
        retention: RetentionManager | None = None,
        report_stream: TextIO | None = None,
    ) -> None:
        self._config = config
        self._sampler = sampler
        self._store = store or VersionStore(config.data_dir)
        self._retention = retention or RetentionManager(self._store)
        self._report_stream = report_stream
        self._state: DriftRunState = "idle"
        self._history: list[DriftRunState] = ["idle"]

    @property
    def state(self) -> DriftRunState:
        return self._state

    @property
    def history(self) -> tuple[DriftRunState, ...]:
        return tuple(self._history)

    def run(self) -> DriftRunResult:
        """Execute the drift check and return its result.

        Raises:
            MongoDiffError: For sampling, storage, and persistence failures.
        """
        with self._stage("sampling"):
            snapshot = self._sample()
        if self._config.no_diff:
            return self._report_only(snapshot)
        with self._stage("comparing"):
            previous = self._store.latest(snapshot.name)
            diff = compute_diff(
                previous.content if previous else None,
                snapshot.content,
                self._config.context_lines,
            )
        self._transition("reporting")
        report = render_unified_diff(diff)
        self._emit(report)
        with self._stage("persisting"):
            saved_version = self._store.save(
                snapshot.name, snapshot.content, snapshot.captured_at
            )
        self._transition("retaining")
        retention = self._enforce_retention()
        self._transition("done")
        _LOGGER.info(
            "drift_run_completed",
            name=snapshot.name,
            previous_sequence=previous.sequence if previous else None,
            saved_sequence=saved_version.sequence,
            has_previous=diff.has_previous,
            hunk_count=len(diff.hunks),
            changed=diff.has_changes,
        )
        return DriftRunResult(
            state=self._state,
            report=report,
            saved_version=saved_version,
            previous_sequence=previous.sequence if previous else None,
            retention=retention,
        )

    def _sample(self) -> Snapshot:
        content = self._sampler.sample()
        return Snapshot(
            name=self._config.name,
            captured_at=datetime.now(timezone.utc),
            content=content,
        )

    def _report_only(self, snapshot: Snapshot) -> DriftRunResult:
        self._transition("reporting")
        self._emit(snapshot.content)
        self._transition("done")
        return DriftRunResult(state=self._state, report=snapshot.content)

    def _enforce_retention(self) -> RetentionReport | None:
        try:
            return self._retention.enforce(self._config.name, self._config.keep_versions)
        except MongoDiffRetentionError as error:
            _LOGGER.warning("retention_failed", name=self._config.name, error=str(error))
            return None

    def _emit(self, text: str) -> None:
        stream = self._report_stream if self._report_stream is not None else sys.stdout
        stream.write(text)
        stream.flush()

    @contextmanager
    def _stage(self, state: DriftRunState) -> Iterator[None]:
        """Enter a fallible stage; fatal errors move the run to ``failed``."""
        self._transition(state)
        try:
            yield
        except MongoDiffError as error:
            self._transition("failed")
            _LOGGER.error(
                "drift_run_failed", name=self._config.name, stage=state, error=str(error)
            )
            raise

    def _transition(self, next_state: DriftRunState) -> None:
        validate_transition(self._state, next_state)
        self._state = next_state
        self._history.append(next_state)


def run_drift_check(
    config: MongoDiffConfig,
    sampler: InventorySampler,
    report_stream: TextIO | None = None,
) -> DriftRunResult:
    """Run one drift check with default store and retention wiring."""
    return DriftPipelineRunner(config, sampler, report_stream=report_stream).run()
