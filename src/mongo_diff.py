"""Public SDK surface for mongo-diff.

This module provides a stable import path for library users.
It re-exports the pipeline, store, diff engine, and typed models.
"""

from __future__ import annotations

from core.config import MongoDiffConfig
from core.types import (
    DiffHunk,
    DiffLine,
    DiffResult,
    DriftRunResult,
    RetentionReport,
    VersionRecord,
)
from diffing.diff_engine import compute_diff
from diffing.unified_render import render_unified_diff
from drift.pipeline import DriftPipelineRunner, run_drift_check
from sampling.mongo_sampler import InventorySampler, MongoInventorySampler
from store.retention import RetentionManager
from store.version_store import VersionStore

__all__ = [
    "DiffHunk",
    "DiffLine",
    "DiffResult",
    "DriftPipelineRunner",
    "DriftRunResult",
    "InventorySampler",
    "MongoDiffConfig",
    "MongoInventorySampler",
    "RetentionManager",
    "RetentionReport",
    "VersionRecord",
    "VersionStore",
    "compute_diff",
    "render_unified_diff",
    "run_drift_check",
]
