"""mongo-diff exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class MongoDiffError(Exception):
    """Base exception for all mongo-diff failures."""


class MongoDiffConfigError(MongoDiffError):
    """Raised for invalid runtime configuration."""


class MongoDiffSamplingError(MongoDiffError):
    """Raised when the MongoDB inventory cannot be captured."""


class MongoDiffStoreError(MongoDiffError):
    """Raised for version store read and write failures."""


class MongoDiffStorageUnavailableError(MongoDiffStoreError):
    """Raised when the data directory or a version namespace is inaccessible."""


class MongoDiffPersistConflictError(MongoDiffStoreError):
    """Raised when concurrent writers exhaust sequence allocation retries."""


class MongoDiffRetentionError(MongoDiffError):
    """Raised when a retention pass could not run."""


class MongoDiffPipelineError(MongoDiffError):
    """Raised for illegal drift run state transitions."""
