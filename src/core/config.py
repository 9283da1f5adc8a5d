"""Runtime configuration model for mongo-diff.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_CONTEXT_LINES,
    DEFAULT_DATA_DIR,
    DEFAULT_KEEP_VERSIONS,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MONGO_URI,
    DEFAULT_SAMPLE_TIMEOUT_SECONDS,
    DEFAULT_SNAPSHOT_NAME,
    SUPPORTED_LOG_LEVELS,
)
from core.errors import MongoDiffConfigError


@dataclass(frozen=True)
class MongoDiffConfig:
    """Validated runtime configuration.

    Attributes:
        mongo_uri: Connection string handed to the inventory sampler.
        data_dir: Root directory of the version store.
        name: Snapshot name partitioning the version store.
        context_lines: Unchanged lines shown around each change.
        keep_versions: Number of most recent versions retained per name.
        no_diff: Report-only mode; print the inventory and touch nothing.
        sample_timeout_seconds: Upper bound for the whole sampling call.
        log_level: Minimum structured log level written to stderr.
    """

    mongo_uri: str
    data_dir: Path
    name: str
    context_lines: int
    keep_versions: int
    no_diff: bool
    sample_timeout_seconds: float
    log_level: str

    @classmethod
    def from_env(cls) -> "MongoDiffConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            MongoDiffConfigError: If environment values are invalid.
        """
        data_dir_value = os.getenv("MONGO_DIFF_DATA_DIR", str(DEFAULT_DATA_DIR))
        config = cls(
            mongo_uri=os.getenv("MONGO_DIFF_MONGO_URI", DEFAULT_MONGO_URI),
            data_dir=Path(data_dir_value).expanduser().resolve(),
            name=os.getenv("MONGO_DIFF_NAME", DEFAULT_SNAPSHOT_NAME),
            context_lines=_parse_count(
                "MONGO_DIFF_CONTEXT_LINES",
                os.getenv("MONGO_DIFF_CONTEXT_LINES", str(DEFAULT_CONTEXT_LINES)),
            ),
            keep_versions=_parse_count(
                "MONGO_DIFF_KEEP_VERSIONS",
                os.getenv("MONGO_DIFF_KEEP_VERSIONS", str(DEFAULT_KEEP_VERSIONS)),
            ),
            no_diff=False,
            sample_timeout_seconds=_parse_timeout(
                os.getenv("MONGO_DIFF_SAMPLE_TIMEOUT", str(DEFAULT_SAMPLE_TIMEOUT_SECONDS))
            ),
            log_level=os.getenv("MONGO_DIFF_LOG_LEVEL", DEFAULT_LOG_LEVEL).lower(),
        )
        return validate_config(config)


def validate_config(config: MongoDiffConfig) -> MongoDiffConfig:
    """Validate a config assembled from env and CLI overrides.

    Args:
        config: Candidate configuration.

    Returns:
        The same config when valid.

    Raises:
        MongoDiffConfigError: If any field is out of range.
    """
    validate_snapshot_name(config.name)
    if not config.mongo_uri:
        raise MongoDiffConfigError(
            "Invalid mongo URI: value is empty. "
            "Pass --mongo-uri or set MONGO_DIFF_MONGO_URI."
        )
    if config.context_lines < 0:
        raise MongoDiffConfigError(
            f"Invalid context line count {config.context_lines}: expected a value >= 0."
        )
    if config.keep_versions < 0:
        raise MongoDiffConfigError(
            f"Invalid keep-version count {config.keep_versions}: expected a value >= 0."
        )
    if config.sample_timeout_seconds <= 0:
        raise MongoDiffConfigError(
            f"Invalid sampling timeout {config.sample_timeout_seconds}: "
            "expected a positive number of seconds."
        )
    if config.log_level not in SUPPORTED_LOG_LEVELS:
        raise MongoDiffConfigError(
            f"Invalid log level '{config.log_level}'. "
            f"Use one of: {', '.join(SUPPORTED_LOG_LEVELS)}."
        )
    return config


def validate_snapshot_name(name: str) -> str:
    """Check that a snapshot name is a single safe path component.

    Args:
        name: Snapshot name from config or SDK callers.

    Returns:
        The unchanged name.

    Raises:
        MongoDiffConfigError: If the name cannot be used as a directory.
    """
    if not name or name.startswith(".") or "/" in name or "\\" in name:
        raise MongoDiffConfigError(
            f"Invalid snapshot name '{name}': use a non-empty name without path "
            "separators or a leading dot."
        )
    return name


def _parse_count(variable: str, raw_value: str) -> int:
    """Parse a non-negative integer environment value.

    Args:
        variable: Environment variable name, for error messages.
        raw_value: Raw string from environment.

    Returns:
        Parsed integer.

    Raises:
        MongoDiffConfigError: If value is not a non-negative integer.
    """
    try:
        value = int(raw_value)
    except ValueError as error:
        raise MongoDiffConfigError(
            f"Invalid {variable} value: expected integer, got '{raw_value}'. "
            f"Set {variable} to a non-negative number."
        ) from error
    if value < 0:
        raise MongoDiffConfigError(
            f"Invalid {variable} value: expected a value >= 0, got {value}."
        )
    return value


def _parse_timeout(raw_value: str) -> float:
    try:
        return float(raw_value)
    except ValueError as error:
        raise MongoDiffConfigError(
            "Invalid MONGO_DIFF_SAMPLE_TIMEOUT value: "
            f"expected seconds, got '{raw_value}'. "
            "Set MONGO_DIFF_SAMPLE_TIMEOUT to a positive number."
        ) from error
