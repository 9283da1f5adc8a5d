"""mongo-diff CLI entry point.

This module maps command-line flags onto one immutable config and runs
a single drift check, converting fatal errors into a non-zero exit code.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from core.config import MongoDiffConfig, validate_config
from core.constants import (
    DEFAULT_CONTEXT_LINES,
    DEFAULT_DATA_DIR,
    DEFAULT_KEEP_VERSIONS,
    DEFAULT_MONGO_URI,
    DEFAULT_SAMPLE_TIMEOUT_SECONDS,
    DEFAULT_SNAPSHOT_NAME,
)
from core.errors import MongoDiffError
from core.logging_config import configure_logging
from drift.pipeline import DriftPipelineRunner
from sampling.mongo_sampler import InventorySampler, MongoInventorySampler


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="mongo-diff",
        description="Report MongoDB configuration drift since the previous run",
    )
    parser.add_argument(
        "--mongo-uri",
        help=f"MongoDB connection string (default: {DEFAULT_MONGO_URI})",
    )
    parser.add_argument(
        "--data-dir",
        help=f"Directory storing snapshot versions (default: {DEFAULT_DATA_DIR})",
    )
    parser.add_argument(
        "--context-line",
        type=int,
        help=f"Unchanged lines shown around each change (default: {DEFAULT_CONTEXT_LINES})",
    )
    parser.add_argument(
        "--keep-version",
        type=int,
        help=f"Versions of history kept per name (default: {DEFAULT_KEEP_VERSIONS})",
    )
    parser.add_argument(
        "--no-diff",
        action="store_true",
        help="Only print the inventory; do not diff or save a version",
    )
    parser.add_argument(
        "--name",
        help=f"Snapshot name separating histories (default: {DEFAULT_SNAPSHOT_NAME})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help=f"Sampling timeout in seconds (default: {DEFAULT_SAMPLE_TIMEOUT_SECONDS:g})",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the mongo-diff CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = _build_config(args)
        configure_logging(config.log_level)
        runner = DriftPipelineRunner(config, sampler=_build_sampler(config))
        runner.run()
    except MongoDiffError as error:
        print(f"mongo-diff: {error}", file=sys.stderr)
        return 1
    return 0


def _build_config(args: argparse.Namespace) -> MongoDiffConfig:
    """Build config from env with CLI overrides.

    Args:
        args: Parsed CLI args.

    Returns:
        Validated configuration.
    """
    overrides: dict[str, Any] = {"no_diff": args.no_diff}
    if args.mongo_uri is not None:
        overrides["mongo_uri"] = args.mongo_uri
    if args.data_dir is not None:
        overrides["data_dir"] = Path(args.data_dir).expanduser().resolve()
    if args.context_line is not None:
        overrides["context_lines"] = args.context_line
    if args.keep_version is not None:
        overrides["keep_versions"] = args.keep_version
    if args.name is not None:
        overrides["name"] = args.name
    if args.timeout is not None:
        overrides["sample_timeout_seconds"] = args.timeout
    return validate_config(replace(MongoDiffConfig.from_env(), **overrides))


def _build_sampler(config: MongoDiffConfig) -> InventorySampler:
    return MongoInventorySampler(config.mongo_uri, config.sample_timeout_seconds)
