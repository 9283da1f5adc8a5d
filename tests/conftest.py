"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable

import pytest


def pytest_sessionstart() -> None:
    """Add the project root and src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    for import_root in (project_root / "src", project_root):
        if str(import_root) not in sys.path:
            sys.path.insert(0, str(import_root))


class StaticSampler:
    """Inventory sampler returning queued texts, one per call."""

    def __init__(self, *contents: str) -> None:
        self._contents = list(contents)
        self.calls = 0

    def sample(self) -> str:
        self.calls += 1
        return self._contents.pop(0)


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., Any]:
    """Return a factory for configs rooted in the test temp directory."""
    from core.config import MongoDiffConfig

    def _make_config(**overrides: Any) -> MongoDiffConfig:
        base = replace(MongoDiffConfig.from_env(), data_dir=tmp_path / "data")
        return replace(base, **overrides)

    return _make_config


@pytest.fixture
def static_sampler() -> type[StaticSampler]:
    """Expose the static sampler class to tests."""
    return StaticSampler
