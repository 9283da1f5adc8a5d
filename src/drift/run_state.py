"""Drift run state machine edges."""

from __future__ import annotations

from core.errors import MongoDiffPipelineError
from core.types import DriftRunState

ALLOWED_STATE_TRANSITIONS: dict[DriftRunState, tuple[DriftRunState, ...]] = {
    "idle": ("sampling",),
    "sampling": ("comparing", "reporting", "failed"),
    "comparing": ("reporting", "failed"),
    "reporting": ("persisting", "done"),
    "persisting": ("retaining", "failed"),
    "retaining": ("done",),
    "done": (),
    "failed": (),
}


def validate_transition(current: DriftRunState, next_state: DriftRunState) -> None:
    """Validate one run transition against allowed state machine edges."""
    allowed_states = ALLOWED_STATE_TRANSITIONS[current]
    if next_state not in allowed_states:
        raise MongoDiffPipelineError(
            f"Invalid drift run state transition {current!r} -> {next_state!r}. "
            f"Allowed: {', '.join(allowed_states) or 'none'}."
        )
