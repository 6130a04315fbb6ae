"""Explicit state of a single recommendation relay session.

A session moves COLLECTING -> DISPATCHING -> STREAMING -> DONE, or into
FAILED from any non-terminal phase. States are immutable values; each
transition function validates the current phase and returns a new state.
"""

from dataclasses import dataclass, replace
from enum import StrEnum


class RelayPhase(StrEnum):
    """Phase of a relay session."""

    COLLECTING = "collecting"
    DISPATCHING = "dispatching"
    STREAMING = "streaming"
    DONE = "done"
    FAILED = "failed"


TERMINAL_PHASES = frozenset({RelayPhase.DONE, RelayPhase.FAILED})


class RelayTransitionError(RuntimeError):
    """Raised on a transition that is not allowed from the current phase."""


@dataclass(frozen=True)
class RelayState:
    """Snapshot of a relay session."""

    phase: RelayPhase
    bytes_sent: int = 0
    failure_reason: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.phase in TERMINAL_PHASES

    @property
    def has_sent_bytes(self) -> bool:
        return self.bytes_sent > 0


def start() -> RelayState:
    """Return the initial state of a new session."""
    return RelayState(phase=RelayPhase.COLLECTING)


def collected(state: RelayState) -> RelayState:
    """Profile and meals are available; the prompt can be dispatched."""
    _require(state, RelayPhase.COLLECTING, "collected")
    return replace(state, phase=RelayPhase.DISPATCHING)


def dispatched(state: RelayState) -> RelayState:
    """Upstream accepted the request and its body is readable."""
    _require(state, RelayPhase.DISPATCHING, "dispatched")
    return replace(state, phase=RelayPhase.STREAMING)


def forwarded(state: RelayState, delta: str) -> RelayState:
    """Record a text delta handed to the client."""
    _require(state, RelayPhase.STREAMING, "forwarded")
    return replace(state, bytes_sent=state.bytes_sent + len(delta.encode("utf-8")))


def finished(state: RelayState) -> RelayState:
    """Upstream signalled the end of the stream."""
    _require(state, RelayPhase.STREAMING, "finished")
    return replace(state, phase=RelayPhase.DONE)


def failed(state: RelayState, reason: str) -> RelayState:
    """Move a live session into FAILED with the given reason."""
    if state.is_terminal:
        raise RelayTransitionError(
            f"Cannot fail a relay session that is already {state.phase}"
        )
    return replace(state, phase=RelayPhase.FAILED, failure_reason=reason)


def _require(state: RelayState, expected: RelayPhase, transition: str) -> None:
    if state.phase is not expected:
        raise RelayTransitionError(
            f"Transition {transition!r} requires phase {expected}, got {state.phase}"
        )
