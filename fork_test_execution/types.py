"""Phase identifiers and phase states."""

from enum import Enum


class Phase(Enum):
    """The two height-gated runs of a fork check."""

    PRE_FORK = "pre-fork"
    POST_FORK = "post-fork"

    def __str__(self) -> str:
        """Return the phase name used in log output."""
        return self.value


class PhaseState(Enum):
    """Lifecycle of a phase: IDLE → AWAITING_GATE → RUNNING → PASSED | FAILED."""

    IDLE = "idle"
    AWAITING_GATE = "awaiting gate"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"
