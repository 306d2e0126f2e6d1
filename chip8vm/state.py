"""Execution state reported to the driving loop after every step."""

import enum
from dataclasses import dataclass
from typing import Optional

from .errors import Chip8Error


class Status(enum.Enum):
    RUNNING = "running"
    BLOCKED = "blocked"
    DRAW_PENDING = "draw_pending"
    CLEAR_PENDING = "clear_pending"
    PAUSED = "paused"
    HALTED = "halted"


@dataclass(frozen=True)
class ExecutionState:
    """Tagged state value.

    ``register`` is only set for BLOCKED (the Vx that receives the key),
    ``error`` only for HALTED.
    """
    status: Status
    register: Optional[int] = None
    error: Optional[Chip8Error] = None

    @classmethod
    def running(cls):
        return cls(Status.RUNNING)

    @classmethod
    def blocked(cls, register):
        return cls(Status.BLOCKED, register=register)

    @classmethod
    def draw_pending(cls):
        return cls(Status.DRAW_PENDING)

    @classmethod
    def clear_pending(cls):
        return cls(Status.CLEAR_PENDING)

    @classmethod
    def paused(cls):
        return cls(Status.PAUSED)

    @classmethod
    def halted(cls, error):
        return cls(Status.HALTED, error=error)

    @property
    def is_halted(self):
        return self.status is Status.HALTED

    @property
    def is_pending(self):
        """True for the one-shot renderer signals."""
        return self.status in (Status.DRAW_PENDING, Status.CLEAR_PENDING)

    def __str__(self):
        if self.status is Status.BLOCKED:
            return "blocked(V%X)" % self.register
        if self.status is Status.HALTED:
            return "halted(%s: %s)" % (type(self.error).__name__, self.error)
        return self.status.value
