"""
Core enumerations for the strata animation runtime.

This module defines the lifecycle states of a vignette, the kinds of
scheduled tasks understood by the timeline scheduler, and the status values
a task handle moves through while it is owned by a program.
"""

from enum import Enum, auto


class LifecycleState(Enum):
    """
    Lifecycle states of a vignette controller.

    A controller starts IDLE, moves to PLAYING when its scroll section is
    entered, and to COMPLETE once every finite task of its program settled.
    Any state returns to IDLE on reset.
    """

    IDLE = auto()
    """Initial state; the surface shows the initialization snapshot."""

    PLAYING = auto()
    """A program is running and at least one finite task is unsettled."""

    COMPLETE = auto()
    """Every finite task finished; continuous effects may still be running."""


class TaskKind(Enum):
    """
    Execution substrate of a scheduled task.

    - ONE_SHOT: delay-then-mutate, applied once on a timer
    - TWEEN: eased progress from 0 to 1 over a duration, ticked per frame
    - CONTINUOUS: per-frame callback that runs until cancelled
    - PERIODIC: repeating cycles on a timer, finite or until cancelled
    """

    ONE_SHOT = auto()
    """Discrete state change fired once after its delay."""

    TWEEN = auto()
    """Time-bounded interpolation with easing."""

    CONTINUOUS = auto()
    """Frame-clock driven motion with no natural end."""

    PERIODIC = auto()
    """Pulse or interval effect with explicit start and cancel."""


class TaskStatus(Enum):
    """Status of a task handle inside a running program."""

    PENDING = auto()
    """Waiting for its start (delay not elapsed or predecessor unsettled)."""

    RUNNING = auto()
    """Started and still producing mutations."""

    DONE = auto()
    """Finished; no further callbacks will fire."""

    CANCELLED = auto()
    """Cancelled before finishing; its mutations will never fire again."""
