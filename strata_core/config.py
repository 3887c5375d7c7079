"""
Configuration objects for the strata timeline runtime.

Exposes the tunable parameters of the scheduler and of the scroll handlers so
storyboards and the command line can adjust them without editing core logic.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from .easing import get_easing


@dataclass
class TimelineConfig:
    """
    Configuration for scheduling and lifecycle behavior.

    Defaults reproduce the behavior of the published page: 60 Hz frames,
    vignettes reset when their section is left, and fresh randomness on
    every page load.
    """

    # Frame clock period used by tweens and continuous tasks
    frame_interval_ms: float = 16.0

    # Scroll exit resets the vignette so it replays on the next enter
    reset_on_exit: bool = True

    # Seed for the shared random source; None draws from OS entropy
    seed: Optional[int] = None

    # Easing used by declarative tracks that do not name one
    default_easing: str = "cubic_in_out"

    def __post_init__(self):
        if self.frame_interval_ms <= 0:
            raise ValueError("frame_interval_ms must be positive")
        get_easing(self.default_easing)
