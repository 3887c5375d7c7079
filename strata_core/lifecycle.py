"""
Play-once / reset lifecycle shared by every vignette.

A controller is bound to one container of the rendering surface. At
construction it clears the container, draws its static geometry and takes a
snapshot of the subtree. `play()` runs the vignette's composed tracks at
most once; `reset()` cancels everything the playback scheduled and restores
the snapshot, whatever state the controller is in.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from .config import TimelineConfig
from .enums import LifecycleState
from .generators import RandomSource, make_rng
from .scheduler import Program, Scheduler, Track
from .surface import Element, Surface

logger = logging.getLogger(__name__)


class LifecycleController(ABC):
    """
    Base class for vignette controllers.

    Subclasses implement `build()` (static geometry, called once) and
    `compose()` (generators + tracks, called by every accepted `play()`),
    and override `clear_transient()` when they keep per-playback state.

    Attributes:
        era: Era key of the scroll section
        surface: Rendering surface the vignette draws into
        scheduler: Scheduler running the composed tracks
        container: Bound container element
        rng: Random source used by the generators
        state: Current lifecycle state
    """

    def __init__(self, era: str, surface: Surface, scheduler: Scheduler, container: Element, rng: RandomSource | None = None, config: TimelineConfig | None = None):
        self.era = era
        self.surface = surface
        self.scheduler = scheduler
        self.container = container
        self.config = config or scheduler.config
        self.rng = rng if rng is not None else make_rng(self.config.seed)
        self.state = LifecycleState.IDLE
        self.program: Optional[Program] = None

        surface.clear(container.id)
        self.build()
        self._snapshot = surface.snapshot(container.id)

    @classmethod
    def bind(cls, era: str, surface: Surface, scheduler: Scheduler, selector: str, **kwargs) -> Optional["LifecycleController"]:
        """Create a controller for `selector`, or None when the container is absent."""
        container = surface.select(selector)
        if container is None:
            logger.debug("Container %s absent; %s vignette unavailable", selector, era)
            return None
        return cls(era, surface, scheduler, container, **kwargs)

    # ----- hooks -----
    @abstractmethod
    def build(self) -> None:
        """Draw static geometry under `self.container`."""

    @abstractmethod
    def compose(self) -> List[Track]:
        """Compute this playback's data and return the tracks to run."""

    def clear_transient(self) -> None:
        """Drop per-playback data (particles, counters)."""

    # ----- lifecycle -----
    @property
    def root(self) -> str:
        return self.container.id

    @property
    def pending(self) -> int:
        return self.program.pending if self.program is not None else 0

    def play(self) -> None:
        if self.state is not LifecycleState.IDLE:
            logger.debug("%s already %s; play ignored", self.era, self.state.name)
            return
        tracks = self.compose()
        self.state = LifecycleState.PLAYING
        logger.info("Playing %s", self.era)
        self.program = self.scheduler.run(tracks, on_complete=self._on_complete)

    def reset(self) -> None:
        if self.program is not None:
            self.program.cancel()
            self.program = None
        self.surface.restore(self._snapshot)
        self.clear_transient()
        if self.state is not LifecycleState.IDLE:
            logger.info("Reset %s", self.era)
        self.state = LifecycleState.IDLE

    def _on_complete(self, program: Program) -> None:
        if self.state is LifecycleState.PLAYING and not program.cancelled:
            self.state = LifecycleState.COMPLETE
            logger.info("%s complete", self.era)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(era={self.era!r}, state={self.state.name})"
