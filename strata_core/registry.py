"""
Era registry: the single entry point of the scroll-trigger collaborator.

The registry is an explicit context object built once at startup and handed
to the scroll adapter. An era whose container was absent is registered with
no controller; enter and exit events for it (or for unknown eras) are
ignored.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional

from .config import TimelineConfig
from .lifecycle import LifecycleController

logger = logging.getLogger(__name__)


class AnimationRegistry:
    """
    Maps era keys to lifecycle controllers.

    Attributes:
        config: Timeline configuration (``reset_on_exit`` controls `on_exit`)
    """

    def __init__(self, config: TimelineConfig | None = None):
        self.config = config or TimelineConfig()
        self._entries: Dict[str, Optional[LifecycleController]] = {}

    def register(self, era: str, controller: Optional[LifecycleController]) -> None:
        if era in self._entries:
            raise ValueError(f"Era {era!r} already registered")
        self._entries[era] = controller

    def get(self, era: str) -> Optional[LifecycleController]:
        return self._entries.get(era)

    def eras(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, era: str) -> bool:
        return era in self._entries

    def __iter__(self) -> Iterator[LifecycleController]:
        return (c for c in self._entries.values() if c is not None)

    def __len__(self) -> int:
        return len(self._entries)

    # ----- scroll handlers -----
    def on_enter(self, era: str, direction: str = "down") -> None:
        controller = self.get(era)
        if controller is None:
            logger.debug("Enter %s (%s): no vignette", era, direction)
            return
        controller.play()

    def on_exit(self, era: str, direction: str = "down") -> None:
        controller = self.get(era)
        if controller is None or not self.config.reset_on_exit:
            return
        controller.reset()

    def reset_all(self) -> None:
        """Teardown route: cancel every playback and restore every vignette."""
        for controller in self:
            controller.reset()

    def states(self) -> Dict[str, Optional[str]]:
        return {
            era: (c.state.name if c is not None else None)
            for era, c in self._entries.items()
        }
