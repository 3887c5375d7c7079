from __future__ import annotations

import logging
from typing import Iterable

from strata_core.registry import AnimationRegistry

from strata_anim.models.events import ScrollEvent, StepEnter, StepExit

logger = logging.getLogger(__name__)


class ScrollDispatcher:
    """Routes scroll-trigger events to the registry handlers."""

    def __init__(self, registry: AnimationRegistry):
        self.registry = registry

    def dispatch(self, event: ScrollEvent) -> None:
        logger.debug("%s %s (%s)", type(event).__name__, event.era, event.direction)
        if isinstance(event, StepEnter):
            self.registry.on_enter(event.era, event.direction)
        elif isinstance(event, StepExit):
            self.registry.on_exit(event.era, event.direction)

    def dispatch_all(self, events: Iterable[ScrollEvent]) -> None:
        for ev in events:
            self.dispatch(ev)
