"""
Replay recorded scroll logs against a headless surface.

`replay()` runs on a `VirtualClock`, so a log replays instantly and
identically for a given seed; `replay_realtime()` runs the same storyboard
on the asyncio event loop in wall-clock time. Both return the final state:

    {"t": ms, "states": {era: state | None}, "elements": {id: attrs}}
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from strata_core.clock import AsyncioClock, Clock, VirtualClock
from strata_core.compiler import Storyboard
from strata_core.generators import RandomSource
from strata_core.registry import AnimationRegistry
from strata_core.scheduler import Scheduler
from strata_core.surface import Surface

from strata_anim.adapters.scroll import ScrollDispatcher
from strata_anim.models.events import ScrollEvent
from strata_anim.vignettes import build_registry

logger = logging.getLogger(__name__)


def mount(surface: Surface, storyboard: Storyboard, omit: Iterable[str] = ()) -> List[str]:
    """Add the containers of every era not in `omit`; returns the mounted selectors."""
    skip = set(omit)
    mounted = []
    for era in storyboard.eras:
        if era.key in skip:
            logger.info("Leaving %s unmounted", era.container)
            continue
        surface.add_container(era.container)
        mounted.append(era.container)
    return mounted


def state_of(t: float, registry: AnimationRegistry, surface: Surface) -> Dict[str, Any]:
    return {"t": t, "states": registry.states(), "elements": surface.dump()}


def _ordered(events: Iterable[ScrollEvent]) -> List[ScrollEvent]:
    # events without a timestamp fire at 0; equal times keep log order
    return sorted(events, key=lambda ev: ev.t or 0.0)


def _setup(storyboard: Storyboard, clock: Clock, omit: Sequence[str], rng: Optional[RandomSource]):
    surface = Surface()
    mount(surface, storyboard, omit)
    scheduler = Scheduler(clock, storyboard.config)
    registry = build_registry(storyboard, surface, scheduler, rng=rng)
    return surface, registry


def replay(storyboard: Storyboard, events: Iterable[ScrollEvent], until_ms: Optional[float] = None, omit: Sequence[str] = (), rng: Optional[RandomSource] = None) -> Dict[str, Any]:
    """
    Replay `events` on a virtual clock and return the state at `until_ms`.

    Args:
        storyboard: Compiled storyboard
        events: Scroll events; each fires at its ``t`` (ms)
        until_ms: Time of the returned state; defaults to the last event
        omit: Era keys whose containers are left unmounted
        rng: Shared random source overriding the storyboard seed
    """
    ordered = _ordered(events)
    if until_ms is None:
        until_ms = max((ev.t or 0.0 for ev in ordered), default=0.0)

    clock = VirtualClock(frame_interval_ms=storyboard.config.frame_interval_ms)
    surface, registry = _setup(storyboard, clock, omit, rng)
    dispatcher = ScrollDispatcher(registry)

    for ev in ordered:
        t = ev.t or 0.0
        if t > until_ms:
            break
        clock.advance_to(t)
        dispatcher.dispatch(ev)
    clock.advance_to(until_ms)
    logger.info("Replayed %d events up to %.0f ms", len(ordered), until_ms)
    return state_of(until_ms, registry, surface)


async def replay_realtime(storyboard: Storyboard, events: Iterable[ScrollEvent], until_ms: Optional[float] = None, omit: Sequence[str] = (), rng: Optional[RandomSource] = None) -> Dict[str, Any]:
    """Wall-clock counterpart of `replay()`; every playback is reset afterwards."""
    ordered = _ordered(events)
    if until_ms is None:
        until_ms = max((ev.t or 0.0 for ev in ordered), default=0.0)

    clock = AsyncioClock(frame_interval_ms=storyboard.config.frame_interval_ms)
    surface, registry = _setup(storyboard, clock, omit, rng)
    dispatcher = ScrollDispatcher(registry)
    origin = clock.now()

    async def sleep_until(t: float) -> None:
        delay = origin + t - clock.now()
        if delay > 0:
            await asyncio.sleep(delay / 1000.0)

    for ev in ordered:
        t = ev.t or 0.0
        if t > until_ms:
            break
        await sleep_until(t)
        dispatcher.dispatch(ev)
    await sleep_until(until_ms)
    state = state_of(until_ms, registry, surface)
    registry.reset_all()
    return state
