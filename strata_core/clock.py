"""
Clocks: the scheduling substrate of a rendering surface.

A clock exposes the three primitives the timeline scheduler needs: run a
callback after a delay, run a callback on the next frame, and cancel a
callback that has not fired yet. All times are milliseconds.

`VirtualClock` is deterministic and advanced by hand; it drives the tests and
the replay runner. `AsyncioClock` maps the same primitives onto an asyncio
event loop for wall-clock playback.
"""

from __future__ import annotations

import asyncio
import heapq
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

Callback = Callable[[], None]


class Clock(ABC):
    """Minimal timer capability set shared by every scheduling substrate."""

    frame_interval_ms: float = 16.0

    @abstractmethod
    def now(self) -> float:
        ...

    @abstractmethod
    def call_later(self, delay_ms: float, callback: Callback) -> Any:
        ...

    @abstractmethod
    def call_next_frame(self, callback: Callback) -> Any:
        ...

    @abstractmethod
    def cancel(self, handle: Any) -> None:
        ...


@dataclass(order=True)
class _Timer:
    due: float
    seq: int
    callback: Callback = field(compare=False)
    cancelled: bool = field(default=False, compare=False)


class VirtualClock(Clock):
    """
    Deterministic clock advanced explicitly with `advance()`.

    Callbacks fire in order of due time; callbacks due at the same instant
    fire in the order they were scheduled. Callbacks scheduled while the
    clock advances are honored within the same advance when they fall due
    before its target time.
    """

    def __init__(self, frame_interval_ms: float = 16.0, start_ms: float = 0.0):
        self.frame_interval_ms = float(frame_interval_ms)
        self._now = float(start_ms)
        self._queue: List[_Timer] = []
        self._seq = 0

    def now(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callback) -> _Timer:
        timer = _Timer(self._now + max(0.0, float(delay_ms)), self._seq, callback)
        self._seq += 1
        heapq.heappush(self._queue, timer)
        return timer

    def call_next_frame(self, callback: Callback) -> _Timer:
        return self.call_later(self.frame_interval_ms, callback)

    def cancel(self, handle: Optional[_Timer]) -> None:
        if handle is not None:
            handle.cancelled = True

    def pending(self) -> int:
        """Number of scheduled callbacks that have neither fired nor been cancelled."""
        return sum(1 for t in self._queue if not t.cancelled)

    def advance(self, ms: float) -> None:
        """Move time forward by `ms`, firing every callback that falls due."""
        self.advance_to(self._now + float(ms))

    def advance_to(self, target_ms: float) -> None:
        while self._queue and self._queue[0].due <= target_ms:
            timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = timer.due
            timer.callback()
        self._now = max(self._now, float(target_ms))


class AsyncioClock(Clock):
    """Wall-clock substrate backed by an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None, frame_interval_ms: float = 16.0):
        self._loop = loop
        self.frame_interval_ms = float(frame_interval_ms)

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time() * 1000.0

    def call_later(self, delay_ms: float, callback: Callback) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, float(delay_ms)) / 1000.0, callback)

    def call_next_frame(self, callback: Callback) -> asyncio.TimerHandle:
        return self.call_later(self.frame_interval_ms, callback)

    def cancel(self, handle: Optional[asyncio.TimerHandle]) -> None:
        if handle is not None:
            handle.cancel()
