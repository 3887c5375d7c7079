"""
Timeline scheduler.

A vignette's animation is a set of independent Tracks. Each Track is an
ordered list of ScheduledTasks; tracks run concurrently while the tasks of
one track chain sequentially unless a task is marked parallel:

- a sequential task starts `delay_ms` after the preceding sequential task of
  its track settles (the first one `offset_ms + delay_ms` after track start)
- a parallel task starts `offset_ms + delay_ms` after track start

Running a collection of tracks yields a Program, the cancellation scope of
one playback. A task *settles* when it finishes, or when it starts for
tasks with no natural end (continuous loops and unbounded periodic pulses).
The program completes once every task has settled.

Execution substrates:
- ONE_SHOT: timer fires, `apply(1.0)` once
- TWEEN: `apply(eased progress)` on every frame, capped so the final tick
  lands exactly at `start + duration_ms` with `apply(1.0)`
- CONTINUOUS: `apply(elapsed_ms)` on every frame until cancelled
- PERIODIC: a cycle every `interval_ms`; a cycle with a duration is a tween
  over that duration, a cycle without one is a single `apply(1.0)`

Ordering: callbacks due at the same instant fire in submission order, which
the clock guarantees.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from .clock import Clock
from .config import TimelineConfig
from .easing import Easing, get_easing
from .enums import TaskKind, TaskStatus
from .surface import ElementIds, Surface

logger = logging.getLogger(__name__)

_EPS = 1e-9

Interval = Union[float, Callable[[], float]]


@dataclass
class ScheduledTask:
    """
    A single time-bounded (or explicitly cancellable) mutation.

    Attributes:
        apply: Mutation callback. Receives eased progress in [0, 1] for
            ONE_SHOT, TWEEN and PERIODIC tasks, elapsed milliseconds for
            CONTINUOUS tasks.
        delay_ms: Delay before start, relative to the task's anchor
        duration_ms: Transition length (TWEEN) or per-cycle length (PERIODIC)
        easing: Easing name or callable
        kind: Execution substrate
        parallel: Anchor on track start instead of the preceding task
        interval_ms: Cycle period for PERIODIC tasks; a callable is asked
            for each next interval
        repeat: Number of PERIODIC cycles; None repeats until cancelled
        on_start: Called once right before the first apply
        on_end: Called once when a finite task finishes
        label: Free-form name used in logs
    """

    apply: Callable[[float], Any]
    delay_ms: float = 0.0
    duration_ms: float = 0.0
    easing: Union[str, Easing, None] = "linear"
    kind: TaskKind = TaskKind.ONE_SHOT
    parallel: bool = False
    interval_ms: Interval = 0.0
    repeat: Optional[int] = None
    on_start: Optional[Callable[[], None]] = None
    on_end: Optional[Callable[[], None]] = None
    label: str = ""

    def __post_init__(self):
        if self.delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0 (got {self.delay_ms})")
        if self.duration_ms < 0:
            raise ValueError(f"duration_ms must be >= 0 (got {self.duration_ms})")
        if self.kind == TaskKind.ONE_SHOT and self.duration_ms > 0:
            self.kind = TaskKind.TWEEN
        if self.kind == TaskKind.PERIODIC:
            if not callable(self.interval_ms):
                if self.interval_ms <= 0:
                    raise ValueError("PERIODIC tasks need a positive interval_ms")
                if self.duration_ms > self.interval_ms:
                    raise ValueError("PERIODIC duration_ms cannot exceed interval_ms")
            if self.repeat is not None and self.repeat < 0:
                raise ValueError("repeat must be >= 0")
        # resolve early so unknown names fail at composition time
        get_easing(self.easing)

    @property
    def finite(self) -> bool:
        """Whether the task finishes on its own."""
        if self.kind == TaskKind.CONTINUOUS:
            return False
        if self.kind == TaskKind.PERIODIC:
            return self.repeat is not None
        return True

    def next_interval(self) -> float:
        value = self.interval_ms() if callable(self.interval_ms) else self.interval_ms
        return max(float(value), 0.0)


@dataclass
class Track:
    """Ordered sequence of tasks sharing a target element or concern."""

    name: str
    tasks: List[ScheduledTask] = field(default_factory=list)
    offset_ms: float = 0.0

    def add(self, *tasks: ScheduledTask) -> "Track":
        self.tasks.extend(tasks)
        return self

    def __len__(self) -> int:
        return len(self.tasks)


# ----- task constructors -----
def once(fn: Callable[[], Any], delay_ms: float = 0.0, parallel: bool = False, label: str = "") -> ScheduledTask:
    """Delay-then-mutate task running `fn()` once."""
    return ScheduledTask(lambda _p: fn(), delay_ms=delay_ms, parallel=parallel, label=label)


def set_attrs(surface: Surface, element_ids: ElementIds, delay_ms: float = 0.0, parallel: bool = False, **attrs) -> ScheduledTask:
    """One-shot attribute assignment."""
    return once(lambda: surface.set_many(element_ids, **attrs), delay_ms=delay_ms, parallel=parallel, label="set")


def tween(surface: Surface, element_ids: ElementIds, duration_ms: float, delay_ms: float = 0.0, easing: Union[str, Easing] = "cubic_in_out", parallel: bool = False, on_end: Optional[Callable[[], None]] = None, label: str = "", **targets) -> ScheduledTask:
    """Eased attribute transition from the values current at start to `targets`."""
    tw = surface.tween(element_ids, **targets)
    return ScheduledTask(
        tw,
        delay_ms=delay_ms,
        duration_ms=duration_ms,
        easing=easing,
        kind=TaskKind.TWEEN,
        parallel=parallel,
        on_start=tw.begin,
        on_end=on_end,
        label=label or "tween",
    )


def frame_loop(step: Callable[[float], Any], delay_ms: float = 0.0, parallel: bool = False, label: str = "") -> ScheduledTask:
    """Continuous task calling `step(elapsed_ms)` every frame until cancelled."""
    return ScheduledTask(step, delay_ms=delay_ms, kind=TaskKind.CONTINUOUS, parallel=parallel, label=label or "loop")


def periodic(apply: Callable[[float], Any], interval_ms: Interval, delay_ms: float = 0.0, duration_ms: float = 0.0, repeat: Optional[int] = None, easing: Union[str, Easing] = "linear", parallel: bool = False, label: str = "") -> ScheduledTask:
    """Repeating cycle task; see `ScheduledTask` for the cycle semantics."""
    return ScheduledTask(
        apply,
        delay_ms=delay_ms,
        duration_ms=duration_ms,
        easing=easing,
        kind=TaskKind.PERIODIC,
        parallel=parallel,
        interval_ms=interval_ms,
        repeat=repeat,
        label=label or "periodic",
    )


class TaskHandle:
    """
    Runtime handle of one task inside a Program.

    Holds the live clock callbacks of the task so cancelling the handle
    prevents any further mutation.
    """

    _keys = itertools.count()

    def __init__(self, task: ScheduledTask, track: str, program: "Program", counted: bool = True):
        self.task = task
        self.track = track
        self.program = program
        self.counted = counted
        self.status = TaskStatus.PENDING
        self.settled = False
        self.started_at: Optional[float] = None
        self.cycles = 0
        self._successor: Optional[TaskHandle] = None
        self._timers: Dict[int, Any] = {}

    @property
    def active(self) -> bool:
        return self.status in (TaskStatus.PENDING, TaskStatus.RUNNING)

    @property
    def clock(self) -> Clock:
        return self.program.scheduler.clock

    def cancel(self) -> None:
        """Stop this task; unstarted sequential successors are cancelled too.

        A cancelled task counts as settled, so the rest of the program can
        still complete.
        """
        if not self.active:
            return
        self.status = TaskStatus.CANCELLED
        for timer in self._timers.values():
            self.clock.cancel(timer)
        self._timers.clear()
        if not self.settled:
            self.settled = True
            if self._successor is not None:
                self._successor.cancel()
            self.program._settled(self)

    def _after(self, delay_ms: float, fn: Callable[[], None]) -> None:
        self._hold(self.clock.call_later, delay_ms, fn)

    def _next_frame(self, fn: Callable[[], None]) -> None:
        self._hold(lambda _d, cb: self.clock.call_next_frame(cb), None, fn)

    def _hold(self, schedule, delay_ms, fn) -> None:
        key = next(self._keys)

        def fire():
            self._timers.pop(key, None)
            if self.active:
                fn()

        self._timers[key] = schedule(delay_ms, fire)

    def __repr__(self) -> str:
        return f"TaskHandle(track={self.track!r}, label={self.task.label!r}, status={self.status.name})"


class Program:
    """
    Cancellation scope of one `Scheduler.run()` call.

    Attributes:
        handles: Task handles of the program; spawned handles are dropped
            once they finish
        completed: True once every counted task settled
        cancelled: True once `cancel()` was called
    """

    def __init__(self, scheduler: "Scheduler", on_complete: Optional[Callable[["Program"], None]] = None):
        self.scheduler = scheduler
        self.handles: List[TaskHandle] = []
        self.completed = False
        self.cancelled = False
        self._on_complete = on_complete
        self._unsettled = 0

    @property
    def pending(self) -> int:
        """Number of tasks that have not finished and were not cancelled."""
        return sum(1 for h in self.handles if h.active)

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        for h in self.handles:
            h.cancel()

    def spawn(self, *tracks: Track) -> List[TaskHandle]:
        """Run extra tracks under this program's cancellation scope.

        Spawned tasks never delay completion.
        """
        if self.cancelled:
            return []
        out: List[TaskHandle] = []
        for track in tracks:
            out.extend(self.scheduler._launch(self, track, counted=False))
        return out

    def handles_for(self, track: str) -> List[TaskHandle]:
        return [h for h in self.handles if h.track == track]

    def _add(self, handle: TaskHandle) -> None:
        self.handles.append(handle)
        if handle.counted:
            self._unsettled += 1

    def _discard(self, handle: TaskHandle) -> None:
        if handle in self.handles:
            self.handles.remove(handle)

    def _settled(self, handle: TaskHandle) -> None:
        if handle.counted:
            self._unsettled -= 1
            self._check_complete()

    def _check_complete(self) -> None:
        if self._unsettled == 0 and not self.completed and not self.cancelled:
            self.completed = True
            logger.debug("Program complete after %d tasks", len(self.handles))
            if self._on_complete is not None:
                self._on_complete(self)


class Scheduler:
    """Executes Tracks against a clock."""

    def __init__(self, clock: Clock, config: TimelineConfig | None = None):
        self.clock = clock
        self.config = config or TimelineConfig()

    @property
    def frame_ms(self) -> float:
        return self.clock.frame_interval_ms

    def run(self, tracks: Iterable[Track], on_complete: Optional[Callable[[Program], None]] = None) -> Program:
        """Submit `tracks` and return the program that owns their tasks."""
        program = Program(self, on_complete)
        for track in tracks:
            self._launch(program, track, counted=True)
        # nothing to wait for
        program._check_complete()
        return program

    # ----- launching -----
    def _launch(self, program: Program, track: Track, counted: bool) -> List[TaskHandle]:
        handles: List[TaskHandle] = []
        prev: Optional[TaskHandle] = None
        for task in track.tasks:
            h = TaskHandle(task, track.name, program, counted=counted)
            program._add(h)
            handles.append(h)
            if task.parallel or prev is None:
                h._after(track.offset_ms + task.delay_ms, lambda h=h: self._start(h))
                if not task.parallel:
                    prev = h
            else:
                prev._successor = h
                prev = h
        return handles

    # ----- execution -----
    def _start(self, h: TaskHandle) -> None:
        task = h.task
        h.status = TaskStatus.RUNNING
        h.started_at = self.clock.now()
        if task.on_start is not None:
            task.on_start()
        if not h.active:
            return

        if task.kind == TaskKind.ONE_SHOT:
            task.apply(1.0)
            self._finish(h)
        elif task.kind == TaskKind.TWEEN:
            self._run_tween(h, task.duration_ms, lambda: self._finish(h))
        elif task.kind == TaskKind.CONTINUOUS:
            self._settle(h)
            self._loop(h)
        elif task.kind == TaskKind.PERIODIC:
            if task.repeat is None:
                self._settle(h)
            self._cycle(h, 0)

    def _run_tween(self, h: TaskHandle, duration_ms: float, done: Callable[[], None]) -> None:
        task = h.task
        if duration_ms <= 0:
            task.apply(1.0)
            if h.active:
                done()
            return
        ease = get_easing(task.easing)
        started = self.clock.now()
        task.apply(ease(0.0))

        def tick():
            remaining = duration_ms - (self.clock.now() - started)
            if remaining <= _EPS:
                task.apply(1.0)
                if h.active:
                    done()
                return
            task.apply(ease((duration_ms - remaining) / duration_ms))
            if h.active:
                h._after(min(self.frame_ms, remaining), tick)

        h._after(min(self.frame_ms, duration_ms), tick)

    def _loop(self, h: TaskHandle) -> None:
        task = h.task
        started = h.started_at

        def frame():
            task.apply(self.clock.now() - started)
            if h.active:
                h._next_frame(frame)

        frame()

    def _cycle(self, h: TaskHandle, k: int) -> None:
        task = h.task
        if task.repeat is not None and k >= task.repeat:
            self._finish(h)
            return
        h.cycles = k + 1
        last = task.repeat is not None and k + 1 >= task.repeat
        if not last:
            h._after(max(task.next_interval(), task.duration_ms), lambda: self._cycle(h, k + 1))
        done = (lambda: self._finish(h)) if last else (lambda: None)
        self._run_tween(h, task.duration_ms, done)

    def _finish(self, h: TaskHandle) -> None:
        if not h.active:
            return
        h.status = TaskStatus.DONE
        if h.task.on_end is not None:
            h.task.on_end()
        self._settle(h)
        if not h.counted:
            h.program._discard(h)

    def _settle(self, h: TaskHandle) -> None:
        if h.settled:
            return
        h.settled = True
        nxt = h._successor
        if nxt is not None and nxt.status == TaskStatus.PENDING:
            nxt._after(nxt.task.delay_ms, lambda: self._start(nxt))
        h.program._settled(h)
