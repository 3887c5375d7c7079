"""
Procedural generators driving the vignette narratives.

Every function here is pure or draws from an injected random source, so a
playback can be reproduced exactly by supplying a seeded generator (or a
fixed-sequence stub in tests). A random source is anything exposing
``random() -> float`` in [0, 1); production code uses
``numpy.random.default_rng``.

Counters and completion labels must always be derived from the data these
generators actually produced (e.g. the selected cells), never from an
assumed fixed count.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol, Sequence, Tuple

import networkx as nx
import numpy as np


class RandomSource(Protocol):
    def random(self) -> float:
        ...


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Random source for production use; `seed=None` draws OS entropy."""
    return np.random.default_rng(seed)


def pick_index(rng: RandomSource, n: int) -> int:
    """Uniform index in ``range(n)``."""
    if n <= 0:
        raise ValueError("Cannot pick from an empty range")
    return min(int(rng.random() * n), n - 1)


# ----- discrete activation -----
@dataclass(frozen=True)
class Activation:
    """A fixed-position cell, whether it was selected, and its reveal delay."""

    index: int
    active: bool
    delay_ms: float


def select_active(count: int, rng: RandomSource, threshold: float = 0.55, step_ms: float = 40.0) -> List[Activation]:
    """
    Randomly mark cells active.

    Delays are deterministic (``index * step_ms``); membership draws one
    sample per cell and keeps it when the sample exceeds `threshold`.
    """
    return [
        Activation(i, rng.random() > threshold, i * step_ms)
        for i in range(count)
    ]


def active_only(cells: Sequence[Activation]) -> List[Activation]:
    return [c for c in cells if c.active]


# ----- counters -----
def label_for(table: Sequence[str], count: int, base: int = 1) -> str:
    """Label of `count` in an ordered table whose first entry belongs to `base`.

    Counts past the end of the table clamp to its last entry, counts below
    `base` to its first.
    """
    if not table:
        raise ValueError("Label table is empty")
    idx = max(0, min(count - base, len(table) - 1))
    return table[idx]


@dataclass
class CounterState:
    """
    Monotonic counter with a derived display label.

    Attributes:
        initial: Value restored by `reset()`
        step: Increment applied by each `advance()`
        ceiling: Optional upper bound; advances saturate there
        formatter: Maps the value to its display label
    """

    initial: int = 0
    step: int = 1
    ceiling: Optional[int] = None
    formatter: Callable[[int], str] = str
    value: int = field(init=False)

    def __post_init__(self):
        if self.step < 0:
            raise ValueError("Counters only move forward")
        self.value = self.initial

    def advance(self, times: int = 1) -> int:
        value = self.value + self.step * max(0, times)
        if self.ceiling is not None:
            value = min(value, self.ceiling)
        self.value = max(self.value, value)
        return self.value

    def reset(self) -> None:
        self.value = self.initial

    @property
    def at_ceiling(self) -> bool:
        return self.ceiling is not None and self.value >= self.ceiling

    @property
    def label(self) -> str:
        return self.formatter(self.value)


def format_bytes(n: int, short: bool = False) -> str:
    """Human readable byte count.

    Long form: ``512 bytes`` / ``1.5 KB`` / ``2.0 MB``; short form (tape
    counters): ``512`` / ``1.5K``.
    """
    if short:
        return str(n) if n < 1024 else f"{n / 1024:.1f}K"
    if n < 1024:
        return f"{n} bytes"
    if n < 1048576:
        return f"{n / 1024:.1f} KB"
    return f"{n / 1048576:.1f} MB"


def spin_up(rpm: int, step: int = 400, ceiling: int = 7200) -> int:
    return min(rpm + step, ceiling)


# ----- particles -----
@dataclass
class Particle:
    """Marker riding a path: parameter `t` in [0, 1) and polarity `direction`."""

    id: int
    t: float
    direction: int = 1


def wrap_unit(t: float) -> float:
    """Wrap `t` into [0, 1)."""
    t = math.fmod(t, 1.0)
    if t < 0:
        t += 1.0
    # fmod of values just below an integer can round up to 1.0 after the shift
    return 0.0 if t >= 1.0 else t


def make_particles(n: int, rng: RandomSource) -> List[Particle]:
    """`n` evenly spaced particles with random polarity."""
    return [Particle(i, i / n, 1 if rng.random() > 0.5 else -1) for i in range(n)]


def advance_particles(particles: Sequence[Particle], increment: float) -> Sequence[Particle]:
    for p in particles:
        p.t = wrap_unit(p.t + increment)
    return particles


def polarity_fill(particle: Particle, north: str = "#ff6b6b", south: str = "#4ecdc4") -> str:
    return north if particle.direction > 0 else south


def particles_in_window(particles: Sequence[Particle], lo: float, hi: float) -> List[Particle]:
    """Particles strictly inside ``(lo, hi)``."""
    return [p for p in particles if lo < p.t < hi]


# ----- disk seeks -----
def seek_plan(rng: RandomSource, track_count: int, base_ms: int = 5, spread_ms: int = 10) -> Tuple[int, int]:
    """Random target track and access time in ms (``base_ms`` to ``base_ms + spread_ms - 1``)."""
    track = pick_index(rng, track_count)
    access = int(math.floor(base_ms + rng.random() * spread_ms))
    return track, access


def seek_interval(rng: RandomSource, base_ms: float = 1000.0, spread_ms: float = 1500.0) -> float:
    return base_ms + rng.random() * spread_ms


# ----- replication -----
@dataclass(frozen=True)
class Flight:
    """A data chunk travelling from the primary region to one replica."""

    source: str
    target: str
    latency: float
    delay_ms: float
    travel_ms: float
    fade_in_ms: float

    @property
    def arrival_ms(self) -> float:
        return self.delay_ms + self.fade_in_ms + self.travel_ms


def replication_schedule(topology: nx.Graph, primary: str, stagger_ms: float = 350.0, base_travel_ms: float = 400.0, ms_per_latency: float = 3.0, fade_in_ms: float = 100.0) -> List[Flight]:
    """
    One flight per neighbour of `primary`, in adjacency order.

    Flights are staggered by `stagger_ms`; travel time grows with the edge's
    ``latency`` attribute.
    """
    flights = []
    for i, target in enumerate(topology.neighbors(primary)):
        latency = float(topology.edges[primary, target].get("latency", 0.0))
        flights.append(
            Flight(
                source=primary,
                target=target,
                latency=latency,
                delay_ms=i * stagger_ms,
                travel_ms=base_travel_ms + latency * ms_per_latency,
                fade_in_ms=fade_in_ms,
            )
        )
    return flights
