"""
Arclength parametrization of piecewise-linear paths.

A PathModel maps a scalar t in [0, 1) to a point along an ordered list of
straight segments, proportionally to the cumulative distance travelled. It
is built once from static geometry and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import numpy as np

Point = Tuple[float, float]


@dataclass(frozen=True)
class Segment:
    """One straight piece of a path and its share of the parameter range."""

    start: Point
    end: Point
    length: float
    start_t: float
    end_t: float

    def point_at(self, t: float) -> Point:
        span = self.end_t - self.start_t
        local = (t - self.start_t) / span if span > 0 else 0.0
        return (
            self.start[0] + (self.end[0] - self.start[0]) * local,
            self.start[1] + (self.end[1] - self.start[1]) * local,
        )


class PathModel:
    """
    Piecewise-linear path with a normalized arclength parameter.

    Segment intervals ``[start_t, end_t)`` partition ``[0, 1)`` contiguously
    and monotonically; the last interval always ends at exactly 1.0.

    Attributes:
        segments: Ordered segments
        total_length: Sum of segment lengths
        cumulative: Cumulative length at the end of each segment
    """

    def __init__(self, pieces: Iterable[Tuple[Point, Point]]):
        pieces = [(tuple(map(float, a)), tuple(map(float, b))) for a, b in pieces]
        if not pieces:
            raise ValueError("A path needs at least one segment")

        starts = np.array([p[0] for p in pieces], dtype=float)
        ends = np.array([p[1] for p in pieces], dtype=float)
        lengths = np.hypot(*(ends - starts).T)
        total = float(lengths.sum())
        if total <= 0:
            raise ValueError("A path needs a positive total length")

        self.cumulative = np.cumsum(lengths)
        self.total_length = total
        bounds = np.concatenate(([0.0], self.cumulative / total))
        bounds[-1] = 1.0

        self.segments: List[Segment] = [
            Segment(a, b, float(length), float(bounds[i]), float(bounds[i + 1]))
            for i, ((a, b), length) in enumerate(zip(pieces, lengths))
        ]

    @classmethod
    def from_points(cls, points: Sequence[Point]) -> "PathModel":
        """Build a path through consecutive points (a polyline)."""
        if len(points) < 2:
            raise ValueError("A path needs at least two points")
        return cls(zip(points[:-1], points[1:]))

    @property
    def start(self) -> Point:
        return self.segments[0].start

    @property
    def end(self) -> Point:
        return self.segments[-1].end

    def resolve(self, t: float) -> Point:
        """Point at parameter `t`; values outside [0, 1) clamp to the final point."""
        if not (0.0 <= t < 1.0):
            return self.end
        for seg in self.segments:
            if seg.start_t <= t < seg.end_t:
                return seg.point_at(t)
        return self.end

    def __len__(self) -> int:
        return len(self.segments)
