"""
Era 1: 1950s, the physical age.

Holes are punched into an 80-column card one after another, light shines
through every punched hole and keeps pulsing, and a "CLICK" pops above the
first few punches. The set of punched holes is drawn at random on every
playback; the counter is derived from that set.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from strata_core.generators import Activation, CounterState, active_only, select_active
from strata_core.scheduler import Track, once, periodic

from .base import Vignette

COLS = 12
ROWS = 5
HOLE_SIZE = 16
SPACING = 28
ORIGIN = (50, 65)

PUNCH_THRESHOLD = 0.55
PUNCH_STEP_MS = 40
PUNCH_MS = 150
CLICK_LIMIT = 5
CLICK_STAGGER_MS = 200
RAY_PULSE_MS = 1600

HOLE_FILL, HOLE_STROKE = "#c49a6c", "#a07850"
PUNCHED_FILL, PUNCHED_STROKE = "#1a1a1a", "#000"


def hole_position(index: int) -> Tuple[float, float]:
    row, col = divmod(index, COLS)
    return ORIGIN[0] + col * SPACING, ORIGIN[1] + row * SPACING


def counter_text(n: int) -> str:
    return f"Holes punched: {n}"


class PunchCard(Vignette):
    title = "IBM 80-Column Punch Card"

    def build(self) -> None:
        self.cells: List[Activation] = []
        self.punched: List[Activation] = []
        self.counter: Optional[CounterState] = None

        self.draw_title(200, 20)
        self.draw("rect", "card", x=20, y=40, width=360, height=190, fill="#d4a574")
        for i in range(ROWS * COLS):
            x, y = hole_position(i)
            box = dict(x=x - HOLE_SIZE / 2, y=y - HOLE_SIZE / 2, width=HOLE_SIZE, height=HOLE_SIZE * 0.6)
            self.draw("rect", f"hole-{i}", fill=HOLE_FILL, stroke=HOLE_STROKE, **box)
            self.draw("rect", f"ray-{i}", fill="#ffeb3b", opacity=0, **box)
        for k in range(CLICK_LIMIT):
            self.draw("text", f"click-{k}", x=0, y=0, fill="#ff6b6b", opacity=0, text="CLICK")
        self.draw("text", "counter", x=200, y=265, fill="#666", text=counter_text(0))

    def compose(self) -> List[Track]:
        self.cells = select_active(ROWS * COLS, self.rng, threshold=PUNCH_THRESHOLD, step_ms=PUNCH_STEP_MS)
        self.punched = active_only(self.cells)
        self.counter = CounterState(ceiling=len(self.punched), formatter=counter_text)

        tracks = []
        for cell in self.punched:
            i = cell.index
            tracks.append(
                Track(f"hole-{i}", offset_ms=cell.delay_ms).add(
                    self.tween(f"hole-{i}", PUNCH_MS, fill=PUNCHED_FILL, stroke=PUNCHED_STROKE),
                    once(self._count_punch),
                )
            )
            ray = self.el(f"ray-{i}")
            tracks.append(
                Track(f"ray-{i}", offset_ms=cell.delay_ms + PUNCH_MS).add(
                    self.tween(f"ray-{i}", 200, opacity=0.9),
                    self.tween(f"ray-{i}", 500, opacity=0.6),
                    self.tween(f"ray-{i}", 500, opacity=0.9),
                    periodic(
                        self.surface.pulse(ray, rest={"opacity": 0.9}, peak={"opacity": 0.5}),
                        interval_ms=RAY_PULSE_MS,
                        duration_ms=RAY_PULSE_MS,
                        label="ray-pulse",
                    ),
                )
            )
        for k, cell in enumerate(self.punched[:CLICK_LIMIT]):
            x, y = hole_position(cell.index)
            tracks.append(
                Track(f"click-{k}", offset_ms=k * CLICK_STAGGER_MS).add(
                    self.set_later(f"click-{k}", x=x, y=y - 15),
                    self.tween(f"click-{k}", 100, opacity=1),
                    self.tween(f"click-{k}", 300, delay_ms=200, opacity=0, y=y - 25),
                )
            )
        return tracks

    def _count_punch(self) -> None:
        self.counter.advance()
        self.set("counter", text=self.counter.label)

    def clear_transient(self) -> None:
        self.cells = []
        self.punched = []
        self.counter = None
