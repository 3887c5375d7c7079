"""
Era 3: 1980s-2000s, the spinning disk era.

The platter spins up to 7200 RPM and keeps rotating; magnetic domains are
written at random as it turns, and the read/write arm seeks to a random
track at irregular intervals, showing the access time of each seek.
"""

from __future__ import annotations

import math
from typing import List, Optional

from strata_core.generators import (
    CounterState,
    format_bytes,
    pick_index,
    seek_interval,
    seek_plan,
    spin_up,
)
from strata_core.scheduler import Track, frame_loop, once, periodic

from .base import Vignette

CENTER = (200, 160)
TRACK_RADII = (85, 70, 55, 40)

RPM_STEP = 400
RPM_MAX = 7200
SPIN_UP_INTERVAL_MS = 100
DEG_PER_FRAME = 3
WRITE_EVERY_DEG = 15
BYTES_PER_WRITE = 512
WRITE_MS = 50
FIRST_SEEK_MS = 800
SEEK_MS_PER_ACCESS_MS = 20

TEAL, RED, DOMAIN_FILL = "#4ecdc4", "#ff6b6b", "#333"


def head_points(y: float) -> str:
    cx = CENTER[0]
    return f"{cx + 35},{y - 6:g} {cx + 45},{y:g} {cx + 35},{y + 6:g}"


def rpm_text(n: int) -> str:
    return f"{n} RPM"


class HddPlatter(Vignette):
    title = "Hard Disk Drive"

    def build(self) -> None:
        self.rpm = 0
        self.bytes_written: Optional[CounterState] = None
        self.angle = 0
        self.domains: List[str] = []

        cx, cy = CENTER
        self.draw_title(200, 18)
        self.draw("g", "platter", transform="")
        self.draw("circle", "disk", parent="platter", cx=cx, cy=cy, r=100, fill="url(#platter-shine)")
        for track, r in enumerate(TRACK_RADII):
            n = 20 + track * 6
            for i in range(n):
                angle = i / n * math.pi * 2
                name = f"domain-{track}-{i}"
                self.draw(
                    "rect", name, parent="platter",
                    x=round(cx + math.cos(angle) * r - 3, 2),
                    y=round(cy + math.sin(angle) * r - 1.5, 2),
                    width=6, height=3, fill=DOMAIN_FILL,
                )
                self.domains.append(name)
        self.draw("line", "arm", x1=360, y1=270, x2=cx + 40, y2=cy, stroke="#777")
        self.draw("polygon", "head", points=head_points(cy), fill=RED)
        self.draw("text", "rpm", x=50, y=300, fill=TEAL, text=rpm_text(0))
        self.draw("text", "seek", x=350, y=300, fill="#666", text="Seek: --ms")
        self.draw("text", "bytes", x=200, y=300, fill="#666", text=format_bytes(0))

    def compose(self) -> List[Track]:
        self.rpm = 0
        self.bytes_written = CounterState(step=BYTES_PER_WRITE, formatter=format_bytes)
        self.angle = 0

        return [
            Track("spin-up").add(
                periodic(
                    self._spin_up,
                    interval_ms=SPIN_UP_INTERVAL_MS,
                    delay_ms=SPIN_UP_INTERVAL_MS,
                    repeat=RPM_MAX // RPM_STEP,
                    label="spin-up",
                )
            ),
            Track("rotation").add(frame_loop(self._rotate, label="rotation")),
            Track("seek").add(
                periodic(
                    self._seek,
                    interval_ms=lambda: seek_interval(self.rng),
                    delay_ms=FIRST_SEEK_MS,
                    label="seek",
                )
            ),
        ]

    def _spin_up(self, _progress: float) -> None:
        self.rpm = spin_up(self.rpm, RPM_STEP, RPM_MAX)
        self.set("rpm", text=rpm_text(self.rpm))

    def _rotate(self, _elapsed: float) -> None:
        self.angle += DEG_PER_FRAME
        self.set("platter", transform=f"rotate({self.angle}, {CENTER[0]}, {CENTER[1]})")
        if self.angle % WRITE_EVERY_DEG == 0:
            self._write_domain()

    def _write_domain(self) -> None:
        name = self.domains[pick_index(self.rng, len(self.domains))]
        color = TEAL if self.rng.random() > 0.5 else RED
        if self.program is not None:
            self.program.spawn(Track("write").add(self.tween(name, WRITE_MS, fill=color)))
        self.bytes_written.advance()
        self.set("bytes", text=self.bytes_written.label)

    def _seek(self, _progress: float) -> None:
        track, access_ms = seek_plan(self.rng, len(TRACK_RADII))
        target_y = CENTER[1] + (track - 1.5) * 15
        travel = access_ms * SEEK_MS_PER_ACCESS_MS
        self.set("seek", fill=RED, text=f"Seek: {access_ms}ms")
        if self.program is not None:
            self.program.spawn(
                Track("seek-arm").add(
                    self.tween("arm", travel, y2=target_y),
                    once(lambda: self.set("seek", fill=TEAL)),
                ),
                Track("seek-head").add(self.tween("head", travel, points=head_points(target_y))),
            )

    def clear_transient(self) -> None:
        self.rpm = 0
        self.bytes_written = None
        self.angle = 0
