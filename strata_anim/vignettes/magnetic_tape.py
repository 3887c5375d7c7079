"""
Era 2: 1960s-1970s, the magnetic age.

Tape runs from the supply reel over two guide rollers and the read head to
the takeup reel. Magnetic particles ride the tape path, both reels turn,
and the read head lights up (and counts bytes) whenever a particle passes
under it.
"""

from __future__ import annotations

from typing import List, Optional

from strata_core.generators import (
    CounterState,
    Particle,
    advance_particles,
    format_bytes,
    make_particles,
    particles_in_window,
    polarity_fill,
)
from strata_core.path import PathModel
from strata_core.scheduler import Track, frame_loop, once

from .base import Vignette

LEFT_REEL = (85, 120, 50)
RIGHT_REEL = (315, 120, 35)
ROLLERS = [(150, 80, 8), (250, 80, 8), (200, 210, 10)]

PARTICLE_COUNT = 12
PARTICLE_STEP = 0.008
PARTICLE_FADE_STAGGER_MS = 60
TRANSPORT_DELAY_MS = 300
LEFT_DEG_PER_FRAME = 1.5
RIGHT_DEG_PER_FRAME = 2.0
HEAD_WINDOW = (0.45, 0.55)
BYTES_PER_PASS = 8

LIT, DARK_LIGHT, DARK_TEXT = "#4ecdc4", "#333", "#555"


def tape_path() -> PathModel:
    """Supply reel -> top-left roller -> read head -> top-right roller -> takeup reel."""
    lx, ly, lr = LEFT_REEL
    rx, ry, rr = RIGHT_REEL
    (ax, ay, ar), (bx, by, br), (hx, hy, hr) = ROLLERS
    return PathModel.from_points([
        (lx + 10, ly - lr + 5),
        (ax, ay + ar),
        (hx, hy - hr),
        (bx, by + br),
        (rx - 10, ry - rr + 5),
    ])


def bytes_text(n: int) -> str:
    return f"Bytes: {format_bytes(n, short=True)}"


class MagneticTape(Vignette):
    title = "Magnetic Tape Reel-to-Reel"

    def build(self) -> None:
        self.path = tape_path()
        self.particles: List[Particle] = []
        self.bytes_read: Optional[CounterState] = None
        self.left_angle = 0.0
        self.right_angle = 0.0

        self.draw_title(200, 18)
        for name, (x, y, r) in (("left-reel", LEFT_REEL), ("right-reel", RIGHT_REEL)):
            self.draw("g", name, transform="")
            self.draw("circle", f"{name}-flange", parent=name, cx=x, cy=y, r=r, fill="#333")
        self.draw("circle", "read-light", cx=200, cy=ROLLERS[2][1] + 18, r=4, fill=DARK_LIGHT)
        self.draw("text", "read-text", x=200, y=ROLLERS[2][1] + 45, fill=DARK_TEXT, text="READ/WRITE")
        for i in range(PARTICLE_COUNT):
            self.draw("g", f"particle-{i}", opacity=0, transform="", fill="#888")
        self.draw("text", "bytes", x=200, y=285, fill="#666", text=bytes_text(0))

    def compose(self) -> List[Track]:
        self.particles = make_particles(PARTICLE_COUNT, self.rng)
        self.bytes_read = CounterState(step=BYTES_PER_PASS, formatter=bytes_text)
        self.left_angle = self.right_angle = 0.0

        tracks = [Track("polarity").add(once(self._paint_polarity))]
        for p in self.particles:
            tracks.append(
                Track(f"particle-{p.id}", offset_ms=p.id * PARTICLE_FADE_STAGGER_MS).add(
                    self.tween(f"particle-{p.id}", 200, opacity=1)
                )
            )
        tracks.append(Track("transport", offset_ms=TRANSPORT_DELAY_MS).add(frame_loop(self._frame, label="transport")))
        return tracks

    def _paint_polarity(self) -> None:
        for p in self.particles:
            self.set(f"particle-{p.id}", fill=polarity_fill(p))

    def _frame(self, _elapsed: float) -> None:
        self.left_angle += LEFT_DEG_PER_FRAME
        self.right_angle += RIGHT_DEG_PER_FRAME
        self.set("left-reel", transform=f"rotate({self.left_angle:g}, {LEFT_REEL[0]}, {LEFT_REEL[1]})")
        self.set("right-reel", transform=f"rotate({self.right_angle:g}, {RIGHT_REEL[0]}, {RIGHT_REEL[1]})")

        advance_particles(self.particles, PARTICLE_STEP)
        for p in self.particles:
            x, y = self.path.resolve(p.t)
            self.set(f"particle-{p.id}", transform=f"translate({x:.2f}, {y:.2f})")

        if particles_in_window(self.particles, *HEAD_WINDOW):
            self.set("read-light", fill=LIT)
            self.set("read-text", fill=LIT)
            self.bytes_read.advance()
            self.set("bytes", text=self.bytes_read.label)
        else:
            self.set("read-light", fill=DARK_LIGHT)
            self.set("read-text", fill=DARK_TEXT)

    def clear_transient(self) -> None:
        self.particles = []
        self.bytes_read = None
        self.left_angle = self.right_angle = 0.0
