"""
Era 4: 2000s-2010s, the flash revolution.

A floating gate transistor is programmed: the control gate voltage ramps to
20 V, the tunnel oxide glows, eight electrons tunnel from the channel into
the floating gate and the cell flips from bit 1 to bit 0.
"""

from __future__ import annotations

from typing import List, NamedTuple

from strata_core.easing import interpolate_color
from strata_core.enums import TaskKind
from strata_core.scheduler import ScheduledTask, Track, periodic

from .base import Vignette

GATE_X, GATE_Y, GATE_W, LAYER_H = 100, 60, 140, 22

ELECTRON_COUNT = 8
ELECTRON_STAGGER_MS = 120
VOLTAGE_MS = 500
OXIDE_AT_MS = 500
ELECTRONS_AT_MS = 600
TUNNEL_AT_MS = 1200
PROGRAMMED_AT_MS = 2500
ELECTRON_PULSE_MS = 2000
PEAK_VOLTS = 20

RED, TEAL, DIM = "#ff6b6b", "#4ecdc4", "#444"
OXIDE, OXIDE_GLOW = "#2a4a6a", "#4a7a9a"
GATE, GATE_CHARGED = "#1a3a5a", "#2a5a7a"

EMPTY_BIT = "State: EMPTY → Bit = 1"
CHARGED_BIT = "State: CHARGED → Bit = 0"


class ElectronPath(NamedTuple):
    start: tuple
    end: tuple
    delay_ms: int


def electron_paths() -> List[ElectronPath]:
    """Channel-to-gate trajectories, four columns by two staggered waves."""
    return [
        ElectronPath(
            (GATE_X + 15 + (i % 4) * 35, GATE_Y + LAYER_H * 2 + 35),
            (GATE_X + 20 + (i % 4) * 32, GATE_Y + LAYER_H + 17),
            i * ELECTRON_STAGGER_MS,
        )
        for i in range(ELECTRON_COUNT)
    ]


class SsdNand(Vignette):
    title = "NAND Flash Cell (Floating Gate Transistor)"

    def build(self) -> None:
        self.paths = electron_paths()

        self.draw_title(200, 20)
        self.draw("rect", "control-gate", x=GATE_X, y=GATE_Y, width=GATE_W, height=LAYER_H, fill="#4a4a6a")
        self.draw("text", "voltage", x=GATE_X - 10, y=GATE_Y + 15, fill=DIM, text="0V")
        self.draw("rect", "oxide", x=GATE_X, y=GATE_Y + LAYER_H, width=GATE_W, height=8, fill=OXIDE)
        self.draw("rect", "floating-gate", x=GATE_X, y=GATE_Y + LAYER_H + 8, width=GATE_W, height=LAYER_H, fill=GATE)
        self.draw("rect", "tunnel-oxide", x=GATE_X, y=GATE_Y + LAYER_H * 2 + 8, width=GATE_W, height=8, fill=OXIDE)
        self.draw("rect", "substrate", x=GATE_X - 40, y=GATE_Y + LAYER_H * 2 + 16, width=GATE_W + 80, height=45, fill="#1a1a2e")
        for i, p in enumerate(self.paths):
            self.draw("circle", f"electron-{i}", cx=p.start[0], cy=p.start[1], r=4, fill=TEAL, opacity=0)
        self.draw("text", "status", x=200, y=265, fill="#666", text="IDLE")
        self.draw("text", "bit", x=200, y=285, fill="#888", text=EMPTY_BIT)
        self.draw("text", "access", x=30, y=285, fill="#555", text="~25μs write")

    def compose(self) -> List[Track]:
        tracks = [
            Track("status").add(
                self.set_later("status", fill=RED, text="APPLYING VOLTAGE..."),
                self.set_later("status", delay_ms=ELECTRONS_AT_MS, parallel=True, text="PROGRAMMING..."),
                self.set_later("status", delay_ms=PROGRAMMED_AT_MS, parallel=True, fill=TEAL, text="✓ PROGRAMMED"),
                self.set_later("bit", delay_ms=PROGRAMMED_AT_MS, parallel=True, fill=TEAL, text=CHARGED_BIT),
            ),
            Track("voltage").add(
                self._voltage_ramp(),
                self.tween("voltage", 300, delay_ms=PROGRAMMED_AT_MS - VOLTAGE_MS, fill=TEAL),
            ),
            Track("tunnel-oxide", offset_ms=OXIDE_AT_MS).add(self.tween("tunnel-oxide", 300, fill=OXIDE_GLOW)),
            Track("floating-gate", offset_ms=PROGRAMMED_AT_MS).add(self.tween("floating-gate", 400, fill=GATE_CHARGED)),
        ]
        for i, p in enumerate(self.paths):
            name = f"electron-{i}"
            tunneled = TUNNEL_AT_MS + p.delay_ms + 600
            tracks.append(
                Track(name, offset_ms=ELECTRONS_AT_MS + p.delay_ms).add(
                    self.tween(name, 200, opacity=1, r=5),
                    self.tween(name, 600, delay_ms=TUNNEL_AT_MS - ELECTRONS_AT_MS - 200, cx=p.end[0], cy=p.end[1], r=4),
                    self.tween(name, 500, delay_ms=max(0, PROGRAMMED_AT_MS - tunneled), r=6),
                    self.tween(name, 500, r=4),
                    periodic(
                        self.surface.pulse(self.el(name), rest={"r": 4}, peak={"r": 5}),
                        interval_ms=ELECTRON_PULSE_MS,
                        duration_ms=ELECTRON_PULSE_MS,
                        label="electron-pulse",
                    ),
                )
            )
        return tracks

    def _voltage_ramp(self) -> ScheduledTask:
        fill = interpolate_color(DIM, RED)

        def apply(p: float) -> None:
            self.set("voltage", text=f"{round(PEAK_VOLTS * p)}V", fill=fill(p))

        return ScheduledTask(
            apply,
            duration_ms=VOLTAGE_MS,
            easing=self.config.default_easing,
            kind=TaskKind.TWEEN,
            label="voltage",
        )
