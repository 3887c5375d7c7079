"""
Era 5: 2010s-present, the cloud era.

A data chunk written to the primary region replicates to every neighbouring
region of the topology. Travel time grows with link latency; each arrival
raises the replication count and the durability estimate, and once every
replica landed all regions start a heartbeat.
"""

from __future__ import annotations

from typing import Dict, List, Optional

import networkx as nx

from strata_core.generators import CounterState, Flight, label_for, replication_schedule
from strata_core.scheduler import Track, once, periodic

from .base import Vignette

# (label, x, y, latency from primary)
NODES = [
    ("US-East", 90, 100, 12),
    ("EU-West", 320, 80, 85),
    ("Primary", 210, 160, 0),
    ("US-West", 70, 210, 45),
    ("Asia-Pac", 340, 190, 120),
]
CONNECTIONS = [
    (2, 0, 12),
    (2, 1, 85),
    (2, 3, 45),
    (2, 4, 120),
    (0, 1, 73),
    (3, 4, 95),
]
PRIMARY = "Primary"

DURABILITY_LABELS = ("99%", "99.9%", "99.99%", "99.999%", "99.999999999%")
FINAL_DURABILITY = "Durability: 99.999999999% (11 nines)"

LABEL_STAGGER_MS = 200
LINK_STAGGER_MS = 150
HEARTBEAT_MS = 2000

TEAL, LINK, NODE_FILL, NODE_FLASH, NODE_STROKE = "#4ecdc4", "#2a4a6a", "#1a3a5a", "#2a5a7a", "#4a6a8a"


def build_topology(nodes=NODES, connections=CONNECTIONS) -> nx.Graph:
    """Region graph; nodes carry their position, edges their latency in ms."""
    g = nx.Graph()
    for label, x, y, latency in nodes:
        g.add_node(label, pos=(x, y), latency=latency)
    for a, b, latency in connections:
        g.add_edge(nodes[a][0], nodes[b][0], latency=latency)
    return g


class CloudNodes(Vignette):
    title = "Distributed Object Storage"
    nodes = NODES
    connections = CONNECTIONS

    def build(self) -> None:
        self.topology = build_topology(self.nodes, self.connections)
        self.flights: List[Flight] = replication_schedule(self.topology, PRIMARY)
        self.index: Dict[str, int] = {label: i for i, (label, *_rest) in enumerate(self.nodes)}
        self.replicas: Optional[CounterState] = None

        self.draw_title(210, 20)
        for k, (a, b, _latency) in enumerate(self.connections):
            (x1, y1), (x2, y2) = self._pos(a), self._pos(b)
            self.draw("line", f"link-{k}", x1=x1, y1=y1, x2=x2, y2=y2, stroke=LINK, stroke_width=1.5, opacity=0.3)
        for k, f in enumerate(self.flights):
            (x1, y1), (x2, y2) = self._pos(f.source), self._pos(f.target)
            self.draw("text", f"latency-{k}", x=(x1 + x2) / 2, y=(y1 + y2) / 2 - 5, fill="#555", opacity=0, text=f"{f.latency:g}ms")
        for i, (label, x, y, _latency) in enumerate(self.nodes):
            self.draw("g", f"node-{i}", transform=f"translate({x}, {y})")
            self.draw("circle", f"node-{i}-circle", parent=f"node-{i}", r=22, fill=NODE_FILL, stroke=NODE_STROKE, stroke_width=2)
            self.draw("text", f"node-{i}-label", parent=f"node-{i}", y=38, fill="#888", text=label)
        if PRIMARY in self.index:
            self.draw("rect", "primary-chunk", parent=f"node-{self.index[PRIMARY]}", x=-7, y=-7, width=14, height=14, fill=TEAL)
        for k, f in enumerate(self.flights):
            x, y = self._pos(f.source)
            self.draw("rect", f"chunk-{k}", x=x - 5, y=y - 5, width=10, height=10, fill=TEAL, opacity=0)
        self.draw("text", "replication", x=210, y=265, fill="#888", text=self._replication_text(1))
        self.draw("text", "durability", x=210, y=285, fill="#555", text="Durability: calculating...")

    def _pos(self, node):
        label = self.nodes[node][0] if isinstance(node, int) else node
        return self.topology.nodes[label]["pos"]

    def _replication_text(self, n: int) -> str:
        return f"Replication: {n}/{len(self.nodes)} regions"

    def compose(self) -> List[Track]:
        self.replicas = CounterState(initial=1, ceiling=1 + len(self.flights), formatter=self._replication_text)

        tracks = []
        for k in range(len(self.flights)):
            tracks.append(
                Track(f"latency-{k}", offset_ms=k * LABEL_STAGGER_MS).add(self.tween(f"latency-{k}", 300, opacity=1))
            )
        for k in range(len(self.connections)):
            tracks.append(
                Track(f"link-{k}", offset_ms=k * LINK_STAGGER_MS).add(self.tween(f"link-{k}", 300, opacity=0.8, stroke=TEAL))
            )
        for k, f in enumerate(self.flights):
            x, y = self._pos(f.target)
            tracks.append(
                Track(f"chunk-{k}", offset_ms=f.delay_ms).add(
                    self.tween(f"chunk-{k}", f.fade_in_ms, opacity=1),
                    self.tween(f"chunk-{k}", f.travel_ms, easing="cubic_in_out", x=x - 5, y=y - 5),
                    once(lambda f=f: self._arrive(f), label="arrival"),
                    self.tween(f"chunk-{k}", 200, opacity=0),
                )
            )
        if not self.flights:
            tracks.append(Track("finalize").add(once(self._finalize)))
        return tracks

    def _arrive(self, flight: Flight) -> None:
        i = self.index[flight.target]
        circle = f"node-{i}-circle"
        self.draw("rect", f"node-{i}-replica", parent=f"node-{i}", x=-7, y=-7, width=14, height=14, fill=TEAL, opacity=0)
        self.set(circle, filter="url(#node-glow)")
        self.program.spawn(
            Track(f"replica-{i}").add(self.tween(f"node-{i}-replica", 300, opacity=1)),
            Track(f"flash-{i}").add(
                self.tween(circle, 300, fill=NODE_FLASH),
                self.tween(circle, 300, fill=NODE_FILL),
            ),
        )

        count = self.replicas.advance()
        self.set("replication", text=self.replicas.label)
        self.set("durability", text=f"Durability: {label_for(DURABILITY_LABELS, count)}")
        if self.replicas.at_ceiling:
            self._finalize()

    def _finalize(self) -> None:
        count = self.replicas.value
        circles = [f"node-{i}-circle" for i in range(len(self.nodes))]
        self.set("replication", text=f"✓ Replicated to {count} regions")
        self.set("durability", fill=TEAL, text=FINAL_DURABILITY)
        self.program.spawn(
            Track("replication-fill").add(self.tween("replication", 300, fill=TEAL)),
            Track("heartbeat").add(
                periodic(
                    self.surface.pulse(
                        self.els(circles),
                        rest={"stroke_width": 2, "stroke": NODE_STROKE},
                        peak={"stroke_width": 4, "stroke": TEAL},
                        split=0.4,
                    ),
                    interval_ms=HEARTBEAT_MS,
                    delay_ms=HEARTBEAT_MS,
                    duration_ms=1000,
                    label="heartbeat",
                )
            ),
        )

    def clear_transient(self) -> None:
        self.replicas = None
