"""
Unit tests for the procedural generators: activation selection, counters and
label tables, particles, disk seeks and the replication schedule.
"""

import networkx as nx
import pytest

from strata_core.generators import (
    CounterState,
    Particle,
    active_only,
    advance_particles,
    format_bytes,
    label_for,
    make_particles,
    make_rng,
    particles_in_window,
    pick_index,
    polarity_fill,
    replication_schedule,
    seek_interval,
    seek_plan,
    select_active,
    spin_up,
    wrap_unit,
)
from tests.conftest import SequenceRandom


class TestSelection:
    def test_threshold_and_delays(self):
        cells = select_active(4, SequenceRandom([0.9, 0.1, 0.56, 0.55]))
        assert [c.active for c in cells] == [True, False, True, False]
        assert [c.delay_ms for c in cells] == [0, 40, 80, 120]
        assert [c.index for c in active_only(cells)] == [0, 2]

    def test_none_and_all_selected(self):
        assert active_only(select_active(60, SequenceRandom([0.0]))) == []
        assert len(active_only(select_active(60, SequenceRandom([0.99])))) == 60

    def test_seeded_generator_is_reproducible(self):
        a = select_active(60, make_rng(7))
        b = select_active(60, make_rng(7))
        assert a == b

    def test_pick_index_bounds(self):
        assert pick_index(SequenceRandom([0.0]), 5) == 0
        assert pick_index(SequenceRandom([0.999999]), 5) == 4
        with pytest.raises(ValueError):
            pick_index(SequenceRandom([0.5]), 0)


class TestCounters:
    def test_counter_is_monotonic_and_saturates(self):
        c = CounterState(step=400, ceiling=1000, formatter=lambda n: f"{n} RPM")
        values = [c.advance() for _ in range(4)]
        assert values == [400, 800, 1000, 1000]
        assert c.at_ceiling
        assert c.label == "1000 RPM"
        c.reset()
        assert c.value == 0

    def test_negative_step_rejected(self):
        with pytest.raises(ValueError):
            CounterState(step=-1)

    def test_label_table_clamps_both_ends(self):
        table = ("99%", "99.9%", "99.99%")
        assert label_for(table, 1) == "99%"
        assert label_for(table, 3) == "99.99%"
        assert label_for(table, 9) == "99.99%"
        assert label_for(table, 0) == "99%"
        with pytest.raises(ValueError):
            label_for((), 1)

    def test_format_bytes(self):
        assert format_bytes(512) == "512 bytes"
        assert format_bytes(1536) == "1.5 KB"
        assert format_bytes(3 * 1048576) == "3.0 MB"
        assert format_bytes(1000, short=True) == "1000"
        assert format_bytes(2048, short=True) == "2.0K"

    def test_spin_up(self):
        assert spin_up(0) == 400
        assert spin_up(7000) == 7200


class TestParticles:
    def test_wrap_stays_in_unit_range(self):
        assert wrap_unit(1.0) == 0.0
        assert wrap_unit(1.25) == pytest.approx(0.25)
        assert wrap_unit(-0.25) == pytest.approx(0.75)
        assert 0.0 <= wrap_unit(-1e-18) < 1.0

    def test_particles_stay_bounded_while_advancing(self):
        particles = make_particles(12, SequenceRandom([0.7, 0.2]))
        for _ in range(500):
            advance_particles(particles, 0.008)
            assert all(0.0 <= p.t < 1.0 for p in particles)

    def test_polarity(self):
        north, south = make_particles(2, SequenceRandom([0.7, 0.2]))
        assert (north.direction, south.direction) == (1, -1)
        assert polarity_fill(north) == "#ff6b6b"
        assert polarity_fill(south) == "#4ecdc4"

    def test_window_is_open(self):
        ps = [Particle(0, 0.45), Particle(1, 0.5), Particle(2, 0.55)]
        assert [p.id for p in particles_in_window(ps, 0.45, 0.55)] == [1]


class TestDiskAndReplication:
    def test_seek_plan_ranges(self):
        assert seek_plan(SequenceRandom([0.0, 0.0]), 4) == (0, 5)
        assert seek_plan(SequenceRandom([0.99, 0.99]), 4) == (3, 14)
        assert seek_interval(SequenceRandom([0.0])) == 1000
        assert seek_interval(SequenceRandom([0.5])) == 1750

    def test_replication_schedule_follows_adjacency(self):
        g = nx.Graph()
        g.add_edge("P", "a", latency=12)
        g.add_edge("P", "b", latency=120)
        g.add_edge("a", "b", latency=73)
        flights = replication_schedule(g, "P")
        assert [f.target for f in flights] == ["a", "b"]
        assert [f.delay_ms for f in flights] == [0, 350]
        assert flights[0].travel_ms == pytest.approx(436)
        assert flights[1].arrival_ms == pytest.approx(350 + 100 + 760)

    def test_isolated_primary_has_no_flights(self):
        g = nx.Graph()
        g.add_node("P")
        assert replication_schedule(g, "P") == []
