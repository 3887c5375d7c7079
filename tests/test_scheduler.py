"""
Unit tests for the timeline scheduler.

These tests cover sequential and parallel anchoring inside a track, tween
tick capping, continuous and periodic tasks, program completion, spawned
tracks, and cancellation (including the cascade to unstarted successors).
"""

import pytest

from strata_core.enums import TaskKind, TaskStatus
from strata_core.scheduler import (
    ScheduledTask,
    Track,
    frame_loop,
    once,
    periodic,
    set_attrs,
    tween,
)


def _recorder(clock, log, name=None):
    def apply(p):
        log.append((clock.now(), p) if name is None else (name, clock.now()))
    return apply


class TestTaskValidation:
    def test_negative_timings_rejected(self):
        with pytest.raises(ValueError):
            ScheduledTask(lambda p: None, delay_ms=-1)
        with pytest.raises(ValueError):
            ScheduledTask(lambda p: None, duration_ms=-5)

    def test_periodic_needs_interval(self):
        with pytest.raises(ValueError):
            periodic(lambda p: None, interval_ms=0)
        with pytest.raises(ValueError):
            periodic(lambda p: None, interval_ms=100, duration_ms=200)

    def test_unknown_easing_rejected_at_composition(self):
        with pytest.raises(KeyError):
            ScheduledTask(lambda p: None, duration_ms=100, easing="wobble")

    def test_one_shot_with_duration_is_tween(self):
        task = ScheduledTask(lambda p: None, duration_ms=100)
        assert task.kind == TaskKind.TWEEN
        assert task.finite

    def test_finiteness(self):
        assert not frame_loop(lambda e: None).finite
        assert not periodic(lambda p: None, interval_ms=100).finite
        assert periodic(lambda p: None, interval_ms=100, repeat=2).finite


class TestSequencing:
    def test_sequential_tasks_chain_on_settle(self, clock, scheduler):
        log = []
        track = Track("t").add(
            ScheduledTask(_recorder(clock, [], None), duration_ms=300),
            once(lambda: log.append(("b", clock.now())), delay_ms=50),
        )
        scheduler.run([track])
        clock.advance(340)
        assert log == []
        clock.advance(10)
        assert log == [("b", 350)]

    def test_parallel_tasks_anchor_on_track_start(self, clock, scheduler):
        log = []
        track = Track("t", offset_ms=100).add(
            once(lambda: log.append(("a", clock.now()))),
            once(lambda: log.append(("p", clock.now())), delay_ms=500, parallel=True),
            once(lambda: log.append(("b", clock.now())), delay_ms=100),
        )
        scheduler.run([track])
        clock.advance(1000)
        assert log == [("a", 100), ("b", 200), ("p", 600)]

    def test_tracks_run_concurrently(self, clock, scheduler):
        log = []
        slow = Track("slow").add(once(lambda: log.append("slow"), delay_ms=200))
        fast = Track("fast").add(once(lambda: log.append("fast"), delay_ms=50))
        scheduler.run([slow, fast])
        clock.advance(200)
        assert log == ["fast", "slow"]

    def test_ties_resolve_in_submission_order(self, clock, scheduler):
        log = []
        tracks = [Track(n).add(once(lambda n=n: log.append(n), delay_ms=100)) for n in "abc"]
        scheduler.run(tracks)
        clock.advance(100)
        assert log == ["a", "b", "c"]


class TestTween:
    def test_final_tick_lands_on_duration(self, clock, scheduler):
        log = []
        scheduler.run([Track("t").add(ScheduledTask(_recorder(clock, log), duration_ms=300))])
        clock.advance(1000)
        assert log[0] == (0, 0.0)
        assert log[-1] == (300, 1.0)
        assert all(t <= 300 for t, _ in log)
        progress = [p for _, p in log]
        assert progress == sorted(progress)

    def test_zero_duration_tween_applies_target(self, stage):
        clock, surface, scheduler = stage
        surface.create("rect", "#viz", element_id="bar", width=0)
        scheduler.run([Track("t").add(tween(surface, "bar", 0, width=80))])
        clock.advance(0)
        assert surface.attr("bar", "width") == 80

    def test_staggered_transitions_complete_together(self, stage):
        clock, surface, scheduler = stage
        ids = [surface.create("rect", "#viz", element_id=f"bar-{i}", opacity=0).id for i in range(4)]
        done = []
        tracks = [
            Track(eid).add(tween(surface, eid, 300, delay_ms=i * 150, opacity=1))
            for i, eid in enumerate(ids)
        ]
        program = scheduler.run(tracks, on_complete=lambda p: done.append(clock.now()))

        clock.advance(450)
        assert [surface.attr(eid, "opacity") for eid in ids[:2]] == [1, 1]
        assert 0 < surface.attr("bar-2", "opacity") < 1
        assert surface.attr("bar-3", "opacity") == 0
        assert not program.completed

        clock.advance(300)
        assert done == [750]
        assert program.completed
        assert all(surface.attr(eid, "opacity") == 1 for eid in ids)

    def test_chained_tweens_start_from_previous_end(self, stage):
        clock, surface, scheduler = stage
        surface.create("rect", "#viz", element_id="ray", opacity=0)
        samples = []
        track = Track("ray").add(
            tween(surface, "ray", 200, opacity=0.9),
            tween(surface, "ray", 500, opacity=0.6, easing="linear"),
        )
        scheduler.run([track])
        clock.advance(200)
        samples.append(surface.attr("ray", "opacity"))
        clock.advance(16)
        samples.append(surface.attr("ray", "opacity"))
        assert samples[0] == 0.9
        assert 0.6 < samples[1] < 0.9


class TestContinuousAndPeriodic:
    def test_continuous_task_settles_on_start(self, clock, scheduler):
        elapsed = []
        done = []
        program = scheduler.run([Track("loop").add(frame_loop(elapsed.append))], on_complete=lambda p: done.append(clock.now()))
        clock.advance(0)
        assert done == [0]
        clock.advance(48)
        assert elapsed == [0, 16, 32, 48]
        assert program.pending == 1

        program.cancel()
        clock.advance(100)
        assert elapsed == [0, 16, 32, 48]
        assert program.pending == 0
        assert clock.pending() == 0

    def test_finite_periodic(self, clock, scheduler):
        log = []
        done = []
        task = periodic(_recorder(clock, log), interval_ms=100, repeat=3)
        program = scheduler.run([Track("p").add(task)], on_complete=lambda p: done.append(clock.now()))
        clock.advance(1000)
        assert log == [(0, 1.0), (100, 1.0), (200, 1.0)]
        assert done == [200]
        assert program.handles[0].cycles == 3
        assert program.handles[0].status == TaskStatus.DONE

    def test_periodic_cycles_with_duration(self, clock, scheduler):
        done = []
        task = periodic(lambda p: None, interval_ms=100, duration_ms=50, repeat=2)
        scheduler.run([Track("p").add(task)], on_complete=lambda p: done.append(clock.now()))
        clock.advance(1000)
        assert done == [150]

    def test_unbounded_periodic_runs_until_cancelled(self, clock, scheduler):
        log = []
        program = scheduler.run([Track("p").add(periodic(_recorder(clock, log), interval_ms=100))])
        clock.advance(0)
        assert program.completed
        clock.advance(450)
        assert [t for t, _ in log] == [0, 100, 200, 300, 400]
        program.cancel()
        clock.advance(500)
        assert len(log) == 5

    def test_callable_interval(self, clock, scheduler):
        log = []
        intervals = iter([100, 250, 50])
        task = periodic(_recorder(clock, log), interval_ms=lambda: next(intervals), repeat=4)
        scheduler.run([Track("p").add(task)])
        clock.advance(1000)
        assert [t for t, _ in log] == [0, 100, 350, 400]

    def test_callable_interval_never_overlaps_cycles(self, clock, scheduler):
        log = []
        done = []
        task = periodic(_recorder(clock, log), interval_ms=lambda: 10, duration_ms=50, repeat=3)
        scheduler.run([Track("p").add(task)], on_complete=lambda p: done.append(clock.now()))
        clock.advance(1000)
        assert [t for t, p in log if p == 0.0] == [0, 50, 100]
        assert done == [150]


class TestProgram:
    def test_empty_program_completes_immediately(self, scheduler):
        done = []
        program = scheduler.run([], on_complete=done.append)
        assert program.completed
        assert done == [program]

    def test_cancel_cascades_to_unstarted_successors(self, clock, scheduler):
        log = []
        track = Track("t").add(
            ScheduledTask(lambda p: log.append(p), duration_ms=300),
            once(lambda: log.append("after")),
        )
        program = scheduler.run([track])
        clock.advance(100)
        first, second = program.handles_for("t")
        first.cancel()
        assert first.status == TaskStatus.CANCELLED
        assert second.status == TaskStatus.CANCELLED
        clock.advance(500)
        assert "after" not in log
        assert clock.pending() == 0

    def test_task_cancel_lets_program_complete(self, clock, scheduler):
        done = []
        track = Track("t").add(
            ScheduledTask(lambda p: None, duration_ms=300),
            once(lambda: None),
        )
        program = scheduler.run([track, Track("u").add(once(lambda: None, delay_ms=200))], on_complete=lambda p: done.append(clock.now()))
        clock.advance(100)
        program.handles_for("t")[0].cancel()
        assert done == []
        clock.advance(100)
        assert done == [200]
        assert program.completed and not program.cancelled

    def test_finished_spawned_handles_are_dropped(self, clock, scheduler):
        program = scheduler.run([Track("t").add(once(lambda: None, delay_ms=5000))])
        for _ in range(50):
            program.spawn(Track("s").add(once(lambda: None, delay_ms=10)))
        assert len(program.handles) == 51
        clock.advance(100)
        assert len(program.handles) == 1
        assert program.pending == 1

    def test_cancelled_program_never_completes(self, clock, scheduler):
        done = []
        program = scheduler.run([Track("t").add(once(lambda: None, delay_ms=100))], on_complete=done.append)
        program.cancel()
        clock.advance(200)
        assert done == []
        assert program.cancelled and not program.completed

    def test_spawned_tracks_share_cancellation_but_not_completion(self, stage):
        clock, surface, scheduler = stage
        surface.create("rect", "#viz", element_id="flash", fill="#000")
        done = []
        program = scheduler.run([Track("t").add(once(lambda: None))], on_complete=lambda p: done.append(clock.now()))
        spawned = program.spawn(Track("flash").add(tween(surface, "flash", 1000, fill="#fff")))
        assert len(spawned) == 1
        clock.advance(0)
        assert done == [0]
        clock.advance(500)
        program.cancel()
        frozen = surface.attr("flash", "fill")
        clock.advance(1000)
        assert surface.attr("flash", "fill") == frozen
        assert program.spawn(Track("late").add(once(lambda: None))) == []

    def test_set_attrs_targets_many(self, stage):
        clock, surface, scheduler = stage
        for eid in ("a", "b"):
            surface.create("circle", "#viz", element_id=eid, r=4)
        scheduler.run([Track("t").add(set_attrs(surface, ["a", "b"], delay_ms=10, r=6))])
        clock.advance(10)
        assert surface.attr("a", "r") == 6 and surface.attr("b", "r") == 6
