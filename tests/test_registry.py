"""
Unit tests for the era registry and the scroll adapters feeding it.
"""

import json
import logging
import os
import tempfile

import pytest

from strata_core.config import TimelineConfig
from strata_core.enums import LifecycleState
from strata_core.registry import AnimationRegistry
from strata_anim.adapters.jsonl import JsonlScrollSource
from strata_anim.adapters.scroll import ScrollDispatcher
from strata_anim.models.events import StepEnter, StepExit
from tests.test_lifecycle import Spinner


def _registry(stage, config=None):
    clock, surface, scheduler = stage
    registry = AnimationRegistry(config)
    registry.register("spin", Spinner.bind("spin", surface, scheduler, "#viz"))
    registry.register("gone", Spinner.bind("gone", surface, scheduler, "#viz-gone"))
    return registry


class TestRegistry:
    def test_absent_entries(self, stage):
        registry = _registry(stage)
        assert registry.eras() == ["spin", "gone"]
        assert "gone" in registry and registry.get("gone") is None
        assert len(registry) == 2
        assert len(list(registry)) == 1
        assert registry.states() == {"spin": "IDLE", "gone": None}

    def test_duplicate_era_rejected(self, stage):
        registry = _registry(stage)
        with pytest.raises(ValueError):
            registry.register("spin", None)

    def test_enter_and_exit(self, stage):
        clock = stage[0]
        registry = _registry(stage)
        registry.on_enter("spin")
        assert registry.get("spin").state is LifecycleState.PLAYING
        clock.advance(100)
        registry.on_exit("spin", "up")
        assert registry.get("spin").state is LifecycleState.IDLE
        assert registry.get("spin").pending == 0

    def test_unknown_and_absent_eras_are_ignored(self, stage):
        registry = _registry(stage)
        registry.on_enter("gone")
        registry.on_exit("gone")
        registry.on_enter("nope")
        registry.on_exit("nope")
        assert registry.states() == {"spin": "IDLE", "gone": None}

    def test_keep_on_exit(self, stage):
        clock = stage[0]
        registry = _registry(stage, TimelineConfig(reset_on_exit=False))
        registry.on_enter("spin")
        clock.advance(400)
        registry.on_exit("spin")
        assert registry.get("spin").state is LifecycleState.COMPLETE

    def test_reset_all_stops_everything(self, stage):
        clock = stage[0]
        registry = _registry(stage)
        registry.on_enter("spin")
        clock.advance(50)
        registry.reset_all()
        assert clock.pending() == 0
        assert registry.states()["spin"] == "IDLE"


def _read_log(lines):
    with tempfile.NamedTemporaryFile("w", suffix=".jsonl", delete=False) as f:
        for obj in lines:
            f.write(json.dumps(obj) + "\n")
        f.write("\n")
        path = f.name
    try:
        return list(JsonlScrollSource(path).stream_events())
    finally:
        os.unlink(path)


class TestScrollAdapters:
    def test_jsonl_source_skips_unknown_types(self, caplog):
        lines = [
            {"type": "StepEnter", "era": "spin", "direction": "down", "index": 0, "t": 0},
            {"type": "Resize", "width": 300},
            {"type": "StepExit", "era": "spin", "direction": "up", "t": 250},
        ]
        with caplog.at_level(logging.DEBUG, logger="strata_anim.adapters.jsonl"):
            events = _read_log(lines)
        assert events == [
            StepEnter(era="spin", direction="down", index=0, t=0),
            StepExit(era="spin", direction="up", t=250),
        ]
        assert "skipping Resize event" in caplog.text

    def test_jsonl_source_rejects_step_without_era(self):
        lines = [
            {"type": "StepEnter", "era": "spin"},
            {"type": "StepExit", "direction": "up", "t": 250},
        ]
        with pytest.raises(ValueError, match=":2: StepExit without an era"):
            _read_log(lines)

    def test_jsonl_source_rejects_unknown_direction(self):
        with pytest.raises(ValueError, match="direction"):
            _read_log([{"type": "StepEnter", "era": "spin", "direction": "left"}])

    def test_dispatcher_routes_events(self, stage):
        clock = stage[0]
        registry = _registry(stage)
        dispatcher = ScrollDispatcher(registry)
        dispatcher.dispatch(StepEnter("spin"))
        clock.advance(32)
        assert registry.get("spin").angle == 9
        dispatcher.dispatch_all([StepExit("spin"), StepEnter("gone")])
        assert registry.states() == {"spin": "IDLE", "gone": None}
