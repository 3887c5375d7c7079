"""
Unit tests for the YAML storyboard and track compiler.

These tests validate storyboard construction from dictionaries, YAML text and
files (defaults, config keys, validation errors) and the declarative track
entries used by scripted vignettes.
"""

import os
import tempfile

import pytest

from strata_core.compiler import (
    compile_storyboard_from_dict,
    compile_storyboard_from_file,
    compile_storyboard_from_yaml,
    compile_tracks_from_dict,
)
from strata_core.enums import TaskKind


class TestCompileStoryboard:
    def test_defaults(self):
        sb = compile_storyboard_from_dict({"eras": [{"key": "punch", "vignette": "punch_card"}, {"key": "hdd_platter"}]})
        assert sb.keys() == ["punch", "hdd_platter"]
        assert sb.eras[0].container == "#viz-punch"
        assert sb.eras[1].vignette == "hdd_platter"
        assert sb.config.seed is None
        assert sb.config.reset_on_exit is True

    def test_config_keys(self):
        sb = compile_storyboard_from_dict({"seed": 7, "frame_interval_ms": 20, "reset_on_exit": False, "eras": []})
        assert sb.config.seed == 7
        assert sb.config.frame_interval_ms == 20
        assert sb.config.reset_on_exit is False
        assert sb.eras == []

    def test_invalid_storyboards(self):
        with pytest.raises(ValueError):
            compile_storyboard_from_dict({"eras": [{"container": "#x"}]})
        with pytest.raises(ValueError):
            compile_storyboard_from_dict({"eras": [{"key": "a"}, {"key": "a"}]})
        with pytest.raises(ValueError):
            compile_storyboard_from_dict({"eras": [{"key": "a", "vignette": "punch_card", "script": {}}]})
        with pytest.raises(ValueError):
            compile_storyboard_from_dict({"frame_interval_ms": 0})

    def test_yaml_and_file(self):
        text = """
seed: 3
eras:
  - key: intro
    container: "#intro"
    script:
      elements:
        - {id: title, kind: text, attrs: {opacity: 0}}
"""
        sb = compile_storyboard_from_yaml(text)
        assert sb.eras[0].script["elements"][0]["id"] == "title"
        assert sb.eras[0].vignette is None

        with tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False) as f:
            f.write(text)
            path = f.name
        try:
            assert compile_storyboard_from_file(path).keys() == ["intro"]
        finally:
            os.unlink(path)

    def test_empty_yaml(self):
        assert compile_storyboard_from_yaml("").eras == []

    def test_bundled_storyboard(self):
        path = os.path.join(os.path.dirname(__file__), "..", "scripts", "storyboard.yaml")
        sb = compile_storyboard_from_file(path)
        assert sb.keys() == ["punch", "tape", "hdd", "ssd", "cloud"]


class TestCompileTracks:
    def test_modes(self, stage):
        clock, surface, _ = stage
        surface.create("rect", "#viz", element_id="#viz/bar", width=0)
        tracks = compile_tracks_from_dict(
            {
                "tracks": [
                    {
                        "name": "grow",
                        "offset_ms": 100,
                        "tasks": [
                            {"target": "bar", "to": {"width": 80}, "duration_ms": 300, "easing": "linear"},
                            {"target": "bar", "set": {"fill": "#4ecdc4"}, "delay_ms": 50},
                            {"target": "bar", "to": {"opacity": 0.5}},
                            {"target": "bar", "pulse": {"rest": {"r": 4}, "peak": {"r": 5}, "period_ms": 2000}, "parallel": True},
                        ],
                    }
                ]
            },
            surface,
            root="#viz",
        )
        (track,) = tracks
        assert track.name == "grow" and track.offset_ms == 100
        kinds = [t.kind for t in track.tasks]
        assert kinds == [TaskKind.TWEEN, TaskKind.ONE_SHOT, TaskKind.ONE_SHOT, TaskKind.PERIODIC]
        assert track.tasks[3].parallel
        assert track.tasks[3].duration_ms == 2000
        assert track.tasks[3].repeat is None

    def test_list_form_and_default_names(self, stage):
        surface = stage[1]
        tracks = compile_tracks_from_dict([{"tasks": []}, {"tasks": []}], surface)
        assert [t.name for t in tracks] == ["track-0", "track-1"]

    def test_task_errors(self, stage):
        surface = stage[1]
        with pytest.raises(ValueError):
            compile_tracks_from_dict([{"tasks": [{"to": {"x": 1}}]}], surface)
        with pytest.raises(ValueError):
            compile_tracks_from_dict([{"tasks": [{"target": "a", "to": {"x": 1}, "set": {"x": 2}}]}], surface)
        with pytest.raises(ValueError):
            compile_tracks_from_dict([{"tasks": [{"target": "a"}]}], surface)
        with pytest.raises(KeyError):
            compile_tracks_from_dict([{"tasks": [{"target": "a", "to": {"x": 1}, "duration_ms": 10, "easing": "nope"}]}], surface)
