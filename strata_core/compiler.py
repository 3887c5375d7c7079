"""
YAML storyboard and track compiler.

A storyboard binds scroll sections (eras) to vignettes and carries the
timeline configuration:

seed: 7                 # optional; omit for fresh randomness per load
frame_interval_ms: 16
reset_on_exit: true
eras:
  - key: punch
    container: "#viz-punch"   # defaults to "#viz-<key>"
    vignette: punch_card      # defaults to the key
  - key: intro
    script:                   # declarative vignette
      elements:
        - {id: title, kind: text, attrs: {opacity: 0, text: "Storage"}}
      tracks:
        - name: fade
          tasks:
            - {target: title, to: {opacity: 1}, duration_ms: 400}

Track tasks accept exactly one of:
- ``to``: attribute targets, tweened over ``duration_ms`` (a zero duration
  assigns them at once)
- ``set``: attributes assigned once
- ``pulse``: ``{rest, peak, period_ms, duration_ms, split, repeat}``
  repeating there-and-back cycle
plus the timing keys ``delay_ms``, ``easing`` and ``parallel``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import yaml

from .config import TimelineConfig
from .scheduler import ScheduledTask, Track, periodic, set_attrs, tween
from .surface import Surface


@dataclass(frozen=True)
class EraBinding:
    key: str
    container: str
    vignette: Optional[str] = None
    script: Optional[Dict[str, Any]] = None


@dataclass
class Storyboard:
    config: TimelineConfig
    eras: List[EraBinding]

    def keys(self) -> List[str]:
        return [e.key for e in self.eras]


_CONFIG_KEYS = ("frame_interval_ms", "reset_on_exit", "seed", "default_easing")


def compile_storyboard_from_dict(spec: Dict[str, Any]) -> Storyboard:
    """
    Compile a YAML-parsed dictionary into a `Storyboard`.

    Raises:
        ValueError: On missing keys, duplicate eras, or an era that names
            both a vignette and a script
    """
    config = TimelineConfig(**{k: spec[k] for k in _CONFIG_KEYS if k in spec})

    eras: List[EraBinding] = []
    seen = set()
    for entry in spec.get("eras", []) or []:
        key = entry.get("key")
        if not key:
            raise ValueError(f"Era entry without a key: {entry!r}")
        if key in seen:
            raise ValueError(f"Duplicate era key {key!r}")
        seen.add(key)
        script = entry.get("script")
        vignette = entry.get("vignette")
        if script is not None and vignette is not None:
            raise ValueError(f"Era {key!r} names both a vignette and a script")
        if script is None and vignette is None:
            vignette = key
        eras.append(
            EraBinding(
                key=key,
                container=entry.get("container") or f"#viz-{key}",
                vignette=vignette,
                script=script,
            )
        )
    return Storyboard(config=config, eras=eras)


def compile_storyboard_from_yaml(yaml_text: str) -> Storyboard:
    """Compile from YAML text into a `Storyboard`."""
    data = yaml.safe_load(yaml_text) or {}
    return compile_storyboard_from_dict(data)


def compile_storyboard_from_file(path: str) -> Storyboard:
    """Compile from a YAML file path into a `Storyboard`."""
    with open(path, "r", encoding="utf-8") as f:
        txt = f.read()
    return compile_storyboard_from_yaml(txt)


# ----- declarative tracks -----
def _compile_task(entry: Dict[str, Any], surface: Surface, root: Optional[str], default_easing: str) -> ScheduledTask:
    target = entry.get("target")
    if not target:
        raise ValueError(f"Task without a target: {entry!r}")
    element_id = f"{root}/{target}" if root else target

    modes = [m for m in ("to", "set", "pulse") if m in entry]
    if len(modes) != 1:
        raise ValueError(f"Task for {target!r} needs exactly one of to/set/pulse")
    mode = modes[0]

    delay = float(entry.get("delay_ms", 0))
    duration = float(entry.get("duration_ms", 0))
    parallel = bool(entry.get("parallel", False))
    easing = entry.get("easing", default_easing)

    if mode == "set" or (mode == "to" and duration == 0):
        return set_attrs(surface, element_id, delay_ms=delay, parallel=parallel, **entry[mode])
    if mode == "to":
        return tween(surface, element_id, duration, delay_ms=delay, easing=easing, parallel=parallel, **entry["to"])

    spec = entry["pulse"]
    period = float(spec["period_ms"])
    pulse = surface.pulse(element_id, rest=spec["rest"], peak=spec["peak"], split=float(spec.get("split", 0.5)), easing=easing)
    return periodic(
        pulse,
        interval_ms=period,
        delay_ms=delay,
        duration_ms=float(spec.get("duration_ms", period)),
        repeat=spec.get("repeat"),
        parallel=parallel,
        label=f"pulse:{target}",
    )


def compile_tracks_from_dict(spec: Any, surface: Surface, root: Optional[str] = None, default_easing: str = "cubic_in_out") -> List[Track]:
    """
    Compile declarative track entries into `Track` objects.

    Args:
        spec: Either ``{"tracks": [...]}`` or the list of track entries
        surface: Surface the tasks mutate
        root: Optional container id prefixed to every task target
        default_easing: Easing for tweens that do not name one
    """
    entries = spec.get("tracks", []) if isinstance(spec, dict) else spec
    tracks: List[Track] = []
    for i, entry in enumerate(entries or []):
        track = Track(
            name=entry.get("name") or f"track-{i}",
            offset_ms=float(entry.get("offset_ms", 0)),
        )
        for task in entry.get("tasks", []) or []:
            track.add(_compile_task(task, surface, root, default_easing))
        tracks.append(track)
    return tracks
