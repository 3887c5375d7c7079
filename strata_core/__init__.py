"""
strata core package.

This package contains the animation runtime shared by every storage-history
vignette:

- Clocks and the in-memory rendering surface (elements, tweens, snapshots)
- The timeline scheduler (tracks of one-shot, tween, continuous and periodic
  tasks with cancellation)
- The play-once/reset lifecycle controller and the era registry
- Procedural generators and the arclength path parametrizer
- The YAML storyboard compiler
"""

__version__ = "0.1.0"

from .enums import LifecycleState, TaskKind, TaskStatus
from .config import TimelineConfig
from .clock import Clock, VirtualClock, AsyncioClock
from .surface import Element, Surface, Snapshot
from .scheduler import ScheduledTask, Track, Program, Scheduler, TaskHandle
from .path import PathModel, Segment
from .lifecycle import LifecycleController
from .registry import AnimationRegistry
from .compiler import (
    Storyboard,
    EraBinding,
    compile_storyboard_from_dict,
    compile_storyboard_from_yaml,
    compile_storyboard_from_file,
    compile_tracks_from_dict,
)
