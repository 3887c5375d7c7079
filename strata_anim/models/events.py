from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class StepEnter:
    era: str
    direction: str = "down"
    index: Optional[int] = None
    t: Optional[float] = None


@dataclass(frozen=True)
class StepExit:
    era: str
    direction: str = "down"
    index: Optional[int] = None
    t: Optional[float] = None


ScrollEvent = Union[StepEnter, StepExit]
