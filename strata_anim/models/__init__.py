from .events import StepEnter, StepExit, ScrollEvent
