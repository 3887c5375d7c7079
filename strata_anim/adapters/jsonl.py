from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator

from strata_anim.adapters.base import ScrollEventSource
from strata_anim.models.events import ScrollEvent, StepEnter, StepExit

logger = logging.getLogger(__name__)

_EVENT_TYPES = {
    "StepEnter": StepEnter,
    "StepExit": StepExit,
}
_FIELDS = ("era", "direction", "index", "t")


class JsonlScrollSource(ScrollEventSource):
    """Recorded scroll log, one JSON object per line.

    Each object names its event class under ``type``; lines of any other
    type (resize, progress) are skipped. Step events must name an ``era``.
    """

    def __init__(self, path: str):
        self.path = path

    def stream_events(self) -> Iterator[ScrollEvent]:
        with open(self.path, "r", encoding="utf-8") as f:
            for lineno, raw in enumerate(f, 1):
                if not raw.strip():
                    continue
                event = self._parse(json.loads(raw), lineno)
                if event is not None:
                    yield event

    def _parse(self, obj: Dict[str, Any], lineno: int):
        kind = obj.get("type")
        event_cls = _EVENT_TYPES.get(kind)
        if event_cls is None:
            logger.debug("%s:%d: skipping %s event", self.path, lineno, kind)
            return None
        if not obj.get("era"):
            raise ValueError(f"{self.path}:{lineno}: {kind} without an era")
        if obj.get("direction", "down") not in ("up", "down"):
            raise ValueError(f"{self.path}:{lineno}: direction must be 'up' or 'down'")
        return event_cls(**{k: obj[k] for k in _FIELDS if k in obj})
