from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator

from strata_anim.models.events import ScrollEvent


class ScrollEventSource(ABC):
    @abstractmethod
    def stream_events(self) -> Iterator[ScrollEvent]:
        ...
