from __future__ import annotations

from typing import Iterable, List, Union

from strata_core.lifecycle import LifecycleController
from strata_core.scheduler import ScheduledTask, set_attrs, tween

Names = Union[str, Iterable[str]]


class Vignette(LifecycleController):
    """Lifecycle controller with helpers addressing elements by local name.

    Element ids are ``<container>/<name>``, so two vignettes never collide.
    """

    title: str = ""

    def el(self, name: str) -> str:
        return f"{self.root}/{name}"

    def els(self, names: Names) -> List[str]:
        if isinstance(names, str):
            return [self.el(names)]
        return [self.el(n) for n in names]

    def draw(self, kind: str, name: str, parent: str | None = None, **attrs) -> str:
        el = self.surface.create(kind, self.el(parent) if parent else self.root, element_id=self.el(name), **attrs)
        return el.id

    def draw_title(self, x: float, y: float) -> None:
        if self.title:
            self.draw("text", "title", x=x, y=y, fill="#888", text=self.title)

    def set(self, name: str, **attrs) -> None:
        self.surface.set(self.el(name), **attrs)

    def attr(self, name: str, attr: str):
        return self.surface.attr(self.el(name), attr)

    # ----- task helpers -----
    def tween(self, names: Names, duration_ms: float, **kwargs) -> ScheduledTask:
        kwargs.setdefault("easing", self.config.default_easing)
        return tween(self.surface, self.els(names), duration_ms, **kwargs)

    def set_later(self, names: Names, delay_ms: float = 0.0, parallel: bool = False, **attrs) -> ScheduledTask:
        return set_attrs(self.surface, self.els(names), delay_ms=delay_ms, parallel=parallel, **attrs)
