from __future__ import annotations

from typing import Any, Dict, List

from strata_core.compiler import compile_tracks_from_dict
from strata_core.scheduler import Track

from .base import Vignette


class ScriptedVignette(Vignette):
    """Vignette whose elements and tracks come from a storyboard script.

    Script layout::

        elements:
          - {id: bar, kind: rect, parent: group, attrs: {width: 0}}
        tracks:
          - {name: grow, offset_ms: 0, tasks: [{target: bar, to: {width: 80}, duration_ms: 300}]}

    Element ids and task targets are local names, resolved under the
    vignette's container. Parents must be declared before their children.
    """

    def __init__(self, era, surface, scheduler, container, script: Dict[str, Any] | None = None, **kwargs):
        self.script = script or {}
        super().__init__(era, surface, scheduler, container, **kwargs)

    def build(self) -> None:
        self.title = self.script.get("title", "")
        self.draw_title(200, 20)
        for entry in self.script.get("elements", []) or []:
            if "id" not in entry or "kind" not in entry:
                raise ValueError(f"Script element needs an id and a kind: {entry!r}")
            self.draw(entry["kind"], entry["id"], parent=entry.get("parent"), **(entry.get("attrs") or {}))
        # compile once so a malformed track fails here rather than on scroll
        self.compose()
        for entry in self.script.get("tracks", []) or []:
            for task in entry.get("tasks", []) or []:
                if self.surface.select(self.el(task["target"])) is None:
                    raise ValueError(f"Task targets undeclared element {task['target']!r}")

    def compose(self) -> List[Track]:
        return compile_tracks_from_dict(self.script, self.surface, root=self.root, default_easing=self.config.default_easing)
