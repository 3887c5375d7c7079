"""
In-memory rendering surface.

The surface is the element tree the vignettes draw into and the animations
mutate: containers are mounted by the page (or the replay runner), vignettes
create elements beneath them, and the scheduler applies attribute tweens to
them over time. Snapshots of a container subtree let a controller revert
every mutation made after initialization, including elements appended
during playback.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from .easing import Easing, get_easing, interpolate


ElementIds = Union[str, Iterable[str]]


@dataclass
class Element:
    """
    A node of the surface tree.

    Attributes:
        id: Unique identifier (containers use their selector, e.g. ``#viz-hdd``)
        kind: Element kind (``rect``, ``circle``, ``text``, ``g``, ...)
        parent: Identifier of the parent element, None for containers
        attrs: Mutable presentation attributes
    """

    id: str
    kind: str
    parent: Optional[str] = None
    attrs: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Snapshot:
    """Frozen copy of a container subtree taken at initialization."""

    root: str
    elements: Dict[str, Element]
    children: Dict[str, List[str]]

    def __contains__(self, element_id: str) -> bool:
        return element_id in self.elements


class Surface:
    """
    Element tree the vignettes draw into and the tweens mutate.

    Containers are mounted with `add_container()`; a selector that was never
    mounted is absent and `select()` returns None for it.
    """

    def __init__(self):
        self._elements: Dict[str, Element] = {}
        self._children: Dict[str, List[str]] = {}
        self._counter = 0

    # ----- element tree -----
    def add_container(self, selector: str) -> Element:
        el = Element(selector, "container")
        self._elements[selector] = el
        self._children.setdefault(selector, [])
        return el

    def select(self, selector: str) -> Optional[Element]:
        return self._elements.get(selector)

    def get(self, element_id: str) -> Element:
        try:
            return self._elements[element_id]
        except KeyError:
            raise KeyError(f"No element with id {element_id!r}") from None

    def create(self, kind: str, parent: str, element_id: str | None = None, **attrs) -> Element:
        """Append a new element under `parent` and return it."""
        if parent not in self._elements:
            raise KeyError(f"No element with id {parent!r}")
        if element_id is None:
            self._counter += 1
            element_id = f"{parent}/{kind}-{self._counter}"
        if element_id in self._elements:
            raise ValueError(f"Duplicate element id {element_id!r}")
        el = Element(element_id, kind, parent, dict(attrs))
        self._elements[element_id] = el
        self._children[element_id] = []
        self._children[parent].append(element_id)
        return el

    def remove(self, element_id: str) -> None:
        el = self._elements.get(element_id)
        if el is None:
            return
        for child in list(self._children.get(element_id, [])):
            self.remove(child)
        if el.parent is not None and el.parent in self._children:
            self._children[el.parent].remove(element_id)
        del self._elements[element_id]
        self._children.pop(element_id, None)

    def clear(self, element_id: str) -> None:
        """Remove every descendant of `element_id`, keeping the element itself."""
        for child in list(self._children.get(element_id, [])):
            self.remove(child)

    def children(self, element_id: str) -> List[str]:
        return list(self._children.get(element_id, []))

    def subtree(self, element_id: str) -> List[str]:
        """Identifiers of `element_id` and all its descendants, depth first."""
        out = [element_id]
        for child in self._children.get(element_id, []):
            out.extend(self.subtree(child))
        return out

    def __contains__(self, element_id: str) -> bool:
        return element_id in self._elements

    # ----- attributes -----
    def attr(self, element_id: str, name: str, default: Any = None) -> Any:
        return self.get(element_id).attrs.get(name, default)

    def set(self, element_id: str, **attrs) -> None:
        self.get(element_id).attrs.update(attrs)

    def set_many(self, element_ids: ElementIds, **attrs) -> None:
        for eid in _as_ids(element_ids):
            self.set(eid, **attrs)

    def attrs(self, element_id: str) -> Dict[str, Any]:
        return dict(self.get(element_id).attrs)

    def dump(self, root: str | None = None) -> Dict[str, Dict[str, Any]]:
        """Attributes of every element (or of one subtree) keyed by id."""
        ids = self.subtree(root) if root is not None else list(self._elements)
        return {eid: dict(self._elements[eid].attrs) for eid in ids}

    # ----- snapshots -----
    def snapshot(self, root: str) -> Snapshot:
        ids = self.subtree(root)
        return Snapshot(
            root=root,
            elements={eid: copy.deepcopy(self._elements[eid]) for eid in ids},
            children={eid: list(self._children[eid]) for eid in ids},
        )

    def restore(self, snap: Snapshot) -> None:
        """Revert the subtree under `snap.root` to exactly the snapshotted state."""
        current = self.subtree(snap.root) if snap.root in self._elements else []
        for eid in current:
            if eid not in snap:
                self._elements.pop(eid, None)
                self._children.pop(eid, None)
        for eid, el in snap.elements.items():
            self._elements[eid] = copy.deepcopy(el)
            self._children[eid] = list(snap.children[eid])
        root_parent = snap.elements[snap.root].parent
        if root_parent is not None and snap.root not in self._children.get(root_parent, []):
            self._children[root_parent].append(snap.root)

    # ----- transitions -----
    def tween(self, element_ids: ElementIds, **targets) -> "AttrTween":
        return AttrTween(self, element_ids, targets)

    def pulse(self, element_ids: ElementIds, rest: Dict[str, Any], peak: Dict[str, Any], split: float = 0.5, easing: Union[str, Easing] = "cubic_in_out") -> "Pulse":
        return Pulse(self, element_ids, rest, peak, split=split, easing=easing)


def _as_ids(element_ids: ElementIds) -> List[str]:
    if isinstance(element_ids, str):
        return [element_ids]
    return list(element_ids)


class AttrTween:
    """
    Progress-driven attribute transition.

    Start values are captured the first time the tween is applied (when its
    task starts), not when it is built, so a tween chained after another one
    on the same element starts where the previous one ended.
    """

    def __init__(self, surface: Surface, element_ids: ElementIds, targets: Dict[str, Any]):
        self.surface = surface
        self.element_ids = _as_ids(element_ids)
        self.targets = dict(targets)
        self._interps: List[Tuple[str, str, Any]] | None = None

    def begin(self) -> None:
        self._interps = []
        for eid in self.element_ids:
            for name, target in self.targets.items():
                start = self.surface.attr(eid, name)
                self._interps.append((eid, name, interpolate(start, target)))

    def __call__(self, progress: float) -> None:
        if self._interps is None:
            self.begin()
        for eid, name, interp in self._interps:
            if eid in self.surface:
                self.surface.get(eid).attrs[name] = interp(progress)


class Pulse:
    """
    Two-phase there-and-back cycle: rest -> peak during the first `split` of
    the cycle, peak -> rest for the remainder. Progress 1 leaves the rest
    values applied exactly.
    """

    def __init__(self, surface: Surface, element_ids: ElementIds, rest: Dict[str, Any], peak: Dict[str, Any], split: float = 0.5, easing: Union[str, Easing] = "cubic_in_out"):
        if not 0.0 < split < 1.0:
            raise ValueError("split must be within (0, 1)")
        self.surface = surface
        self.element_ids = _as_ids(element_ids)
        self.split = split
        self.ease = get_easing(easing)
        self._up = {k: interpolate(rest[k], peak[k]) for k in peak}
        self._down = {k: interpolate(peak[k], rest[k]) for k in peak}

    def __call__(self, progress: float) -> None:
        if progress < self.split:
            phase, p = self._up, self.ease(progress / self.split)
        else:
            phase, p = self._down, self.ease((progress - self.split) / (1.0 - self.split))
        values = {name: interp(p) for name, interp in phase.items()}
        for eid in self.element_ids:
            if eid in self.surface:
                self.surface.get(eid).attrs.update(values)
