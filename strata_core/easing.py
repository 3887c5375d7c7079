"""
Easing curves and attribute interpolators.

Easing functions map linear progress in [0, 1] onto eased progress in
[0, 1]. Interpolators produce a callable that maps eased progress onto an
attribute value, handling plain numbers, ``#rrggbb`` colours and strings
with embedded numbers such as ``rotate(30, 200, 160)``.

Interpolators return the exact start value at progress 0 and the exact
target value at progress 1, so a finished tween leaves the attribute equal
to what was requested.
"""

from __future__ import annotations

import math
import re
from typing import Any, Callable, Dict, Union

Easing = Callable[[float], float]

_NUMBER = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_HEX = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def linear(t: float) -> float:
    return t


def quad_in_out(t: float) -> float:
    t *= 2
    if t <= 1:
        return t * t / 2
    t -= 1
    return (t * (2 - t) + 1) / 2


def cubic_in(t: float) -> float:
    return t * t * t


def cubic_out(t: float) -> float:
    t -= 1
    return t * t * t + 1


def cubic_in_out(t: float) -> float:
    """Symmetric cubic easing (the default for declarative transitions)."""
    t *= 2
    if t <= 1:
        return t * t * t / 2
    t -= 2
    return (t * t * t + 2) / 2


def sin_in_out(t: float) -> float:
    return (1 - math.cos(math.pi * t)) / 2


EASINGS: Dict[str, Easing] = {
    "linear": linear,
    "quad_in_out": quad_in_out,
    "cubic_in": cubic_in,
    "cubic_out": cubic_out,
    "cubic_in_out": cubic_in_out,
    "sin_in_out": sin_in_out,
}


def get_easing(easing: Union[str, Easing, None]) -> Easing:
    """Resolve an easing by name; callables pass through, None is linear."""
    if easing is None:
        return linear
    if callable(easing):
        return easing
    try:
        return EASINGS[easing]
    except KeyError:
        raise KeyError(f"Unknown easing: {easing!r} (known: {sorted(EASINGS)})") from None


# ----- interpolation -----
def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _format_number(x: float) -> str:
    text = f"{x:.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def _parse_hex(color: str):
    digits = color[1:]
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return tuple(int(digits[i:i + 2], 16) for i in (0, 2, 4))


def interpolate_number(a: float, b: float) -> Callable[[float], Any]:
    def at(t: float):
        if t >= 1:
            return b
        if t <= 0:
            return a
        return a + (b - a) * t

    return at


def interpolate_color(a: str, b: str) -> Callable[[float], str]:
    ca, cb = _parse_hex(a), _parse_hex(b)

    def at(t: float) -> str:
        if t >= 1:
            return b
        if t <= 0:
            return a
        r, g, bl = (round(x + (y - x) * t) for x, y in zip(ca, cb))
        return f"#{r:02x}{g:02x}{bl:02x}"

    return at


def interpolate_string(a: str, b: str) -> Callable[[float], str]:
    """Interpolate numbers embedded in two strings sharing the same template.

    Strings whose non-numeric parts differ snap to the target at the end.
    """
    na = _NUMBER.findall(a)
    nb = _NUMBER.findall(b)
    if not nb or len(na) != len(nb) or _NUMBER.split(a) != _NUMBER.split(b):
        return _snap(a, b)

    parts = _NUMBER.split(b)
    pairs = [(float(x), float(y)) for x, y in zip(na, nb)]

    def at(t: float) -> str:
        if t >= 1:
            return b
        if t <= 0:
            return a
        out = [parts[0]]
        for (x, y), tail in zip(pairs, parts[1:]):
            out.append(_format_number(x + (y - x) * t))
            out.append(tail)
        return "".join(out)

    return at


def _snap(a: Any, b: Any) -> Callable[[float], Any]:
    return lambda t: b if t >= 1 else a


def interpolate(a: Any, b: Any) -> Callable[[float], Any]:
    """Pick an interpolator suited to the start and target values."""
    if _is_number(a) and _is_number(b):
        return interpolate_number(a, b)
    if isinstance(a, str) and isinstance(b, str):
        if _HEX.match(a) and _HEX.match(b):
            return interpolate_color(a, b)
        return interpolate_string(a, b)
    return _snap(a, b)
