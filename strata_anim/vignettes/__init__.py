"""Storage-history vignettes and the registry factory."""

from __future__ import annotations

import logging
from typing import Dict, Optional, Type

from strata_core.compiler import Storyboard
from strata_core.generators import RandomSource
from strata_core.registry import AnimationRegistry
from strata_core.scheduler import Scheduler
from strata_core.surface import Surface

from .base import Vignette
from .cloud_nodes import CloudNodes
from .hdd_platter import HddPlatter
from .magnetic_tape import MagneticTape
from .punch_card import PunchCard
from .scripted import ScriptedVignette
from .ssd_nand import SsdNand

logger = logging.getLogger(__name__)

VIGNETTES: Dict[str, Type[Vignette]] = {
    "punch_card": PunchCard,
    "magnetic_tape": MagneticTape,
    "hdd_platter": HddPlatter,
    "ssd_nand": SsdNand,
    "cloud_nodes": CloudNodes,
}


def build_registry(storyboard: Storyboard, surface: Surface, scheduler: Scheduler, rng: Optional[RandomSource] = None) -> AnimationRegistry:
    """
    Bind every era of `storyboard` to its container on `surface`.

    Eras whose container is not mounted are registered without a controller.
    When `rng` is given all vignettes share it; otherwise each draws its own
    generator from the storyboard seed.

    Raises:
        KeyError: If an era names an unknown vignette
    """
    registry = AnimationRegistry(storyboard.config)
    for era in storyboard.eras:
        kwargs = {"rng": rng, "config": storyboard.config}
        if era.script is not None:
            cls: Type[Vignette] = ScriptedVignette
            kwargs["script"] = era.script
        else:
            try:
                cls = VIGNETTES[era.vignette]
            except KeyError:
                raise KeyError(f"Unknown vignette {era.vignette!r} for era {era.key!r}") from None
        registry.register(era.key, cls.bind(era.key, surface, scheduler, era.container, **kwargs))
    logger.debug("Registered eras: %s", ", ".join(registry.eras()))
    return registry


__all__ = [
    "VIGNETTES",
    "Vignette",
    "PunchCard",
    "MagneticTape",
    "HddPlatter",
    "SsdNand",
    "CloudNodes",
    "ScriptedVignette",
    "build_registry",
]
