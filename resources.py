"""Discoverable resource deposits and the production bonus they grant."""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Dict, List, Sequence, Tuple
import logging
import random

from grid import Coord, distance
from modifiers import GameModifiers, MODIFIERS
from technology import Stage

logger = logging.getLogger(__name__)


class ResourceSourceType(IntEnum):
    FOREST = 0
    MINERALS = 1
    OIL = 2
    FERTILE_LAND = 3


@dataclass
class ResourceSource:
    position: Coord
    type: ResourceSourceType
    richness: int  # 1-10
    radius: int  # influence distance in cells
    discovered: bool = False

    def copy(self) -> "ResourceSource":
        return replace(self)


# Stage affinity per source type: (favoured stages, favoured mult, other mult)
SOURCE_AFFINITY: Dict[ResourceSourceType, Tuple[frozenset, float, float]] = {
    ResourceSourceType.FOREST: (frozenset({Stage.PRIMITIVE, Stage.AGRICULTURAL}), 2.0, 1.0),
    ResourceSourceType.MINERALS: (frozenset({Stage.MEDIEVAL, Stage.INDUSTRIAL}), 2.0, 1.0),
    ResourceSourceType.OIL: (frozenset({Stage.INDUSTRIAL, Stage.MODERN}), 2.0, 0.5),
    ResourceSourceType.FERTILE_LAND: (frozenset(Stage), 1.5, 1.5),
}


def affinity(source_type: ResourceSourceType, stage: Stage) -> float:
    """Return the type x stage multiplier for a source."""
    favoured, mult, other = SOURCE_AFFINITY[source_type]
    return mult if stage in favoured else other


def source_bonus(civ, sources: Sequence[ResourceSource]) -> float:
    """Additive production bonus from the civilization's discovered sources."""
    if not sources or not civ.discovered_sources:
        return 0.0
    total = 0.0
    for idx in civ.discovered_sources:
        if 0 <= idx < len(sources):
            src = sources[idx]
            total += src.richness * affinity(src.type, civ.stage) * civ.stage.bonus_factor
    return total


def generate_resource_sources(count: int, size: int, rng: random.Random,
                              modifiers: GameModifiers = MODIFIERS) -> List[ResourceSource]:
    """Scatter up to ``count`` sources keeping a minimum pairwise distance.

    A source that cannot be placed within the attempt ceiling is skipped.
    """
    if count < 0:
        raise ValueError("count must be non-negative")
    sources: List[ResourceSource] = []
    for i in range(count):
        placed = None
        for _ in range(modifiers.source_placement_attempts):
            pos = (rng.randrange(size), rng.randrange(size))
            if all(distance(pos, s.position) >= modifiers.source_min_distance
                   for s in sources):
                placed = pos
                break
        if placed is None:
            logger.warning("Could not place resource source %d of %d; skipping", i + 1, count)
            continue
        sources.append(ResourceSource(
            position=placed,
            type=ResourceSourceType(rng.randrange(len(ResourceSourceType))),
            richness=rng.randint(1, 10),
            radius=rng.randint(1, 3),
        ))
    return sources


def discover_resource_sources(civilizations: Sequence, sources: Sequence[ResourceSource],
                              index) -> List[Tuple[int, int]]:
    """Mark sources within reach of a civilization's territory as discovered.

    Every civilization reaching a still-undiscovered source in the same tick
    gains it. Only the source bonus is granted; territory fertility is left
    alone. Mutates the given records and returns (civ_id, source_index) pairs.
    """
    found: List[Tuple[int, int]] = []
    for idx, src in enumerate(sources):
        if src.discovered:
            continue
        reached = index.nearby(src.position, src.radius)
        if not reached:
            continue
        for civ in civilizations:
            if civ.id not in reached or idx in civ.discovered_sources:
                continue
            src.discovered = True
            civ.discovered_sources.append(idx)
            found.append((civ.id, idx))
            logger.debug("Civilization %s discovered %s source %d",
                         civ.id, src.type.name, idx)
    return found


def transfer_discoveries(civilizations: Sequence, sources: Sequence[ResourceSource],
                         index, modifiers: GameModifiers = MODIFIERS) -> List[Tuple[int, int]]:
    """Hand orphaned discoveries to civilizations near the source.

    A discovered source that no surviving civilization lists goes to every
    civilization with a territory within ``transfer_radius_factor`` times the
    source radius.
    """
    moved: List[Tuple[int, int]] = []
    known = set()
    for civ in civilizations:
        known.update(civ.discovered_sources)
    for idx, src in enumerate(sources):
        if not src.discovered or idx in known:
            continue
        reach = src.radius * modifiers.transfer_radius_factor
        heirs = index.nearby(src.position, reach)
        for civ in civilizations:
            if civ.id in heirs and idx not in civ.discovered_sources:
                civ.discovered_sources.append(idx)
                moved.append((civ.id, idx))
    return moved
