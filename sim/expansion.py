from __future__ import annotations

"""Greedy, resource-seeking territorial expansion."""

from typing import List, Optional, Sequence
import logging
import math
import random

from grid import Coord, distance_sq
from modifiers import GameModifiers, MODIFIERS
from resources import ResourceSource
from .civilization import Civilization
from .spatial import SpatialHash, TerritoryIndex

logger = logging.getLogger(__name__)


def expansion_cost(civ: Civilization, modifiers: GameModifiers = MODIFIERS) -> int:
    """Resources needed to claim one more cell.

    Grows 50% per stage and logarithmically with territory size.
    """
    stage_factor = 1.0 + civ.stage * 0.5
    size_factor = math.log10(civ.size + 10) / math.log10(10)
    return math.floor(modifiers.expansion_base_cost * stage_factor * size_factor)


def should_expand(civ: Civilization, rng: random.Random,
                  modifiers: GameModifiers = MODIFIERS) -> bool:
    if civ.resource_level <= expansion_cost(civ, modifiers):
        return False
    return rng.random() < civ.expansion_rate * (1.0 + civ.stage * 0.1)


def find_nearby_resource_sources(civ: Civilization, source_hash: SpatialHash,
                                 sources: Sequence[ResourceSource], rng: random.Random,
                                 max_distance: float = 10.0,
                                 scan_limit: int = 10) -> List[int]:
    """Indices of sources within ``max_distance`` of a sample of territories."""
    if not civ.territories:
        return []
    territories = list(civ.territories)
    if len(territories) > scan_limit:
        territories = rng.sample(territories, scan_limit)
    found = set()
    for territory in territories:
        found.update(source_hash.nearby(territory, max_distance))
    return sorted(i for i in found if 0 <= i < len(sources))


def _resource_target(civ: Civilization, candidates: List[Coord],
                     source_hash: SpatialHash, sources: Sequence[ResourceSource],
                     rng: random.Random, modifiers: GameModifiers) -> Optional[Coord]:
    nearby = find_nearby_resource_sources(
        civ, source_hash, sources, rng,
        max_distance=modifiers.resource_search_radius,
        scan_limit=modifiers.resource_scan_limit,
    )
    undiscovered = [i for i in nearby if i not in civ.discovered_sources]
    if not undiscovered:
        return None

    ranked = sorted(
        undiscovered,
        key=lambda i: min(distance_sq(t, sources[i].position) for t in civ.territories),
    )[:modifiers.nearest_source_choices]
    target = sources[rng.choice(ranked)].position

    best = None
    best_d = math.inf
    for cand in candidates:
        d = distance_sq(cand, target)
        if d < best_d:
            best_d = d
            best = cand
    return best


def update_expansion(civ: Civilization, index: TerritoryIndex, source_hash: SpatialHash,
                     sources: Sequence[ResourceSource], rng: random.Random,
                     modifiers: GameModifiers = MODIFIERS) -> Civilization:
    """Return ``civ`` with at most one newly claimed neighbouring cell.

    ``index`` must describe the previous tick's world. Expansion heads for
    the nearest undiscovered sources when any are in range and otherwise
    picks a random free neighbour.
    """
    new = civ.copy()
    if not should_expand(new, rng, modifiers):
        return new

    candidates = index.neighbors_of(new, rng, modifiers.neighbor_scan_limit)
    if not candidates:
        return new

    target = _resource_target(new, candidates, source_hash, sources, rng, modifiers)
    if target is None:
        pool = candidates
        if len(pool) > modifiers.candidate_sample_limit:
            pool = rng.sample(pool, modifiers.candidate_sample_limit)
        target = rng.choice(pool)

    new.territories.append(target)
    new.territory_resources[target] = modifiers.max_resources_per_territory
    new.resource_level = max(0.0, new.resource_level - expansion_cost(new, modifiers))
    logger.debug("Civilization %s expanded to %s (size %d)", new.id, target, new.size)
    return new
