from __future__ import annotations

import random
from typing import Sequence

from modifiers import GameModifiers, MODIFIERS
from resources import ResourceSource
from technology import update_evolution
from .civilization import Civilization
from .economy import update_resources
from .expansion import update_expansion
from .population import update_population
from .spatial import SpatialHash, TerritoryIndex


def advance_civilization(
    civ: Civilization,
    index: TerritoryIndex,
    source_hash: SpatialHash,
    sources: Sequence[ResourceSource],
    rng: random.Random,
    modifiers: GameModifiers = MODIFIERS,
) -> Civilization:
    """Advance one civilization by a tick.

    Parameters
    ----------
    civ : Civilization
        Record from the previous tick. It is not modified.
    index : TerritoryIndex
        Ownership of the previous tick, used to find free neighbours.
    source_hash : SpatialHash
        Resource source positions keyed by source index.
    sources : sequence of ResourceSource
        The world's resource sources.
    rng : random.Random
        Shared seeded generator; calls happen in a fixed order.
    modifiers : GameModifiers, optional
        Tunables, defaults to :data:`modifiers.MODIFIERS`.
    """
    new = civ.copy()
    new.age += 1
    # derived per tick, never carried over from the previous one
    new.resource_production = 0.0
    new.resource_consumption = 0.0

    new = update_population(new, modifiers)
    new = update_resources(new, sources, modifiers)
    new = update_evolution(new)
    new = update_expansion(new, index, source_hash, sources, rng, modifiers)
    return new.clamped(modifiers)
