from __future__ import annotations

"""Resource production, fertility depletion and consumption."""

from typing import Sequence
import math

from modifiers import GameModifiers, MODIFIERS
from resources import ResourceSource, source_bonus
from .civilization import Civilization, resource_capacity


def territory_production(fertility: float, civ: Civilization,
                         modifiers: GameModifiers = MODIFIERS) -> int:
    """Yield of one territory at ``fertility`` (0..1 of its maximum)."""
    return math.floor(
        modifiers.base_territory_production
        * civ.stage.production_factor
        * fertility
        * civ.resource_efficiency
    )


def deplete(current: float, civ: Civilization,
            modifiers: GameModifiers = MODIFIERS) -> float:
    """Geometric decay of a territory's remaining fertility toward the floor."""
    floor_value = modifiers.max_resources_per_territory * modifiers.fertility_floor
    decayed = current * (1.0 - modifiers.depletion_rate * civ.stage.depletion_factor)
    return max(floor_value, decayed)


def consumption(civ: Civilization, modifiers: GameModifiers = MODIFIERS) -> int:
    return math.floor(
        civ.population / 1000.0
        * modifiers.consumption_per_1000_pop
        * civ.stage.consumption_factor
    )


def update_resources(civ: Civilization, sources: Sequence[ResourceSource] = (),
                     modifiers: GameModifiers = MODIFIERS) -> Civilization:
    """Return ``civ`` after one tick of production and consumption."""
    new = civ.copy()
    max_fertility = modifiers.max_resources_per_territory

    production = 0.0
    for territory in new.territories:
        current = new.territory_resources.setdefault(territory, max_fertility)
        current = min(current, max_fertility)
        production += territory_production(current / max_fertility, new, modifiers)
        new.territory_resources[territory] = deplete(current, new, modifiers)

    production += source_bonus(new, sources)
    consumed = consumption(new, modifiers)

    new.resource_production = production
    new.resource_consumption = consumed
    new.resource_level = max(0.0, min(new.resource_level + production - consumed,
                                      resource_capacity(new, modifiers)))
    return new
