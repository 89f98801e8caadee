from __future__ import annotations

"""Civilization record and capacity helpers."""

from dataclasses import dataclass, field, replace
from typing import Dict, List
import math

from grid import Coord
from modifiers import GameModifiers, MODIFIERS
from technology import Stage


@dataclass
class Civilization:
    """Mutable-per-tick state of one civilization.

    Update functions never modify a record in place; they work on
    :meth:`copy` so the previous tick's snapshot stays intact.
    """

    id: int
    capital: Coord
    stage: Stage = Stage.PRIMITIVE
    population: int = 1000
    resource_level: float = 50.0
    expansion_rate: float = 0.1
    territories: List[Coord] = field(default_factory=list)
    age: int = 0
    birth_rate: float = 0.03
    mortality_rate: float = 0.015
    conflict_count: int = 0
    resource_efficiency: float = 1.0
    territory_resources: Dict[Coord, float] = field(default_factory=dict)
    discovered_sources: List[int] = field(default_factory=list)
    # Derived each tick from the economy model
    resource_production: float = 0.0
    resource_consumption: float = 0.0

    @property
    def size(self) -> int:
        return len(self.territories)

    @property
    def alive(self) -> bool:
        return bool(self.territories)

    def copy(self) -> "Civilization":
        """Return a value with its own containers."""
        return replace(
            self,
            territories=list(self.territories),
            territory_resources=dict(self.territory_resources),
            discovered_sources=list(self.discovered_sources),
        )

    def clamped(self, modifiers: GameModifiers = MODIFIERS) -> "Civilization":
        """Return a copy with population, resources and stage inside their bounds."""
        new = self.copy()
        new.stage = Stage(min(max(int(new.stage), Stage.PRIMITIVE), Stage.MODERN))
        cap = carrying_capacity(new, modifiers)
        new.population = int(max(1, min(new.population, max(cap, 1))))
        new.resource_level = max(0.0, min(float(new.resource_level),
                                          resource_capacity(new, modifiers)))
        return new


def create_civilization(civ_id: int, position: Coord,
                        modifiers: GameModifiers = MODIFIERS,
                        **overrides) -> Civilization:
    """Create a primitive civilization holding only its capital."""
    civ = Civilization(
        id=civ_id,
        capital=position,
        population=modifiers.initial_population,
        resource_level=modifiers.initial_resource_level,
        expansion_rate=modifiers.initial_expansion_rate,
        territories=[position],
        birth_rate=modifiers.initial_birth_rate,
        mortality_rate=modifiers.initial_mortality_rate,
        territory_resources={position: modifiers.max_resources_per_territory},
    )
    if overrides:
        civ = replace(civ, **overrides)
    return civ


def carrying_capacity(civ: Civilization, modifiers: GameModifiers = MODIFIERS) -> int:
    """Population the civilization's territory can sustain at its stage."""
    cap = civ.size * modifiers.max_population_per_territory * civ.stage.tech_factor
    return int(math.floor(min(cap, modifiers.global_max_population)))


def resource_capacity(civ: Civilization, modifiers: GameModifiers = MODIFIERS) -> float:
    """Maximum stored resources for the civilization's territory."""
    return civ.size * modifiers.max_resources_per_territory
