from __future__ import annotations

"""Logistic population model with birth/mortality feedback."""

from dataclasses import dataclass
import math

from modifiers import GameModifiers, MODIFIERS
from .civilization import Civilization, carrying_capacity

# Thresholds steering the slow drift of the base rates
LOW_SUFFICIENCY = 0.8
LOW_DENSITY_ROOM = 0.7
SURPLUS_RATIO = 1.5
BIRTH_DECAY = 0.99
BIRTH_GROWTH = 1.01
CONFLICT_PRESSURE = 1.3
SCARCITY_PRESSURE = 1.2
MORTALITY_CONFLICT_GROWTH = 1.02
MORTALITY_SCARCITY_GROWTH = 1.01
MORTALITY_RECOVERY = 0.995
OVERPOPULATION_ONSET = 0.8


@dataclass(frozen=True)
class DemographicFactors:
    """Intermediate multipliers of one population step."""
    capacity: int
    density: float
    sufficiency: float
    scarcity: float
    conflict: float
    overpopulation: float
    effective_birth: float
    effective_mortality: float


def demographic_factors(civ: Civilization,
                        modifiers: GameModifiers = MODIFIERS) -> DemographicFactors:
    stage = civ.stage
    capacity = carrying_capacity(civ, modifiers)
    pop = max(1, civ.population)
    thousands = pop / 1000.0

    density = max(0.0, 1.0 - pop / capacity) if capacity > 0 else 0.0
    sufficiency = min(1.0, civ.resource_level / thousands / 10.0)
    birth = civ.birth_rate * stage.modernization_factor * density * sufficiency

    scarcity = max(1.0, 1.5 - civ.resource_level / (pop / 500.0))
    conflict = min(2.0, 1.0 + civ.conflict_count * 0.001)
    if capacity > 0 and pop > capacity * OVERPOPULATION_ONSET:
        overpopulation = 1.0 + (pop / capacity - OVERPOPULATION_ONSET) * 2.0
    else:
        overpopulation = 1.0
    mortality = max(
        modifiers.min_effective_mortality,
        civ.mortality_rate * (1.0 - stage.mortality_reduction)
        * scarcity * conflict * overpopulation,
    )

    return DemographicFactors(
        capacity=capacity,
        density=density,
        sufficiency=sufficiency,
        scarcity=scarcity,
        conflict=conflict,
        overpopulation=overpopulation,
        effective_birth=birth,
        effective_mortality=mortality,
    )


def update_population(civ: Civilization,
                      modifiers: GameModifiers = MODIFIERS) -> Civilization:
    """Return ``civ`` advanced by one tick of births and deaths.

    Population is clamped to ``[1, carrying capacity]``. The base birth and
    mortality rates drift with resource sufficiency and conflict pressure so
    a civilization's history keeps shaping its demography.
    """
    new = civ.copy()
    f = demographic_factors(new, modifiers)

    growth = math.floor(new.population * f.effective_birth)
    decline = math.floor(new.population * f.effective_mortality)
    new.population = int(max(1, min(new.population + growth - decline, f.capacity)))

    if f.sufficiency < LOW_SUFFICIENCY or f.density < LOW_DENSITY_ROOM:
        new.birth_rate = max(modifiers.birth_rate_floor, new.birth_rate * BIRTH_DECAY)
    elif new.resource_production > new.resource_consumption * SURPLUS_RATIO:
        new.birth_rate = min(modifiers.birth_rate_ceiling, new.birth_rate * BIRTH_GROWTH)

    if f.conflict > CONFLICT_PRESSURE:
        new.mortality_rate = min(modifiers.conflict_mortality_ceiling,
                                 new.mortality_rate * MORTALITY_CONFLICT_GROWTH)
    elif f.scarcity > SCARCITY_PRESSURE:
        new.mortality_rate = min(modifiers.scarcity_mortality_ceiling,
                                 new.mortality_rate * MORTALITY_SCARCITY_GROWTH)
    else:
        new.mortality_rate = max(modifiers.mortality_rate_floor,
                                 new.mortality_rate * MORTALITY_RECOVERY)

    return new
