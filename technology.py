"""
Technological stages and the evolution state machine.

Civilizations progress linearly through five stages. Each stage carries
the population, resource and age thresholds needed to enter it, plus the
factors the population and economy models scale by. A civilization can be
promoted or regress by exactly one stage per tick.
"""

from __future__ import annotations
from enum import IntEnum
from typing import Optional
import logging
import math

logger = logging.getLogger(__name__)


class Stage(IntEnum):
    """Technological stages that civilizations progress through."""
    PRIMITIVE = 0
    AGRICULTURAL = 1
    MEDIEVAL = 2
    INDUSTRIAL = 3
    MODERN = 4

    @property
    def population_requirement(self) -> int:
        """Population needed to enter this stage."""
        requirements = {
            Stage.PRIMITIVE: 0,
            Stage.AGRICULTURAL: 5000,
            Stage.MEDIEVAL: 20000,
            Stage.INDUSTRIAL: 100000,
            Stage.MODERN: 500000,
        }
        return requirements[self]

    @property
    def resource_requirement(self) -> int:
        """Stored resources needed to enter this stage."""
        requirements = {
            Stage.PRIMITIVE: 0,
            Stage.AGRICULTURAL: 500,
            Stage.MEDIEVAL: 2000,
            Stage.INDUSTRIAL: 10000,
            Stage.MODERN: 50000,
        }
        return requirements[self]

    @property
    def age_requirement(self) -> int:
        """Ticks a civilization must have lived to enter this stage."""
        requirements = {
            Stage.PRIMITIVE: 0,
            Stage.AGRICULTURAL: 30,
            Stage.MEDIEVAL: 100,
            Stage.INDUSTRIAL: 200,
            Stage.MODERN: 350,
        }
        return requirements[self]

    @property
    def evolution_cost(self) -> float:
        """Resources consumed when promoted into this stage."""
        return self.resource_requirement * 0.5

    # --- factors consumed by the population and economy models ---

    @property
    def tech_factor(self) -> float:
        return 0.5 + 0.5 * self.value

    @property
    def modernization_factor(self) -> float:
        return 1.0 - 0.05 * self.value

    @property
    def mortality_reduction(self) -> float:
        return 0.15 * self.value

    @property
    def production_factor(self) -> float:
        return 0.5 + 0.2 * self.value

    @property
    def consumption_factor(self) -> float:
        return 0.8 + 0.4 * self.value

    @property
    def depletion_factor(self) -> float:
        return 0.5 + 0.1 * self.value

    @property
    def bonus_factor(self) -> float:
        return 1.0 + 0.1 * self.value

    def next(self) -> Optional[Stage]:
        """Get the next stage in progression."""
        if self is Stage.MODERN:
            return None
        return Stage(self.value + 1)

    def previous(self) -> Optional[Stage]:
        if self is Stage.PRIMITIVE:
            return None
        return Stage(self.value - 1)


# Multipliers applied to resource efficiency on stage changes
PROMOTION_EFFICIENCY = 1.1
REGRESSION_EFFICIENCY = 0.9
# Fraction of stored resources kept on regression
REGRESSION_RESOURCE_KEEP = 0.8
# Fraction of the next stage's age requirement that suffices for promotion
AGE_TOLERANCE = 0.9
# Fractions of the current stage's requirements below which a civ regresses
REGRESSION_POPULATION_FRACTION = 0.5
REGRESSION_RESOURCE_FRACTION = 0.4


def can_promote(civ) -> bool:
    """Check whether ``civ`` meets every gate of the next stage."""
    nxt = civ.stage.next()
    if nxt is None:
        return False
    return (
        civ.age >= nxt.age_requirement * AGE_TOLERANCE
        and civ.resource_level >= nxt.resource_requirement
        and civ.population >= nxt.population_requirement
        and civ.resource_level >= nxt.evolution_cost
    )


def should_regress(civ) -> bool:
    stage = civ.stage
    if stage is Stage.PRIMITIVE:
        return False
    return (
        civ.population < stage.population_requirement * REGRESSION_POPULATION_FRACTION
        or civ.resource_level < stage.resource_requirement * REGRESSION_RESOURCE_FRACTION
    )


def update_evolution(civ):
    """Return a copy of ``civ`` after the promotion and regression checks.

    Promotion is evaluated first. Regression is evaluated afterwards against
    the possibly new stage; the thresholds make both firing in one tick
    impossible.
    """
    new = civ.copy()

    if can_promote(new):
        nxt = new.stage.next()
        new.resource_level -= nxt.evolution_cost
        new.stage = nxt
        new.resource_efficiency *= PROMOTION_EFFICIENCY
        logger.info("Civilization %s advanced to %s", new.id, nxt.name)

    if should_regress(new):
        prev = new.stage.previous()
        new.stage = prev
        new.resource_level = float(math.floor(new.resource_level * REGRESSION_RESOURCE_KEEP))
        new.resource_efficiency *= REGRESSION_EFFICIENCY
        logger.info("Civilization %s regressed to %s", new.id, prev.name)

    return new


__all__ = [
    "Stage",
    "can_promote",
    "should_regress",
    "update_evolution",
]
