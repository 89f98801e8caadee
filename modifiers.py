"""Tweakable simulation parameters.

Every number that shapes the simulation lives on :class:`GameModifiers`.
A balance file in JSON form can override any subset of the fields; the
engine and the pure update functions receive the instance explicitly and
fall back to :data:`MODIFIERS` when none is given.
"""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Optional
import json
import logging
import os

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameModifiers:
    """Central store for values that affect core simulation mechanics."""

    # World
    world_size: int = 50
    spatial_cell_size: int = 5

    # Population
    max_population_per_territory: int = 10_000
    global_max_population: int = 50_000_000
    initial_population: int = 1000
    initial_birth_rate: float = 0.03
    initial_mortality_rate: float = 0.015
    min_effective_mortality: float = 0.005
    birth_rate_floor: float = 0.01
    birth_rate_ceiling: float = 0.04
    mortality_rate_floor: float = 0.005
    conflict_mortality_ceiling: float = 0.03
    scarcity_mortality_ceiling: float = 0.025

    # Economy
    max_resources_per_territory: float = 5000.0
    base_territory_production: float = 100.0
    consumption_per_1000_pop: float = 2.0
    depletion_rate: float = 0.02
    fertility_floor: float = 0.2
    initial_resource_level: float = 50.0

    # Expansion
    initial_expansion_rate: float = 0.1
    expansion_base_cost: float = 50.0
    resource_search_radius: float = 10.0
    neighbor_scan_limit: int = 20
    resource_scan_limit: int = 10
    candidate_sample_limit: int = 10
    nearest_source_choices: int = 3

    # Conflict
    claim_loser_loss: float = 0.08
    claim_loser_loss_cap: int = 20_000
    claim_winner_loss: float = 0.03
    claim_winner_loss_cap: int = 8000
    attacker_stage_weight: float = 3.0
    attacker_jitter: float = 2.0
    defender_stage_weight: float = 2.0
    defender_jitter: float = 3.0
    intensity_divisor: float = 20.0
    intensity_cap: float = 2.0
    border_loser_loss_cap: int = 25_000
    border_loser_loss_fraction_cap: float = 0.15
    border_winner_loss_cap: int = 10_000
    border_winner_loss_fraction_cap: float = 0.05
    conflict_birth_penalty: float = 0.002
    conflict_birth_penalty_cap: float = 0.5
    peace_birth_recovery: float = 0.001
    peace_birth_ceiling: float = 0.05
    transfer_radius_factor: float = 1.5

    # Initialization
    source_min_distance: float = 5.0
    source_placement_attempts: int = 50
    civ_placement_attempts: int = 100

    # Dominance
    dominance_area_share: float = 0.5
    dominance_occupied_share: float = 0.75
    dominance_occupied_area: float = 0.25
    sole_survivor_area_share: float = 0.1


# Global modifiers instance used as the default throughout the codebase
MODIFIERS = GameModifiers()


def _balance_path(default_path: Optional[str] = None) -> str:
    """Return path to the balance file."""

    if default_path is not None:
        return default_path
    return os.path.join(os.path.dirname(__file__), "balance", "modifiers.json")


def load_modifiers(path: Optional[str] = None,
                   base: GameModifiers = MODIFIERS) -> GameModifiers:
    """Return ``base`` with overrides from a JSON balance file applied.

    The file maps field names to values. Unknown keys are skipped and a
    missing file yields ``base`` unchanged.
    """

    fn = _balance_path(path)
    try:
        with open(fn, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return base

    known = {f.name for f in fields(GameModifiers)}
    overrides = {}
    for key, value in data.items():
        if key not in known:
            logger.warning("load_modifiers: ignoring unknown key %r", key)
            continue
        current = getattr(base, key)
        # keep ints ints so counts stay usable as range() bounds
        overrides[key] = type(current)(value)
    return replace(base, **overrides)


__all__ = ["GameModifiers", "MODIFIERS", "load_modifiers"]
