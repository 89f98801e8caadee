from __future__ import annotations

"""Border conflict detection and resolution.

Two detection passes feed one resolution:

* simultaneous claims, where two civilizations list the same cell after
  expanding in the same tick;
* adjacency conflicts, one per contested border cell between different
  owners.

Both write into a single resolved-ownership mapping. Population losses and
involvement counts are gathered in a :class:`ConflictLedger` and applied
once at the end.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Set, Tuple
import logging
import math
import random

from grid import Coord, neighbors4
from modifiers import GameModifiers, MODIFIERS
from .civilization import Civilization
from .spatial import TerritoryIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Conflict:
    position: Coord
    attacker: int
    defender: int


@dataclass
class ConflictLedger:
    """Per-civilization tallies for one resolution pass."""

    population_loss: Dict[int, int] = field(default_factory=lambda: defaultdict(int))
    involvement: Dict[int, int] = field(default_factory=lambda: defaultdict(int))
    applied: bool = False

    def involve(self, *civ_ids: int) -> None:
        for cid in civ_ids:
            self.involvement[cid] += 1

    def add_loss(self, civ_id: int, amount: int) -> None:
        self.population_loss[civ_id] += int(max(0, amount))

    def apply(self, civilizations: Sequence[Civilization],
              ownership: Dict[Coord, int],
              modifiers: GameModifiers = MODIFIERS) -> List[Civilization]:
        """Return new civilizations with territories, losses and rates applied."""
        if self.applied:
            raise RuntimeError("conflict ledger already applied")
        self.applied = True

        fertility: Dict[Coord, float] = {}
        for civ in civilizations:
            for t in civ.territories:
                if t in civ.territory_resources and t not in fertility:
                    fertility[t] = civ.territory_resources[t]

        held: Dict[int, List[Coord]] = defaultdict(list)
        for pos, owner in ownership.items():
            held[owner].append(pos)

        out: List[Civilization] = []
        for civ in civilizations:
            new = civ.copy()
            new.territories = held.get(civ.id, [])
            new.territory_resources = {
                t: civ.territory_resources.get(
                    t, fertility.get(t, modifiers.max_resources_per_territory))
                for t in new.territories
            }
            new.population = max(1, new.population - self.population_loss.get(civ.id, 0))

            involved = self.involvement.get(civ.id, 0)
            new.conflict_count += involved
            if involved > 0:
                reduction = min(modifiers.conflict_birth_penalty_cap,
                                involved * modifiers.conflict_birth_penalty)
                new.birth_rate = max(modifiers.birth_rate_floor,
                                     new.birth_rate * (1.0 - reduction))
            else:
                new.birth_rate = min(modifiers.peace_birth_ceiling,
                                     new.birth_rate + modifiers.peace_birth_recovery)
            out.append(new.clamped(modifiers))
        return out


def detect_conflicts(civilizations: Sequence[Civilization],
                     index: TerritoryIndex) -> List[Conflict]:
    """Border cells where a civilization touches another's territory.

    One conflict per position, and once A attacks B no conflict with B
    attacking A is recorded in the same tick.
    """
    conflicts: List[Conflict] = []
    positions: Set[Coord] = set()
    pairs: Set[Tuple[int, int]] = set()
    for attacker in civilizations:
        for x, y in attacker.territories:
            for pos in neighbors4(x, y, index.size):
                defender = index.owner_at(pos)
                if defender is None or defender == attacker.id:
                    continue
                if pos in positions or (defender, attacker.id) in pairs:
                    continue
                conflicts.append(Conflict(pos, attacker.id, defender))
                positions.add(pos)
                pairs.add((attacker.id, defender))
    return conflicts


def _outranks(challenger: Civilization, holder: Civilization) -> bool:
    if challenger.stage != holder.stage:
        return challenger.stage > holder.stage
    return challenger.population > holder.population


def _claim_losses(winner: Civilization, loser: Civilization,
                  modifiers: GameModifiers) -> Tuple[int, int]:
    loser_loss = min(math.floor(loser.population * modifiers.claim_loser_loss),
                     modifiers.claim_loser_loss_cap)
    winner_loss = min(math.floor(winner.population * modifiers.claim_winner_loss),
                      modifiers.claim_winner_loss_cap)
    return winner_loss, loser_loss


def _border_losses(winner: Civilization, loser: Civilization, intensity: float,
                   rng: random.Random, modifiers: GameModifiers) -> Tuple[int, int]:
    winner_loss = min(
        math.floor(winner.population * (0.02 + rng.random() * 0.02)),
        winner.population * modifiers.border_winner_loss_fraction_cap,
        modifiers.border_winner_loss_cap,
    )
    loser_loss = min(
        math.floor(loser.population * (0.05 + rng.random() * 0.05)),
        loser.population * modifiers.border_loser_loss_fraction_cap,
        modifiers.border_loser_loss_cap,
    )
    return math.floor(winner_loss * intensity), math.floor(loser_loss * intensity)


def strength(civ: Civilization, weight: float, jitter: float, rng: random.Random) -> float:
    return civ.stage * weight + math.log10(max(1, civ.population)) + rng.random() * jitter


def resolve_conflicts(civilizations: Sequence[Civilization], conflicts: Sequence[Conflict],
                      rng: random.Random, modifiers: GameModifiers = MODIFIERS
                      ) -> Tuple[List[Civilization], ConflictLedger]:
    """Settle ownership of contested cells and charge population losses.

    Returns the updated civilizations (including any left without
    territory) and the consumed ledger.
    """
    ledger = ConflictLedger()
    by_id: Dict[int, Civilization] = {c.id: c for c in civilizations}
    ownership: Dict[Coord, int] = {}

    # Pass 1: cells listed by more than one civilization
    for civ in civilizations:
        for pos in civ.territories:
            holder_id = ownership.get(pos)
            if holder_id is None:
                ownership[pos] = civ.id
                continue
            if holder_id == civ.id:
                continue
            holder = by_id[holder_id]
            ledger.involve(holder.id, civ.id)
            # losses only when the cell changes hands
            if _outranks(civ, holder):
                ownership[pos] = civ.id
                winner_loss, loser_loss = _claim_losses(civ, holder, modifiers)
                ledger.add_loss(civ.id, winner_loss)
                ledger.add_loss(holder.id, loser_loss)

    # Pass 2: border incursions
    for conflict in conflicts:
        attacker = by_id.get(conflict.attacker)
        defender = by_id.get(conflict.defender)
        if attacker is None or defender is None:
            continue
        ledger.involve(attacker.id, defender.id)

        a = strength(attacker, modifiers.attacker_stage_weight, modifiers.attacker_jitter, rng)
        d = strength(defender, modifiers.defender_stage_weight, modifiers.defender_jitter, rng)
        intensity = min((a + d) / modifiers.intensity_divisor, modifiers.intensity_cap)

        if a > d:
            ownership[conflict.position] = attacker.id
            attacker_loss, defender_loss = _border_losses(attacker, defender, intensity,
                                                          rng, modifiers)
        else:
            ownership.setdefault(conflict.position, defender.id)
            defender_loss, attacker_loss = _border_losses(defender, attacker, intensity,
                                                          rng, modifiers)
        ledger.add_loss(attacker.id, attacker_loss)
        ledger.add_loss(defender.id, defender_loss)

    if conflicts:
        logger.debug("Resolved %d border conflicts", len(conflicts))
    return ledger.apply(civilizations, ownership, modifiers), ledger
