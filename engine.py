from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple
import logging
import random

import numpy as np

import grid
from grid import Coord
from modifiers import GameModifiers, MODIFIERS
from resources import (
    ResourceSource, discover_resource_sources, generate_resource_sources,
    transfer_discoveries,
)
from sim.civilization import Civilization, create_civilization
from sim.conflict import Conflict, detect_conflicts, resolve_conflicts
from sim.loop import advance_civilization
from sim.spatial import SpatialHash, TerritoryIndex

logger = logging.getLogger(__name__)


# =============================== DATA TYPES ===================================

@dataclass
class World:
    size: int
    civilizations: List[Civilization] = field(default_factory=list)
    resource_sources: List[ResourceSource] = field(default_factory=list)
    conflicts: List[Conflict] = field(default_factory=list)
    tick_count: int = 0
    is_running: bool = False
    dominant_civilization: Optional[Civilization] = None
    # civilizations the run started with; the elimination rules need rivals
    founding_count: int = 0

    @property
    def area(self) -> int:
        return grid.area(self.size)

    def in_bounds(self, x: int, y: int) -> bool:
        return grid.in_bounds(x, y, self.size)

    def get_civilization(self, civ_id: int) -> Optional[Civilization]:
        for civ in self.civilizations:
            if civ.id == civ_id:
                return civ
        return None


# =============================== ENGINE =======================================

class SimulationEngine:
    """Pure-sim API usable by CLI, GUI, and tests.

    The engine owns the authoritative civilization list. ``tick`` advances
    every civilization against an immutable snapshot of the previous tick,
    then settles conflicts and checks for a dominant civilization. The
    caller decides the cadence; ``tick`` does nothing while paused.
    """

    def __init__(self, size: Optional[int] = None, seed: Optional[int] = None,
                 rng: Optional[random.Random] = None,
                 modifiers: Optional[GameModifiers] = None):
        self.modifiers = modifiers if modifiers is not None else MODIFIERS
        if size is None:
            size = self.modifiers.world_size
        if size <= 0:
            raise ValueError("world size must be positive")
        self.rng = rng if rng is not None else random.Random(seed)
        self.world = World(size=size)
        self.index = TerritoryIndex(size, self.modifiers.spatial_cell_size)
        self.source_hash = SpatialHash(self.modifiers.spatial_cell_size)
        self._params: Tuple[int, int] = (0, 0)

    # ------------------------ Setup -------------------------------------------

    def initialize(self, civilization_count: int = 10, resource_source_count: int = 20) -> None:
        """(Re)seed the world with resource sources and civilizations."""
        if civilization_count < 0 or resource_source_count < 0:
            raise ValueError("counts must be non-negative")
        self._params = (civilization_count, resource_source_count)

        w = self.world
        w.civilizations = []
        w.conflicts = []
        w.tick_count = 0
        w.is_running = False
        w.dominant_civilization = None

        w.resource_sources = generate_resource_sources(
            resource_source_count, w.size, self.rng, self.modifiers)
        self._rebuild_source_hash()

        placed: Set[Coord] = set()
        for i in range(civilization_count):
            position = None
            candidate = None
            for _ in range(self.modifiers.civ_placement_attempts):
                candidate = (self.rng.randrange(w.size), self.rng.randrange(w.size))
                if candidate not in placed:
                    position = candidate
                    break
            if position is None:
                logger.warning("No free position for civilization %d after %d attempts",
                               i, self.modifiers.civ_placement_attempts)
                if i > civilization_count / 2:
                    logger.warning("Reducing civilization count from %d to %d",
                                   civilization_count, i)
                    break
                logger.warning("Forcing position %s for civilization %d", candidate, i)
                position = candidate
            w.civilizations.append(create_civilization(i, position, self.modifiers))
            placed.add(position)

        w.founding_count = len(w.civilizations)
        self._refresh_index()
        logger.info("World initialized: %d civilizations, %d resource sources",
                    len(w.civilizations), len(w.resource_sources))

    def add_civilization(self, at: Coord, **overrides) -> int:
        """Add a civilization with its capital at ``at`` and return its id."""
        x, y = at
        if not self.world.in_bounds(x, y):
            raise ValueError("Civilization spawn out of bounds")
        cid = self._next_civ_id()
        civ = create_civilization(cid, (x, y), self.modifiers, **overrides)
        self.world.civilizations.append(civ)
        self.world.founding_count += 1
        self._refresh_index()
        return cid

    def add_resource_source(self, source: ResourceSource) -> int:
        """Register an explicitly placed resource source and return its index."""
        x, y = source.position
        if not self.world.in_bounds(x, y):
            raise ValueError("Resource source out of bounds")
        self.world.resource_sources.append(source)
        self._rebuild_source_hash()
        return len(self.world.resource_sources) - 1

    def _next_civ_id(self) -> int:
        used = {c.id for c in self.world.civilizations}
        i = 0
        while i in used:
            i += 1
        return i

    def _rebuild_source_hash(self) -> None:
        self.source_hash.clear()
        for idx, src in enumerate(self.world.resource_sources):
            self.source_hash.add(src.position, idx)

    def _refresh_index(self) -> None:
        self.index.invalidate()
        self.index.rebuild(self.world.civilizations)

    # ------------------------ Run control -------------------------------------

    def start(self) -> None:
        if self.world.dominant_civilization is not None:
            logger.info("Run already decided; reset before starting again")
            return
        self.world.is_running = True

    def pause(self) -> None:
        self.world.is_running = False

    def reset(self) -> None:
        self.world.is_running = False
        self.initialize(*self._params)

    # ------------------------ Core tick ---------------------------------------

    def tick(self) -> None:
        """Advance the world by one tick if running."""
        w = self.world
        if not w.is_running:
            return
        w.tick_count += 1

        snapshot = tuple(w.civilizations)
        self.index.ensure_current(snapshot)
        advanced = [
            advance_civilization(civ, self.index, self.source_hash,
                                 w.resource_sources, self.rng, self.modifiers)
            for civ in snapshot
        ]

        self.index.invalidate()
        self.index.rebuild(advanced)
        discover_resource_sources(advanced, w.resource_sources, self.index)

        w.conflicts = detect_conflicts(advanced, self.index)
        resolved, _ = resolve_conflicts(advanced, w.conflicts, self.rng, self.modifiers)

        survivors = []
        for civ in resolved:
            if civ.alive:
                survivors.append(civ)
            else:
                logger.info("[Tick %s] Civilization %s has been eliminated", w.tick_count, civ.id)
        w.civilizations = survivors

        self._refresh_index()
        transfer_discoveries(survivors, w.resource_sources, self.index, self.modifiers)

        logger.debug("[Tick %s] %d civilizations, %d conflicts",
                     w.tick_count, len(survivors), len(w.conflicts))
        self._check_dominance()

    def _check_dominance(self) -> None:
        w = self.world
        if not w.civilizations:
            return
        m = self.modifiers
        area = w.area
        occupied = self.index.occupied_count()

        leader = w.civilizations[0]
        for civ in w.civilizations[1:]:
            if civ.size > leader.size:
                leader = civ

        rivals = w.founding_count > 1
        winner = None
        if leader.size / area >= m.dominance_area_share:
            winner = leader
        elif (rivals and occupied > 0
              and leader.size / occupied > m.dominance_occupied_share
              and occupied / area > m.dominance_occupied_area):
            winner = leader
        elif rivals and len(w.civilizations) == 1 and occupied / area > m.sole_survivor_area_share:
            winner = w.civilizations[0]

        if winner is not None:
            w.dominant_civilization = winner.copy()
            w.is_running = False
            logger.info("[Tick %s] Civilization %s dominates with %d of %d cells",
                        w.tick_count, winner.id, winner.size, area)

    # ------------------------ Read accessors ----------------------------------

    @property
    def civilizations(self) -> Tuple[Civilization, ...]:
        return tuple(c.copy() for c in self.world.civilizations)

    @property
    def conflicts(self) -> Tuple[Conflict, ...]:
        return tuple(self.world.conflicts)

    @property
    def resource_sources(self) -> Tuple[ResourceSource, ...]:
        return tuple(s.copy() for s in self.world.resource_sources)

    @property
    def tick_count(self) -> int:
        return self.world.tick_count

    @property
    def is_running(self) -> bool:
        return self.world.is_running

    @property
    def dominant_civilization(self) -> Optional[Civilization]:
        dom = self.world.dominant_civilization
        return dom.copy() if dom is not None else None

    def owner_map(self) -> np.ndarray:
        """Copy of the ownership grid indexed ``[y, x]``; -1 marks free cells."""
        return self.index.owner_map()

    def summary(self) -> Dict:
        w = self.world
        out_civs: Dict[int, Dict] = {}
        for c in w.civilizations:
            out_civs[c.id] = {
                "stage": c.stage.name,
                "population": c.population,
                "resources": round(c.resource_level, 1),
                "territories": c.size,
                "discovered_sources": len(c.discovered_sources),
                "conflicts": c.conflict_count,
            }
        dom = w.dominant_civilization
        return {
            "tick": w.tick_count,
            "running": w.is_running,
            "size": w.size,
            "occupied": self.index.occupied_count(),
            "conflicts": len(w.conflicts),
            "resource_sources": len(w.resource_sources),
            "discovered": sum(1 for s in w.resource_sources if s.discovered),
            "dominant": dom.id if dom is not None else None,
            "civs": out_civs,
        }
