from __future__ import annotations

"""Ownership grid and bucketed spatial hash."""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Set, Tuple
import math
import random

import numpy as np

from grid import Coord, MOORE_OFFSETS, in_bounds

FREE = -1


class SpatialHash:
    """Buckets positions into square cells for radius queries.

    ``cell_size`` only affects how many buckets a query touches; results
    are filtered by exact euclidean distance.
    """

    def __init__(self, cell_size: int = 5):
        if cell_size <= 0:
            raise ValueError("cell_size must be positive")
        self.cell_size = cell_size
        self._buckets: Dict[Tuple[int, int], List[Tuple[Coord, int]]] = defaultdict(list)

    def _cell(self, pos: Coord) -> Tuple[int, int]:
        return (math.floor(pos[0] / self.cell_size), math.floor(pos[1] / self.cell_size))

    def clear(self) -> None:
        self._buckets.clear()

    def add(self, pos: Coord, item_id: int) -> None:
        self._buckets[self._cell(pos)].append((pos, item_id))

    def nearby(self, pos: Coord, radius: float = 1.0) -> Set[int]:
        """Return ids stored within ``radius`` of ``pos``."""
        cx, cy = self._cell(pos)
        reach = int(math.ceil(radius / self.cell_size))
        r2 = radius * radius
        out: Set[int] = set()
        for dx in range(-reach, reach + 1):
            for dy in range(-reach, reach + 1):
                bucket = self._buckets.get((cx + dx, cy + dy))
                if not bucket:
                    continue
                for (x, y), item_id in bucket:
                    ddx = x - pos[0]
                    ddy = y - pos[1]
                    if ddx * ddx + ddy * ddy <= r2:
                        out.add(item_id)
        return out

    def __len__(self) -> int:
        return sum(len(b) for b in self._buckets.values())


class TerritoryIndex:
    """Coordinate -> owner cache rebuilt from the civilization list.

    The index is never authoritative. It must be rebuilt (or invalidated
    and lazily rebuilt) whenever territories change.
    """

    def __init__(self, size: int, cell_size: int = 5):
        self.size = size
        self._owner = np.full((size, size), FREE, dtype=np.int32)
        self._hash = SpatialHash(cell_size)
        self._stale = True

    @property
    def stale(self) -> bool:
        return self._stale

    def invalidate(self) -> None:
        self._stale = True

    def rebuild(self, civilizations: Iterable) -> None:
        """Repopulate from territories in list order; first claimant keeps a cell."""
        self._owner.fill(FREE)
        self._hash.clear()
        for civ in civilizations:
            for x, y in civ.territories:
                if not in_bounds(x, y, self.size):
                    continue
                if self._owner[y, x] == FREE:
                    self._owner[y, x] = civ.id
                self._hash.add((x, y), civ.id)
        self._stale = False

    def ensure_current(self, civilizations: Optional[Iterable]) -> None:
        if self._stale and civilizations is not None:
            self.rebuild(civilizations)

    def owner_at(self, coord: Coord) -> Optional[int]:
        x, y = coord
        if not in_bounds(x, y, self.size):
            return None
        owner = int(self._owner[y, x])
        return None if owner == FREE else owner

    def is_free(self, coord: Coord, civilizations: Optional[Iterable] = None) -> bool:
        """True if ``coord`` is in bounds and unowned."""
        self.ensure_current(civilizations)
        x, y = coord
        return in_bounds(x, y, self.size) and self._owner[y, x] == FREE

    def neighbors_of(self, civ, rng: random.Random, sample_limit: int = 20,
                     civilizations: Optional[Iterable] = None) -> List[Coord]:
        """Free 8-connected cells around ``civ``'s territory.

        Large civilizations only have a random sample of ``sample_limit``
        territories scanned.
        """
        self.ensure_current(civilizations)
        territories = list(civ.territories)
        if len(territories) > sample_limit:
            territories = rng.sample(territories, sample_limit)

        out: List[Coord] = []
        checked: Set[Coord] = set()
        for tx, ty in territories:
            for dx, dy in MOORE_OFFSETS:
                pos = (tx + dx, ty + dy)
                if pos in checked:
                    continue
                checked.add(pos)
                if self.is_free(pos):
                    out.append(pos)
        return out

    def nearby(self, pos: Coord, radius: float) -> Set[int]:
        """Ids of civilizations with a territory within ``radius`` of ``pos``."""
        return self._hash.nearby(pos, radius)

    def occupied_count(self) -> int:
        return int(np.count_nonzero(self._owner != FREE))

    def owner_map(self) -> np.ndarray:
        return self._owner.copy()
