"""Square grid coordinate utilities."""
from __future__ import annotations
import math
from typing import List, Tuple

Coord = Tuple[int, int]  # (x, y); arrays are indexed [y, x]

CARDINAL_OFFSETS: Tuple[Coord, ...] = ((0, 1), (1, 0), (0, -1), (-1, 0))
DIAGONAL_OFFSETS: Tuple[Coord, ...] = ((1, 1), (-1, -1), (1, -1), (-1, 1))
MOORE_OFFSETS: Tuple[Coord, ...] = CARDINAL_OFFSETS + DIAGONAL_OFFSETS


def in_bounds(x: int, y: int, size: int) -> bool:
    """Return True if (x, y) lies on a ``size`` x ``size`` grid."""
    return 0 <= x < size and 0 <= y < size


def neighbors4(x: int, y: int, size: int) -> List[Coord]:
    """Return the in-bounds north/east/south/west neighbors of (x, y)."""
    return [
        (x + dx, y + dy)
        for dx, dy in CARDINAL_OFFSETS
        if in_bounds(x + dx, y + dy, size)
    ]


def neighbors8(x: int, y: int, size: int) -> List[Coord]:
    """Return the in-bounds 8-connected neighbors of (x, y)."""
    return [
        (x + dx, y + dy)
        for dx, dy in MOORE_OFFSETS
        if in_bounds(x + dx, y + dy, size)
    ]


def distance_sq(a: Coord, b: Coord) -> int:
    """Squared euclidean distance, cheap for comparisons."""
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return dx * dx + dy * dy


def distance(a: Coord, b: Coord) -> float:
    return math.sqrt(distance_sq(a, b))


def area(size: int) -> int:
    return size * size
