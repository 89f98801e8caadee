"""
Per-civilization simulation models: population, economy, expansion,
conflict and the spatial index they share.

``SimulationEngine`` and ``World`` are re-exported lazily from engine.py.
"""
from typing import Any

from .civilization import Civilization, create_civilization, carrying_capacity, resource_capacity
from .conflict import Conflict, ConflictLedger, detect_conflicts, resolve_conflicts
from .loop import advance_civilization
from .spatial import SpatialHash, TerritoryIndex

__all__ = [
    "Civilization",
    "create_civilization",
    "carrying_capacity",
    "resource_capacity",
    "Conflict",
    "ConflictLedger",
    "detect_conflicts",
    "resolve_conflicts",
    "advance_civilization",
    "SpatialHash",
    "TerritoryIndex",
    "SimulationEngine",
    "World",
]


def __getattr__(name: str) -> Any:
    # Lazy import to avoid circular dependency during package import.
    if name in ("SimulationEngine", "World"):
        from engine import SimulationEngine, World  # local import
        globals().update({
            "SimulationEngine": SimulationEngine,
            "World": World,
        })
        return globals()[name]
    raise AttributeError(f"module 'sim' has no attribute {name!r}")
