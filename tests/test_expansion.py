import random

import pytest

from resources import ResourceSource, ResourceSourceType
from sim.civilization import create_civilization
from sim.expansion import (
    expansion_cost, find_nearby_resource_sources, should_expand, update_expansion,
)
from sim.spatial import SpatialHash, TerritoryIndex
from technology import Stage


def _setup(civs, size=20, sources=()):
    index = TerritoryIndex(size)
    index.rebuild(civs)
    source_hash = SpatialHash()
    for i, src in enumerate(sources):
        source_hash.add(src.position, i)
    return index, source_hash, list(sources)


@pytest.mark.parametrize("stage, size, expected", [
    (Stage.PRIMITIVE, 1, 52),
    (Stage.AGRICULTURAL, 0, 75),
    (Stage.MEDIEVAL, 1, 104),
    (Stage.PRIMITIVE, 90, 100),
])
def test_expansion_cost(stage, size, expected):
    territories = [(i % 50, i // 50) for i in range(size)]
    civ = create_civilization(0, (0, 0), stage=stage, territories=territories)
    assert expansion_cost(civ) == expected


def test_cannot_expand_without_resources():
    civ = create_civilization(0, (5, 5), resource_level=52.0, expansion_rate=1.0)
    assert not should_expand(civ, random.Random(0))


def test_zero_rate_never_expands():
    civ = create_civilization(0, (5, 5), resource_level=1000.0, expansion_rate=0.0)
    index, source_hash, sources = _setup([civ])
    new = update_expansion(civ, index, source_hash, sources, random.Random(0))
    assert new == civ


def test_random_expansion_claims_a_free_neighbour():
    civ = create_civilization(0, (10, 10), resource_level=1000.0, expansion_rate=1.0)
    index, source_hash, sources = _setup([civ])
    new = update_expansion(civ, index, source_hash, sources, random.Random(3))
    assert new.size == 2
    target = new.territories[-1]
    assert max(abs(target[0] - 10), abs(target[1] - 10)) == 1
    assert new.territory_resources[target] == 5000.0
    # cost at the new size: floor(50 * log10(12))
    assert new.resource_level == pytest.approx(1000.0 - 53)
    assert civ.size == 1


def test_expansion_heads_for_undiscovered_source():
    civ = create_civilization(0, (10, 10), resource_level=1000.0, expansion_rate=1.0)
    src = ResourceSource((15, 10), ResourceSourceType.MINERALS, richness=3, radius=1)
    index, source_hash, sources = _setup([civ], sources=[src])
    new = update_expansion(civ, index, source_hash, sources, random.Random(0))
    assert new.territories[-1] == (11, 10)


def test_discovered_sources_are_not_targets():
    civ = create_civilization(0, (10, 10), resource_level=1000.0, expansion_rate=1.0,
                              discovered_sources=[0])
    src = ResourceSource((15, 10), ResourceSourceType.MINERALS, richness=3, radius=1,
                         discovered=True)
    index, source_hash, sources = _setup([civ], sources=[src])
    rng = random.Random(0)
    targets = set()
    for _ in range(30):
        targets.add(update_expansion(civ, index, source_hash, sources, rng).territories[-1])
    assert len(targets) > 1


def test_no_candidates_means_no_expansion():
    civ = create_civilization(0, (0, 0), resource_level=1000.0, expansion_rate=1.0)
    index, source_hash, sources = _setup([civ], size=1)
    new = update_expansion(civ, index, source_hash, sources, random.Random(0))
    assert new.size == 1
    assert new.resource_level == 1000.0


def test_occupied_cells_are_skipped():
    civ = create_civilization(0, (0, 0), resource_level=1000.0, expansion_rate=1.0)
    others = [create_civilization(i + 1, pos)
              for i, pos in enumerate([(0, 1), (1, 1)])]
    index, source_hash, sources = _setup([civ] + others, size=5)
    new = update_expansion(civ, index, source_hash, sources, random.Random(0))
    assert new.territories[-1] == (1, 0)


def test_find_nearby_resource_sources_respects_distance():
    civ = create_civilization(0, (0, 0))
    srcs = [
        ResourceSource((3, 4), ResourceSourceType.OIL, 5, 1),
        ResourceSource((10, 10), ResourceSourceType.OIL, 5, 1),
    ]
    _, source_hash, sources = _setup([civ], sources=srcs)
    found = find_nearby_resource_sources(civ, source_hash, sources, random.Random(0),
                                         max_distance=5.0)
    assert found == [0]
