import itertools
import logging
import random

import pytest

from grid import distance
from resources import (
    ResourceSource, ResourceSourceType, discover_resource_sources,
    generate_resource_sources, transfer_discoveries,
)
from sim.civilization import create_civilization
from sim.spatial import TerritoryIndex


def _index(civs, size=20):
    index = TerritoryIndex(size)
    index.rebuild(civs)
    return index


def test_generated_sources_keep_their_distance():
    sources = generate_resource_sources(20, 50, random.Random(7))
    assert len(sources) == 20
    for a, b in itertools.combinations(sources, 2):
        assert distance(a.position, b.position) >= 5.0
    for s in sources:
        assert 0 <= s.position[0] < 50 and 0 <= s.position[1] < 50
        assert 1 <= s.richness <= 10
        assert 1 <= s.radius <= 3
        assert not s.discovered


def test_generation_is_deterministic():
    a = generate_resource_sources(10, 30, random.Random(3))
    b = generate_resource_sources(10, 30, random.Random(3))
    assert a == b


def test_unplaceable_sources_are_skipped(caplog):
    with caplog.at_level(logging.WARNING, logger="resources"):
        sources = generate_resource_sources(3, 1, random.Random(0))
    assert [s.position for s in sources] == [(0, 0)]
    assert caplog.text.count("Could not place resource source") == 2


def test_negative_count_rejected():
    with pytest.raises(ValueError):
        generate_resource_sources(-1, 10, random.Random(0))


def test_discovery_within_radius():
    civ = create_civilization(0, (10, 10), territory_resources={(10, 10): 2000.0})
    near = ResourceSource((12, 10), ResourceSourceType.OIL, richness=4, radius=2)
    far = ResourceSource((15, 10), ResourceSourceType.OIL, richness=4, radius=2)
    sources = [near, far]
    found = discover_resource_sources([civ], sources, _index([civ]))
    assert found == [(0, 0)]
    assert near.discovered and not far.discovered
    assert civ.discovered_sources == [0]
    assert civ.territory_resources == {(10, 10): 2000.0}


def test_discovery_leaves_source_cell_fertility_alone():
    civ = create_civilization(0, (10, 10), territories=[(10, 10), (11, 10)],
                              territory_resources={(10, 10): 2000.0, (11, 10): 1500.0})
    src = ResourceSource((11, 10), ResourceSourceType.FOREST, richness=1, radius=1)
    discover_resource_sources([civ], [src], _index([civ]))
    assert civ.discovered_sources == [0]
    assert civ.territory_resources == {(10, 10): 2000.0, (11, 10): 1500.0}


def test_two_civilizations_can_discover_the_same_source():
    a = create_civilization(0, (10, 10))
    b = create_civilization(1, (12, 10))
    src = ResourceSource((11, 10), ResourceSourceType.MINERALS, richness=2, radius=1)
    found = discover_resource_sources([a, b], [src], _index([a, b]))
    assert found == [(0, 0), (1, 0)]
    assert a.discovered_sources == [0] and b.discovered_sources == [0]


def test_discovered_sources_stay_discovered():
    civ = create_civilization(0, (10, 10))
    src = ResourceSource((11, 10), ResourceSourceType.MINERALS, richness=2, radius=1)
    discover_resource_sources([civ], [src], _index([civ]))
    assert discover_resource_sources([], [src], _index([])) == []
    assert src.discovered


def test_orphaned_discovery_moves_to_neighbours():
    src = ResourceSource((11, 10), ResourceSourceType.FERTILE_LAND, richness=5, radius=2,
                         discovered=True)
    heir = create_civilization(1, (13, 11))  # within 3.0 of the source
    stranger = create_civilization(2, (15, 10))
    moved = transfer_discoveries([heir, stranger], [src], _index([heir, stranger]))
    assert moved == [(1, 0)]
    assert heir.discovered_sources == [0]
    assert stranger.discovered_sources == []


def test_known_discovery_is_not_transferred():
    src = ResourceSource((11, 10), ResourceSourceType.FERTILE_LAND, richness=5, radius=2,
                         discovered=True)
    owner = create_civilization(0, (19, 19), discovered_sources=[0])
    neighbour = create_civilization(1, (12, 10))
    civs = [owner, neighbour]
    assert transfer_discoveries(civs, [src], _index(civs)) == []
    assert neighbour.discovered_sources == []
