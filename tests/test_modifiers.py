import json
import logging

from engine import SimulationEngine
from modifiers import MODIFIERS, load_modifiers


def test_missing_balance_file_keeps_defaults(tmp_path):
    assert load_modifiers(str(tmp_path / "nope.json")) is MODIFIERS


def test_balance_file_overrides_known_fields(tmp_path, caplog):
    path = tmp_path / "balance.json"
    path.write_text(json.dumps({
        "world_size": 12.0,
        "depletion_rate": 0.05,
        "no_such_field": 1,
    }))
    with caplog.at_level(logging.WARNING, logger="modifiers"):
        mods = load_modifiers(str(path))
    assert mods.world_size == 12 and isinstance(mods.world_size, int)
    assert mods.depletion_rate == 0.05
    assert mods.initial_population == MODIFIERS.initial_population
    assert "no_such_field" in caplog.text
    assert MODIFIERS.world_size == 50


def test_engine_uses_given_modifiers(tmp_path):
    path = tmp_path / "balance.json"
    path.write_text(json.dumps({"world_size": 8, "initial_population": 2500}))
    eng = SimulationEngine(modifiers=load_modifiers(str(path)), seed=1)
    eng.initialize(2, 0)
    assert eng.world.size == 8
    assert all(c.population == 2500 for c in eng.civilizations)
