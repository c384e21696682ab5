"""Tests for the game data catalog."""
import json
import math

from cosmic_clicker.game_data_loader import MODULE_KINDS, GameDataLoader

def test_shipped_catalog_validates(data_loader):
    assert data_loader.validate_data() == []

def test_every_zone_has_a_spawn_table(data_loader):
    for zone in data_loader.load_zones():
        assert data_loader.get_spawn_table(zone['number'])['entries']

def test_last_zone_is_open_ended(data_loader):
    last_zone = max(zone['number'] for zone in data_loader.load_zones())
    assert math.isinf(data_loader.get_fuel_required(last_zone))
    assert data_loader.get_fuel_required(1) == 10000

def test_initial_modules_are_fresh_copies(data_loader):
    first = data_loader.get_initial_modules()
    first['converter']['unlocked_tiers'].append(4)

    second = data_loader.get_initial_modules()
    assert second['converter']['unlocked_tiers'] == [1]
    assert set(second) == set(MODULE_KINDS)
    assert all(module['purchased_upgrades'] == [] for module in second.values())

def test_upgrades_for_module_sorted_by_cost(data_loader):
    costs = [upgrade['cost'] for upgrade in data_loader.get_upgrades_for_module('laser')]
    assert costs == sorted(costs)
    assert data_loader.get_upgrade_by_id('no_such_upgrade') is None

def test_validation_reports_broken_catalog(tmp_path, data_loader):
    for name in ('zones.json', 'object_templates.json', 'resources.json', 'modules.json', 'achievements.json'):
        (tmp_path / name).write_text((data_loader.data_dir / name).read_text())

    spawn_tables = {'spawn_tables': [
        {'zone': 1, 'spawn_rate': 1.0, 'entries': [{'template_id': 'ufo', 'weight': -1}]},
    ]}
    (tmp_path / 'spawn_tables.json').write_text(json.dumps(spawn_tables))

    errors = GameDataLoader(tmp_path).validate_data()

    assert 'Zone 1 spawns unknown template ufo' in errors
    assert 'Zone 1 has negative weight for ufo' in errors
    assert 'No spawn table for zone 2' in errors

def test_validation_reports_broken_achievements(tmp_path, data_loader):
    for path in data_loader.data_dir.glob('*.json'):
        (tmp_path / path.name).write_text(path.read_text())

    achievements = {'achievements': [
        {'id': 'first_strike', 'condition': 'objects_destroyed', 'threshold': 1},
        {'id': 'first_strike', 'condition': 'coffee_cups', 'threshold': 0},
    ]}
    (tmp_path / 'achievements.json').write_text(json.dumps(achievements))

    errors = GameDataLoader(tmp_path).validate_data()

    assert errors == [
        'Duplicate achievement id first_strike',
        'Achievement first_strike has unknown condition coffee_cups',
        'Achievement first_strike needs a positive threshold',
    ]

def test_achievement_lookup(data_loader):
    assert data_loader.get_achievement_by_id('first_strike')['threshold'] == 1
    assert data_loader.get_achievement_by_id('no_such_achievement') is None
