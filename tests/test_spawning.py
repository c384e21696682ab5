"""Tests for spawn table selection and object creation."""
import logging
import math
import random

import pytest

from cosmic_clicker.config import Config
from cosmic_clicker.game_data_loader import GameDataLoader
from cosmic_clicker.spawning import (
    create_object_from_template,
    format_object_id,
    generate_resource_drops,
    generate_spawn_position,
    select_spawn_template,
    spawn_interval,
    spawn_object,
)

class FixedRandom:
    """rng stub that always draws the same value."""

    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value

def test_object_ids_sort_in_creation_order():
    assert format_object_id(42) == 'obj_000042'
    assert format_object_id(99) < format_object_id(100)

def test_weighted_selection_converges():
    entries = [
        {'template_id': 'rare', 'weight': 1},
        {'template_id': 'common', 'weight': 3},
    ]
    rng = random.Random(42)
    draws = 20000

    rare = sum(1 for _ in range(draws) if select_spawn_template(entries, rng) == 'rare')

    assert rare / draws == pytest.approx(0.25, abs=0.02)

def test_selection_uses_cumulative_threshold():
    entries = [
        {'template_id': 'a', 'weight': 1},
        {'template_id': 'b', 'weight': 3},
    ]
    # draw == first cumulative weight still selects the first entry
    assert select_spawn_template(entries, FixedRandom(0.25)) == 'a'
    assert select_spawn_template(entries, FixedRandom(0.26)) == 'b'
    assert select_spawn_template(entries, FixedRandom(0.0)) == 'a'

def test_zero_weight_entries_are_never_picked():
    entries = [
        {'template_id': 'never', 'weight': 0},
        {'template_id': 'always', 'weight': 2},
    ]
    assert select_spawn_template(entries, FixedRandom(0.0)) == 'always'

@pytest.mark.parametrize('entries', [
    [],
    [{'template_id': 'a', 'weight': 0}],
])
def test_empty_tables_select_nothing(entries):
    assert select_spawn_template(entries, random.Random(1)) is None

def test_spawn_interval_by_ship_speed():
    assert spawn_interval(1.0, 1.0, 'normal') == pytest.approx(1.0)
    assert spawn_interval(1.0, 1.0, 'stop') == pytest.approx(1.0)
    assert spawn_interval(1.0, 1.0, 'slow') == pytest.approx(1 / 0.7)
    assert spawn_interval(1.0, 2.0, 'boost') == pytest.approx(1 / 3.2)

def test_spawn_interval_without_rate_is_infinite():
    assert math.isinf(spawn_interval(0.0, 1.0, 'normal'))

def test_spawn_position_is_off_screen_and_inside_width():
    rng = random.Random(7)
    for _ in range(100):
        position = generate_spawn_position(rng, play_width=800, object_width=40)
        assert 20 <= position['x'] <= 780
        assert position['y'] < 0

def test_resource_drops_respect_loot_table():
    loot_table = [
        {'resource': 'stone', 'min_amount': 5, 'max_amount': 10, 'probability': 1.0},
        {'resource': 'gold', 'min_amount': 1, 'max_amount': 1, 'probability': 0.0},
    ]
    drops = generate_resource_drops(loot_table, random.Random(3))

    assert [drop['type'] for drop in drops] == ['stone']
    assert 5 <= drops[0]['amount'] <= 10

def test_object_hp_scales_with_zone(data_loader):
    template = data_loader.get_object_template('asteroid_stone_small')
    position = {'x': 100.0, 'y': -100.0}

    zone_one = create_object_from_template(template, 'obj_000001', position, 1, random.Random(1))
    zone_two = create_object_from_template(template, 'obj_000002', position, 2, random.Random(1))

    assert zone_one['health'] == template['hp']
    assert zone_two['health'] == int(template['hp'] * 1.3)
    assert zone_two['max_health'] == zone_two['health']
    assert zone_one['velocity']['y'] == pytest.approx(Config.OBJECT_FALL_SPEED * 1.1)
    assert zone_two['velocity']['y'] == pytest.approx(Config.OBJECT_FALL_SPEED * 1.2)
    assert zone_one['destroyed'] is False

def test_special_drops_are_copied_from_template(data_loader):
    template = data_loader.get_object_template('debris_container')
    obj = create_object_from_template(template, 'obj_000001', {'x': 0.0, 'y': 0.0}, 1, random.Random(1))

    assert obj['special_drops'] == {'credits': 25}
    assert obj['special_drops'] is not template['special_drops']

def test_spawn_object_uses_zone_table(data_loader):
    obj = spawn_object(data_loader, 1, 'obj_000001', random.Random(5), created_at=2.5)

    template_ids = {entry['template_id'] for entry in data_loader.get_spawn_table(1)['entries']}
    assert obj['id'] == 'obj_000001'
    assert obj['template_id'] in template_ids
    assert obj['created_at'] == 2.5

def test_missing_spawn_table_logs_and_spawns_nothing(tmp_path, caplog):
    loader = GameDataLoader(tmp_path)

    with caplog.at_level(logging.WARNING, logger='cosmic_clicker.spawning'):
        obj = spawn_object(loader, 1, 'obj_000001', random.Random(5))

    assert obj is None
    assert 'No spawn table found for zone 1' in caplog.text
