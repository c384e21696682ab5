"""Tests for module upgrade purchases and catalog checks."""
import copy

import pytest

from cosmic_clicker.game_state import default_game_state
from cosmic_clicker.upgrades import (
    ALREADY_OWNED,
    INSUFFICIENT_CREDITS,
    NOT_FOUND,
    PREREQUISITES_UNMET,
    apply_purchase,
    can_purchase,
    check_catalog_consistency,
    get_rejection_reason,
    get_upgrade_status,
    purchase,
)

@pytest.fixture
def state(data_loader):
    return default_game_state(data_loader, last_save_time=0)

def test_purchase_charges_exact_cost(state, data_loader):
    state['credits'] = 1234
    upgrade = data_loader.get_upgrade_by_id('laser_range_1')

    result = purchase(state, 'laser_range_1', data_loader)

    assert result.success is True
    assert result.reason is None
    assert state['credits'] == 1234 - upgrade['cost']
    assert state['modules']['laser']['range'] == 150
    assert state['modules']['laser']['purchased_upgrades'] == ['laser_range_1']

def test_second_purchase_is_already_owned(state, data_loader):
    state['credits'] = 10000
    purchase(state, 'laser_range_1', data_loader)
    credits_after_first = state['credits']

    result = purchase(state, 'laser_range_1', data_loader)

    assert result.success is False
    assert result.reason == ALREADY_OWNED
    assert state['credits'] == credits_after_first
    assert state['modules']['laser']['purchased_upgrades'] == ['laser_range_1']

def test_unknown_upgrade(state, data_loader):
    assert purchase(state, 'laser_death_ray', data_loader).reason == NOT_FOUND

def test_prerequisites_are_required(state, data_loader):
    state['credits'] = 10 ** 6
    result = purchase(state, 'bot_count_1', data_loader)

    assert result.reason == PREREQUISITES_UNMET
    assert state['credits'] == 10 ** 6

def test_insufficient_credits(state, data_loader):
    state['credits'] = 99
    result = purchase(state, 'laser_damage_1', data_loader)

    assert result.reason == INSUFFICIENT_CREDITS
    assert state['credits'] == 99
    assert state['modules']['laser']['damage'] == 1

def test_bot_unlock_opens_bot_bay(state, data_loader):
    state['credits'] = 500
    purchase(state, 'bot_unlock', data_loader)

    bot_bay = state['modules']['bot_bay']
    assert bot_bay['unlocked'] is True
    assert bot_bay['tier'] == 1
    assert bot_bay['bot_count'] == 1
    assert state['statistics']['upgrades_purchased'] == 1

def test_apply_purchase_replaces_stats_and_raises_tier(state):
    upgrade = {
        'id': 'engine_custom',
        'module': 'engine',
        'tier': 3,
        'cost': 0,
        'prerequisites': [],
        'stat_changes': {'unlocked_speeds': ['stop', 'slow', 'normal', 'fast', 'boost']},
    }
    apply_purchase(state, upgrade)

    engine = state['modules']['engine']
    assert engine['unlocked_speeds'] == ['stop', 'slow', 'normal', 'fast', 'boost']
    assert engine['unlocked_speeds'] is not upgrade['stat_changes']['unlocked_speeds']
    assert engine['tier'] == 3

def test_can_purchase_and_status(state, data_loader):
    upgrade = data_loader.get_upgrade_by_id('bot_count_1')
    bot_bay = state['modules']['bot_bay']

    status = get_upgrade_status(upgrade, bot_bay, 5000)
    assert status == {
        'is_purchased': False,
        'is_affordable': True,
        'is_locked': True,
        'can_purchase': False,
    }
    assert can_purchase(upgrade, bot_bay, 5000) is False

    bot_bay['purchased_upgrades'].append('bot_unlock')
    assert can_purchase(upgrade, bot_bay, 5000) is True
    assert can_purchase(upgrade, bot_bay, 1999) is False

@pytest.mark.parametrize('credits', [0, 150, 5000, 10 ** 9])
def test_purchase_agrees_with_can_purchase(state, data_loader, credits):
    state['modules']['bot_bay']['purchased_upgrades'].append('bot_unlock')

    for upgrade in data_loader.get_upgrades():
        trial = copy.deepcopy(state)
        trial['credits'] = credits
        module = trial['modules'][upgrade['module']]
        allowed = can_purchase(upgrade, module, credits)
        reason = get_rejection_reason(upgrade, module, credits)

        result = purchase(trial, upgrade['id'], data_loader)

        assert result.success is allowed
        assert result.reason == reason
        assert (reason is None) is allowed

def test_shipped_catalog_is_consistent(data_loader):
    errors = check_catalog_consistency(
        data_loader.get_upgrades(),
        data_loader.get_initial_modules(),
        data_loader.get_lower_is_better_stats(),
    )
    assert errors == []

def _upgrade(upgrade_id, module, stat_changes, prerequisites=()):
    return {
        'id': upgrade_id,
        'module': module,
        'tier': 1,
        'cost': 10,
        'prerequisites': list(prerequisites),
        'stat_changes': stat_changes,
    }

INITIAL_MODULES = {
    'laser': {'damage': 1, 'cooldown': 0.5, 'auto_target': False},
    'engine': {'unlocked_speeds': ['stop', 'normal']},
}

def test_catalog_check_flags_unknown_prerequisite():
    errors = check_catalog_consistency([_upgrade('a', 'laser', {'damage': 2}, ['ghost'])], INITIAL_MODULES)
    assert any('unknown upgrade ghost' in error for error in errors)

def test_catalog_check_flags_cross_module_prerequisite():
    upgrades = [
        _upgrade('a', 'engine', {'unlocked_speeds': ['stop', 'normal', 'fast']}),
        _upgrade('b', 'laser', {'damage': 2}, ['a']),
    ]
    errors = check_catalog_consistency(upgrades, INITIAL_MODULES)
    assert any('another module' in error for error in errors)

def test_catalog_check_flags_cycles():
    upgrades = [
        _upgrade('a', 'laser', {'damage': 2}, ['b']),
        _upgrade('b', 'laser', {'damage': 3}, ['a']),
    ]
    errors = check_catalog_consistency(upgrades, INITIAL_MODULES)
    assert any('a is part of a prerequisite cycle' in error for error in errors)
    assert any('b is part of a prerequisite cycle' in error for error in errors)

def test_catalog_check_flags_unknown_stat_and_module():
    upgrades = [
        _upgrade('a', 'laser', {'wattage': 9}),
        _upgrade('b', 'teleporter', {'range': 9}),
    ]
    errors = check_catalog_consistency(upgrades, INITIAL_MODULES)
    assert any('unknown stat laser.wattage' in error for error in errors)
    assert any('unknown module teleporter' in error for error in errors)

def test_catalog_check_flags_worse_stats():
    upgrades = [
        _upgrade('dmg1', 'laser', {'damage': 5}),
        _upgrade('dmg2', 'laser', {'damage': 3}, ['dmg1']),
        _upgrade('cd1', 'laser', {'cooldown': 0.8}),
        _upgrade('auto', 'laser', {'auto_target': True}),
        _upgrade('auto_off', 'laser', {'auto_target': False}, ['auto']),
        _upgrade('speeds', 'engine', {'unlocked_speeds': ['stop']}),
    ]
    errors = check_catalog_consistency(upgrades, INITIAL_MODULES, {'cooldown'})

    assert any('dmg2 makes damage worse' in error for error in errors)
    assert any('cd1 makes cooldown worse' in error for error in errors)
    assert any('auto_off makes auto_target worse' in error for error in errors)
    assert any('speeds makes unlocked_speeds worse' in error for error in errors)
    assert not any(error.startswith('Upgrade dmg1 ') for error in errors)
