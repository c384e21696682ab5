"""Achievements: one-way threshold unlocks over the game's counters."""
import logging

logger = logging.getLogger(__name__)

# Counters kept in state['statistics']
STATISTIC_CONDITIONS = (
    'objects_destroyed',
    'resources_mined',
    'laser_shots',
    'upgrades_purchased',
    'total_prestiges',
    'total_crystals_earned',
)

# Values kept at the top level of the state
STATE_CONDITIONS = ('total_fuel_earned', 'current_zone')

ACHIEVEMENT_CONDITIONS = STATISTIC_CONDITIONS + STATE_CONDITIONS

def get_condition_value(state, condition):
    """Current value of an achievement condition, or None if unknown."""
    if condition in STATISTIC_CONDITIONS:
        return state['statistics'].get(condition, 0)
    if condition in STATE_CONDITIONS:
        return state.get(condition, 0)
    return None

def is_achievement_unlocked(achievement_id, state):
    return achievement_id in state['achievements']

def is_condition_met(achievement, state):
    value = get_condition_value(state, achievement['condition'])
    return value is not None and value >= achievement['threshold']

def get_achievement_progress(achievement, state):
    """Progress toward an achievement as a fraction in [0, 1]."""
    if is_achievement_unlocked(achievement['id'], state):
        return 1.0
    value = get_condition_value(state, achievement['condition']) or 0
    return min(1.0, max(0.0, value / achievement['threshold']))

def check_achievements(state, achievements):
    """Unlock every achievement whose threshold has been reached.

    Returns the newly unlocked IDs in catalog order. Unlocks are never
    revoked, even when a prestige reset lowers the underlying counter.
    """
    unlocked = []
    for achievement in achievements:
        if is_achievement_unlocked(achievement['id'], state):
            continue
        if is_condition_met(achievement, state):
            state['achievements'].append(achievement['id'])
            unlocked.append(achievement['id'])

    if unlocked:
        logger.info(f"Achievements unlocked: {unlocked}")
    return unlocked
