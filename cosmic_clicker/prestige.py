"""Prestige: trade a run's lifetime fuel for nebula crystals and start over."""
import logging
import math

from cosmic_clicker.config import Config
from cosmic_clicker.game_state import default_game_state, default_statistics

logger = logging.getLogger(__name__)

def calculate_prestige_reward(total_fuel_earned):
    """Crystals a reset would pay out right now (0 below the minimum)."""
    if total_fuel_earned < Config.MIN_PRESTIGE_FUEL:
        return 0
    return int(math.floor(math.sqrt(total_fuel_earned / Config.PRESTIGE_DIVISOR)))

def get_production_multiplier(state):
    """Fuel production bonus from held crystals and unlocked achievements."""
    crystals = state.get('nebula_crystals', 0)
    achievements = len(state.get('achievements', []))
    return 1 + crystals * Config.NEBULA_CRYSTAL_BONUS + achievements * Config.ACHIEVEMENT_BONUS

def apply_prestige(state, data_loader):
    """Reset the run in place.

    Crystals, achievements and the prestige counters carry over; everything
    else starts fresh. ID counters keep running so IDs are never reused.
    Callers must have checked calculate_prestige_reward() first. Returns the
    crystals earned.
    """
    crystals = calculate_prestige_reward(state['total_fuel_earned'])

    statistics = default_statistics()
    statistics['total_prestiges'] = state['statistics'].get('total_prestiges', 0) + 1
    statistics['total_crystals_earned'] = state['statistics'].get('total_crystals_earned', 0) + crystals

    fresh = default_game_state(data_loader, last_save_time=state['last_save_time'])
    fresh.update({
        'nebula_crystals': state.get('nebula_crystals', 0) + crystals,
        'achievements': list(state.get('achievements', [])),
        'statistics': statistics,
        'next_bot_id': state['next_bot_id'],
        'next_object_id': state['next_object_id'],
        'sim_time': state.get('sim_time', 0.0),
    })

    state.clear()
    state.update(fresh)
    return crystals
