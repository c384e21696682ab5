"""Default game state aggregate.

The whole simulation lives in one JSON-compatible dict so that saves are a
plain dump of it and forward migration is a shallow merge against these
defaults. New top-level fields added here are picked up by old saves
automatically. New keys inside nested records (e.g. a new module stat) are
not; GameEngine fills those in when it takes over a state.
"""
import time

from cosmic_clicker.config import Config
from cosmic_clicker.game_data_loader import get_game_data_loader

def now_ms():
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)

def default_statistics():
    """Zeroed statistics counters."""
    return {
        'total_play_time': 0.0,
        'current_session_time': 0.0,
        'objects_spawned': 0,
        'objects_destroyed': 0,
        'resources_mined': 0,
        'resources_deposited': 0,
        'resources_lost': 0,
        'laser_shots': 0,
        'upgrades_purchased': 0,
        'fuel_converted': 0.0,
        'total_prestiges': 0,
        'total_crystals_earned': 0,
    }

def default_game_state(data_loader=None, last_save_time=None):
    """Build a fresh game state."""
    data_loader = data_loader or get_game_data_loader()
    resources = {resource_id: 0 for resource_id in data_loader.load_resources()}

    return {
        'version': Config.VERSION,
        'last_save_time': last_save_time if last_save_time is not None else now_ms(),

        # Economy
        'credits': Config.INITIAL_CREDITS,
        'fuel': float(Config.INITIAL_FUEL),
        'total_fuel_earned': 0.0,
        'resources': resources,

        # Progression
        'current_zone': Config.INITIAL_ZONE,
        'zone_progress': 0.0,
        'ship_speed': Config.INITIAL_SHIP_SPEED,

        # Ship modules: {kind: {stat: value, 'tier', 'unlocked', 'purchased_upgrades'}}
        'modules': data_loader.get_initial_modules(),

        # Live world
        'bots': [],
        'objects': [],
        'spawn_timer': 0.0,
        'next_bot_id': 1,
        'next_object_id': 1,
        'conversion_progress': 0.0,
        'laser_cooldown': 0.0,
        'sim_time': 0.0,  # seconds simulated since the session started

        # Kept across prestige resets
        'nebula_crystals': 0,
        'achievements': [],

        'statistics': default_statistics(),
    }
