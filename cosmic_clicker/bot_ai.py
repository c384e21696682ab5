"""Mining bot AI: targeting, movement and the per-bot state machine.

Bots hold only the ID of the object they target. Every update looks the ID
up again in the live object list and checks it before use, because lasers,
other bots or the screen edge can destroy the object between two ticks.
"""
from cosmic_clicker.config import Config
from cosmic_clicker.object_physics import (
    calculate_distance,
    find_object,
    is_live,
    normalize_vector,
)

IDLE = 'idle'
MOVING_TO_TARGET = 'moving_to_target'
MINING = 'mining'
RETURNING = 'returning'
DEPOSITING = 'depositing'

BOT_STATES = (IDLE, MOVING_TO_TARGET, MINING, RETURNING, DEPOSITING)

# States in which a bot holds a claim on its target
CLAIMING_STATES = (MOVING_TO_TARGET, MINING)

class BotContext:
    """Everything a bot may read or touch during one tick.

    extract_unit(obj) moves one resource unit out of obj and returns its
    type (or None). deposit(bot) credits the bot's cargo to the ship.
    """

    def __init__(self, objects, bot_bay, ship_position, extract_unit, deposit,
                 targeted_ids=None, reach_distance=None):
        self.objects = objects
        self.mining_speed = bot_bay['mining_speed']
        self.range = bot_bay['range']
        self.bot_capacity = bot_bay['bot_capacity']
        self.bot_speed = bot_bay['bot_speed']
        self.ship_position = ship_position
        self.extract_unit = extract_unit
        self.deposit = deposit
        self.targeted_ids = set(targeted_ids or ())
        self.reach_distance = Config.BOT_REACH_DISTANCE if reach_distance is None else reach_distance

def format_bot_id(sequence):
    """Bot IDs sort lexicographically in creation order."""
    return f"bot_{sequence:04d}"

def create_bot(bot_id, ship_position=None):
    """Create a new idle bot parked at the ship."""
    ship_position = ship_position or Config.SHIP_POSITION
    return {
        'id': bot_id,
        'position': {'x': float(ship_position['x']), 'y': float(ship_position['y'])},
        'velocity': {'x': 0.0, 'y': 0.0},
        'state': IDLE,
        'target_object_id': None,
        'cargo_amount': 0,
        'cargo': {},
        'mining_progress': 0.0,
    }

def get_targeted_object_ids(bots):
    """IDs currently claimed by bots heading to or mining an object."""
    return {
        bot['target_object_id'] for bot in bots
        if bot['target_object_id'] and bot['state'] in CLAIMING_STATES
    }

def has_resources(obj):
    """True if any resource drop still has units left."""
    return any(drop['amount'] > 0 for drop in obj.get('resource_drops', []))

def is_minable(obj):
    """True if a bot may work this object."""
    return is_live(obj) and has_resources(obj)

def in_range(obj, ship_position, bot_range):
    """True if the object lies within bot range of the ship."""
    return calculate_distance(ship_position, obj['position']) <= bot_range

def select_target_object(bot, context):
    """Nearest minable, unclaimed object within range (ties: lowest ID)."""
    best = None
    best_key = None

    for obj in context.objects:
        if not is_minable(obj):
            continue
        if obj['id'] in context.targeted_ids:
            continue
        if not in_range(obj, context.ship_position, context.range):
            continue

        key = (calculate_distance(bot['position'], obj['position']), obj['id'])
        if best_key is None or key < best_key:
            best = obj
            best_key = key

    return best['id'] if best else None

def move_bot_toward(bot, target_position, delta_time, speed, reach_distance=None):
    """Move at constant speed toward a point without overshooting it.

    Returns True once the bot is within reach of the point.
    """
    if reach_distance is None:
        reach_distance = Config.BOT_REACH_DISTANCE
    direction = {
        'x': target_position['x'] - bot['position']['x'],
        'y': target_position['y'] - bot['position']['y'],
    }
    distance = calculate_distance(bot['position'], target_position)
    step = speed * delta_time
    unit = normalize_vector(direction)

    if distance <= step:
        bot['position'] = {'x': target_position['x'], 'y': target_position['y']}
    else:
        bot['position'] = {
            'x': bot['position']['x'] + unit['x'] * step,
            'y': bot['position']['y'] + unit['y'] * step,
        }
    bot['velocity'] = {'x': unit['x'] * speed, 'y': unit['y'] * speed}

    return calculate_distance(bot['position'], target_position) <= reach_distance

def _release_target(bot, context):
    """Drop the bot's claim on its target."""
    context.targeted_ids.discard(bot['target_object_id'])
    bot['target_object_id'] = None
    bot['mining_progress'] = 0.0

def _go_idle(bot, context):
    _release_target(bot, context)
    bot['state'] = IDLE
    bot['velocity'] = {'x': 0.0, 'y': 0.0}

def _start_return(bot, context):
    _release_target(bot, context)
    bot['state'] = RETURNING

def _update_idle(bot, context, delta_time):
    if bot['target_object_id'] is not None:
        # Idle bots never keep a stale claim
        bot['target_object_id'] = None

    target_id = select_target_object(bot, context)
    if target_id is None:
        return

    bot['state'] = MOVING_TO_TARGET
    bot['target_object_id'] = target_id
    context.targeted_ids.add(target_id)

def _update_moving(bot, context, delta_time):
    target = find_object(context.objects, bot['target_object_id'])

    # Re-evaluate instead of chasing a stale reference
    if (target is None or not is_minable(target)
            or not in_range(target, context.ship_position, context.range)):
        _go_idle(bot, context)
        return

    if move_bot_toward(bot, target['position'], delta_time, context.bot_speed,
                       context.reach_distance):
        bot['state'] = MINING
        bot['mining_progress'] = 0.0
        bot['velocity'] = {'x': 0.0, 'y': 0.0}

def _update_mining(bot, context, delta_time):
    if bot['cargo_amount'] >= context.bot_capacity:
        _start_return(bot, context)
        return

    target = find_object(context.objects, bot['target_object_id'])
    if target is None or not is_minable(target):
        if bot['cargo_amount'] > 0:
            _start_return(bot, context)
        else:
            _go_idle(bot, context)
        return

    bot['mining_progress'] += context.mining_speed * delta_time / target['mining_yield']
    if bot['mining_progress'] < 1.0:
        return

    resource_type = context.extract_unit(target)
    bot['mining_progress'] = 0.0
    if resource_type is not None:
        bot['cargo'][resource_type] = bot['cargo'].get(resource_type, 0) + 1
        bot['cargo_amount'] += 1

    if bot['cargo_amount'] >= context.bot_capacity or not is_minable(target):
        _start_return(bot, context)

def _update_returning(bot, context, delta_time):
    if move_bot_toward(bot, context.ship_position, delta_time, context.bot_speed,
                       context.reach_distance):
        bot['state'] = DEPOSITING
        bot['velocity'] = {'x': 0.0, 'y': 0.0}

def _update_depositing(bot, context, delta_time):
    # Whole cargo goes over in one call
    context.deposit(bot)
    bot['cargo'] = {}
    bot['cargo_amount'] = 0
    _go_idle(bot, context)

_STATE_HANDLERS = {
    IDLE: _update_idle,
    MOVING_TO_TARGET: _update_moving,
    MINING: _update_mining,
    RETURNING: _update_returning,
    DEPOSITING: _update_depositing,
}

def update_bot(bot, context, delta_time):
    """Advance one bot by one tick, mutating it in place."""
    handler = _STATE_HANDLERS.get(bot['state'])
    if handler is None:
        raise ValueError(f"Unknown bot state: {bot['state']}")
    handler(bot, context, delta_time)
