"""Core game engine for simulation."""
import logging
import math
import random

from cosmic_clicker.achievements import check_achievements
from cosmic_clicker.bot_ai import (
    CLAIMING_STATES,
    IDLE,
    RETURNING,
    BotContext,
    create_bot,
    format_bot_id,
    get_targeted_object_ids,
    has_resources,
    update_bot,
)
from cosmic_clicker.config import Config
from cosmic_clicker.game_data_loader import get_game_data_loader
from cosmic_clicker.game_state import default_game_state, default_statistics
from cosmic_clicker.object_physics import (
    check_laser_hit,
    check_out_of_bounds,
    update_object_position,
)
from cosmic_clicker.offline_progress import get_max_offline_seconds, get_offline_progress_info
from cosmic_clicker.prestige import apply_prestige, calculate_prestige_reward, get_production_multiplier
from cosmic_clicker.resource_conversion import (
    calculate_conversion_amount,
    calculate_convertible_amount,
    calculate_max_cargo_addition,
    calculate_resource_value,
    convert_resource_to_fuel,
    is_resource_tier_unlocked,
)
from cosmic_clicker.spawning import format_object_id, spawn_interval, spawn_object
from cosmic_clicker.upgrades import purchase

logger = logging.getLogger(__name__)

# Ways an object can leave the world
DESTROYED_BY_LASER = 'laser'
DESTROYED_EXHAUSTED = 'exhausted'
DESTROYED_OUT_OF_BOUNDS = 'out_of_bounds'

def is_valid_delta_time(delta_time):
    """Only finite, strictly positive numbers advance the simulation."""
    if isinstance(delta_time, bool) or not isinstance(delta_time, (int, float)):
        return False
    return math.isfinite(delta_time) and delta_time > 0

class GameEngine:
    """Core game simulation engine.

    The engine owns one game state dict and is the only thing that mutates
    it. Time only moves through tick(); player actions are applied between
    ticks.
    """

    def __init__(self, session_id=None, state=None, rng=None, data_loader=None):
        """Initialize game engine."""
        self.session_id = session_id
        self.data_loader = data_loader or get_game_data_loader()
        self.rng = rng or random.Random()
        self.state = state if state is not None else default_game_state(self.data_loader)
        self._in_tick = False
        self._warned_zones = set()
        self._restore_defaults()

    def _restore_defaults(self):
        """Fill in whatever an older or damaged save is missing.

        Saves only merge at the top level, so nested records (module stats,
        statistics counters, resource types) added since the save was written
        are filled in here. A record of the wrong shape is replaced.
        """
        state = self.state
        defaults = default_game_state(self.data_loader, last_save_time=state.get('last_save_time'))

        for key, value in defaults.items():
            current = state.get(key)
            if key not in state:
                state[key] = value
            elif isinstance(value, dict) and not isinstance(current, dict):
                state[key] = value
            elif isinstance(value, list) and not isinstance(current, list):
                state[key] = value

        for key, value in default_statistics().items():
            state['statistics'].setdefault(key, value)
        for resource_type, amount in defaults['resources'].items():
            state['resources'].setdefault(resource_type, amount)

        modules = state['modules']
        for kind, record in defaults['modules'].items():
            module = modules.get(kind)
            if not isinstance(module, dict):
                modules[kind] = record
                continue
            for stat, value in record.items():
                module.setdefault(stat, value)

    @classmethod
    def load_from_session(cls, session, rng=None, data_loader=None):
        """Load game engine from a stored session (fresh state if none)."""
        from cosmic_clicker.save_manager import load_game

        data_loader = data_loader or get_game_data_loader()
        state = load_game(session, data_loader)
        return cls(session.id, state, rng=rng, data_loader=data_loader)

    def get_state(self):
        """Get current game state as dictionary."""
        return self.state

    def get_summary(self):
        """Derived values the UI shows next to the state."""
        zone = self.state['current_zone']
        spawn_table = self.data_loader.get_spawn_table(zone)
        fuel_required = self.data_loader.get_fuel_required(zone)

        return {
            'production_per_second': self.estimate_production_per_second(),
            'spawn_interval': spawn_interval(
                Config.OBJECT_SPAWN_RATE,
                spawn_table['spawn_rate'] if spawn_table else 1.0,
                self.state['ship_speed'],
            ),
            'fuel_required': None if math.isinf(fuel_required) else fuel_required,
            'can_warp': self._warp_blocker() is None,
            'live_objects': sum(1 for obj in self.state['objects'] if not obj['destroyed']),
            'bot_count': len(self.state['bots']),
            'production_multiplier': get_production_multiplier(self.state),
            'prestige_reward': calculate_prestige_reward(self.state['total_fuel_earned']),
        }

    def tick(self, delta_time):
        """Advance game simulation by one tick.

        Returns False (and changes nothing) for a delta that is not a finite
        positive number.
        """
        if not is_valid_delta_time(delta_time):
            return False
        if self._in_tick:
            raise RuntimeError("GameEngine.tick() is not re-entrant")

        self._in_tick = True
        try:
            self._reconcile_bots()
            self._update_world(delta_time)
            self._update_bots(delta_time)
            self._update_ship_systems(delta_time)
            check_achievements(self.state, self.data_loader.load_achievements())
            self.state['sim_time'] = self.state.get('sim_time', 0.0) + delta_time
        finally:
            self._in_tick = False
        return True

    def _check_idle(self):
        if self._in_tick:
            raise RuntimeError("Player actions cannot run while a tick is in progress")

    # Tick phases

    def _reconcile_bots(self):
        """Match the live bots to the bot bay's bot_count."""
        bots = self.state['bots']
        target_count = max(0, int(self.state['modules']['bot_bay'].get('bot_count', 0)))

        while len(bots) < target_count:
            bots.append(create_bot(format_bot_id(self.state['next_bot_id']), Config.SHIP_POSITION))
            self.state['next_bot_id'] += 1

        if len(bots) > target_count:
            # Newest bots go first; their cargo is lost with them
            removed = bots[target_count:]
            del bots[target_count:]
            logger.debug(f"Despawned bots {[bot['id'] for bot in removed]}")

    def _update_world(self, delta_time):
        """Sweep, move and spawn world objects."""
        state = self.state
        state['objects'] = [obj for obj in state['objects'] if not obj['destroyed']]

        for obj in state['objects']:
            obj['position'] = update_object_position(obj, delta_time)
            if check_out_of_bounds(obj):
                self._destroy_object(obj, DESTROYED_OUT_OF_BOUNDS)

        zone = state['current_zone']
        spawn_table = self.data_loader.get_spawn_table(zone)
        if spawn_table is None:
            # Nothing to spawn; the timer stays put
            if zone not in self._warned_zones:
                logger.warning(f"No spawn table found for zone {zone}")
                self._warned_zones.add(zone)
            return

        interval = spawn_interval(Config.OBJECT_SPAWN_RATE, spawn_table['spawn_rate'], state['ship_speed'])

        state['spawn_timer'] += delta_time
        if state['spawn_timer'] >= interval:
            # One spawn per tick; the remainder is dropped
            state['spawn_timer'] = 0.0
            obj = spawn_object(
                self.data_loader,
                zone,
                format_object_id(state['next_object_id']),
                self.rng,
                created_at=state.get('sim_time', 0.0),
            )
            if obj is not None:
                state['objects'].append(obj)
                state['next_object_id'] += 1
                state['statistics']['objects_spawned'] += 1

    def _update_bots(self, delta_time):
        """Advance every bot once, in list order."""
        bots = self.state['bots']
        if not bots:
            return

        context = BotContext(
            objects=self.state['objects'],
            bot_bay=self.state['modules']['bot_bay'],
            ship_position=Config.SHIP_POSITION,
            extract_unit=self._extract_unit,
            deposit=self._deposit_cargo,
            targeted_ids=get_targeted_object_ids(bots),
        )
        for bot in bots:
            update_bot(bot, context, delta_time)

    def _update_ship_systems(self, delta_time):
        """Laser cooldown, converter, fuel burn and play time."""
        state = self.state
        state['laser_cooldown'] = max(0.0, state['laser_cooldown'] - delta_time)

        self._run_converter(delta_time)

        engine = state['modules']['engine']
        burn = Config.FUEL_CONSUMPTION_RATES.get(state['ship_speed'], 0) * engine['fuel_efficiency'] * delta_time
        if burn > 0:
            state['fuel'] = max(0.0, state['fuel'] - burn)
            if state['fuel'] <= 0:
                logger.info(f"Out of fuel at speed {state['ship_speed']}, stopping ship")
                state['ship_speed'] = 'stop'

        statistics = state['statistics']
        statistics['total_play_time'] += delta_time
        statistics['current_session_time'] += delta_time

    def _run_converter(self, delta_time):
        """Turn stored resources into fuel."""
        state = self.state
        converter = state['modules']['converter']
        catalog = self.data_loader.load_resources()

        units, state['conversion_progress'] = calculate_conversion_amount(
            converter['conversion_speed'], delta_time, state['conversion_progress']
        )

        fuel_produced = 0.0
        for resource_type in catalog:
            if units <= 0:
                break
            stock = state['resources'].get(resource_type, 0)
            if stock <= 0 or not is_resource_tier_unlocked(resource_type, converter['unlocked_tiers'], catalog):
                continue

            amount = min(units, calculate_convertible_amount(stock, converter['auto_convert_percent']))
            if amount <= 0:
                continue

            state['resources'][resource_type] = stock - amount
            units -= amount
            fuel_produced += convert_resource_to_fuel(
                resource_type, amount, catalog, converter['conversion_efficiency']
            )

        if fuel_produced > 0:
            fuel_produced *= get_production_multiplier(state)
            self._add_fuel(fuel_produced)
            state['statistics']['fuel_converted'] += fuel_produced

    # Shared mutations

    def _add_fuel(self, amount):
        """Produced fuel fills the tank and counts toward zone progress."""
        state = self.state
        tank_capacity = state['modules']['engine']['tank_capacity']
        state['fuel'] = min(tank_capacity, state['fuel'] + amount)
        state['total_fuel_earned'] += amount
        state['zone_progress'] += amount

    def _add_to_inventory(self, resource_type, amount):
        """Store resources in the cargo hold; overflow is lost.

        Returns the amount actually stored.
        """
        resources = self.state['resources']
        stored = calculate_max_cargo_addition(
            resources, resource_type, amount, self.state['modules']['cargo_hold']
        )
        if stored > 0:
            resources[resource_type] = resources.get(resource_type, 0) + stored
        lost = amount - stored
        if lost > 0:
            self.state['statistics']['resources_lost'] += lost
        return stored

    def _extract_unit(self, obj):
        """Take one unit from the object's first non-empty drop."""
        for drop in obj['resource_drops']:
            if drop['amount'] > 0:
                drop['amount'] -= 1
                self.state['statistics']['resources_mined'] += 1
                if not has_resources(obj):
                    self._destroy_object(obj, DESTROYED_EXHAUSTED)
                return drop['type']
        return None

    def _deposit_cargo(self, bot):
        """Move a bot's whole cargo into the cargo hold."""
        for resource_type, amount in bot['cargo'].items():
            if amount > 0:
                stored = self._add_to_inventory(resource_type, amount)
                self.state['statistics']['resources_deposited'] += stored

    def _destroy_object(self, obj, cause):
        """Mark an object destroyed and pay out what is left on it.

        Safe to call more than once; rewards are credited only the first
        time. Objects that drift off screen pay nothing.
        """
        if obj['destroyed']:
            return

        obj['destroyed'] = True
        self.state['statistics']['objects_destroyed'] += 1

        if cause == DESTROYED_OUT_OF_BOUNDS:
            return

        for drop in obj['resource_drops']:
            if drop['amount'] > 0:
                self._add_to_inventory(drop['type'], drop['amount'])
                drop['amount'] = 0

        special_drops = obj.pop('special_drops', None) or {}
        if special_drops.get('credits'):
            self.state['credits'] += special_drops['credits']
        if special_drops.get('fuel'):
            self._add_fuel(special_drops['fuel'])

        logger.debug(f"Object {obj['id']} destroyed ({cause})")

    # Player actions

    def purchase_upgrade(self, upgrade_id):
        """Buy a module upgrade; returns a PurchaseResult."""
        self._check_idle()
        return purchase(self.state, upgrade_id, self.data_loader)

    def fire_laser(self, x, y):
        """Fire the ship's laser at a point on screen."""
        self._check_idle()
        if not all(is_valid_coordinate(value) for value in (x, y)):
            raise ValueError(f"Invalid laser target: ({x}, {y})")

        state = self.state
        if state['laser_cooldown'] > 0:
            return {'success': False, 'reason': 'cooling_down', 'cooldown': state['laser_cooldown']}

        laser = state['modules']['laser']
        state['laser_cooldown'] = laser['cooldown']
        state['statistics']['laser_shots'] += 1

        target = check_laser_hit({'x': x, 'y': y}, state['objects'], laser['range'])
        if target is None:
            return {'success': True, 'hit': False}

        target['health'] = max(0, target['health'] - laser['damage'])
        if target['health'] <= 0:
            self._destroy_object(target, DESTROYED_BY_LASER)

        return {
            'success': True,
            'hit': True,
            'object_id': target['id'],
            'damage': laser['damage'],
            'destroyed': target['destroyed'],
        }

    def sell_resources(self, resource_type=None):
        """Sell one resource type (or everything) for credits."""
        self._check_idle()
        catalog = self.data_loader.load_resources()
        if resource_type is not None and resource_type not in catalog:
            raise ValueError(f"Unknown resource: {resource_type}")

        resources = self.state['resources']
        types = [resource_type] if resource_type is not None else list(resources)

        sold = {}
        credits_earned = 0
        for rtype in types:
            amount = resources.get(rtype, 0)
            if amount <= 0:
                continue
            credits_earned += calculate_resource_value(rtype, amount, catalog)
            resources[rtype] = 0
            sold[rtype] = amount

        self.state['credits'] += credits_earned
        return {'success': True, 'credits_earned': credits_earned, 'sold': sold}

    def set_ship_speed(self, speed):
        """Change the ship speed setting."""
        self._check_idle()
        if speed not in Config.FUEL_CONSUMPTION_RATES:
            raise ValueError(f"Unknown ship speed: {speed}")
        if speed not in self.state['modules']['engine']['unlocked_speeds']:
            raise ValueError(f"Ship speed {speed} is locked")
        if speed != 'stop' and self.state['fuel'] <= 0:
            raise ValueError("Out of fuel")

        self.state['ship_speed'] = speed
        return {'success': True, 'ship_speed': speed}

    def _warp_blocker(self):
        """Reason the ship cannot warp yet, or None."""
        state = self.state
        next_zone = state['current_zone'] + 1
        if self.data_loader.get_zone(next_zone) is None:
            return 'No further zones'

        jump_drive = state['modules']['jump_drive']
        if next_zone > jump_drive['jump_tier'] * Config.ZONES_PER_JUMP_TIER:
            return f"Jump drive tier {jump_drive['jump_tier']} cannot reach zone {next_zone}"

        fuel_required = self.data_loader.get_fuel_required(state['current_zone']) * jump_drive['jump_efficiency']
        if state['zone_progress'] < fuel_required:
            return f"Zone progress {state['zone_progress']:.0f} below {fuel_required:.0f}"
        return None

    def warp_to_next_zone(self):
        """Jump to the next zone once the current one is complete."""
        self._check_idle()
        blocker = self._warp_blocker()
        if blocker is not None:
            raise ValueError(f"Cannot warp: {blocker}")

        state = self.state
        state['current_zone'] += 1
        state['zone_progress'] = 0.0
        state['objects'] = []
        state['spawn_timer'] = 0.0
        for bot in state['bots']:
            if bot['state'] in CLAIMING_STATES:
                bot['state'] = RETURNING if bot['cargo_amount'] > 0 else IDLE
                bot['target_object_id'] = None
                bot['mining_progress'] = 0.0

        logger.info(f"Warped to zone {state['current_zone']}")
        return {'success': True, 'current_zone': state['current_zone']}

    def prestige(self):
        """Trade this run's lifetime fuel for nebula crystals and start over."""
        self._check_idle()
        if calculate_prestige_reward(self.state['total_fuel_earned']) <= 0:
            raise ValueError(f"Cannot prestige: need {Config.MIN_PRESTIGE_FUEL} lifetime fuel")

        crystals = apply_prestige(self.state, self.data_loader)
        check_achievements(self.state, self.data_loader.load_achievements())

        logger.info(f"Prestiged for {crystals} crystals ({self.state['nebula_crystals']} held)")
        return {'success': True, 'crystals_earned': crystals, 'nebula_crystals': self.state['nebula_crystals']}

    def perform_action(self, action_type, action_data):
        """Perform a game action."""
        action_data = action_data or {}
        if action_type == 'purchase_upgrade':
            return self.purchase_upgrade(action_data.get('upgrade_id'))._asdict()
        elif action_type == 'fire_laser':
            return self.fire_laser(action_data.get('x'), action_data.get('y'))
        elif action_type == 'sell_resources':
            return self.sell_resources(action_data.get('resource_type'))
        elif action_type == 'set_ship_speed':
            return self.set_ship_speed(action_data.get('speed'))
        elif action_type == 'warp':
            return self.warp_to_next_zone()
        elif action_type == 'prestige':
            return self.prestige()
        else:
            raise ValueError(f"Unknown action type: {action_type}")

    # Offline progress

    def estimate_production_per_second(self):
        """Fuel per second the bots would produce at the current stats."""
        modules = self.state['modules']
        bot_bay = modules['bot_bay']
        base_rate = bot_bay['bot_count'] * bot_bay['mining_speed'] * modules['converter']['conversion_efficiency']
        return base_rate * get_production_multiplier(self.state)

    def apply_offline_progress(self, now):
        """Credit fuel earned since the last save and start a new session."""
        self._check_idle()
        state = self.state
        info = get_offline_progress_info(state['last_save_time'], now, self.estimate_production_per_second())

        if info['fuel_earned'] > 0:
            self._add_fuel(info['fuel_earned'])

        statistics = state['statistics']
        statistics['total_play_time'] += min(max(0.0, info['time_away']), get_max_offline_seconds())
        statistics['current_session_time'] = 0.0
        state['last_save_time'] = now

        return info

def is_valid_coordinate(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
