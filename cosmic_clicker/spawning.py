"""Object spawning: weighted template selection and object creation."""
import logging

from cosmic_clicker.config import Config

logger = logging.getLogger(__name__)

def format_object_id(sequence):
    """Object IDs sort lexicographically in creation order."""
    return f"obj_{sequence:06d}"

def select_spawn_template(entries, rng):
    """Pick a template ID from weighted spawn entries.

    Draws a uniform value over the total weight and returns the first entry
    whose cumulative weight meets or exceeds it. Returns None for an empty
    table or one whose weights sum to zero.
    """
    if not entries:
        return None

    total_weight = sum(entry['weight'] for entry in entries)
    if total_weight <= 0:
        return None

    draw = rng.random() * total_weight
    cumulative = 0.0
    for entry in entries:
        cumulative += entry['weight']
        if cumulative >= draw and entry['weight'] > 0:
            return entry['template_id']

    # Float rounding can leave draw a hair above the last cumulative sum
    return next(entry['template_id'] for entry in reversed(entries) if entry['weight'] > 0)

def get_speed_multiplier(ship_speed):
    """Spawn rate multiplier for a ship speed ('stop' spawns at base rate)."""
    return Config.SPEED_SPAWN_MULTIPLIERS.get(ship_speed, 1.0)

def spawn_interval(base_rate, zone_multiplier, ship_speed):
    """Seconds between spawns; inf when the effective rate is not positive."""
    rate = base_rate * zone_multiplier * get_speed_multiplier(ship_speed)
    if rate <= 0:
        return float('inf')
    return 1.0 / rate

def generate_spawn_position(rng, play_width=None, object_width=0):
    """Random x across the play width at the fixed off-screen spawn height."""
    if play_width is None:
        play_width = Config.PLAY_WIDTH
    margin = min(object_width / 2, play_width / 2)
    x = margin + rng.random() * (play_width - 2 * margin)
    return {'x': x, 'y': float(Config.SPAWN_Y)}

def calculate_object_velocity(zone, rng, base_fall_speed=None):
    """Objects fall faster in later zones and drift slightly sideways."""
    if base_fall_speed is None:
        base_fall_speed = Config.OBJECT_FALL_SPEED
    drift = (rng.random() - 0.5) * Config.OBJECT_DRIFT_RANGE
    return {'x': drift, 'y': base_fall_speed * (1 + zone * 0.1)}

def generate_resource_drops(loot_table, rng):
    """Roll a loot table into an ordered list of {type, amount} drops."""
    drops = []
    for loot in loot_table:
        if rng.random() > loot['probability']:
            continue
        amount = rng.randint(loot['min_amount'], loot['max_amount'])
        if amount > 0:
            drops.append({'type': loot['resource'], 'amount': amount})
    return drops

def create_object_from_template(template, object_id, position, zone, rng, created_at=0.0):
    """Create a game object from a template, scaled to the zone."""
    difficulty_multiplier = Config.OBJECT_HP_ZONE_SCALING ** (zone - 1)
    hp = max(1, int(template['hp'] * difficulty_multiplier))

    obj = {
        'id': object_id,
        'template_id': template['id'],
        'type': template['type'],
        'variant': template.get('variant'),
        'size': template['size'],
        'position': position,
        'velocity': calculate_object_velocity(zone, rng),
        'health': hp,
        'max_health': hp,
        'width': template['width'],
        'height': template['height'],
        'mining_yield': template.get('mining_yield', 1.0),
        'resource_drops': generate_resource_drops(template.get('loot_table', []), rng),
        'destroyed': False,
        'created_at': created_at,
    }
    if template.get('special_drops'):
        obj['special_drops'] = dict(template['special_drops'])
    return obj

def spawn_object(data_loader, zone, object_id, rng, created_at=0.0):
    """Spawn one object for a zone.

    Returns None (and logs) when the zone has no spawn table or the table
    names a template that does not exist.
    """
    spawn_table = data_loader.get_spawn_table(zone)
    if not spawn_table:
        logger.warning(f"No spawn table found for zone {zone}")
        return None

    template_id = select_spawn_template(spawn_table.get('entries', []), rng)
    if template_id is None:
        logger.warning(f"Spawn table for zone {zone} has no spawnable entries")
        return None

    template = data_loader.get_object_template(template_id)
    if not template:
        logger.warning(f"Template not found: {template_id}")
        return None

    position = generate_spawn_position(rng, object_width=template['width'])
    return create_object_from_template(template, object_id, position, zone, rng, created_at)
