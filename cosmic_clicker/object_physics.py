"""Object physics helpers: movement, bounds and hit tests.

Positions and velocities are {'x': float, 'y': float} dicts in screen pixels,
y growing downward. Velocities are pixels per second.
"""
import math

from cosmic_clicker.config import Config

def calculate_distance(p1, p2):
    """Euclidean distance between two positions."""
    return math.hypot(p2['x'] - p1['x'], p2['y'] - p1['y'])

def normalize_vector(vector):
    """Scale a vector to unit length (zero vector stays zero)."""
    magnitude = math.hypot(vector['x'], vector['y'])
    if magnitude == 0:
        return {'x': 0.0, 'y': 0.0}
    return {'x': vector['x'] / magnitude, 'y': vector['y'] / magnitude}

def update_object_position(obj, delta_time):
    """New position of an object after delta_time seconds."""
    return {
        'x': obj['position']['x'] + obj['velocity']['x'] * delta_time,
        'y': obj['position']['y'] + obj['velocity']['y'] * delta_time,
    }

def check_out_of_bounds(obj, play_height=None):
    """True once the object's top edge has fallen below the play area."""
    if play_height is None:
        play_height = Config.PLAY_HEIGHT
    return obj['position']['y'] - obj['height'] / 2 > play_height

def hitbox_radius(obj):
    """Circular hitbox radius of an object."""
    return max(obj['width'], obj['height']) / 2

def is_live(obj):
    """True if the object can still be interacted with."""
    return obj is not None and not obj['destroyed'] and obj['health'] > 0

def find_object(objects, object_id):
    """Look up a live-table entry by ID (None if it has been removed)."""
    if object_id is None:
        return None
    for obj in objects:
        if obj['id'] == object_id:
            return obj
    return None

def check_laser_hit(position, objects, laser_range):
    """Closest live object whose hitbox is within laser range of position."""
    closest_object = None
    closest_distance = math.inf

    for obj in objects:
        if not is_live(obj):
            continue

        distance = calculate_distance(position, obj['position'])
        if distance > laser_range + hitbox_radius(obj):
            continue

        # Tie-break on ID keeps hits deterministic
        if distance < closest_distance or (
                distance == closest_distance and obj['id'] < closest_object['id']):
            closest_distance = distance
            closest_object = obj

    return closest_object
