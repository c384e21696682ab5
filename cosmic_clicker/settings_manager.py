"""Player settings: defaults, validation and storage."""
import json
import logging

from sqlalchemy.exc import SQLAlchemyError

from cosmic_clicker.models import db
from cosmic_clicker.save_manager import SaveError

logger = logging.getLogger(__name__)

AUTO_SAVE_INTERVALS = (15, 30, 60)
NUMBER_NOTATIONS = ('standard', 'scientific', 'engineering')

DEFAULT_SETTINGS = {
    'auto_save_enabled': True,
    'auto_save_interval': 30,  # seconds
    'show_particles': True,
    'reduce_motion': False,
    'number_notation': 'standard',
    'show_tooltips': True,
    'sound_enabled': False,
    'music_enabled': False,
}

BOOLEAN_SETTINGS = (
    'auto_save_enabled',
    'show_particles',
    'reduce_motion',
    'show_tooltips',
    'sound_enabled',
    'music_enabled',
)

def get_default_settings():
    """Fresh copy of the default settings."""
    return dict(DEFAULT_SETTINGS)

def validate_settings(settings):
    """Check that every setting is present and well-typed."""
    if not isinstance(settings, dict):
        return False

    for key in BOOLEAN_SETTINGS:
        if not isinstance(settings.get(key), bool):
            return False

    interval = settings.get('auto_save_interval')
    if isinstance(interval, bool) or interval not in AUTO_SAVE_INTERVALS:
        return False

    return settings.get('number_notation') in NUMBER_NOTATIONS

def load_settings(raw):
    """Parse stored settings JSON text.

    Stored values are merged over the defaults so settings added later get
    their default. Anything unreadable or invalid falls back to the
    defaults as a whole.
    """
    if not raw:
        return get_default_settings()

    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"Failed to parse settings, using defaults: {e}")
        return get_default_settings()

    if not isinstance(parsed, dict):
        logger.warning("Stored settings are not an object, using defaults")
        return get_default_settings()

    settings = {**DEFAULT_SETTINGS, **parsed}
    if not validate_settings(settings):
        logger.warning("Stored settings are invalid, using defaults")
        return get_default_settings()
    return settings

def _commit(action):
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Failed to {action}: {e}")
        raise SaveError(f"Failed to {action}") from e

def save_settings(session, settings):
    """Validate and store settings on a session."""
    if not validate_settings(settings):
        raise ValueError('Invalid settings')

    session.settings_data = json.dumps(settings)
    _commit('save settings')
    return settings

def reset_settings(session):
    """Clear stored settings; returns the defaults."""
    session.settings_data = None
    _commit('reset settings')
    return get_default_settings()

def update_setting(session, key, value):
    """Change one setting and store the result."""
    if key not in DEFAULT_SETTINGS:
        raise ValueError(f"Unknown setting: {key}")

    settings = {**load_settings(session.settings_data), key: value}
    return save_settings(session, settings)
