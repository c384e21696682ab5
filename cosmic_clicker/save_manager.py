"""Save snapshots: export, import, forward migration and storage."""
import json
import logging
from collections import namedtuple

from sqlalchemy.exc import SQLAlchemyError

from cosmic_clicker.config import Config
from cosmic_clicker.game_state import default_game_state, now_ms
from cosmic_clicker.models import db

logger = logging.getLogger(__name__)

CURRENT_VERSION = Config.VERSION

ImportResult = namedtuple('ImportResult', ['success', 'game_state', 'error'])

class SaveError(Exception):
    """Raised when a save cannot be written to storage."""

def validate_save_data(data):
    """Check the snapshot envelope: version, timestamp and game_state."""
    if not isinstance(data, dict):
        return False

    timestamp = data.get('timestamp')
    return (
        isinstance(data.get('version'), str)
        and isinstance(timestamp, (int, float))
        and not isinstance(timestamp, bool)
        and isinstance(data.get('game_state'), dict)
    )

def migrate_save_data(save_data, data_loader=None):
    """Bring a snapshot up to the current version.

    Missing top-level fields come from a fresh default state. The merge is
    shallow: a saved 'modules' or 'statistics' dict replaces the default one
    wholesale.
    """
    game_state = {
        **default_game_state(data_loader),
        **save_data['game_state'],
        'version': CURRENT_VERSION,
    }
    return {**save_data, 'version': CURRENT_VERSION, 'game_state': game_state}

def build_snapshot(state, now=None):
    """Wrap a game state in a versioned, timestamped snapshot."""
    return {
        'version': CURRENT_VERSION,
        'timestamp': now if now is not None else now_ms(),
        'game_state': state,
    }

def export_save(state, now=None):
    """Serialize a game state to snapshot JSON text."""
    return json.dumps(build_snapshot(state, now), indent=2)

def import_save(json_string, data_loader=None):
    """Parse snapshot JSON text into a migrated game state.

    Never raises; failures come back as ImportResult(success=False, ...).
    """
    try:
        save_data = json.loads(json_string)
    except (TypeError, ValueError) as e:
        return ImportResult(False, None, f"Could not parse save: {e}")

    if not validate_save_data(save_data):
        return ImportResult(False, None, 'Invalid save data format')

    migrated = migrate_save_data(save_data, data_loader)
    return ImportResult(True, migrated['game_state'], None)

def save_game(session, state, now=None):
    """Write a game state to a stored session.

    Returns the save timestamp. Raises SaveError if the database rejects
    the write.
    """
    now = now if now is not None else now_ms()
    snapshot_state = {**state, 'last_save_time': now}

    try:
        session.save_data = export_save(snapshot_state, now)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Failed to save game for session {session.id}: {e}")
        raise SaveError('Failed to save game') from e

    return now

def load_game(session, data_loader=None):
    """Read the migrated game state of a stored session, or None."""
    if session is None or not session.save_data:
        return None

    result = import_save(session.save_data, data_loader)
    if not result.success:
        logger.warning(f"Discarding unreadable save for session {session.id}: {result.error}")
        return None
    return result.game_state

def delete_save(session):
    """Remove the save from a stored session."""
    try:
        session.save_data = None
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Failed to delete save for session {session.id}: {e}")
        raise SaveError('Failed to delete save') from e

def get_last_save_time(session):
    """Timestamp of the stored save, or None if there is no readable one."""
    if session is None or not session.save_data:
        return None
    try:
        save_data = json.loads(session.save_data)
    except ValueError:
        return None
    if not validate_save_data(save_data):
        return None
    return save_data['timestamp']
