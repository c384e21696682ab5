"""Settings API endpoints."""
from flask import Blueprint, jsonify, request

from cosmic_clicker.models import GameSession, db
from cosmic_clicker.settings_manager import (
    load_settings,
    reset_settings,
    save_settings,
    update_setting,
)

settings_bp = Blueprint('settings', __name__)

@settings_bp.route('/<int:session_id>', methods=['GET'])
def get_settings(session_id):
    """Get the player's settings (defaults if none are stored)."""
    session = db.get_or_404(GameSession, session_id)
    return jsonify({'settings': load_settings(session.settings_data)})

@settings_bp.route('/<int:session_id>', methods=['PUT'])
def put_settings(session_id):
    """Update one setting ({key, value}) or replace them all ({settings})."""
    session = db.get_or_404(GameSession, session_id)
    data = request.get_json(silent=True)

    if not data:
        return jsonify({'error': 'Missing settings'}), 400

    try:
        if 'settings' in data:
            settings = save_settings(session, data['settings'])
        elif 'key' in data:
            settings = update_setting(session, data['key'], data.get('value'))
        else:
            return jsonify({'error': 'Missing settings'}), 400
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    return jsonify({'settings': settings})

@settings_bp.route('/<int:session_id>', methods=['DELETE'])
def delete_settings(session_id):
    """Reset the player's settings to the defaults."""
    session = db.get_or_404(GameSession, session_id)
    return jsonify({'settings': reset_settings(session)})
