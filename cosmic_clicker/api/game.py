"""Game API endpoints."""
from flask import Blueprint, jsonify, request

from cosmic_clicker.achievements import get_achievement_progress, is_achievement_unlocked
from cosmic_clicker.game_engine import GameEngine
from cosmic_clicker.game_state import now_ms
from cosmic_clicker.models import GameSession, db
from cosmic_clicker.offline_progress import should_show_offline_popup
from cosmic_clicker.save_manager import export_save, import_save, save_game
from cosmic_clicker.upgrades import get_upgrade_status

game_bp = Blueprint('game', __name__)

def _state_response(engine, **extra):
    """Standard payload: the state plus derived display values."""
    payload = {
        'session_id': engine.session_id,
        'game_state': engine.get_state(),
        'summary': engine.get_summary(),
    }
    payload.update(extra)
    return payload

@game_bp.route('/start', methods=['POST'])
def start_game():
    """Start a new game session."""
    session = GameSession()
    db.session.add(session)
    db.session.commit()

    # Initialize game engine and save the initial state
    engine = GameEngine(session.id)
    save_game(session, engine.get_state())

    return jsonify(_state_response(engine)), 201

@game_bp.route('/state/<int:session_id>', methods=['GET'])
def get_game_state(session_id):
    """Get current game state."""
    session = db.get_or_404(GameSession, session_id)
    engine = GameEngine.load_from_session(session)
    return jsonify(_state_response(engine))

@game_bp.route('/tick', methods=['POST'])
def tick_game():
    """Advance game simulation by delta_time seconds."""
    data = request.get_json(silent=True)

    if not data or not data.get('session_id'):
        return jsonify({'error': 'Missing session_id'}), 400

    session = db.get_or_404(GameSession, data['session_id'])
    engine = GameEngine.load_from_session(session)

    advanced = engine.tick(data.get('delta_time'))
    if advanced:
        save_game(session, engine.get_state())

    return jsonify(_state_response(engine, advanced=advanced))

@game_bp.route('/upgrades/<int:session_id>', methods=['GET'])
def list_upgrades(session_id):
    """Upgrade catalog with purchase status for this session."""
    session = db.get_or_404(GameSession, session_id)
    engine = GameEngine.load_from_session(session)
    state = engine.get_state()

    upgrades = []
    for kind, module in state['modules'].items():
        for upgrade in engine.data_loader.get_upgrades_for_module(kind):
            upgrades.append({**upgrade, **get_upgrade_status(upgrade, module, state['credits'])})

    return jsonify({'upgrades': upgrades})

@game_bp.route('/achievements/<int:session_id>', methods=['GET'])
def list_achievements(session_id):
    """Achievement catalog with unlock state and progress for this session."""
    session = db.get_or_404(GameSession, session_id)
    engine = GameEngine.load_from_session(session)
    state = engine.get_state()

    achievements = []
    for achievement in engine.data_loader.load_achievements():
        achievements.append({
            **achievement,
            'is_unlocked': is_achievement_unlocked(achievement['id'], state),
            'progress': get_achievement_progress(achievement, state),
        })

    return jsonify({'achievements': achievements})

@game_bp.route('/purchase', methods=['POST'])
def purchase_upgrade():
    """Buy a module upgrade."""
    data = request.get_json(silent=True)

    if not data or not data.get('session_id'):
        return jsonify({'error': 'Missing session_id'}), 400
    if not data.get('upgrade_id'):
        return jsonify({'error': 'Missing upgrade_id'}), 400

    session = db.get_or_404(GameSession, data['session_id'])
    engine = GameEngine.load_from_session(session)

    result = engine.purchase_upgrade(data['upgrade_id'])
    if result.success:
        save_game(session, engine.get_state())

    return jsonify(_state_response(engine, result=result._asdict()))

@game_bp.route('/action', methods=['POST'])
def game_action():
    """Perform a player action (laser, sell, speed, warp, purchase)."""
    data = request.get_json(silent=True)

    if not data or not data.get('session_id'):
        return jsonify({'error': 'Missing session_id'}), 400

    session = db.get_or_404(GameSession, data['session_id'])
    engine = GameEngine.load_from_session(session)

    try:
        result = engine.perform_action(data.get('action_type'), data.get('action_data', {}))
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    save_game(session, engine.get_state())
    return jsonify(_state_response(engine, result=result))

@game_bp.route('/save', methods=['POST'])
def save_game_state():
    """Save a client-side game state (cloud sync)."""
    data = request.get_json(silent=True)

    if not data or not data.get('session_id'):
        return jsonify({'error': 'Missing session_id'}), 400

    session = db.get_or_404(GameSession, data['session_id'])

    game_state = data.get('game_state')
    if not isinstance(game_state, dict):
        return jsonify({'error': 'Missing game_state'}), 400

    # Normalize before storing so a damaged state never reaches the store
    engine = GameEngine(session.id, game_state)
    saved_at = save_game(session, engine.get_state())
    return jsonify({'success': True, 'message': 'Game state saved', 'timestamp': saved_at})

@game_bp.route('/export/<int:session_id>', methods=['GET'])
def export_game(session_id):
    """Export the session's game state as save text."""
    session = db.get_or_404(GameSession, session_id)
    engine = GameEngine.load_from_session(session)
    return jsonify({'save_data': export_save(engine.get_state())})

@game_bp.route('/import', methods=['POST'])
def import_game():
    """Replace the session's game state with imported save text."""
    data = request.get_json(silent=True)

    if not data or not data.get('session_id'):
        return jsonify({'error': 'Missing session_id'}), 400

    session = db.get_or_404(GameSession, data['session_id'])

    result = import_save(data.get('save_data'))
    if not result.success:
        return jsonify({'error': result.error}), 400

    engine = GameEngine(session.id, result.game_state)
    save_game(session, engine.get_state())
    return jsonify(_state_response(engine, success=True))

@game_bp.route('/resume/offline', methods=['POST'])
def resume_offline():
    """Credit offline progress when the player comes back."""
    data = request.get_json(silent=True)

    if not data or not data.get('session_id'):
        return jsonify({'error': 'Missing session_id'}), 400

    session = db.get_or_404(GameSession, data['session_id'])
    engine = GameEngine.load_from_session(session)

    now = now_ms()
    show_popup = should_show_offline_popup(engine.get_state()['last_save_time'], now)
    info = engine.apply_offline_progress(now)
    save_game(session, engine.get_state(), now)

    return jsonify(_state_response(engine, offline_progress=info, show_popup=show_popup))
