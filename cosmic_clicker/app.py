"""Flask application factory."""
import os

from flask import Flask
from flask_cors import CORS
from flask_migrate import Migrate

from cosmic_clicker.config import config
from cosmic_clicker.game_data_loader import get_game_data_loader
from cosmic_clicker.models import db
from cosmic_clicker.save_manager import SaveError

def create_app(config_name=None):
    """Create and configure Flask application."""
    app = Flask(__name__)

    # Load configuration
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')
    app.config.from_object(config[config_name])

    # Initialize extensions
    db.init_app(app)
    CORS(app)
    Migrate(app, db)

    # Initialize game data loader
    with app.app_context():
        data_loader = get_game_data_loader()
        errors = data_loader.validate_data()
        if errors:
            app.logger.warning(f"Game data validation warnings: {errors}")

    # Register blueprints
    from cosmic_clicker.api import game_bp, settings_bp
    app.register_blueprint(game_bp, url_prefix='/api/game')
    app.register_blueprint(settings_bp, url_prefix='/api/settings')

    # Serve the read-only catalog to the browser
    @app.route('/game_data/<path:filename>')
    def serve_game_data(filename):
        """Serve game data JSON files."""
        from flask import send_from_directory
        return send_from_directory(data_loader.data_dir, filename)

    # Error handlers
    @app.errorhandler(404)
    def not_found(error):
        return {'error': 'Not found'}, 404

    @app.errorhandler(SaveError)
    def save_failed(error):
        app.logger.error(f"Storage failure: {error}")
        return {'error': str(error)}, 500

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return {'error': 'Internal server error'}, 500

    return app
