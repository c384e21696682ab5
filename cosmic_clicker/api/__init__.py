"""API blueprints for Cosmic Clicker."""
from cosmic_clicker.api.game import game_bp
from cosmic_clicker.api.settings import settings_bp

__all__ = ['game_bp', 'settings_bp']
