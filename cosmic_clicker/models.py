"""Database models for the game."""
from datetime import datetime
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

class GameSession(db.Model):
    """Game session model.

    save_data holds the exported save snapshot (JSON text) and
    settings_data the player's settings (JSON text).
    """
    __tablename__ = 'game_sessions'

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    save_data = db.Column(db.Text, nullable=True)
    settings_data = db.Column(db.Text, nullable=True)

    def to_dict(self):
        """Convert to dictionary."""
        return {
            'id': self.id,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
            'has_save': bool(self.save_data),
        }
