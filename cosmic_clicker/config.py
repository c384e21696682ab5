"""Configuration settings for the Flask application."""
import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        os.environ.get('SQLALCHEMY_DATABASE_URI') or \
        'sqlite:///cosmic_clicker.db'  # Use SQLite for development

    # Save compatibility
    VERSION = '1.0.0'

    # Offline progress
    MAX_OFFLINE_HOURS = 8  # hours of offline time that count toward the award
    OFFLINE_PRODUCTION_MULTIPLIER = 0.5  # 50% of normal production
    OFFLINE_POPUP_MIN_SECONDS = 60  # don't surface the summary for short absences

    # Play area (pixels)
    PLAY_WIDTH = 800
    PLAY_HEIGHT = 600
    SPAWN_Y = -100  # objects enter from above the screen
    SHIP_POSITION = {'x': 400.0, 'y': 520.0}  # fixed bot deposit point

    # Objects
    OBJECT_SPAWN_RATE = 1.0  # objects per second before zone/speed multipliers
    OBJECT_FALL_SPEED = 100  # pixels per second, scaled by 1 + zone * 0.1
    OBJECT_DRIFT_RANGE = 40  # horizontal drift spread, pixels per second
    OBJECT_HP_ZONE_SCALING = 1.3  # HP multiplier per zone past the first

    # Bots
    BOT_REACH_DISTANCE = 5.0  # pixels

    # Ship speed: spawn rate multipliers. 'stop' keeps the base rate on purpose.
    SPEED_SPAWN_MULTIPLIERS = {
        'stop': 1.0,
        'slow': 0.7,
        'normal': 1.0,
        'fast': 1.3,
        'boost': 1.6,
    }

    # Ship speed: fuel consumed per second before engine efficiency
    FUEL_CONSUMPTION_RATES = {
        'stop': 0,
        'slow': 0.5,
        'normal': 1,
        'fast': 2,
        'boost': 5,
    }

    # Starting values
    INITIAL_CREDITS = 0
    INITIAL_FUEL = 100
    INITIAL_ZONE = 1
    INITIAL_SHIP_SPEED = 'normal'

    # Each jump drive tier opens three zones
    ZONES_PER_JUMP_TIER = 3

    # Prestige
    MIN_PRESTIGE_FUEL = 1000000  # lifetime fuel needed before the first reset
    PRESTIGE_DIVISOR = 1000000  # crystals = floor(sqrt(total_fuel_earned / divisor))
    NEBULA_CRYSTAL_BONUS = 0.01  # production bonus per crystal held
    ACHIEVEMENT_BONUS = 0.01  # production bonus per achievement unlocked

class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True

class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False

class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'

config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
