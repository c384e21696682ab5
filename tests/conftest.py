"""Shared fixtures for the Cosmic Clicker test suite."""
import random
import shutil
from pathlib import Path

import pytest

from cosmic_clicker.app import create_app
from cosmic_clicker.game_data_loader import GameDataLoader, get_game_data_loader
from cosmic_clicker.game_engine import GameEngine
from cosmic_clicker.game_state import default_game_state
from cosmic_clicker.models import db

GAME_DATA_DIR = Path(__file__).resolve().parent.parent / 'cosmic_clicker' / 'game_data'

@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    return app.test_client()

@pytest.fixture
def data_loader():
    return get_game_data_loader()

@pytest.fixture
def quiet_loader(tmp_path):
    """Catalog without spawn tables, so nothing spawns on its own."""
    for path in GAME_DATA_DIR.glob('*.json'):
        if path.name != 'spawn_tables.json':
            shutil.copy(path, tmp_path / path.name)
    return GameDataLoader(tmp_path)

@pytest.fixture
def engine(data_loader):
    state = default_game_state(data_loader, last_save_time=0)
    return GameEngine('test', state, rng=random.Random(1234), data_loader=data_loader)

@pytest.fixture
def quiet_engine(quiet_loader):
    state = default_game_state(quiet_loader, last_save_time=0)
    state['ship_speed'] = 'stop'
    return GameEngine('quiet', state, rng=random.Random(1234), data_loader=quiet_loader)

@pytest.fixture
def make_object():
    """Factory for world objects with sensible defaults."""
    def _make(object_id, x, y, drops=None, health=10, velocity=None, **extra):
        obj = {
            'id': object_id,
            'template_id': 'asteroid_stone_small',
            'type': 'asteroid',
            'variant': 'stone',
            'size': 'small',
            'position': {'x': float(x), 'y': float(y)},
            'velocity': velocity or {'x': 0.0, 'y': 0.0},
            'health': health,
            'max_health': health,
            'width': 40,
            'height': 40,
            'mining_yield': 1.0,
            'resource_drops': drops if drops is not None else [{'type': 'stone', 'amount': 5}],
            'destroyed': False,
            'created_at': 0.0,
        }
        obj.update(extra)
        return obj
    return _make
