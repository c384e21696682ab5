#!/usr/bin/env python3
"""Run script for the Cosmic Clicker game server."""
import os

from cosmic_clicker.app import create_app

if __name__ == '__main__':
    app = create_app(os.environ.get('FLASK_ENV', 'development'))

    # Initialize database
    with app.app_context():
        from cosmic_clicker.models import db
        db.create_all()
        print("Database initialized.")

    port = int(os.environ.get('PORT', 5001))
    print("Starting Cosmic Clicker game server...")
    print(f"API listening on http://localhost:{port}/api")
    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=port)
