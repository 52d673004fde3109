#!/usr/bin/env python3
"""
BloomDesk application entry point.

This module selects configuration based on environment variables, creates the
Flask application via `create_app`, and eagerly creates tables for in-memory
databases. When executed directly, it runs the development server. In
production, a WSGI server should import `app` from this module.

Environment variables of interest:
- FLASK_ENV: 'production' loads config.prod.env, 'testing' skips env files.
- DATABASE_URL: if set to 'sqlite:///:memory:' forces table creation at startup.
- SECRET_KEY, AUTH_JWT_SECRET, mail settings: consumed by `create_app`.
"""

import logging
import os
from bloomdesk import create_app
from bloomdesk.models import db

logging.basicConfig(level=os.getenv('LOG_LEVEL', 'INFO').upper())

app = create_app()

if os.getenv('DATABASE_URL') == 'sqlite:///:memory:' or os.getenv('FLASK_ENV') == 'testing':
    with app.app_context():
        db.create_all()
    app.logger.info("In-memory database initialized")

if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=5000)
