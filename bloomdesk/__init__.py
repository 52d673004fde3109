"""
BloomDesk Application Package

FLOW OVERVIEW
- create_app(test_config=None)
  • Build Flask app, apply config (test or env-based), init extensions (DB, Mail).
  • Register blueprints: auth (/auth), main (/), api-level blueprints (/api).
  • Register global error handlers and request metrics.
  • CLI: `flask init-db`, `flask send-reminders --days N`.
"""

import logging
import time

import click
from flask import Flask, g, request
from flask_mail import Mail

from .models import db
from .routes import (
    auth_bp, main_bp, api_bp, profile_bp, studios_bp, projects_bp, inventory_bp,
    designs_bp, notifications_bp
)
from .config import Config

DEFAULTS = {
    'ATTENTION_UPCOMING_DAYS': 7,
    'REMINDER_DAYS': 3,
    'APP_BASE_URL': 'http://localhost:3000',
    'AUTH_JWT_ALGORITHMS': ['HS256'],
    'AUTH_JWT_AUDIENCE': 'authenticated',
    'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    'LOG_LEVEL': 'INFO',
}


def create_app(test_config=None):
    """Application factory pattern for production deployment"""
    app = Flask(__name__)
    app.config.from_mapping(DEFAULTS)

    # Configuration
    if test_config:
        # Use test configuration if provided
        app.config.update(test_config)
    else:
        # Use environment-based configuration
        app.config.from_object(Config())

    app.logger.setLevel(getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    Mail(app)

    # Register blueprints
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(main_bp)
    app.register_blueprint(api_bp, url_prefix='/api')
    for blueprint in (profile_bp, studios_bp, projects_bp, inventory_bp, designs_bp, notifications_bp):
        app.register_blueprint(blueprint, url_prefix='/api')

    # Register error handlers
    from .utils.error_handlers import register_error_handlers
    register_error_handlers(app)

    from .utils.auth_utils import reset_current_user
    app.before_request(reset_current_user)

    _register_metrics(app)
    _register_commands(app)

    return app


def _register_metrics(app):
    from .utils.prom_metrics import observe_request

    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def record_request(response):
        started = g.get('request_started')
        if started is not None:
            endpoint = request.url_rule.rule if request.url_rule else 'unmatched'
            observe_request(endpoint, response.status_code, time.perf_counter() - started)
        return response


def _register_commands(app):
    @app.cli.command('init-db')
    def init_db():
        """Create all tables."""
        db.create_all()
        click.echo('Database initialized')

    @app.cli.command('send-reminders')
    @click.option('--days', type=int, default=None, help='Look-ahead window in days.')
    def send_reminders(days):
        """Notify admins of assigned projects starting soon."""
        from .utils.notifier import send_upcoming_reminders
        if days is None:
            days = app.config['REMINDER_DAYS']
        sent = send_upcoming_reminders(days)
        app.logger.info(f"Sent {sent} upcoming reminders (window {days} days)")
        click.echo(f'Sent {sent} reminder(s)')
