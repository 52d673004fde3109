"""
API Routes

FLOW OVERVIEW
- /api/status [GET]
  • Service version, environment and database reachability.
- /api/metrics [GET]
  • Prometheus text exposition (bd_* metrics).
"""

import os

from flask import Blueprint, jsonify, Response, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..models import db
from ..utils.prom_metrics import metrics_latest, CONTENT_TYPE_LATEST

api_bp = Blueprint('api', __name__)

VERSION = '1.0.0'


@api_bp.route('/status')
def api_status():
    """Report whether the service and its database are usable"""
    try:
        db.session.execute(text('SELECT 1'))
        database = 'ok'
    except SQLAlchemyError as e:
        current_app.logger.error(f"Status check could not reach the database: {e}")
        db.session.rollback()
        database = 'unavailable'
    return jsonify({
        'status': 'operational' if database == 'ok' else 'degraded',
        'version': VERSION,
        'environment': os.getenv('FLASK_ENV', 'development'),
        'database': database,
    })


@api_bp.route('/metrics')
def metrics():
    return Response(metrics_latest(), mimetype=CONTENT_TYPE_LATEST)
