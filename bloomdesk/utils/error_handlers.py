"""
Error Handlers

This module contains the API exception types and the JSON error handlers
registered on the app. Every error body has the shape
{"error": <message>, "details": <optional structured detail>}.
"""

from flask import jsonify, current_app


class APIError(Exception):
    """Base class for errors returned to API clients"""
    status_code = 400

    def __init__(self, message, details=None, status_code=None):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'error': self.message, 'details': self.details}


class ValidationError(APIError):
    status_code = 400


class AuthError(APIError):
    status_code = 401


class PermissionDenied(APIError):
    status_code = 403


class NotFound(APIError):
    status_code = 404


class Conflict(APIError):
    status_code = 409


def error_response(message, status_code, details=None):
    return jsonify({'error': message, 'details': details}), status_code


def register_error_handlers(app):
    """Register error handlers with the Flask app"""

    @app.errorhandler(APIError)
    def handle_api_error(error):
        if error.status_code >= 500:
            current_app.logger.error(f"API error: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found(error):
        return error_response('Not found', 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return error_response('Method not allowed', 405)

    @app.errorhandler(500)
    def internal_error(error):
        from ..models import db
        db.session.rollback()
        current_app.logger.error(f"Internal server error: {error}")
        return error_response('Internal server error', 500)
