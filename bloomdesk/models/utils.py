"""
Model Utilities

This module contains id/token generators and small helpers shared by models.
"""

import secrets
import uuid


def generate_uuid():
    """Generate a string UUID used as primary key for domain rows"""
    return str(uuid.uuid4())


def generate_invite_token():
    """Generate a URL-safe studio invite token"""
    return secrets.token_urlsafe(24)


def isoformat(value):
    """Serialize a date/datetime (or None) for JSON output"""
    return value.isoformat() if value else None
