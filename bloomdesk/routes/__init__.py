"""
Routes Package

This package contains all Flask route blueprints.
"""

from .auth import auth_bp
from .main import main_bp
from .api import api_bp
from .profile import profile_bp
from .studios import studios_bp
from .projects import projects_bp
from .inventory import inventory_bp
from .designs import designs_bp
from .notifications import notifications_bp

__all__ = [
    'auth_bp',
    'main_bp',
    'api_bp',
    'profile_bp',
    'studios_bp',
    'projects_bp',
    'inventory_bp',
    'designs_bp',
    'notifications_bp',
]
