"""
Utilities Package

This package contains utility functions and helper modules.
"""

from . import auth_utils
from . import validators
from . import error_handlers
from . import project_status
from . import notifier

__all__ = [
    'auth_utils',
    'validators',
    'error_handlers',
    'project_status',
    'notifier',
]
