"""
Database Models Package

FLOW OVERVIEW
- Centralizes SQLAlchemy DB instance and model imports for convenient usage.
- Exposes: db, users/roles/profiles, studios + roster + invites, projects and
  their staffing rows, inventory rows, designs, notifications.
"""

from .database import db
from .user import User, UserRole, Profile
from .studio import Studio, StudioRosterEntry, StudioInvite
from .project import (
    Project, ProjectAssignment, FreelancerResponse, FloralItem, InspirationPhoto
)
from .inventory import FlowerInventoryRow, HardGoodInventoryRow
from .design import FloralItemDesign, DesignPhoto, DesignRevision
from .notification import Notification, NotificationPreference

__all__ = [
    'db',
    'User',
    'UserRole',
    'Profile',
    'Studio',
    'StudioRosterEntry',
    'StudioInvite',
    'Project',
    'ProjectAssignment',
    'FreelancerResponse',
    'FloralItem',
    'InspirationPhoto',
    'FlowerInventoryRow',
    'HardGoodInventoryRow',
    'FloralItemDesign',
    'DesignPhoto',
    'DesignRevision',
    'Notification',
    'NotificationPreference',
]
