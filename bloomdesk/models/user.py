"""
User Models

This module contains the User, UserRole and Profile models. Users are keyed by
the subject issued by the hosted auth provider; BloomDesk never stores
credentials.
"""

from datetime import datetime
from .database import db
from .utils import generate_uuid

ROLE_ADMIN = 'admin'
ROLE_FREELANCER = 'freelancer'
ROLES = (ROLE_ADMIN, ROLE_FREELANCER)


class User(db.Model):
    """Local mirror of an identity issued by the auth provider"""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), unique=True, nullable=False)
    email = db.Column(db.String(254), nullable=False, default='')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    last_seen = db.Column(db.DateTime)

    # Relationships
    roles = db.relationship('UserRole', backref='user', lazy=True, cascade='all, delete-orphan')
    profile = db.relationship('Profile', backref='user', uselist=False, cascade='all, delete-orphan')

    def __repr__(self):
        return f'<User {self.user_id}>'

    @property
    def role(self):
        """Admin when any role row says admin, freelancer otherwise"""
        if any(r.role == ROLE_ADMIN for r in self.roles):
            return ROLE_ADMIN
        return ROLE_FREELANCER

    def is_admin(self):
        return self.role == ROLE_ADMIN

    def touch(self):
        """Update the last seen timestamp"""
        self.last_seen = datetime.utcnow()
        db.session.commit()

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'email': self.email,
            'role': self.role,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class UserRole(db.Model):
    """Role grant for a user"""
    __tablename__ = 'user_roles'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    user_id = db.Column(db.String(64), db.ForeignKey('users.user_id'), nullable=False, index=True)
    role = db.Column(db.String(20), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint('user_id', 'role', name='unique_user_role'),
    )

    @classmethod
    def has_role(cls, user_id, role):
        return cls.query.filter_by(user_id=user_id, role=role).first() is not None


class Profile(db.Model):
    """Contact details shown to studio admins and teammates"""
    __tablename__ = 'profiles'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    user_id = db.Column(db.String(64), db.ForeignKey('users.user_id'), unique=True, nullable=False)
    first_name = db.Column(db.String(80), nullable=False, default='')
    last_name = db.Column(db.String(80), nullable=False, default='')
    email = db.Column(db.String(254), nullable=False, default='')
    phone = db.Column(db.String(32), nullable=False, default='')
    address = db.Column(db.String(255), nullable=False, default='')
    avatar_url = db.Column(db.String(1024))
    website = db.Column(db.String(1024))
    instagram = db.Column(db.String(64))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def full_name(self):
        return f'{self.first_name} {self.last_name}'.strip()

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'email': self.email,
            'phone': self.phone,
            'address': self.address,
            'avatar_url': self.avatar_url or '',
            'website': self.website,
            'instagram': self.instagram,
            'initials': get_initials(self.first_name, self.last_name),
        }

    def to_public_dict(self):
        """Subset exposed to other users (roster, staffing panels)"""
        return {
            'user_id': self.user_id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'email': self.email,
            'phone': self.phone,
            'avatar_url': self.avatar_url or '',
            'website': self.website,
        }


def get_initials(first_name, last_name):
    """Upper-cased first letters of first and last name"""
    first = (first_name or '').strip()[:1].upper()
    last = (last_name or '').strip()[:1].upper()
    return f'{first}{last}'
