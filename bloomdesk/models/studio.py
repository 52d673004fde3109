"""
Studio Models

FLOW OVERVIEW
- Studio: tenant organization owned by exactly one admin user.
- StudioRosterEntry: freelancer membership in a studio, unique per (studio, freelancer).
- StudioInvite: emailed join link; upserted per (studio, email) and
  moved through pending -> accepted | declined.
"""

from datetime import datetime
from .database import db
from .utils import generate_uuid, generate_invite_token

VISIBILITY_OPEN = 'open'
VISIBILITY_PRIVATE = 'private'
VISIBILITIES = (VISIBILITY_OPEN, VISIBILITY_PRIVATE)

INVITE_PENDING = 'pending'
INVITE_ACCEPTED = 'accepted'
INVITE_DECLINED = 'declined'


class Studio(db.Model):
    """Studio owned by an admin"""
    __tablename__ = 'studios'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    admin_id = db.Column(db.String(64), unique=True, nullable=False)
    name = db.Column(db.String(120), nullable=False, default='')
    logo_url = db.Column(db.String(1024))
    description = db.Column(db.Text)
    visibility = db.Column(db.String(20), nullable=False, default=VISIBILITY_PRIVATE)
    onboarding_completed = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    roster = db.relationship('StudioRosterEntry', backref='studio', lazy=True, cascade='all, delete-orphan')
    invites = db.relationship('StudioInvite', backref='studio', lazy=True, cascade='all, delete-orphan')

    def __repr__(self):
        return f'<Studio {self.name!r} admin={self.admin_id}>'

    def to_dict(self):
        return {
            'id': self.id,
            'admin_id': self.admin_id,
            'name': self.name,
            'logo_url': self.logo_url,
            'description': self.description,
            'visibility': self.visibility,
            'onboarding_completed': self.onboarding_completed,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def for_admin(cls, admin_id):
        return cls.query.filter_by(admin_id=admin_id).first()

    def has_member(self, freelancer_id):
        return StudioRosterEntry.query.filter_by(
            studio_id=self.id, freelancer_id=freelancer_id
        ).first() is not None

    def add_member(self, freelancer_id):
        """Add a freelancer to the roster, ignoring duplicates"""
        entry = StudioRosterEntry.query.filter_by(studio_id=self.id, freelancer_id=freelancer_id).first()
        if entry:
            return entry, False
        entry = StudioRosterEntry(studio_id=self.id, freelancer_id=freelancer_id)
        db.session.add(entry)
        return entry, True

    def member_ids(self):
        return [e.freelancer_id for e in self.roster]


class StudioRosterEntry(db.Model):
    """Freelancer on a studio roster"""
    __tablename__ = 'studio_roster'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    studio_id = db.Column(db.String(36), db.ForeignKey('studios.id'), nullable=False, index=True)
    freelancer_id = db.Column(db.String(64), nullable=False, index=True)
    joined_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint('studio_id', 'freelancer_id', name='unique_studio_freelancer'),
    )


class StudioInvite(db.Model):
    """Invite link for joining a studio roster"""
    __tablename__ = 'studio_invites'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    studio_id = db.Column(db.String(36), db.ForeignKey('studios.id'), nullable=False, index=True)
    email = db.Column(db.String(254), nullable=False)
    token = db.Column(db.String(64), unique=True, nullable=False, default=generate_invite_token)
    status = db.Column(db.String(20), nullable=False, default=INVITE_PENDING)
    invited_by = db.Column(db.String(64))
    invited_at = db.Column(db.DateTime, default=datetime.utcnow)
    accepted_at = db.Column(db.DateTime)

    __table_args__ = (
        db.UniqueConstraint('studio_id', 'email', name='unique_studio_invite_email'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'studio_id': self.studio_id,
            'email': self.email,
            'token': self.token,
            'status': self.status,
            'invited_by': self.invited_by,
            'invited_at': self.invited_at.isoformat() if self.invited_at else None,
            'accepted_at': self.accepted_at.isoformat() if self.accepted_at else None,
        }

    @classmethod
    def upsert(cls, studio_id, email, invited_by):
        """Create an invite or reset the existing one for this email back to pending.

        The token of an existing invite is kept so links already shared keep working.
        """
        invite = cls.query.filter_by(studio_id=studio_id, email=email).first()
        if invite is None:
            invite = cls(studio_id=studio_id, email=email, invited_by=invited_by)
            db.session.add(invite)
        else:
            invite.status = INVITE_PENDING
            invite.invited_by = invited_by
            invite.invited_at = datetime.utcnow()
            invite.accepted_at = None
        return invite
