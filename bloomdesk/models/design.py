"""
Design Models

FLOW OVERVIEW
- FloralItemDesign: one freelancer's photo set for one floral item.
  design_status cycles in_review -> needs_revision -> in_review ... -> approved.
- DesignPhoto: current photos of the design, replaced on every submission.
- DesignRevision: append-only history, one row per submission; the latest row
  mirrors the outcome of the admin review.
"""

from datetime import datetime
from .database import db
from .utils import generate_uuid

DESIGN_IN_REVIEW = 'in_review'
DESIGN_NEEDS_REVISION = 'needs_revision'
DESIGN_APPROVED = 'approved'
DESIGN_STATUSES = (DESIGN_IN_REVIEW, DESIGN_NEEDS_REVISION, DESIGN_APPROVED)


class FloralItemDesign(db.Model):
    """Freelancer-submitted design for a floral item"""
    __tablename__ = 'floral_item_designs'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    project_id = db.Column(db.String(36), db.ForeignKey('projects.id'), nullable=False, index=True)
    floral_item_id = db.Column(db.String(36), db.ForeignKey('floral_items.id'), nullable=False, index=True)
    submitted_by = db.Column(db.String(64), nullable=False)
    design_status = db.Column(db.String(20), nullable=False, default=DESIGN_IN_REVIEW)
    freelancer_note = db.Column(db.Text)
    admin_note = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    photos = db.relationship('DesignPhoto', backref='design', lazy=True,
                             cascade='all, delete-orphan', order_by='DesignPhoto.sort_order')
    revisions = db.relationship('DesignRevision', backref='design', lazy=True,
                                cascade='all, delete-orphan', order_by='DesignRevision.number')

    __table_args__ = (
        db.UniqueConstraint('floral_item_id', 'submitted_by', name='unique_item_designer'),
    )

    def __repr__(self):
        return f'<FloralItemDesign {self.id} {self.design_status}>'

    @property
    def latest_revision(self):
        return self.revisions[-1] if self.revisions else None

    def replace_photos(self, photo_urls):
        self.photos = [DesignPhoto(photo_url=url, sort_order=i) for i, url in enumerate(photo_urls)]

    def to_dict(self):
        return {
            'id': self.id,
            'project_id': self.project_id,
            'floral_item_id': self.floral_item_id,
            'submitted_by': self.submitted_by,
            'design_status': self.design_status,
            'approved': self.design_status == DESIGN_APPROVED,
            'revision_requested': self.design_status == DESIGN_NEEDS_REVISION,
            'freelancer_note': self.freelancer_note,
            'admin_note': self.admin_note,
            'photos': [{'id': p.id, 'photo_url': p.photo_url} for p in self.photos],
            'revision_history': [r.to_dict() for r in self.revisions],
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


class DesignPhoto(db.Model):
    """Photo attached to a design"""
    __tablename__ = 'design_photos'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    floral_item_design_id = db.Column(db.String(36), db.ForeignKey('floral_item_designs.id'),
                                      nullable=False, index=True)
    photo_url = db.Column(db.String(1024), nullable=False)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class DesignRevision(db.Model):
    """One submission in a design's review history"""
    __tablename__ = 'design_revisions'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    floral_item_design_id = db.Column(db.String(36), db.ForeignKey('floral_item_designs.id'),
                                      nullable=False, index=True)
    number = db.Column(db.Integer, nullable=False, default=1)
    photo_url = db.Column(db.String(1024), nullable=False)
    note = db.Column(db.Text)
    status = db.Column(db.String(20), nullable=False, default=DESIGN_IN_REVIEW)
    admin_note = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'number': self.number,
            'photo_url': self.photo_url,
            'note': self.note,
            'status': self.status,
            'admin_note': self.admin_note,
            'timestamp': self.created_at.isoformat() if self.created_at else None,
        }
