"""
Project Models

FLOW OVERVIEW
- Project: event job with staffing, inventory and design-approval workflow.
- ProjectAssignment: freelancer approved onto a project.
- FreelancerResponse: freelancer's available/unavailable answer, one per (project, user).
- FloralItem: an arrangement to be designed (e.g. "Bridal bouquet" x1).
- InspirationPhoto: admin-provided reference image URL.

Children are deleted with their project.
"""

from datetime import datetime
from .database import db
from .utils import generate_uuid

STATUS_UNASSIGNED = 'unassigned'
STATUS_ASSIGNED = 'assigned'
STATUS_COMPLETED = 'completed'
PROJECT_STATUSES = (STATUS_UNASSIGNED, STATUS_ASSIGNED, STATUS_COMPLETED)

TRANSPORT_METHODS = ('personal_vehicle', 'uhaul_rental')
SERVICE_LEVELS = ('design', 'delivery', 'setup', 'flip', 'strike')
QUALITY_STATUSES = ('good', 'issue')

RESPONSE_AVAILABLE = 'available'
RESPONSE_UNAVAILABLE = 'unavailable'
RESPONSE_STATUSES = (RESPONSE_AVAILABLE, RESPONSE_UNAVAILABLE)

# Fields an admin may hide from freelancers
TOGGLEABLE_FIELDS = (
    'pay', 'total_hours', 'location', 'timeline', 'description',
    'design_guide', 'transport_method', 'service_level', 'day_of_contact',
)
DEFAULT_VISIBILITY = {field: True for field in TOGGLEABLE_FIELDS}


class Project(db.Model):
    """Event project created by a studio admin"""
    __tablename__ = 'projects'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    created_by = db.Column(db.String(64), nullable=False, index=True)
    event_name = db.Column(db.String(200), nullable=False)
    date_start = db.Column(db.Date, nullable=False)
    date_end = db.Column(db.Date, nullable=False)
    timeline = db.Column(db.Text, nullable=False, default='')
    location = db.Column(db.String(255), nullable=False, default='')
    pay = db.Column(db.Float, nullable=False, default=0)
    total_hours = db.Column(db.Float, nullable=False, default=0)
    description = db.Column(db.Text, nullable=False, default='')
    design_guide = db.Column(db.Text, nullable=False, default='')
    transport_method = db.Column(db.String(32), nullable=False, default='personal_vehicle')
    service_level = db.Column(db.JSON, nullable=False, default=list)
    day_of_contact = db.Column(db.String(255), nullable=False, default='')
    status = db.Column(db.String(20), nullable=False, default=STATUS_UNASSIGNED, index=True)
    designers_needed = db.Column(db.Integer, nullable=False, default=1)
    inventory_confirmed = db.Column(db.Boolean, nullable=False, default=False)
    flowers_confirmed = db.Column(db.Boolean, nullable=False, default=False)
    hard_goods_confirmed = db.Column(db.Boolean, nullable=False, default=False)
    quality_status = db.Column(db.String(20))
    quality_note = db.Column(db.Text)
    field_visibility = db.Column(db.JSON, nullable=False, default=lambda: dict(DEFAULT_VISIBILITY))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    assignments = db.relationship('ProjectAssignment', backref='project', lazy=True,
                                  cascade='all, delete-orphan')
    responses = db.relationship('FreelancerResponse', backref='project', lazy=True,
                                cascade='all, delete-orphan')
    floral_items = db.relationship('FloralItem', backref='project', lazy=True,
                                   cascade='all, delete-orphan', order_by='FloralItem.sort_order')
    inspiration_photos = db.relationship('InspirationPhoto', backref='project', lazy=True,
                                         cascade='all, delete-orphan', order_by='InspirationPhoto.sort_order')
    designs = db.relationship('FloralItemDesign', backref='project', lazy=True,
                              cascade='all, delete-orphan')
    flower_inventory = db.relationship('FlowerInventoryRow', backref='project', lazy=True,
                                       cascade='all, delete-orphan', order_by='FlowerInventoryRow.sort_order')
    hard_good_inventory = db.relationship('HardGoodInventoryRow', backref='project', lazy=True,
                                          cascade='all, delete-orphan', order_by='HardGoodInventoryRow.sort_order')

    def __repr__(self):
        return f'<Project {self.event_name!r} {self.status}>'

    @property
    def assigned_ids(self):
        return [a.user_id for a in self.assignments]

    @property
    def assigned_count(self):
        return len(self.assignments)

    @property
    def open_seats(self):
        return max(0, (self.designers_needed or 0) - self.assigned_count)

    def is_assigned_to(self, user_id):
        return user_id in self.assigned_ids

    def response_for(self, user_id):
        for response in self.responses:
            if response.user_id == user_id:
                return response
        return None

    def visibility(self):
        """Stored visibility merged over defaults"""
        merged = dict(DEFAULT_VISIBILITY)
        merged.update(self.field_visibility or {})
        return merged

    def refresh_inventory_confirmed(self):
        self.inventory_confirmed = bool(self.flowers_confirmed and self.hard_goods_confirmed)


class ProjectAssignment(db.Model):
    """Freelancer approved onto a project"""
    __tablename__ = 'project_assignments'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    project_id = db.Column(db.String(36), db.ForeignKey('projects.id'), nullable=False, index=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint('project_id', 'user_id', name='unique_project_assignment'),
    )


class FreelancerResponse(db.Model):
    """Freelancer's availability answer for a project"""
    __tablename__ = 'freelancer_responses'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    project_id = db.Column(db.String(36), db.ForeignKey('projects.id'), nullable=False, index=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default=RESPONSE_AVAILABLE)
    note = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint('project_id', 'user_id', name='unique_project_response'),
    )

    def to_dict(self):
        return {
            'freelancer_id': self.user_id,
            'status': self.status,
            'note': self.note,
            'timestamp': self.created_at.isoformat() if self.created_at else None,
        }


class FloralItem(db.Model):
    """Arrangement line on a project"""
    __tablename__ = 'floral_items'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    project_id = db.Column(db.String(36), db.ForeignKey('projects.id'), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    designs = db.relationship('FloralItemDesign', backref='floral_item', lazy=True,
                              cascade='all, delete-orphan')

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'quantity': self.quantity, 'sort_order': self.sort_order}


class InspirationPhoto(db.Model):
    """Reference image for a project"""
    __tablename__ = 'inspiration_photos'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    project_id = db.Column(db.String(36), db.ForeignKey('projects.id'), nullable=False, index=True)
    photo_url = db.Column(db.String(1024), nullable=False)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {'id': self.id, 'photo_url': self.photo_url, 'sort_order': self.sort_order}
