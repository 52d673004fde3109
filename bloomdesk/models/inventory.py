"""
Inventory Models

FLOW OVERVIEW
- FlowerInventoryRow / HardGoodInventoryRow: line items on a project.
- status is None (pending), 'approved' (confirmed by the freelancer) or
  'flagged' (issue reported with a note).
- confirm/flag/clear_flag apply the freelancer transitions and stamp
  updated_by/updated_at.
"""

from datetime import datetime
from .database import db
from .utils import generate_uuid

ITEM_APPROVED = 'approved'
ITEM_FLAGGED = 'flagged'
ITEM_STATUSES = (ITEM_APPROVED, ITEM_FLAGGED)

KIND_FLOWERS = 'flowers'
KIND_HARD_GOODS = 'hard_goods'
INVENTORY_KINDS = (KIND_FLOWERS, KIND_HARD_GOODS)


class InventoryRowMixin:
    """Shared status handling for inventory rows"""

    # Name of the column holding the freelancer's note
    note_field = 'notes'

    def _stamp(self, user_id):
        self.updated_by = user_id
        self.updated_at = datetime.utcnow()

    @property
    def note(self):
        return getattr(self, self.note_field)

    def confirm(self, user_id):
        """Toggle confirmation: approved goes back to pending, anything else becomes approved.

        Returns the new status.
        """
        if self.status == ITEM_APPROVED:
            self.status = None
        else:
            self.status = ITEM_APPROVED
            setattr(self, self.note_field, None)
        self._stamp(user_id)
        return self.status

    def flag(self, user_id, note):
        """Flag the row with a required note. Returns True if it was already flagged."""
        note = (note or '').strip()
        if not note:
            raise ValueError('Please add a note describing the issue')
        was_flagged = self.status == ITEM_FLAGGED
        self.status = ITEM_FLAGGED
        setattr(self, self.note_field, note)
        self._stamp(user_id)
        return was_flagged

    def clear_flag(self, user_id):
        self.status = None
        setattr(self, self.note_field, None)
        self._stamp(user_id)

    def set_photo(self, user_id, photo_url):
        self.photo_url = photo_url
        self._stamp(user_id)

    def _common_dict(self):
        return {
            'id': self.id,
            'project_id': self.project_id,
            'status': self.status,
            'photo_url': self.photo_url,
            'sort_order': self.sort_order,
            'updated_by': self.updated_by,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


class FlowerInventoryRow(InventoryRowMixin, db.Model):
    """Flower line: stems needed by the recipe and ordered from the wholesaler"""
    __tablename__ = 'flower_inventory'

    note_field = 'quality_notes'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    project_id = db.Column(db.String(36), db.ForeignKey('projects.id'), nullable=False, index=True)
    flower = db.Column(db.String(120), nullable=False)
    color = db.Column(db.String(60), nullable=False, default='')
    stems_in_recipe = db.Column(db.Integer, nullable=False, default=0)
    total_ordered = db.Column(db.Integer, nullable=False, default=0)
    extras = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(db.String(20))
    quality_notes = db.Column(db.Text)
    photo_url = db.Column(db.String(1024))
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    updated_by = db.Column(db.String(64))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        data = self._common_dict()
        data.update({
            'flower': self.flower,
            'color': self.color,
            'stems_in_recipe': self.stems_in_recipe,
            'total_ordered': self.total_ordered,
            'extras': self.extras,
            'quality_notes': self.quality_notes,
        })
        return data


class HardGoodInventoryRow(InventoryRowMixin, db.Model):
    """Hard good line: vases, stands, candles and the like"""
    __tablename__ = 'hard_good_inventory'

    note_field = 'notes'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    project_id = db.Column(db.String(36), db.ForeignKey('projects.id'), nullable=False, index=True)
    item = db.Column(db.String(200), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(db.String(20))
    notes = db.Column(db.Text)
    photo_url = db.Column(db.String(1024))
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    updated_by = db.Column(db.String(64))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        data = self._common_dict()
        data.update({
            'item': self.item,
            'quantity': self.quantity,
            'notes': self.notes,
        })
        return data


INVENTORY_MODELS = {
    KIND_FLOWERS: FlowerInventoryRow,
    KIND_HARD_GOODS: HardGoodInventoryRow,
}
