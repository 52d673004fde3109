"""
Notification Models

FLOW OVERVIEW
- Notification: in-app message for one user, optionally pointing at a project tab/item.
- NotificationPreference: stored override of a (event, channel) toggle; anything
  not stored falls back to the role defaults from default_preferences().
- FREELANCER_EVENTS / ADMIN_EVENTS: catalogue of events a role can receive.
"""

from collections import namedtuple
from datetime import datetime
from .database import db
from .utils import generate_uuid

NOTIFICATION_TYPES = ('project', 'approval', 'inventory', 'design', 'comment')
TARGET_TABS = ('overview', 'designs', 'inventory', 'assignment')

CHANNEL_EMAIL = 'email'
CHANNEL_SMS = 'sms'
CHANNEL_IN_APP = 'in_app'
CHANNELS = (CHANNEL_EMAIL, CHANNEL_SMS, CHANNEL_IN_APP)

NotificationEvent = namedtuple('NotificationEvent', 'id label description category type')

FREELANCER_EVENTS = [
    NotificationEvent('new_project', 'New project posted',
                      'A new project is available for you to express interest.',
                      'Project Opportunities', 'project'),
    NotificationEvent('assigned', 'Assigned to project',
                      "You've been approved or assigned to a project.", 'Assignment', 'approval'),
    NotificationEvent('removed', 'Removed from project',
                      "You've been removed from a project assignment.", 'Assignment', 'project'),
    NotificationEvent('details_updated', 'Project details updated',
                      "The admin updated project details you're assigned to.", 'Project Changes', 'project'),
    NotificationEvent('timeline_updated', 'Timeline or logistics updated',
                      'Schedule or logistics changes on your project.', 'Project Changes', 'project'),
    NotificationEvent('recipes_updated', 'Recipes or files updated',
                      'Floral recipes or attached files were changed.', 'Project Changes', 'project'),
    NotificationEvent('revision_requested', 'Revision requested',
                      'The admin requested revisions on your designs.', 'Design Feedback', 'design'),
    NotificationEvent('design_approved', 'Design approved',
                      'The admin approved one of your designs.', 'Design Feedback', 'design'),
    NotificationEvent('admin_comment', 'Admin added comment',
                      'A new note or comment from the admin.', 'Design Feedback', 'comment'),
    NotificationEvent('flag_response', 'Flagged item response',
                      'Admin responded to an item you flagged.', 'Inventory', 'inventory'),
    NotificationEvent('inventory_instructions', 'Inventory updates',
                      'New instructions or updates on inventory items.', 'Inventory', 'inventory'),
]

ADMIN_EVENTS = [
    NotificationEvent('freelancer_available', 'Freelancer marked available',
                      'A freelancer expressed interest in an unassigned project.',
                      'Freelancer Responses', 'project'),
    NotificationEvent('freelancer_declined', 'Freelancer declined',
                      'A freelancer declined a project invitation.', 'Freelancer Responses', 'project'),
    NotificationEvent('photos_uploaded', 'Photos uploaded',
                      'A freelancer uploaded new arrangement photos.', 'Design Activity', 'design'),
    NotificationEvent('freelancer_comment', 'Freelancer added comment',
                      'A freelancer left a note or comment.', 'Design Activity', 'comment'),
    NotificationEvent('revision_completed', 'Revision completed',
                      'A freelancer completed a requested revision.', 'Design Activity', 'design'),
    NotificationEvent('item_flagged', 'Item flagged',
                      'A freelancer flagged an inventory item for review.', 'Inventory Activity', 'inventory'),
    NotificationEvent('inventory_note', 'Note added to item',
                      'A note was added to an inventory item.', 'Inventory Activity', 'inventory'),
    NotificationEvent('inventory_approved', 'Inventory list approved',
                      'Full flower or hard goods list was approved.', 'Inventory Activity', 'inventory'),
    NotificationEvent('project_completed', 'Project completed',
                      'A freelancer marked a project as completed.', 'Project Status', 'project'),
    NotificationEvent('upcoming_reminder', 'Upcoming project reminder',
                      'Reminder for a project approaching its event date.', 'Project Status', 'project'),
]

_FREELANCER_EMAIL_DEFAULTS = {'assigned', 'removed', 'revision_requested'}
_FREELANCER_SMS_DEFAULTS = {'assigned'}
_ADMIN_EMAIL_DEFAULTS = {'photos_uploaded', 'item_flagged', 'freelancer_available', 'inventory_approved'}
_ADMIN_SMS_DEFAULTS = {'item_flagged'}


def events_for_role(role):
    return ADMIN_EVENTS if role == 'admin' else FREELANCER_EVENTS


def find_event(role, event_id):
    for event in events_for_role(role):
        if event.id == event_id:
            return event
    return None


def default_preferences(role):
    """Role defaults: in-app everywhere, email/sms only for the important events"""
    if role == 'admin':
        email_on, sms_on = _ADMIN_EMAIL_DEFAULTS, _ADMIN_SMS_DEFAULTS
    else:
        email_on, sms_on = _FREELANCER_EMAIL_DEFAULTS, _FREELANCER_SMS_DEFAULTS
    return {
        event.id: {
            CHANNEL_IN_APP: True,
            CHANNEL_EMAIL: event.id in email_on,
            CHANNEL_SMS: event.id in sms_on,
        }
        for event in events_for_role(role)
    }


class Notification(db.Model):
    """In-app notification"""
    __tablename__ = 'notifications'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    message = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(20), nullable=False, default='project')
    event = db.Column(db.String(40))
    read = db.Column(db.Boolean, nullable=False, default=False)
    project_id = db.Column(db.String(36), db.ForeignKey('projects.id', ondelete='SET NULL'), index=True)
    project_name = db.Column(db.String(200))
    target_tab = db.Column(db.String(20))
    target_item_id = db.Column(db.String(36))
    context_preview = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f'<Notification {self.event or self.type} for {self.user_id}>'

    def to_dict(self):
        return {
            'id': self.id,
            'message': self.message,
            'type': self.type,
            'event': self.event,
            'read': self.read,
            'project_id': self.project_id,
            'project_name': self.project_name,
            'target_tab': self.target_tab,
            'target_item_id': self.target_item_id,
            'context_preview': self.context_preview,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def for_user(cls, user_id, unread_only=False):
        query = cls.query.filter_by(user_id=user_id)
        if unread_only:
            query = query.filter_by(read=False)
        return query.order_by(cls.created_at.desc()).all()

    @classmethod
    def unread_count(cls, user_id):
        return cls.query.filter_by(user_id=user_id, read=False).count()


class NotificationPreference(db.Model):
    """Stored (event, channel) toggle for a user"""
    __tablename__ = 'notification_preferences'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    event_id = db.Column(db.String(40), nullable=False)
    channel = db.Column(db.String(10), nullable=False)
    enabled = db.Column(db.Boolean, nullable=False, default=True)

    __table_args__ = (
        db.UniqueConstraint('user_id', 'event_id', 'channel', name='unique_user_event_channel'),
    )

    @classmethod
    def effective(cls, user_id, role):
        """Defaults for the role with the user's stored toggles applied"""
        prefs = default_preferences(role)
        for row in cls.query.filter_by(user_id=user_id).all():
            if row.event_id in prefs and row.channel in CHANNELS:
                prefs[row.event_id][row.channel] = row.enabled
        return prefs

    @classmethod
    def toggle(cls, user_id, role, event_id, channel):
        """Flip one toggle and return its new value"""
        current = cls.effective(user_id, role)[event_id][channel]
        row = cls.query.filter_by(user_id=user_id, event_id=event_id, channel=channel).first()
        if row is None:
            row = cls(user_id=user_id, event_id=event_id, channel=channel)
            db.session.add(row)
        row.enabled = not current
        db.session.commit()
        return row.enabled
