"""
Notification Routes

FLOW OVERVIEW
- /api/notifications [GET, DELETE]
  • GET newest first with unread_count, ?unread=1; DELETE clears all own rows.
- /api/notifications/<id>/read [POST], /api/notifications/read-all [POST]
- /api/notifications/<id> [DELETE]
  • Dismiss one; other users' notifications are 404.
- /api/notifications/preferences [GET]
  • Role catalogue grouped by category with effective toggles.
- /api/notifications/preferences/toggle [POST]
  • {event_id, channel}; unknown event for the role or channel is 400.
"""

from flask import Blueprint, jsonify, request

from ..models import db, Notification, NotificationPreference
from ..models.notification import CHANNELS, events_for_role, find_event
from ..utils.api_utils import get_json_body
from ..utils.auth_utils import login_required, get_current_user
from ..utils.error_handlers import NotFound, ValidationError

notifications_bp = Blueprint('notifications', __name__)


def _own_notification(user, notification_id):
    notification = Notification.query.filter_by(id=notification_id, user_id=user.user_id).first()
    if notification is None:
        raise NotFound('Notification not found')
    return notification


@notifications_bp.route('/notifications', methods=['GET'])
@login_required
def list_notifications():
    user = get_current_user()
    unread_only = request.args.get('unread') in ('1', 'true')
    items = Notification.for_user(user.user_id, unread_only=unread_only)
    return jsonify({
        'notifications': [n.to_dict() for n in items],
        'unread_count': Notification.unread_count(user.user_id),
    })


@notifications_bp.route('/notifications/<notification_id>/read', methods=['POST'])
@login_required
def mark_read(notification_id):
    notification = _own_notification(get_current_user(), notification_id)
    notification.read = True
    db.session.commit()
    return jsonify(notification.to_dict())


@notifications_bp.route('/notifications/read-all', methods=['POST'])
@login_required
def mark_all_read():
    user = get_current_user()
    updated = Notification.query.filter_by(user_id=user.user_id, read=False).update({'read': True})
    db.session.commit()
    return jsonify({'updated': updated})


@notifications_bp.route('/notifications/<notification_id>', methods=['DELETE'])
@login_required
def dismiss(notification_id):
    notification = _own_notification(get_current_user(), notification_id)
    db.session.delete(notification)
    db.session.commit()
    return jsonify({'success': True})


@notifications_bp.route('/notifications', methods=['DELETE'])
@login_required
def clear_all():
    user = get_current_user()
    deleted = Notification.query.filter_by(user_id=user.user_id).delete()
    db.session.commit()
    return jsonify({'deleted': deleted})


@notifications_bp.route('/notifications/preferences', methods=['GET'])
@login_required
def get_preferences():
    user = get_current_user()
    prefs = NotificationPreference.effective(user.user_id, user.role)
    categories = {}
    for event in events_for_role(user.role):
        categories.setdefault(event.category, []).append({
            'id': event.id,
            'label': event.label,
            'description': event.description,
            'channels': prefs[event.id],
        })
    return jsonify({
        'role': user.role,
        'categories': [{'name': name, 'events': events} for name, events in categories.items()],
        'preferences': prefs,
    })


@notifications_bp.route('/notifications/preferences/toggle', methods=['POST'])
@login_required
def toggle_preference():
    user = get_current_user()
    data = get_json_body()
    event_id, channel = data.get('event_id'), data.get('channel')
    if find_event(user.role, event_id) is None:
        raise ValidationError(f"Unknown notification event: {event_id}")
    if channel not in CHANNELS:
        raise ValidationError(f"channel must be one of: {', '.join(CHANNELS)}")
    enabled = NotificationPreference.toggle(user.user_id, user.role, event_id, channel)
    return jsonify({'event_id': event_id, 'channel': channel, 'enabled': enabled})
