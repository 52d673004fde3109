"""
Notification Delivery

FLOW OVERVIEW
- notify(recipient_id, event_id, message, actor_id=..., project=..., ...)
  • Skips the acting user and events outside the recipient role's catalogue.
  • Resolves the recipient's effective preferences (role defaults + stored toggles).
  • in_app: adds a Notification row (caller commits).
  • email: sends through Flask-Mail when the recipient has an address.
  • sms: logged only; no SMS gateway is configured.
- send_invite_email(invite, link)
- send_upcoming_reminders(days, today)
  • upcoming_reminder for admins of assigned projects starting within `days`,
    once per (project, admin).
"""

import logging
import smtplib
from datetime import date, timedelta

from flask import current_app
from flask_mail import Message

from ..models import db, User, Notification, NotificationPreference, Project
from ..models.notification import find_event, CHANNEL_IN_APP, CHANNEL_EMAIL, CHANNEL_SMS
from ..models.project import STATUS_ASSIGNED
from .prom_metrics import observe_notification

logger = logging.getLogger(__name__)


def _send_mail(subject, recipient, body):
    """Send one email; returns True on success"""
    mail = current_app.extensions.get('mail')
    if mail is None:
        logger.warning(f"Mail extension not initialised, dropping email to {recipient}")
        return False
    try:
        mail.send(Message(subject, recipients=[recipient], body=body))
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send email to {recipient}: {e}")
        return False
    return True


def notify(recipient_id, event_id, message, actor_id=None, project=None,
           target_tab=None, target_item_id=None, context_preview=None):
    """
    Deliver one event to one user according to their preferences.

    Returns the list of channels delivered on.
    """
    if not recipient_id or recipient_id == actor_id:
        return []

    user = User.query.filter_by(user_id=recipient_id).first()
    if user is None:
        logger.warning(f"Notification {event_id} for unknown user {recipient_id}")
        return []

    event = find_event(user.role, event_id)
    if event is None:
        logger.warning(f"Event {event_id} is not in the {user.role} catalogue")
        return []

    prefs = NotificationPreference.effective(recipient_id, user.role)[event_id]
    project_name = project.event_name if project is not None else None
    delivered = []

    if prefs[CHANNEL_IN_APP]:
        db.session.add(Notification(
            user_id=recipient_id,
            message=message,
            type=event.type,
            event=event_id,
            project_id=project.id if project is not None else None,
            project_name=project_name,
            target_tab=target_tab,
            target_item_id=target_item_id,
            context_preview=context_preview,
        ))
        delivered.append(CHANNEL_IN_APP)

    if prefs[CHANNEL_EMAIL]:
        address = (user.profile.email if user.profile and user.profile.email else user.email)
        if address:
            subject = f"{event.label}: {project_name}" if project_name else event.label
            body = message if not context_preview else f"{message}\n\n{context_preview}"
            if _send_mail(subject, address, body):
                delivered.append(CHANNEL_EMAIL)

    if prefs[CHANNEL_SMS]:
        phone = user.profile.phone if user.profile else ''
        if phone:
            logger.info(f"SMS to {phone} ({event_id}): {message}")
            delivered.append(CHANNEL_SMS)

    for channel in delivered:
        observe_notification(channel)
    logger.debug(f"Notified {recipient_id} of {event_id} via {delivered}")
    return delivered


def notify_many(recipient_ids, event_id, message, **kwargs):
    return {uid: notify(uid, event_id, message, **kwargs) for uid in recipient_ids}


def send_invite_email(invite, studio_name, link):
    body = (
        f"You've been invited to join {studio_name} on BloomDesk.\n\n"
        f"Open this link to accept the invitation:\n{link}\n"
    )
    return _send_mail(f"Join {studio_name} on BloomDesk", invite.email, body)


def send_upcoming_reminders(days, today=None):
    """Create upcoming_reminder notifications; returns how many were sent"""
    today = today or date.today()
    horizon = today + timedelta(days=days)
    projects = Project.query.filter(
        Project.status == STATUS_ASSIGNED,
        Project.date_start >= today,
        Project.date_start <= horizon,
    ).all()

    sent = 0
    for project in projects:
        already = Notification.query.filter_by(
            user_id=project.created_by, project_id=project.id, event='upcoming_reminder'
        ).first()
        if already:
            continue
        days_left = (project.date_start - today).days
        when = 'today' if days_left == 0 else f"in {days_left} day{'s' if days_left != 1 else ''}"
        if notify(project.created_by, 'upcoming_reminder',
                  f"{project.event_name} starts {when}",
                  project=project, target_tab='overview'):
            sent += 1
    db.session.commit()
    return sent
