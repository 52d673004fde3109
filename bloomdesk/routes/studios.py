"""
Studio Routes

FLOW OVERVIEW
- /api/studio [GET, POST, PATCH] (admin)
  • Own studio; one studio per admin.
- /api/studio/roster [GET], /api/studio/roster/<freelancer_id> [DELETE] (admin)
- /api/studio/invites [GET, POST], /api/studio/invites/<id>/revoke [POST] (admin)
  • POST upserts per (studio, email), keeps the token, emails the join link.
- /api/invites/<token> [GET] (public)
- /api/invites/<token>/accept, /decline [POST] (login)
  • accept: roster upsert, idempotent when already accepted, 409 when declined.
  • decline: 403 for admins, 409 when already accepted.
- /api/studios/mine [GET] (freelancer)
"""

from datetime import datetime

from flask import Blueprint, jsonify, request, current_app

from ..models import db, Studio, StudioRosterEntry, StudioInvite
from ..models.studio import INVITE_PENDING, INVITE_ACCEPTED, INVITE_DECLINED
from ..models.user import ROLE_ADMIN, ROLE_FREELANCER
from ..utils.api_utils import get_json_body
from ..utils.auth_utils import login_required, role_required, get_current_user
from ..utils.error_handlers import NotFound, Conflict, ValidationError, PermissionDenied
from ..utils.notifier import send_invite_email
from ..utils.validators import clean_studio_payload, validate_email
from ..utils.view_models import profile_map

studios_bp = Blueprint('studios', __name__)


def _own_studio(user):
    studio = Studio.for_admin(user.user_id)
    if studio is None:
        raise NotFound('Studio not found')
    return studio


def invite_link(token):
    return f"{current_app.config.get('APP_BASE_URL', '').rstrip('/')}/invite?token={token}"


@studios_bp.route('/studio', methods=['GET'])
@role_required(ROLE_ADMIN)
def get_studio():
    return jsonify(_own_studio(get_current_user()).to_dict())


@studios_bp.route('/studio', methods=['POST'])
@role_required(ROLE_ADMIN)
def create_studio():
    user = get_current_user()
    if Studio.for_admin(user.user_id):
        raise Conflict('You already have a studio')
    fields = clean_studio_payload(get_json_body())
    studio = Studio(admin_id=user.user_id, **fields)
    db.session.add(studio)
    db.session.commit()
    current_app.logger.info(f"Studio {studio.id} created by {user.user_id}")
    return jsonify(studio.to_dict()), 201


@studios_bp.route('/studio', methods=['PATCH'])
@role_required(ROLE_ADMIN)
def update_studio():
    studio = _own_studio(get_current_user())
    for field, value in clean_studio_payload(get_json_body(), partial=True).items():
        setattr(studio, field, value)
    db.session.commit()
    return jsonify(studio.to_dict())


@studios_bp.route('/studio/roster', methods=['GET'])
@role_required(ROLE_ADMIN)
def get_roster():
    studio = _own_studio(get_current_user())
    entries = sorted(studio.roster, key=lambda e: e.joined_at or datetime.min)
    profiles = profile_map(e.freelancer_id for e in entries)
    return jsonify({
        'studio_id': studio.id,
        'members': [
            {
                'freelancer_id': e.freelancer_id,
                'joined_at': e.joined_at.isoformat() if e.joined_at else None,
                'profile': profiles.get(e.freelancer_id),
            }
            for e in entries
        ],
    })


@studios_bp.route('/studio/roster/<freelancer_id>', methods=['DELETE'])
@role_required(ROLE_ADMIN)
def remove_roster_member(freelancer_id):
    studio = _own_studio(get_current_user())
    entry = StudioRosterEntry.query.filter_by(studio_id=studio.id, freelancer_id=freelancer_id).first()
    if entry is None:
        raise NotFound('Freelancer is not on your roster')
    db.session.delete(entry)
    db.session.commit()
    current_app.logger.info(f"Removed {freelancer_id} from studio {studio.id}")
    return jsonify({'success': True})


@studios_bp.route('/studio/invites', methods=['GET'])
@role_required(ROLE_ADMIN)
def list_invites():
    studio = _own_studio(get_current_user())
    query = StudioInvite.query.filter_by(studio_id=studio.id)
    status = request.args.get('status')
    if status:
        if status not in (INVITE_PENDING, INVITE_ACCEPTED, INVITE_DECLINED):
            raise ValidationError(f"Unknown invite status: {status}")
        query = query.filter_by(status=status)
    invites = query.order_by(StudioInvite.invited_at.desc()).all()
    return jsonify({'invites': [i.to_dict() for i in invites]})


@studios_bp.route('/studio/invites', methods=['POST'])
@role_required(ROLE_ADMIN)
def create_invite():
    user = get_current_user()
    studio = _own_studio(user)
    result = validate_email(get_json_body().get('email'))
    if not result.is_valid:
        raise ValidationError(result.error_message, details={'email': result.error_message})

    invite = StudioInvite.upsert(studio.id, result.sanitized_value, user.user_id)
    db.session.commit()

    link = invite_link(invite.token)
    emailed = send_invite_email(invite, studio.name or 'a studio', link)
    current_app.logger.info(f"Invite {invite.id} for {invite.email} to studio {studio.id} (emailed={emailed})")

    data = invite.to_dict()
    data.update({'link': link, 'emailed': emailed})
    return jsonify(data), 201


@studios_bp.route('/studio/invites/<invite_id>/revoke', methods=['POST'])
@role_required(ROLE_ADMIN)
def revoke_invite(invite_id):
    studio = _own_studio(get_current_user())
    invite = StudioInvite.query.filter_by(id=invite_id, studio_id=studio.id).first()
    if invite is None:
        raise NotFound('Invite not found')
    invite.status = INVITE_DECLINED
    db.session.commit()
    return jsonify(invite.to_dict())


def _invite_by_token(token):
    invite = StudioInvite.query.filter_by(token=token).first()
    if invite is None:
        raise NotFound('Invite not found')
    return invite


@studios_bp.route('/invites/<token>', methods=['GET'])
def get_invite(token):
    """Public invite lookup used by the join page"""
    invite = _invite_by_token(token)
    return jsonify({
        'email': invite.email,
        'status': invite.status,
        'studio': {
            'id': invite.studio.id,
            'name': invite.studio.name,
            'logo_url': invite.studio.logo_url,
        },
    })


@studios_bp.route('/invites/<token>/accept', methods=['POST'])
@login_required
def accept_invite(token):
    user = get_current_user()
    if user.is_admin():
        raise PermissionDenied('Only freelancers can join a studio roster')
    invite = _invite_by_token(token)
    if invite.status == INVITE_DECLINED:
        raise Conflict('This invite is no longer valid')

    _, added = invite.studio.add_member(user.user_id)
    if invite.status != INVITE_ACCEPTED:
        invite.status = INVITE_ACCEPTED
        invite.accepted_at = datetime.utcnow()
    db.session.commit()
    current_app.logger.info(f"{user.user_id} accepted invite to studio {invite.studio_id} (new={added})")
    return jsonify({'invite': invite.to_dict(), 'studio': invite.studio.to_dict()})


@studios_bp.route('/invites/<token>/decline', methods=['POST'])
@login_required
def decline_invite(token):
    if get_current_user().is_admin():
        raise PermissionDenied('Only freelancers can decline a studio invite')
    invite = _invite_by_token(token)
    if invite.status == INVITE_ACCEPTED:
        raise Conflict('This invite was already accepted')
    invite.status = INVITE_DECLINED
    db.session.commit()
    return jsonify({'invite': invite.to_dict()})


@studios_bp.route('/studios/mine', methods=['GET'])
@role_required(ROLE_FREELANCER)
def my_studios():
    user = get_current_user()
    entries = StudioRosterEntry.query.filter_by(freelancer_id=user.user_id).all()
    return jsonify({'studios': [
        dict(e.studio.to_dict(), joined_at=e.joined_at.isoformat() if e.joined_at else None)
        for e in entries
    ]})
