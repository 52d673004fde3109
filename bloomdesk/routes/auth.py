"""
Session Routes

Identity is owned by the hosted auth provider. These routes only exchange a
provider access token for a Flask session and describe the current user.

FLOW OVERVIEW
- /auth/session [POST]
  • Verify {access_token}, provision local rows on first sight, set session.
- /auth/me [GET]
  • Current user, role, profile and studio membership.
- /auth/logout [POST]
  • Clear the session.
"""

from flask import Blueprint, jsonify, session, current_app, g

from ..models import Studio
from ..utils.api_utils import get_json_body
from ..utils.auth_utils import (
    verify_access_token, provision_user, get_current_user, login_required, studio_ids_for_freelancer
)

auth_bp = Blueprint('auth', __name__)


def _describe(user):
    data = {
        'user': user.to_dict(),
        'role': user.role,
        'profile': user.profile.to_dict() if user.profile else None,
    }
    if user.is_admin():
        studio = Studio.for_admin(user.user_id)
        data['studio_id'] = studio.id if studio else None
    else:
        data['studio_ids'] = studio_ids_for_freelancer(user.user_id)
    return data


@auth_bp.route('/session', methods=['POST'])
def create_session():
    """Exchange a provider access token for a session"""
    data = get_json_body()
    claims = verify_access_token(data.get('access_token'))
    user = provision_user(claims)

    session.clear()
    session['user_id'] = user.user_id
    session['user_email'] = user.email
    session.permanent = True
    g.current_user = user

    current_app.logger.info(f"Session started for {user.user_id} ({user.role})")
    return jsonify(_describe(user))


@auth_bp.route('/me')
@login_required
def me():
    return jsonify(_describe(get_current_user()))


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """Logout route"""
    session.clear()
    return jsonify({'success': True})
