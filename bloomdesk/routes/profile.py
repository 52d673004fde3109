"""
Profile Routes

FLOW OVERVIEW
- /api/profile [GET]
  • Own profile with initials.
- /api/profile [PATCH]
  • Partial update of contact fields; phone formatted, website checked,
    instagram normalized to @handle.
"""

from flask import Blueprint, jsonify, current_app

from ..models import db, Profile
from ..utils.api_utils import get_json_body
from ..utils.auth_utils import login_required, get_current_user
from ..utils.validators import clean_profile_payload

profile_bp = Blueprint('profile', __name__)


def _own_profile(user):
    profile = user.profile
    if profile is None:
        profile = Profile(user_id=user.user_id, email=user.email)
        db.session.add(profile)
        db.session.commit()
    return profile


@profile_bp.route('/profile', methods=['GET'])
@login_required
def get_profile():
    return jsonify(_own_profile(get_current_user()).to_dict())


@profile_bp.route('/profile', methods=['PATCH'])
@login_required
def update_profile():
    user = get_current_user()
    changes = clean_profile_payload(get_json_body())
    profile = _own_profile(user)
    for field, value in changes.items():
        setattr(profile, field, value)
    db.session.commit()
    current_app.logger.info(f"Profile updated for {user.user_id}: {sorted(changes)}")
    return jsonify(profile.to_dict())
