"""
Design Routes

FLOW OVERVIEW
- /api/floral-items/<id>/designs [POST] (assigned freelancer)
  • {photos: [url...], note}; creates or resubmits the freelancer's design,
    replaces its photos and appends an in_review revision.
- /api/designs/<id> [GET]
  • Design with photos and revision history (admin owner or the submitter).
- /api/designs/<id>/approve [POST] (admin)
- /api/designs/<id>/request-revision [POST] (admin, note required)
  • Only from in_review; the latest revision mirrors the outcome.
"""

from flask import Blueprint, jsonify, current_app

from ..models import db, FloralItem, FloralItemDesign, DesignRevision
from ..models.design import DESIGN_NEEDS_REVISION, DESIGN_APPROVED
from ..models.user import ROLE_ADMIN
from ..utils.api_utils import get_json_body, get_or_404, optional_note, require_note
from ..utils.auth_utils import (
    login_required, role_required, get_current_user, load_project_for, require_assigned,
    require_project_owner
)
from ..utils.error_handlers import Conflict, ValidationError, NotFound
from ..utils.notifier import notify
from ..utils.project_status import (
    next_design_status, InvalidTransition, ACTION_SUBMIT, ACTION_APPROVE, ACTION_REQUEST_REVISION
)
from ..utils.prom_metrics import observe_design_review
from ..utils.validators import require_photo_url

designs_bp = Blueprint('designs', __name__)


def _photo_urls(data):
    photos = data.get('photos')
    if not isinstance(photos, list) or not photos:
        raise ValidationError('Add at least one photo', details={'photos': 'Add at least one photo'})
    return [require_photo_url({'photo_url': p}) for p in photos]


def _visible_design(user, design_id):
    design = get_or_404(FloralItemDesign, design_id, 'Design not found')
    project = load_project_for(user, design.project_id)
    if not user.is_admin() and design.submitted_by != user.user_id:
        raise NotFound('Design not found')
    return design, project


@designs_bp.route('/floral-items/<item_id>/designs', methods=['POST'])
@login_required
def submit_design(item_id):
    user = get_current_user()
    item = get_or_404(FloralItem, item_id, 'Floral item not found')
    project = load_project_for(user, item.project_id)
    require_assigned(user, project)

    data = get_json_body()
    urls = _photo_urls(data)
    note = optional_note(data)

    design = FloralItemDesign.query.filter_by(floral_item_id=item.id, submitted_by=user.user_id).first()
    previous = design.design_status if design else None
    try:
        status = next_design_status(previous, ACTION_SUBMIT)
    except InvalidTransition as e:
        raise Conflict(str(e))

    if design is None:
        design = FloralItemDesign(project=project, floral_item=item, submitted_by=user.user_id)
        db.session.add(design)

    design.design_status = status
    design.freelancer_note = note
    design.replace_photos(urls)
    design.revisions.append(DesignRevision(
        number=len(design.revisions) + 1,
        photo_url=urls[0],
        note=note,
        status=status,
    ))

    resubmitted = previous == DESIGN_NEEDS_REVISION
    notify(project.created_by,
           'revision_completed' if resubmitted else 'photos_uploaded',
           f"{'Revision submitted' if resubmitted else 'Photos uploaded'} for {item.name} on {project.event_name}",
           actor_id=user.user_id, project=project, target_tab='designs',
           target_item_id=item.id, context_preview=note)
    db.session.commit()

    current_app.logger.info(f"Design {design.id} submitted by {user.user_id} ({previous} -> {status})")
    return jsonify(design.to_dict()), 201 if previous is None else 200


@designs_bp.route('/designs/<design_id>', methods=['GET'])
@login_required
def get_design(design_id):
    design, _ = _visible_design(get_current_user(), design_id)
    return jsonify(design.to_dict())


def _review(design_id, action):
    user = get_current_user()
    design, project = _visible_design(user, design_id)
    require_project_owner(user, project)

    data = get_json_body(required=False)
    if action == ACTION_REQUEST_REVISION:
        admin_note = require_note(data, 'admin_note', 'Please describe the revision you need')
    else:
        admin_note = optional_note(data, 'admin_note')

    try:
        status = next_design_status(design.design_status, action)
    except InvalidTransition as e:
        raise Conflict(str(e))

    design.design_status = status
    design.admin_note = admin_note
    latest = design.latest_revision
    if latest is not None:
        latest.status = status
        latest.admin_note = admin_note

    item_name = design.floral_item.name
    if status == DESIGN_APPROVED:
        event_id, message = 'design_approved', f"Your design for {item_name} was approved"
    else:
        event_id, message = 'revision_requested', f"Revision requested for {item_name}"
    notify(design.submitted_by, event_id, message,
           actor_id=user.user_id, project=project, target_tab='designs',
           target_item_id=design.floral_item_id, context_preview=admin_note)
    db.session.commit()

    observe_design_review(status)
    current_app.logger.info(f"Design {design.id} reviewed by {user.user_id}: {status}")
    return jsonify(design.to_dict())


@designs_bp.route('/designs/<design_id>/approve', methods=['POST'])
@role_required(ROLE_ADMIN)
def approve_design(design_id):
    return _review(design_id, ACTION_APPROVE)


@designs_bp.route('/designs/<design_id>/request-revision', methods=['POST'])
@role_required(ROLE_ADMIN)
def request_revision(design_id):
    return _review(design_id, ACTION_REQUEST_REVISION)
