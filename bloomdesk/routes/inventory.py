"""
Inventory Routes

FLOW OVERVIEW
- /api/projects/<id>/inventory [GET]
  • Flower and hard good rows, ?filter=all|approved|flagged|pending.
- /api/projects/<id>/flowers, /hard-goods [POST] (admin)
  • New rows reopen the confirmation of that list.
- /api/projects/<id>/flowers/import, /hard-goods/import [POST] (admin)
  • CSV (multipart `file` or raw body); header skipped; rows appended.
- /api/flowers/<row_id>, /api/hard-goods/<row_id> [PATCH, DELETE] (admin)
- /api/<kind>/<row_id>/confirm, /flag, /clear-flag [POST] (assigned freelancer)
- /api/<kind>/<row_id>/photo [PUT, DELETE] (assigned freelancer)
- /api/projects/<id>/inventory/confirm [POST] (assigned freelancer)
  • {kind}; refused while any row of that kind is flagged.
- /api/projects/<id>/quality [POST] (assigned freelancer)
"""

from flask import Blueprint, jsonify, request, current_app

from ..models import db
from ..models.inventory import (
    INVENTORY_MODELS, INVENTORY_KINDS, KIND_FLOWERS, KIND_HARD_GOODS, ITEM_APPROVED, ITEM_FLAGGED
)
from ..models.user import ROLE_ADMIN
from ..utils.api_utils import get_json_body, get_or_404, read_upload_text, require_note
from ..utils.auth_utils import (
    login_required, role_required, get_current_user, load_project_for, require_assigned
)
from ..utils.csv_import import parse_flower_rows, parse_hard_good_rows
from ..utils.error_handlers import Conflict, ValidationError, NotFound
from ..utils.notifier import notify, notify_many
from ..utils.prom_metrics import observe_inventory_import
from ..utils.validators import (
    clean_flower_row_payload, clean_hard_good_row_payload, clean_quality_payload, require_photo_url
)
from .projects import owned_project

inventory_bp = Blueprint('inventory', __name__)

# URL segment -> inventory kind
SEGMENT = '<any(flowers, "hard-goods"):segment>'
URL_KINDS = {'flowers': KIND_FLOWERS, 'hard-goods': KIND_HARD_GOODS}

ROW_CLEANERS = {
    KIND_FLOWERS: clean_flower_row_payload,
    KIND_HARD_GOODS: clean_hard_good_row_payload,
}

CSV_PARSERS = {
    KIND_FLOWERS: parse_flower_rows,
    KIND_HARD_GOODS: parse_hard_good_rows,
}

ROW_FILTERS = {
    'all': lambda row: True,
    'approved': lambda row: row.status == ITEM_APPROVED,
    'flagged': lambda row: row.status == ITEM_FLAGGED,
    'pending': lambda row: row.status is None,
}


def _kind(segment):
    kind = URL_KINDS.get(segment)
    if kind is None:
        raise NotFound('Unknown inventory type')
    return kind


def _rows(project, kind):
    return project.flower_inventory if kind == KIND_FLOWERS else project.hard_good_inventory


def _row_label(row):
    return getattr(row, 'flower', None) or getattr(row, 'item', '')


def _load_row(user, kind, row_id):
    row = get_or_404(INVENTORY_MODELS[kind], row_id, 'Inventory item not found')
    project = load_project_for(user, row.project_id)
    return row, project


@inventory_bp.route('/projects/<project_id>/inventory', methods=['GET'])
@login_required
def list_inventory(project_id):
    project = load_project_for(get_current_user(), project_id)
    row_filter = request.args.get('filter', 'all')
    if row_filter not in ROW_FILTERS:
        raise ValidationError(f"Unknown filter: {row_filter}")
    keep = ROW_FILTERS[row_filter]
    return jsonify({
        'project_id': project.id,
        'flowers_confirmed': project.flowers_confirmed,
        'hard_goods_confirmed': project.hard_goods_confirmed,
        'inventory_confirmed': project.inventory_confirmed,
        'flowers': [r.to_dict() for r in project.flower_inventory if keep(r)],
        'hard_goods': [r.to_dict() for r in project.hard_good_inventory if keep(r)],
    })


@inventory_bp.route(f'/projects/<project_id>/{SEGMENT}', methods=['POST'])
@role_required(ROLE_ADMIN)
def create_row(project_id, segment):
    kind = _kind(segment)
    project = owned_project(get_current_user(), project_id)
    fields = ROW_CLEANERS[kind](get_json_body())
    rows = _rows(project, kind)
    row = INVENTORY_MODELS[kind](sort_order=len(rows), **fields)
    rows.append(row)
    _unconfirm(project, kind)
    db.session.commit()
    return jsonify(row.to_dict()), 201


@inventory_bp.route(f'/projects/<project_id>/{SEGMENT}/import', methods=['POST'])
@role_required(ROLE_ADMIN)
def import_rows(project_id, segment):
    kind = _kind(segment)
    user = get_current_user()
    project = owned_project(user, project_id)
    parsed = CSV_PARSERS[kind](read_upload_text())

    rows = _rows(project, kind)
    start = len(rows)
    for offset, fields in enumerate(parsed):
        rows.append(INVENTORY_MODELS[kind](sort_order=start + offset, **fields))
    if parsed:
        _unconfirm(project, kind)

    if parsed and project.assigned_ids:
        label = 'flower' if kind == KIND_FLOWERS else 'hard good'
        notify_many(project.assigned_ids, 'inventory_instructions',
                    f"{len(parsed)} {label} row(s) added to {project.event_name}",
                    actor_id=user.user_id, project=project, target_tab='inventory')
    db.session.commit()
    observe_inventory_import(kind, len(parsed))

    current_app.logger.info(f"Imported {len(parsed)} {kind} rows into project {project.id}")
    return jsonify({'imported': len(parsed), 'rows': [r.to_dict() for r in rows]}), 201


@inventory_bp.route(f'/{SEGMENT}/<row_id>', methods=['PATCH'])
@role_required(ROLE_ADMIN)
def update_row(segment, row_id):
    kind = _kind(segment)
    user = get_current_user()
    row = get_or_404(INVENTORY_MODELS[kind], row_id, 'Inventory item not found')
    owned_project(user, row.project_id)
    for field, value in ROW_CLEANERS[kind](get_json_body(), partial=True).items():
        setattr(row, field, value)
    db.session.commit()
    return jsonify(row.to_dict())


@inventory_bp.route(f'/{SEGMENT}/<row_id>', methods=['DELETE'])
@role_required(ROLE_ADMIN)
def delete_row(segment, row_id):
    kind = _kind(segment)
    row = get_or_404(INVENTORY_MODELS[kind], row_id, 'Inventory item not found')
    project = owned_project(get_current_user(), row.project_id)
    _rows(project, kind).remove(row)
    db.session.commit()
    return jsonify({'success': True})


def _unconfirm(project, kind):
    """Any row change reopens the list confirmation of that kind"""
    if kind == KIND_FLOWERS:
        project.flowers_confirmed = False
    else:
        project.hard_goods_confirmed = False
    project.refresh_inventory_confirmed()


@inventory_bp.route(f'/{SEGMENT}/<row_id>/confirm', methods=['POST'])
@login_required
def confirm_row(segment, row_id):
    kind = _kind(segment)
    user = get_current_user()
    row, project = _load_row(user, kind, row_id)
    require_assigned(user, project)
    row.confirm(user.user_id)
    if row.status != ITEM_APPROVED:
        _unconfirm(project, kind)
    db.session.commit()
    return jsonify(row.to_dict())


@inventory_bp.route(f'/{SEGMENT}/<row_id>/flag', methods=['POST'])
@login_required
def flag_row(segment, row_id):
    kind = _kind(segment)
    user = get_current_user()
    row, project = _load_row(user, kind, row_id)
    require_assigned(user, project)
    note = require_note(get_json_body())

    was_flagged = row.flag(user.user_id, note)
    _unconfirm(project, kind)
    label = _row_label(row)
    notify(project.created_by,
           'inventory_note' if was_flagged else 'item_flagged',
           f"{'Note added to' if was_flagged else 'Flagged'} {label} on {project.event_name}",
           actor_id=user.user_id, project=project, target_tab='inventory',
           target_item_id=row.id, context_preview=note)
    db.session.commit()

    current_app.logger.info(f"{kind} row {row.id} flagged by {user.user_id}")
    return jsonify(row.to_dict())


@inventory_bp.route(f'/{SEGMENT}/<row_id>/clear-flag', methods=['POST'])
@login_required
def clear_row_flag(segment, row_id):
    kind = _kind(segment)
    user = get_current_user()
    row, project = _load_row(user, kind, row_id)
    require_assigned(user, project)
    row.clear_flag(user.user_id)
    db.session.commit()
    return jsonify(row.to_dict())


@inventory_bp.route(f'/{SEGMENT}/<row_id>/photo', methods=['PUT'])
@login_required
def set_row_photo(segment, row_id):
    kind = _kind(segment)
    user = get_current_user()
    row, project = _load_row(user, kind, row_id)
    require_assigned(user, project)
    row.set_photo(user.user_id, require_photo_url(get_json_body()))
    db.session.commit()
    return jsonify(row.to_dict())


@inventory_bp.route(f'/{SEGMENT}/<row_id>/photo', methods=['DELETE'])
@login_required
def delete_row_photo(segment, row_id):
    kind = _kind(segment)
    user = get_current_user()
    row, project = _load_row(user, kind, row_id)
    require_assigned(user, project)
    row.set_photo(user.user_id, None)
    db.session.commit()
    return jsonify(row.to_dict())


@inventory_bp.route('/projects/<project_id>/inventory/confirm', methods=['POST'])
@login_required
def confirm_inventory(project_id):
    user = get_current_user()
    project = load_project_for(user, project_id)
    require_assigned(user, project)

    kind = get_json_body().get('kind')
    if kind not in INVENTORY_KINDS:
        raise ValidationError(f"kind must be one of: {', '.join(INVENTORY_KINDS)}")

    flagged = [r for r in _rows(project, kind) if r.status == ITEM_FLAGGED]
    if flagged:
        raise Conflict(
            f"{len(flagged)} item(s) are still flagged",
            details={'flagged': [r.id for r in flagged]},
        )

    if kind == KIND_FLOWERS:
        project.flowers_confirmed = True
    else:
        project.hard_goods_confirmed = True
    project.refresh_inventory_confirmed()

    label = 'Flower' if kind == KIND_FLOWERS else 'Hard goods'
    notify(project.created_by, 'inventory_approved',
           f"{label} list approved for {project.event_name}",
           actor_id=user.user_id, project=project, target_tab='inventory')
    db.session.commit()

    current_app.logger.info(f"{kind} list confirmed on project {project.id} by {user.user_id}")
    return jsonify({
        'flowers_confirmed': project.flowers_confirmed,
        'hard_goods_confirmed': project.hard_goods_confirmed,
        'inventory_confirmed': project.inventory_confirmed,
    })


@inventory_bp.route('/projects/<project_id>/quality', methods=['POST'])
@login_required
def quality_check(project_id):
    user = get_current_user()
    project = load_project_for(user, project_id)
    require_assigned(user, project)
    fields = clean_quality_payload(get_json_body())

    project.quality_status = fields['status']
    project.quality_note = fields['note']
    if fields['status'] == 'issue':
        notify(project.created_by, 'item_flagged',
               f"Quality issue reported on {project.event_name}",
               actor_id=user.user_id, project=project, target_tab='inventory',
               context_preview=fields['note'])
    db.session.commit()
    return jsonify({'quality_status': project.quality_status, 'quality_note': project.quality_note})
