"""
Project Routes

FLOW OVERVIEW
- /api/projects [GET, POST]
  • GET: nested view-models sorted by closeness to today.
    Admin filter ?status=<status|display status|needs_review>; freelancer ?tab=available|my.
  • POST (admin): validate, create with optional floral_items / inspiration_photos,
    notify the studio roster (new_project).
- /api/projects/<id> [GET, PATCH, DELETE]
  • PATCH (admin): partial update, designers_needed never below assigned count,
    status recomputed, assigned freelancers notified.
- /api/projects/<id>/responses [POST] (freelancer, project unassigned)
- /api/projects/<id>/assignments [POST], /assignments/<user_id> [DELETE] (admin)
- /api/projects/<id>/complete [POST] (admin or assigned freelancer, from assigned)
- /api/projects/<id>/inspiration [POST], /inspiration/<photo_id> [DELETE] (admin)
- /api/projects/<id>/floral-items [POST], /api/floral-items/<id> [PATCH, DELETE] (admin)
"""

from datetime import date

from flask import Blueprint, jsonify, request, current_app

from ..models import (
    db, Project, ProjectAssignment, FreelancerResponse, FloralItem, InspirationPhoto,
    Notification, Studio
)
from ..models.project import (
    STATUS_UNASSIGNED, STATUS_ASSIGNED, STATUS_COMPLETED, PROJECT_STATUSES,
    RESPONSE_AVAILABLE, RESPONSE_STATUSES
)
from ..models.user import ROLE_ADMIN, ROLE_FREELANCER
from ..utils.api_utils import get_json_body, get_or_404, optional_note
from ..utils.auth_utils import (
    login_required, role_required, get_current_user, load_project_for, projects_visible_to,
    require_project_owner
)
from ..utils.error_handlers import Conflict, ValidationError, NotFound, PermissionDenied
from ..utils.notifier import notify, notify_many
from ..utils.project_status import (
    derive_status, freelancer_tab, sort_by_date_proximity, ASSIGNED_SUB_CATEGORIES,
    DISPLAY_OPEN, TAB_MY, TAB_AVAILABLE
)
from ..utils.validators import (
    clean_project_payload, clean_floral_item_payload, require_photo_url, InputValidator
)
from ..utils.view_models import build_project_view, build_project_views

projects_bp = Blueprint('projects', __name__)

ADMIN_STATUS_FILTERS = set(PROJECT_STATUSES) | set(ASSIGNED_SUB_CATEGORIES) | {DISPLAY_OPEN, 'needs_review'}

TIMELINE_FIELDS = {'date_start', 'date_end', 'timeline', 'location', 'transport_method', 'day_of_contact'}
RECIPE_FIELDS = {'design_guide'}


def refresh_status(project):
    """Recompute the staffing status after assignments change"""
    project.status = derive_status(project.status, project.assigned_count, project.designers_needed)
    return project.status


def owned_project(user, project_id):
    project = load_project_for(user, project_id)
    require_project_owner(user, project)
    return project


def _view(project, user):
    return build_project_view(project, user)


def _add_floral_items(project, items):
    if not isinstance(items, list):
        raise ValidationError('floral_items must be a list')
    start = len(project.floral_items)
    for offset, raw in enumerate(items):
        fields = clean_floral_item_payload(raw)
        project.floral_items.append(FloralItem(sort_order=start + offset, **fields))


def _add_inspiration(project, photos):
    if not isinstance(photos, list):
        raise ValidationError('inspiration_photos must be a list')
    start = len(project.inspiration_photos)
    for offset, raw in enumerate(photos):
        url = require_photo_url({'photo_url': raw} if isinstance(raw, str) else raw)
        project.inspiration_photos.append(InspirationPhoto(photo_url=url, sort_order=start + offset))


@projects_bp.route('/projects', methods=['GET'])
@login_required
def list_projects():
    user = get_current_user()
    today = date.today()
    views = build_project_views(projects_visible_to(user), user, today=today)

    if user.is_admin():
        wanted = request.args.get('status')
        if wanted:
            if wanted not in ADMIN_STATUS_FILTERS:
                raise ValidationError(f"Unknown status filter: {wanted}")
            if wanted == 'needs_review':
                views = [v for v in views if v['attention']['needs_attention']]
            elif wanted in PROJECT_STATUSES:
                views = [v for v in views if v['status'] == wanted]
            else:
                views = [v for v in views if v['display_status'] == wanted]
    else:
        tab = request.args.get('tab')
        if tab:
            if tab not in (TAB_AVAILABLE, TAB_MY):
                raise ValidationError(f"Unknown tab: {tab}")
            views = [v for v in views if freelancer_tab(v, user.user_id) == tab]

    return jsonify({'projects': sort_by_date_proximity(views, today)})


@projects_bp.route('/projects', methods=['POST'])
@role_required(ROLE_ADMIN)
def create_project():
    user = get_current_user()
    data = get_json_body()
    fields = clean_project_payload(data)

    project = Project(created_by=user.user_id, status=STATUS_UNASSIGNED, **fields)
    if 'floral_items' in data:
        _add_floral_items(project, data['floral_items'])
    if 'inspiration_photos' in data:
        _add_inspiration(project, data['inspiration_photos'])
    db.session.add(project)
    db.session.flush()

    studio = Studio.for_admin(user.user_id)
    if studio is not None:
        notify_many(studio.member_ids(), 'new_project',
                    f"New project posted: {project.event_name}",
                    actor_id=user.user_id, project=project, target_tab='overview')
    db.session.commit()

    current_app.logger.info(f"Project {project.id} created by {user.user_id}")
    return jsonify(_view(project, user)), 201


@projects_bp.route('/projects/<project_id>', methods=['GET'])
@login_required
def get_project(project_id):
    user = get_current_user()
    return jsonify(_view(load_project_for(user, project_id), user))


@projects_bp.route('/projects/<project_id>', methods=['PATCH'])
@role_required(ROLE_ADMIN)
def update_project(project_id):
    user = get_current_user()
    project = owned_project(user, project_id)
    changes = clean_project_payload(
        get_json_body(), partial=True,
        current_start=project.date_start, current_end=project.date_end,
    )

    if changes.get('designers_needed', project.designers_needed) < project.assigned_count:
        raise Conflict(
            f"{project.assigned_count} freelancers are already assigned",
            details={'designers_needed': 'Cannot be lower than the number of assigned freelancers'},
        )

    if 'field_visibility' in changes:
        merged = project.visibility()
        merged.update(changes['field_visibility'])
        changes['field_visibility'] = merged

    changed = {f for f, v in changes.items() if getattr(project, f) != v}
    for field, value in changes.items():
        setattr(project, field, value)
    refresh_status(project)

    if changed:
        if changed & TIMELINE_FIELDS:
            event_id, text = 'timeline_updated', 'Timeline or logistics updated'
        elif changed & RECIPE_FIELDS:
            event_id, text = 'recipes_updated', 'Design guide updated'
        else:
            event_id, text = 'details_updated', 'Project details updated'
        notify_many(project.assigned_ids, event_id, f"{text}: {project.event_name}",
                    actor_id=user.user_id, project=project, target_tab='overview',
                    context_preview=', '.join(sorted(changed)))
    db.session.commit()

    current_app.logger.info(f"Project {project.id} updated: {sorted(changed)}")
    return jsonify(_view(project, user))


@projects_bp.route('/projects/<project_id>', methods=['DELETE'])
@role_required(ROLE_ADMIN)
def delete_project(project_id):
    user = get_current_user()
    project = owned_project(user, project_id)
    Notification.query.filter_by(project_id=project.id).update({'project_id': None})
    db.session.delete(project)
    db.session.commit()
    current_app.logger.info(f"Project {project_id} deleted by {user.user_id}")
    return jsonify({'success': True})


@projects_bp.route('/projects/<project_id>/responses', methods=['POST'])
@role_required(ROLE_FREELANCER)
def respond_to_project(project_id):
    user = get_current_user()
    project = load_project_for(user, project_id)
    data = get_json_body()

    result = InputValidator.validate_choice(data.get('status'), RESPONSE_STATUSES, 'Status')
    if not result.is_valid:
        raise ValidationError(result.error_message, details={'status': result.error_message})
    if project.status != STATUS_UNASSIGNED:
        raise Conflict('This project is no longer accepting responses')
    if project.is_assigned_to(user.user_id):
        raise Conflict('You are already assigned to this project')

    response = project.response_for(user.user_id)
    if response is None:
        response = FreelancerResponse(user_id=user.user_id)
        project.responses.append(response)
    response.status = result.sanitized_value
    response.note = optional_note(data)

    available = response.status == RESPONSE_AVAILABLE
    name = user.profile.full_name if user.profile and user.profile.full_name else user.email
    notify(project.created_by,
           'freelancer_available' if available else 'freelancer_declined',
           f"{name} is {'available' if available else 'unavailable'} for {project.event_name}",
           actor_id=user.user_id, project=project, target_tab='assignment',
           context_preview=response.note)
    db.session.commit()
    return jsonify(response.to_dict())


@projects_bp.route('/projects/<project_id>/assignments', methods=['POST'])
@role_required(ROLE_ADMIN)
def assign_freelancer(project_id):
    user = get_current_user()
    project = owned_project(user, project_id)
    freelancer_id = get_json_body().get('user_id')
    if not freelancer_id:
        raise ValidationError('user_id is required', details={'user_id': 'user_id is required'})

    if project.status == STATUS_COMPLETED:
        raise Conflict('Project is already completed')
    if project.is_assigned_to(freelancer_id):
        raise Conflict('Freelancer is already assigned')
    if project.open_seats == 0:
        raise Conflict('All designer seats are filled')
    response = project.response_for(freelancer_id)
    if response is None or response.status != RESPONSE_AVAILABLE:
        raise Conflict('Freelancer has not marked themselves available')

    project.assignments.append(ProjectAssignment(user_id=freelancer_id))
    refresh_status(project)
    notify(freelancer_id, 'assigned', f"You've been assigned to {project.event_name}",
           actor_id=user.user_id, project=project, target_tab='overview')
    db.session.commit()

    current_app.logger.info(f"Assigned {freelancer_id} to project {project.id} ({project.status})")
    return jsonify(_view(project, user)), 201


@projects_bp.route('/projects/<project_id>/assignments/<freelancer_id>', methods=['DELETE'])
@role_required(ROLE_ADMIN)
def unassign_freelancer(project_id, freelancer_id):
    user = get_current_user()
    project = owned_project(user, project_id)
    if project.status == STATUS_COMPLETED:
        raise Conflict('Project is already completed')
    assignment = next((a for a in project.assignments if a.user_id == freelancer_id), None)
    if assignment is None:
        raise NotFound('Freelancer is not assigned to this project')

    project.assignments.remove(assignment)
    refresh_status(project)
    notify(freelancer_id, 'removed', f"You've been removed from {project.event_name}",
           actor_id=user.user_id, project=project, target_tab='overview')
    db.session.commit()

    current_app.logger.info(f"Removed {freelancer_id} from project {project.id}")
    return jsonify(_view(project, user))


@projects_bp.route('/projects/<project_id>/complete', methods=['POST'])
@login_required
def complete_project(project_id):
    user = get_current_user()
    project = load_project_for(user, project_id)
    if user.is_admin():
        require_project_owner(user, project)
    elif not project.is_assigned_to(user.user_id):
        raise PermissionDenied('Only assigned freelancers can complete a project')
    if project.status != STATUS_ASSIGNED:
        raise Conflict('Only fully staffed projects can be completed')

    project.status = STATUS_COMPLETED
    notify(project.created_by, 'project_completed', f"{project.event_name} was marked completed",
           actor_id=user.user_id, project=project, target_tab='overview')
    db.session.commit()
    current_app.logger.info(f"Project {project.id} completed by {user.user_id}")
    return jsonify(_view(project, user))


@projects_bp.route('/projects/<project_id>/inspiration', methods=['POST'])
@role_required(ROLE_ADMIN)
def add_inspiration_photo(project_id):
    user = get_current_user()
    project = owned_project(user, project_id)
    url = require_photo_url(get_json_body())
    photo = InspirationPhoto(photo_url=url, sort_order=len(project.inspiration_photos))
    project.inspiration_photos.append(photo)
    db.session.commit()
    return jsonify(photo.to_dict()), 201


@projects_bp.route('/projects/<project_id>/inspiration/<photo_id>', methods=['DELETE'])
@role_required(ROLE_ADMIN)
def delete_inspiration_photo(project_id, photo_id):
    user = get_current_user()
    project = owned_project(user, project_id)
    photo = next((p for p in project.inspiration_photos if p.id == photo_id), None)
    if photo is None:
        raise NotFound('Photo not found')
    project.inspiration_photos.remove(photo)
    db.session.commit()
    return jsonify({'success': True})


def _notify_recipe_change(project, actor_id, message):
    notify_many(project.assigned_ids, 'recipes_updated', message,
                actor_id=actor_id, project=project, target_tab='designs')


@projects_bp.route('/projects/<project_id>/floral-items', methods=['POST'])
@role_required(ROLE_ADMIN)
def create_floral_item(project_id):
    user = get_current_user()
    project = owned_project(user, project_id)
    fields = clean_floral_item_payload(get_json_body())
    item = FloralItem(sort_order=len(project.floral_items), **fields)
    project.floral_items.append(item)
    db.session.flush()
    _notify_recipe_change(project, user.user_id, f"Floral item added to {project.event_name}: {item.name}")
    db.session.commit()
    return jsonify(item.to_dict()), 201


def _owned_floral_item(user, item_id):
    item = get_or_404(FloralItem, item_id, 'Floral item not found')
    owned_project(user, item.project_id)
    return item


@projects_bp.route('/floral-items/<item_id>', methods=['PATCH'])
@role_required(ROLE_ADMIN)
def update_floral_item(item_id):
    user = get_current_user()
    item = _owned_floral_item(user, item_id)
    for field, value in clean_floral_item_payload(get_json_body(), partial=True).items():
        setattr(item, field, value)
    _notify_recipe_change(item.project, user.user_id,
                          f"Floral item updated on {item.project.event_name}: {item.name}")
    db.session.commit()
    return jsonify(item.to_dict())


@projects_bp.route('/floral-items/<item_id>', methods=['DELETE'])
@role_required(ROLE_ADMIN)
def delete_floral_item(item_id):
    user = get_current_user()
    item = _owned_floral_item(user, item_id)
    project = item.project
    project.floral_items.remove(item)
    _notify_recipe_change(project, user.user_id, f"Floral item removed from {project.event_name}: {item.name}")
    db.session.commit()
    return jsonify({'success': True})
