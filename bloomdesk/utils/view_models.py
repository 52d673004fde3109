"""
Project View-Models

FLOW OVERVIEW
- build_project_view(project, viewer, today=None)
  • Joins the flat rows of one project (assignments, responses, floral items with
    designs, inventory, inspiration photos) into one nested dict.
  • Admin view adds attention flags and every response/design.
  • Freelancer view drops fields the admin hid, other freelancers' responses and
    designs, and the field_visibility map itself.
- build_project_views(projects, viewer)
  • Same for a list, sharing one profile lookup.
- profile_map(user_ids)
  • user_id -> public profile dict.
"""

from datetime import date

from flask import current_app

from ..models import Profile
from ..models.project import TOGGLEABLE_FIELDS
from ..models.utils import isoformat
from .project_status import attention_flags, display_status, STATUS_LABELS


def profile_map(user_ids):
    """Public profiles keyed by user_id"""
    user_ids = {u for u in user_ids if u}
    if not user_ids:
        return {}
    return {p.user_id: p.to_public_dict() for p in Profile.query.filter(Profile.user_id.in_(user_ids)).all()}


def _project_user_ids(project):
    ids = {project.created_by}
    ids.update(project.assigned_ids)
    ids.update(r.user_id for r in project.responses)
    ids.update(d.submitted_by for d in project.designs)
    return ids


def _floral_items(project, viewer_id=None):
    items = []
    for item in project.floral_items:
        data = item.to_dict()
        designs = item.designs
        if viewer_id is not None:
            designs = [d for d in designs if d.submitted_by == viewer_id]
        data['designs'] = [d.to_dict() for d in designs]
        items.append(data)
    return items


def _base_view(project, today):
    shown = display_status(project.status, project.date_start, project.date_end, today)
    return {
        'id': project.id,
        'created_by': project.created_by,
        'event_name': project.event_name,
        'date_start': isoformat(project.date_start),
        'date_end': isoformat(project.date_end),
        'timeline': project.timeline,
        'location': project.location,
        'pay': project.pay,
        'total_hours': project.total_hours,
        'description': project.description,
        'design_guide': project.design_guide,
        'transport_method': project.transport_method,
        'service_level': list(project.service_level or []),
        'day_of_contact': project.day_of_contact,
        'status': project.status,
        'display_status': shown,
        'status_label': STATUS_LABELS[shown],
        'designers_needed': project.designers_needed,
        'assigned_count': project.assigned_count,
        'open_seats': project.open_seats,
        'assigned_freelancers': project.assigned_ids,
        'inventory_confirmed': project.inventory_confirmed,
        'flowers_confirmed': project.flowers_confirmed,
        'hard_goods_confirmed': project.hard_goods_confirmed,
        'quality_status': project.quality_status,
        'quality_note': project.quality_note,
        'inspiration_photos': [p.to_dict() for p in project.inspiration_photos],
        'flower_inventory': [r.to_dict() for r in project.flower_inventory],
        'hard_good_inventory': [r.to_dict() for r in project.hard_good_inventory],
        'created_at': isoformat(project.created_at),
        'updated_at': isoformat(project.updated_at),
    }


def build_project_view(project, viewer, today=None, profiles=None):
    """Nested project dict shaped for the viewer's role"""
    today = today or date.today()
    if profiles is None:
        profiles = profile_map(_project_user_ids(project))

    view = _base_view(project, today)

    if viewer.is_admin():
        view['field_visibility'] = project.visibility()
        view['freelancer_responses'] = [r.to_dict() for r in project.responses]
        view['floral_items'] = _floral_items(project)
        view['attention'] = attention_flags(
            view, today, current_app.config.get('ATTENTION_UPCOMING_DAYS', 7)
        )
    else:
        own = project.response_for(viewer.user_id)
        view['freelancer_responses'] = [own.to_dict()] if own else []
        view['my_response'] = own.to_dict() if own else None
        view['is_assigned'] = project.is_assigned_to(viewer.user_id)
        view['floral_items'] = _floral_items(project, viewer_id=viewer.user_id)
        visibility = project.visibility()
        hidden = [f for f in TOGGLEABLE_FIELDS if not visibility.get(f, True)]
        for field in hidden:
            view[field] = None
        view['hidden_fields'] = hidden

    related = {project.created_by, *view['assigned_freelancers']}
    related.update(r['freelancer_id'] for r in view['freelancer_responses'])
    view['profiles'] = {uid: profiles[uid] for uid in related if uid in profiles}
    return view


def build_project_views(projects, viewer, today=None):
    ids = set()
    for project in projects:
        ids.update(_project_user_ids(project))
    profiles = profile_map(ids)
    return [build_project_view(p, viewer, today=today, profiles=profiles) for p in projects]
