"""
Main Routes

FLOW OVERVIEW
- /health [GET]
  • JSON health check.
- /api/dashboard/admin [GET] (admin)
  • Stats {active, needs_review, completed, upcoming, in_progress} and the
    review queue (projects with attention flags, most urgent date first).
- /api/dashboard/freelancer [GET] (freelancer)
  • Tab counts and the next upcoming assignment.
"""

from datetime import date, datetime

from flask import Blueprint, jsonify, current_app

from ..models.user import ROLE_ADMIN, ROLE_FREELANCER
from ..utils.auth_utils import role_required, get_current_user, projects_visible_to
from ..utils.project_status import (
    dashboard_stats, freelancer_tab, sort_by_date_proximity, TAB_MY, TAB_AVAILABLE,
    DISPLAY_UPCOMING, DISPLAY_IN_PROGRESS
)
from ..utils.view_models import build_project_views

main_bp = Blueprint('main', __name__)


@main_bp.route('/health')
def health():
    """Health check endpoint"""
    return jsonify({'status': 'healthy', 'timestamp': datetime.utcnow().isoformat()})


@main_bp.route('/api/dashboard/admin')
@role_required(ROLE_ADMIN)
def admin_dashboard():
    user = get_current_user()
    today = date.today()
    views = build_project_views(projects_visible_to(user), user, today=today)
    upcoming_days = current_app.config.get('ATTENTION_UPCOMING_DAYS', 7)

    queue = [
        {
            'project_id': v['id'],
            'event_name': v['event_name'],
            'date_start': v['date_start'],
            'status_label': v['status_label'],
            'reasons': v['attention']['reasons'],
            'review_tab': v['attention']['review_tab'],
        }
        for v in sort_by_date_proximity(views, today)
        if v['attention']['needs_attention']
    ]
    return jsonify({
        'stats': dashboard_stats(views, today, upcoming_days),
        'review_queue': queue,
    })


@main_bp.route('/api/dashboard/freelancer')
@role_required(ROLE_FREELANCER)
def freelancer_dashboard():
    user = get_current_user()
    today = date.today()
    views = build_project_views(projects_visible_to(user), user, today=today)

    mine = [v for v in views if freelancer_tab(v, user.user_id) == TAB_MY]
    available = [v for v in views if freelancer_tab(v, user.user_id) == TAB_AVAILABLE]
    ahead = sorted(
        (v for v in mine if v['display_status'] in (DISPLAY_UPCOMING, DISPLAY_IN_PROGRESS)),
        key=lambda v: v['date_start'],
    )
    return jsonify({
        'counts': {TAB_AVAILABLE: len(available), TAB_MY: len(mine)},
        'next_assignment': ahead[0] if ahead else None,
    })
