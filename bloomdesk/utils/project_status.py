"""
Project Status Rules

FLOW OVERVIEW
- derive_status(status, assigned_count, designers_needed)
  • completed is sticky; otherwise assigned when fully staffed, else unassigned.
- display_status(...) / status_label(...)
  • Assigned projects split by today's date: upcoming, in_progress, wrap_up.
- attention_flags(project_vm, today, upcoming_days)
  • Ordered reasons an admin should look at a project, each with the tab to open.
- next_design_status(current, action)
  • Design review state machine.
- dashboard_stats / freelancer_tab / sort_by_date_proximity
  • Aggregations over project view-models.

Everything here is pure: inputs are view-model dicts (see view_models) or
plain values, dates may be date objects or ISO strings.
"""

from datetime import date
from typing import Dict, Iterable, List, Optional

from ..models.project import STATUS_UNASSIGNED, STATUS_ASSIGNED, STATUS_COMPLETED, RESPONSE_AVAILABLE
from ..models.design import DESIGN_IN_REVIEW, DESIGN_NEEDS_REVISION, DESIGN_APPROVED
from ..models.inventory import ITEM_FLAGGED

DISPLAY_OPEN = 'open'
DISPLAY_UPCOMING = 'upcoming'
DISPLAY_IN_PROGRESS = 'in_progress'
DISPLAY_WRAP_UP = 'wrap_up'
DISPLAY_COMPLETED = 'completed'
ASSIGNED_SUB_CATEGORIES = (DISPLAY_UPCOMING, DISPLAY_IN_PROGRESS, DISPLAY_WRAP_UP)

STATUS_LABELS = {
    DISPLAY_OPEN: 'Open',
    DISPLAY_UPCOMING: 'Upcoming',
    DISPLAY_IN_PROGRESS: 'In Progress',
    DISPLAY_WRAP_UP: 'Wrap-up',
    DISPLAY_COMPLETED: 'Completed',
}

ACTION_SUBMIT = 'submit'
ACTION_APPROVE = 'approve'
ACTION_REQUEST_REVISION = 'request_revision'

TAB_MY = 'my'
TAB_AVAILABLE = 'available'


class InvalidTransition(ValueError):
    """Raised when a design cannot move to the requested state"""


def _as_date(value) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _plural(count, word):
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def derive_status(status: str, assigned_count: int, designers_needed: int) -> str:
    if status == STATUS_COMPLETED:
        return STATUS_COMPLETED
    if assigned_count >= max(designers_needed or 1, 1):
        return STATUS_ASSIGNED
    return STATUS_UNASSIGNED


def display_status(status: str, date_start, date_end, today: Optional[date] = None) -> str:
    """Status with assigned projects split into upcoming / in_progress / wrap_up"""
    if status == STATUS_COMPLETED:
        return DISPLAY_COMPLETED
    if status != STATUS_ASSIGNED:
        return DISPLAY_OPEN
    today = today or date.today()
    start = _as_date(date_start)
    end = _as_date(date_end) or start
    if today < start:
        return DISPLAY_UPCOMING
    if today <= end:
        return DISPLAY_IN_PROGRESS
    return DISPLAY_WRAP_UP


def status_label(status: str, date_start, date_end, today: Optional[date] = None) -> str:
    return STATUS_LABELS[display_status(status, date_start, date_end, today)]


def _designs(vm) -> List[dict]:
    return [d for item in vm.get('floral_items', []) for d in item.get('designs', [])]


def _inventory_rows(vm) -> List[dict]:
    return list(vm.get('flower_inventory', [])) + list(vm.get('hard_good_inventory', []))


def available_responders(vm) -> List[str]:
    """Freelancers who answered available and are not yet assigned"""
    assigned = set(vm.get('assigned_freelancers', []))
    return [
        r['freelancer_id'] for r in vm.get('freelancer_responses', [])
        if r['status'] == RESPONSE_AVAILABLE and r['freelancer_id'] not in assigned
    ]


def attention_flags(vm: dict, today: Optional[date] = None, upcoming_days: int = 7) -> Dict:
    """
    Reasons a project needs the admin, in priority order.

    Returns {'needs_attention': bool, 'reasons': [{code, message, tab}], 'review_tab': tab|None}.
    Completed projects never need attention.
    """
    reasons = []
    if vm.get('status') != STATUS_COMPLETED:
        today = today or date.today()

        in_review = sum(1 for d in _designs(vm) if d.get('design_status') == DESIGN_IN_REVIEW)
        if in_review:
            reasons.append({'code': 'designs_in_review',
                            'message': f"{_plural(in_review, 'design')} awaiting review",
                            'tab': 'designs'})

        flagged = sum(1 for row in _inventory_rows(vm) if row.get('status') == ITEM_FLAGGED)
        if flagged:
            reasons.append({'code': 'inventory_flagged',
                            'message': f"{_plural(flagged, 'inventory item')} flagged",
                            'tab': 'inventory'})

        if vm.get('quality_status') == 'issue':
            reasons.append({'code': 'quality_issue', 'message': 'Quality issue reported',
                            'tab': 'inventory'})

        needed = vm.get('designers_needed') or 1
        filled = len(vm.get('assigned_freelancers', []))
        open_seats = filled < needed
        if vm.get('status') == STATUS_UNASSIGNED and open_seats:
            responders = available_responders(vm)
            if responders:
                reasons.append({'code': 'freelancers_available',
                                'message': f"{_plural(len(responders), 'freelancer')} available",
                                'tab': 'assignment'})

            start = _as_date(vm.get('date_start'))
            days = (start - today).days if start else None
            if days is not None and 0 <= days <= upcoming_days:
                reasons.append({'code': 'event_understaffed',
                                'message': f"Event in {_plural(days, 'day')}, {filled} of {needed} filled",
                                'tab': 'assignment'})

    return {
        'needs_attention': bool(reasons),
        'reasons': reasons,
        'review_tab': reasons[0]['tab'] if reasons else None,
    }


def next_design_status(current: Optional[str], action: str) -> str:
    """
    Design review transitions.

    submit: new/needs_revision/in_review -> in_review; approved is final.
    approve / request_revision: only from in_review.
    """
    if action == ACTION_SUBMIT:
        if current == DESIGN_APPROVED:
            raise InvalidTransition('Design is already approved')
        return DESIGN_IN_REVIEW
    if action in (ACTION_APPROVE, ACTION_REQUEST_REVISION):
        if current != DESIGN_IN_REVIEW:
            raise InvalidTransition(f"Design is not awaiting review (status: {current})")
        return DESIGN_APPROVED if action == ACTION_APPROVE else DESIGN_NEEDS_REVISION
    raise InvalidTransition(f"Unknown design action: {action}")


def dashboard_stats(vms: Iterable[dict], today: Optional[date] = None, upcoming_days: int = 7) -> Dict[str, int]:
    """Admin dashboard counters"""
    today = today or date.today()
    stats = {'active': 0, 'needs_review': 0, 'completed': 0, 'upcoming': 0, 'in_progress': 0}
    for vm in vms:
        shown = display_status(vm['status'], vm['date_start'], vm['date_end'], today)
        if shown == DISPLAY_COMPLETED:
            stats['completed'] += 1
            continue
        stats['active'] += 1
        if shown == DISPLAY_UPCOMING:
            stats['upcoming'] += 1
        elif shown == DISPLAY_IN_PROGRESS:
            stats['in_progress'] += 1
        if attention_flags(vm, today, upcoming_days)['needs_attention']:
            stats['needs_review'] += 1
    return stats


def freelancer_tab(vm: dict, user_id: str) -> Optional[str]:
    """'my' for the freelancer's assignments, 'available' for open projects they could join"""
    if user_id in vm.get('assigned_freelancers', []):
        return TAB_MY
    if vm.get('status') == STATUS_UNASSIGNED:
        return TAB_AVAILABLE
    return None


def sort_by_date_proximity(vms: Iterable[dict], today: Optional[date] = None) -> List[dict]:
    """Closest date_start to today first, earlier date breaks ties"""
    today = today or date.today()

    def key(vm):
        start = _as_date(vm['date_start'])
        return abs((start - today).days), start

    return sorted(vms, key=key)
