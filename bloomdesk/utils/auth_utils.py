"""
Authentication Utilities

FLOW OVERVIEW
- verify_access_token(token)
  • Decode a provider-issued JWT (PyJWT) with AUTH_JWT_SECRET / AUTH_JWT_AUDIENCE.
- provision_user(claims)
  • First sight creates users + user_roles + profiles rows; later sights bump last_seen.
- get_current_user()
  • Bearer token wins over the Flask session; result cached on flask.g.
- login_required / role_required(role)
  • Route decorators raising AuthError (401) / PermissionDenied (403).
- Project access helpers
  • load_project_for(user, project_id): creator admin, or a freelancer who is assigned,
    has responded, is on the creator studio roster, or the creator studio is open.
"""

import logging
from functools import wraps

import jwt
from flask import current_app, g, request, session

from ..models import db, User, UserRole, Profile, Project, Studio, StudioRosterEntry
from ..models.user import ROLE_FREELANCER, ROLES
from ..models.studio import VISIBILITY_OPEN
from .error_handlers import AuthError, PermissionDenied, NotFound
from .validators import validate_phone

logger = logging.getLogger(__name__)


def verify_access_token(token):
    """Verify an access token and return its claims"""
    if not token:
        raise AuthError('Missing access token')
    try:
        claims = jwt.decode(
            token,
            current_app.config['AUTH_JWT_SECRET'],
            algorithms=current_app.config.get('AUTH_JWT_ALGORITHMS', ['HS256']),
            audience=current_app.config.get('AUTH_JWT_AUDIENCE'),
            options={'require': ['sub', 'exp']},
        )
    except jwt.ExpiredSignatureError:
        raise AuthError('Access token expired')
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected access token: {e}")
        raise AuthError('Invalid access token')
    return claims


def provision_user(claims):
    """Return the local user for token claims, creating it on first sight"""
    subject = claims['sub']
    user = User.query.filter_by(user_id=subject).first()
    if user:
        user.touch()
        return user

    metadata = claims.get('user_metadata') or {}
    email = (claims.get('email') or '').strip().lower()
    role = metadata.get('role')
    if role not in ROLES:
        role = ROLE_FREELANCER

    phone = validate_phone(metadata.get('phone') or '')

    user = User(user_id=subject, email=email)
    db.session.add(user)
    db.session.add(UserRole(user_id=subject, role=role))
    db.session.add(Profile(
        user_id=subject,
        email=email,
        first_name=(metadata.get('first_name') or '').strip(),
        last_name=(metadata.get('last_name') or '').strip(),
        phone=phone.sanitized_value if phone.is_valid else '',
    ))
    user.touch()
    logger.info(f"Provisioned {role} user {subject}")
    return user


def _bearer_token():
    header = request.headers.get('Authorization', '')
    if header.lower().startswith('bearer '):
        return header[7:].strip()
    return None


def reset_current_user():
    """Forget the user resolved for a previous request"""
    g.pop('current_user', None)


def get_current_user():
    """Resolve the authenticated user for this request, or None"""
    if 'current_user' in g:
        return g.current_user

    user = None
    token = _bearer_token()
    if token:
        user = provision_user(verify_access_token(token))
    elif 'user_id' in session:
        user = User.query.filter_by(user_id=session['user_id']).first()
        if user is None:
            session.clear()

    g.current_user = user
    return user


def login_required(f):
    """Decorator to require an authenticated user"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if get_current_user() is None:
            raise AuthError('Authentication required')
        return f(*args, **kwargs)
    return decorated_function


def role_required(role):
    """Decorator to require an authenticated user with the given role"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = get_current_user()
            if user is None:
                raise AuthError('Authentication required')
            if user.role != role:
                raise PermissionDenied(f'{role.capitalize()} access required')
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def studio_ids_for_freelancer(freelancer_id):
    return [e.studio_id for e in StudioRosterEntry.query.filter_by(freelancer_id=freelancer_id).all()]


def visible_creator_ids(freelancer_id):
    """Admin ids whose projects a freelancer may browse: rostered or open studios"""
    studio_ids = studio_ids_for_freelancer(freelancer_id)
    query = Studio.query.filter(
        db.or_(Studio.visibility == VISIBILITY_OPEN, Studio.id.in_(studio_ids))
    )
    return {s.admin_id for s in query.all()}


def can_view_project(user, project, creator_ids=None):
    if user.is_admin():
        return project.created_by == user.user_id
    if project.is_assigned_to(user.user_id) or project.response_for(user.user_id):
        return True
    if creator_ids is None:
        creator_ids = visible_creator_ids(user.user_id)
    return project.created_by in creator_ids


def projects_visible_to(user):
    """All projects the user may see"""
    if user.is_admin():
        return Project.query.filter_by(created_by=user.user_id).all()
    creator_ids = visible_creator_ids(user.user_id)
    return [p for p in Project.query.all() if can_view_project(user, p, creator_ids)]


def load_project_for(user, project_id):
    """Fetch a project the user may see; unknown and hidden projects are both 404"""
    project = db.session.get(Project, project_id)
    if project is None or not can_view_project(user, project):
        raise NotFound('Project not found')
    return project


def require_project_owner(user, project):
    if not (user.is_admin() and project.created_by == user.user_id):
        raise PermissionDenied('Only the project admin can do that')


def require_assigned(user, project):
    if user.is_admin() or not project.is_assigned_to(user.user_id):
        raise PermissionDenied('Only freelancers assigned to this project can do that')
