"""
Test configuration and shared fixtures for BloomDesk tests.

This file contains:
- Centralized test configuration
- Shared fixtures used across multiple test files
- Token helper issuing provider-style access tokens
- User / studio / project factories
"""

from datetime import date, datetime, timedelta

import jwt
import pytest

from bloomdesk import create_app
from bloomdesk.models import (
    db, User, UserRole, Profile, Studio, Project, ProjectAssignment, FreelancerResponse, FloralItem
)
from bloomdesk.models.project import RESPONSE_AVAILABLE


# Centralized test configuration
TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SECRET_KEY': 'test-secret-key',
    'AUTH_JWT_SECRET': 'test-auth-secret',
    'AUTH_JWT_AUDIENCE': 'authenticated',
    'AUTH_JWT_ALGORITHMS': ['HS256'],
    'MAIL_SERVER': 'localhost',
    'MAIL_PORT': 587,
    'MAIL_USE_TLS': False,
    'MAIL_USE_SSL': False,
    'MAIL_DEFAULT_SENDER': 'studio@example.com',
    'MAIL_SUPPRESS_SEND': True,
    'APP_BASE_URL': 'https://app.example.com',
    'ATTENTION_UPCOMING_DAYS': 7,
    'REMINDER_DAYS': 3,
}


def make_token(sub, email=None, metadata=None, expires_in=3600, secret=None, audience='authenticated'):
    """Encode an access token the way the auth provider does"""
    now = datetime.utcnow()
    claims = {
        'sub': sub,
        'email': email or f'{sub}@example.com',
        'aud': audience,
        'iat': now,
        'exp': now + timedelta(seconds=expires_in),
        'user_metadata': metadata or {},
    }
    return jwt.encode(claims, secret or TEST_CONFIG['AUTH_JWT_SECRET'], algorithm='HS256')


@pytest.fixture
def app():
    """Create and configure a new app instance for each test."""
    app = create_app(TEST_CONFIG)
    return app


@pytest.fixture
def client(app):
    """Create a test client for the app."""
    return app.test_client()


@pytest.fixture
def app_context(app):
    """Create an application context for database operations."""
    with app.app_context():
        yield


@pytest.fixture
def db_session(app_context):
    """Create a database session and clean up after tests."""
    db.create_all()
    yield db.session
    db.session.remove()
    db.drop_all()


@pytest.fixture
def mail_outbox(app):
    """Capture emails sent through Flask-Mail."""
    with app.extensions['mail'].record_messages() as outbox:
        yield outbox


def create_user(user_id, role, first_name='Test', last_name='User', phone='(555) 123-4567', email=None):
    email = email or f'{user_id}@example.com'
    user = User(user_id=user_id, email=email)
    db.session.add(user)
    db.session.add(UserRole(user_id=user_id, role=role))
    db.session.add(Profile(user_id=user_id, email=email, first_name=first_name,
                           last_name=last_name, phone=phone))
    db.session.commit()
    return user


@pytest.fixture
def auth_headers():
    """Build Authorization headers for a user id."""
    def _headers(user_id):
        return {'Authorization': f'Bearer {make_token(user_id)}'}
    return _headers


@pytest.fixture
def admin_user(db_session):
    return create_user('admin-1', 'admin', first_name='Ada', last_name='Bloom')


@pytest.fixture
def other_admin(db_session):
    return create_user('admin-2', 'admin', first_name='Otto', last_name='Stem')


@pytest.fixture
def freelancer(db_session):
    return create_user('free-1', 'freelancer', first_name='Fern', last_name='Petal')


@pytest.fixture
def second_freelancer(db_session):
    return create_user('free-2', 'freelancer', first_name='Rose', last_name='Thorn')


@pytest.fixture
def outsider(db_session):
    """Freelancer with no link to the admin's studio"""
    return create_user('free-3', 'freelancer', first_name='Ivy', last_name='Vine')


@pytest.fixture
def studio(db_session, admin_user, freelancer, second_freelancer):
    """Private studio with both freelancers on the roster."""
    studio = Studio(admin_id=admin_user.user_id, name='Petal & Stem')
    db_session.add(studio)
    db_session.flush()
    studio.add_member(freelancer.user_id)
    studio.add_member(second_freelancer.user_id)
    db_session.commit()
    return studio


@pytest.fixture
def make_project(db_session, admin_user):
    """Factory for projects owned by admin_user."""
    def _make(**overrides):
        start = overrides.pop('date_start', date.today() + timedelta(days=30))
        fields = {
            'created_by': admin_user.user_id,
            'event_name': 'Garden Wedding',
            'date_start': start,
            'date_end': overrides.pop('date_end', start),
            'location': 'Rose Hall',
            'pay': 400.0,
            'total_hours': 8.0,
            'designers_needed': 1,
            'service_level': ['design', 'setup'],
        }
        fields.update(overrides)
        project = Project(**fields)
        db_session.add(project)
        db_session.commit()
        return project
    return _make


@pytest.fixture
def project(make_project, studio):
    """Unassigned project with one floral item."""
    project = make_project(designers_needed=2)
    project.floral_items.append(FloralItem(name='Bridal bouquet', quantity=1))
    db.session.commit()
    return project


def assign(project, user_id):
    """Record an available response and an assignment for a freelancer"""
    if project.response_for(user_id) is None:
        project.responses.append(FreelancerResponse(user_id=user_id, status=RESPONSE_AVAILABLE))
    project.assignments.append(ProjectAssignment(user_id=user_id))
    db.session.commit()


@pytest.fixture
def staffed_project(make_project, studio, freelancer):
    """Assigned project with the freelancer on it and one floral item."""
    project = make_project(designers_needed=1, status='assigned')
    project.floral_items.append(FloralItem(name='Centerpiece', quantity=10))
    db.session.commit()
    assign(project, freelancer.user_id)
    return project
