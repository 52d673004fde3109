"""
BloomDesk - App Factory and Service Endpoint Tests
"""

from bloomdesk import create_app


def test_health_endpoint(client):
    """Test the health check endpoint"""
    response = client.get('/health')
    assert response.status_code == 200
    assert response.json['status'] == 'healthy'


def test_api_status(client):
    response = client.get('/api/status')
    assert response.status_code == 200
    assert response.json['status'] == 'operational'


def test_method_not_allowed_is_json(client, db_session):
    response = client.put('/api/projects')
    assert response.status_code == 405
    assert response.json['error'] == 'Method not allowed'


def test_test_config_overrides_defaults():
    app = create_app({'TESTING': True, 'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
                      'ATTENTION_UPCOMING_DAYS': 14})
    assert app.config['ATTENTION_UPCOMING_DAYS'] == 14
    assert app.config['REMINDER_DAYS'] == 3
    assert 'send-reminders' in app.cli.commands
