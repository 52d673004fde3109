"""
BloomDesk - Profile Endpoint Tests
"""

from bloomdesk.models import Profile
from bloomdesk.models.user import get_initials


class TestInitials:
    """Test initials helper"""

    def test_initials(self):
        assert get_initials('fern', 'petal') == 'FP'
        assert get_initials('Fern', '') == 'F'
        assert get_initials(None, None) == ''


class TestProfileEndpoints:
    """Test reading and updating the own profile"""

    def test_get_profile(self, client, freelancer, auth_headers):
        response = client.get('/api/profile', headers=auth_headers(freelancer.user_id))
        assert response.status_code == 200
        data = response.get_json()
        assert data['first_name'] == 'Fern'
        assert data['initials'] == 'FP'

    def test_patch_normalizes_fields(self, client, freelancer, auth_headers):
        response = client.patch('/api/profile', headers=auth_headers(freelancer.user_id), json={
            'phone': '555 987 6543',
            'website': 'https://fern.example.com',
            'instagram': 'fern.florals',
            'last_name': 'Leaf',
        })
        assert response.status_code == 200
        data = response.get_json()
        assert data['phone'] == '(555) 987-6543'
        assert data['instagram'] == '@fern.florals'
        assert data['initials'] == 'FL'

        profile = Profile.query.filter_by(user_id=freelancer.user_id).first()
        assert profile.website == 'https://fern.example.com'

    def test_patch_rejects_bad_values(self, client, freelancer, auth_headers):
        response = client.patch('/api/profile', headers=auth_headers(freelancer.user_id),
                                json={'phone': '123', 'website': 'fern.example.com'})
        assert response.status_code == 400
        assert set(response.get_json()['details']) == {'phone', 'website'}
        assert Profile.query.filter_by(user_id=freelancer.user_id).first().phone == '(555) 123-4567'
