"""
BloomDesk - Studio, Roster and Invite Tests

This module tests:
- Studio creation (one per admin) and updates
- Roster listing and removal
- Invite upsert, email delivery, revoke
- Public invite lookup, accept (idempotent) and decline
"""

from bloomdesk.models import db, StudioInvite, StudioRosterEntry


class TestStudioCrud:
    """Test the admin's own studio"""

    def test_create_then_conflict(self, client, admin_user, auth_headers):
        headers = auth_headers(admin_user.user_id)
        assert client.get('/api/studio', headers=headers).status_code == 404

        response = client.post('/api/studio', headers=headers, json={'name': 'Moss & Co'})
        assert response.status_code == 201
        assert response.get_json()['visibility'] == 'private'

        again = client.post('/api/studio', headers=headers, json={'name': 'Second'})
        assert again.status_code == 409

    def test_update(self, client, admin_user, studio, auth_headers):
        response = client.patch('/api/studio', headers=auth_headers(admin_user.user_id), json={
            'visibility': 'open', 'onboarding_completed': True, 'description': 'Seasonal florals',
        })
        assert response.status_code == 200
        data = response.get_json()
        assert data['visibility'] == 'open'
        assert data['onboarding_completed'] is True

    def test_update_rejects_blank_name(self, client, admin_user, studio, auth_headers):
        response = client.patch('/api/studio', headers=auth_headers(admin_user.user_id), json={'name': ''})
        assert response.status_code == 400


class TestRoster:
    """Test roster management"""

    def test_list_roster_with_profiles(self, client, admin_user, studio, auth_headers):
        data = client.get('/api/studio/roster', headers=auth_headers(admin_user.user_id)).get_json()
        names = sorted(m['profile']['first_name'] for m in data['members'])
        assert names == ['Fern', 'Rose']

    def test_remove_member(self, client, admin_user, studio, freelancer, auth_headers):
        headers = auth_headers(admin_user.user_id)
        response = client.delete(f'/api/studio/roster/{freelancer.user_id}', headers=headers)
        assert response.status_code == 200
        assert not studio.has_member(freelancer.user_id)
        assert client.delete(f'/api/studio/roster/{freelancer.user_id}', headers=headers).status_code == 404

    def test_freelancer_lists_own_studios(self, client, studio, freelancer, auth_headers):
        data = client.get('/api/studios/mine', headers=auth_headers(freelancer.user_id)).get_json()
        assert [s['name'] for s in data['studios']] == ['Petal & Stem']


class TestInvites:
    """Test invite lifecycle"""

    def test_invite_upsert_keeps_token_and_emails_link(self, client, admin_user, studio, auth_headers, mail_outbox):
        headers = auth_headers(admin_user.user_id)
        first = client.post('/api/studio/invites', headers=headers, json={'email': 'New@Example.com'})
        assert first.status_code == 201
        invite = first.get_json()
        assert invite['email'] == 'new@example.com'
        assert invite['link'] == f"https://app.example.com/invite?token={invite['token']}"
        assert len(mail_outbox) == 1
        assert invite['link'] in mail_outbox[0].body

        client.post(f"/api/studio/invites/{invite['id']}/revoke", headers=headers)
        second = client.post('/api/studio/invites', headers=headers, json={'email': 'new@example.com'}).get_json()
        assert second['id'] == invite['id']
        assert second['token'] == invite['token']
        assert second['status'] == 'pending'
        assert StudioInvite.query.count() == 1

    def test_invalid_email(self, client, admin_user, studio, auth_headers):
        response = client.post('/api/studio/invites', headers=auth_headers(admin_user.user_id),
                               json={'email': 'not-an-email'})
        assert response.status_code == 400

    def test_list_filters_by_status(self, client, admin_user, studio, auth_headers):
        headers = auth_headers(admin_user.user_id)
        for email in ('a@example.com', 'b@example.com'):
            client.post('/api/studio/invites', headers=headers, json={'email': email})
        invite = StudioInvite.query.filter_by(email='a@example.com').first()
        client.post(f'/api/studio/invites/{invite.id}/revoke', headers=headers)

        pending = client.get('/api/studio/invites?status=pending', headers=headers).get_json()['invites']
        assert [i['email'] for i in pending] == ['b@example.com']

    def test_public_lookup(self, client, studio):
        invite = StudioInvite.upsert(studio.id, 'x@example.com', studio.admin_id)
        db.session.commit()

        data = client.get(f'/api/invites/{invite.token}').get_json()
        assert data['studio']['name'] == 'Petal & Stem'
        assert client.get('/api/invites/unknown-token').status_code == 404

    def test_accept_is_idempotent(self, client, studio, outsider, auth_headers):
        invite = StudioInvite.upsert(studio.id, 'ivy@example.com', studio.admin_id)
        db.session.commit()
        headers = auth_headers(outsider.user_id)

        first = client.post(f'/api/invites/{invite.token}/accept', headers=headers)
        assert first.status_code == 200
        assert first.get_json()['invite']['status'] == 'accepted'
        accepted_at = first.get_json()['invite']['accepted_at']

        second = client.post(f'/api/invites/{invite.token}/accept', headers=headers)
        assert second.status_code == 200
        assert second.get_json()['invite']['accepted_at'] == accepted_at
        assert StudioRosterEntry.query.filter_by(studio_id=studio.id, freelancer_id=outsider.user_id).count() == 1

        assert client.post(f'/api/invites/{invite.token}/decline', headers=headers).status_code == 409

    def test_declined_invite_cannot_be_accepted(self, client, studio, outsider, auth_headers):
        invite = StudioInvite.upsert(studio.id, 'ivy@example.com', studio.admin_id)
        db.session.commit()
        headers = auth_headers(outsider.user_id)

        assert client.post(f'/api/invites/{invite.token}/decline', headers=headers).status_code == 200
        assert client.post(f'/api/invites/{invite.token}/accept', headers=headers).status_code == 409
        assert not studio.has_member(outsider.user_id)

    def test_admins_cannot_accept_or_decline(self, client, studio, other_admin, auth_headers):
        invite = StudioInvite.upsert(studio.id, 'boss@example.com', studio.admin_id)
        db.session.commit()
        headers = auth_headers(other_admin.user_id)

        assert client.post(f'/api/invites/{invite.token}/accept', headers=headers).status_code == 403
        assert client.post(f'/api/invites/{invite.token}/decline', headers=headers).status_code == 403
        assert db.session.get(StudioInvite, invite.id).status == 'pending'
        assert not studio.has_member(other_admin.user_id)
