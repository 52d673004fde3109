"""
BloomDesk - Design Review Tests

This module tests:
- Design review state machine
- Submission, resubmission and revision history
- Admin approve / request-revision with notifications
- Design visibility between freelancers
"""

import pytest

from conftest import assign

from bloomdesk.models import Notification, FloralItemDesign
from bloomdesk.utils.project_status import (
    next_design_status, InvalidTransition, ACTION_SUBMIT, ACTION_APPROVE, ACTION_REQUEST_REVISION
)

PHOTO = 'https://cdn.example.com/centerpiece.jpg'


def submit(client, headers, item_id, photos=None, note=None):
    return client.post(f'/api/floral-items/{item_id}/designs', headers=headers,
                       json={'photos': photos or [PHOTO], 'note': note})


class TestDesignTransitions:
    """Test next_design_status"""

    def test_submit_from_any_open_state(self):
        assert next_design_status(None, ACTION_SUBMIT) == 'in_review'
        assert next_design_status('needs_revision', ACTION_SUBMIT) == 'in_review'
        assert next_design_status('in_review', ACTION_SUBMIT) == 'in_review'

    def test_review_outcomes(self):
        assert next_design_status('in_review', ACTION_APPROVE) == 'approved'
        assert next_design_status('in_review', ACTION_REQUEST_REVISION) == 'needs_revision'

    def test_invalid_transitions(self):
        with pytest.raises(InvalidTransition):
            next_design_status('approved', ACTION_SUBMIT)
        with pytest.raises(InvalidTransition):
            next_design_status('needs_revision', ACTION_APPROVE)
        with pytest.raises(InvalidTransition):
            next_design_status('in_review', 'archive')


class TestSubmitDesign:
    """Test freelancer submissions"""

    def test_first_submission(self, client, admin_user, freelancer, staffed_project, auth_headers):
        item = staffed_project.floral_items[0]
        response = submit(client, auth_headers(freelancer.user_id), item.id,
                          photos=[PHOTO, 'https://cdn.example.com/side.jpg'], note='Front and side')
        assert response.status_code == 201
        data = response.get_json()
        assert data['design_status'] == 'in_review'
        assert len(data['photos']) == 2
        assert [r['number'] for r in data['revision_history']] == [1]

        note = Notification.query.filter_by(user_id=admin_user.user_id, event='photos_uploaded').first()
        assert note.target_tab == 'designs'
        assert note.target_item_id == item.id

    def test_requires_photos(self, client, freelancer, staffed_project, auth_headers):
        item = staffed_project.floral_items[0]
        response = client.post(f'/api/floral-items/{item.id}/designs', headers=auth_headers(freelancer.user_id),
                               json={'photos': []})
        assert response.status_code == 400
        response = submit(client, auth_headers(freelancer.user_id), item.id, photos=['ftp://nope'])
        assert response.status_code == 400

    def test_only_assigned_freelancers_submit(self, client, admin_user, second_freelancer, staffed_project,
                                              auth_headers):
        item = staffed_project.floral_items[0]
        assert submit(client, auth_headers(second_freelancer.user_id), item.id).status_code == 403
        assert submit(client, auth_headers(admin_user.user_id), item.id).status_code == 403

    def test_resubmit_replaces_photos_and_appends_revision(self, client, freelancer, staffed_project, auth_headers):
        item = staffed_project.floral_items[0]
        headers = auth_headers(freelancer.user_id)
        submit(client, headers, item.id, photos=[PHOTO, 'https://cdn.example.com/b.jpg'])
        second = submit(client, headers, item.id, photos=['https://cdn.example.com/c.jpg'])
        assert second.status_code == 200
        data = second.get_json()
        assert [p['photo_url'] for p in data['photos']] == ['https://cdn.example.com/c.jpg']
        assert [r['number'] for r in data['revision_history']] == [1, 2]
        assert FloralItemDesign.query.count() == 1


class TestReviewDesign:
    """Test admin review actions"""

    @pytest.fixture
    def design_id(self, client, freelancer, staffed_project, auth_headers):
        item = staffed_project.floral_items[0]
        return submit(client, auth_headers(freelancer.user_id), item.id).get_json()['id']

    def test_request_revision_then_resubmit_then_approve(self, client, admin_user, freelancer, design_id,
                                                         auth_headers):
        admin = auth_headers(admin_user.user_id)
        missing = client.post(f'/api/designs/{design_id}/request-revision', headers=admin, json={})
        assert missing.status_code == 400

        revised = client.post(f'/api/designs/{design_id}/request-revision', headers=admin,
                              json={'admin_note': 'More greenery please'}).get_json()
        assert revised['design_status'] == 'needs_revision'
        assert revised['revision_requested'] is True
        assert revised['revision_history'][-1]['admin_note'] == 'More greenery please'
        assert Notification.query.filter_by(user_id=freelancer.user_id, event='revision_requested').count() == 1

        # approving a design that is not in review is refused
        assert client.post(f'/api/designs/{design_id}/approve', headers=admin).status_code == 409

        item_id = revised['floral_item_id']
        resubmitted = submit(client, auth_headers(freelancer.user_id), item_id, note='Added eucalyptus')
        assert resubmitted.get_json()['design_status'] == 'in_review'
        assert Notification.query.filter_by(user_id=admin_user.user_id, event='revision_completed').count() == 1

        approved = client.post(f'/api/designs/{design_id}/approve', headers=admin).get_json()
        assert approved['approved'] is True
        assert [r['status'] for r in approved['revision_history']] == ['needs_revision', 'approved']
        assert Notification.query.filter_by(user_id=freelancer.user_id, event='design_approved').count() == 1

    def test_approved_design_is_final(self, client, admin_user, freelancer, design_id, auth_headers):
        client.post(f'/api/designs/{design_id}/approve', headers=auth_headers(admin_user.user_id))
        design = FloralItemDesign.query.filter_by(id=design_id).first()
        response = submit(client, auth_headers(freelancer.user_id), design.floral_item_id)
        assert response.status_code == 409

    def test_other_admin_cannot_review(self, client, other_admin, design_id, auth_headers):
        response = client.post(f'/api/designs/{design_id}/approve', headers=auth_headers(other_admin.user_id))
        assert response.status_code == 404


class TestDesignVisibility:
    """Test freelancers only see their own designs"""

    def test_other_freelancer_cannot_see_design(self, client, freelancer, second_freelancer, staffed_project,
                                                auth_headers):
        item = staffed_project.floral_items[0]
        design_id = submit(client, auth_headers(freelancer.user_id), item.id).get_json()['id']

        staffed_project.designers_needed = 2
        assign(staffed_project, second_freelancer.user_id)
        headers = auth_headers(second_freelancer.user_id)
        assert client.get(f'/api/designs/{design_id}', headers=headers).status_code == 404

        view = client.get(f'/api/projects/{staffed_project.id}', headers=headers).get_json()
        assert view['floral_items'][0]['designs'] == []

    def test_admin_view_lists_design_for_review(self, client, admin_user, freelancer, staffed_project,
                                                auth_headers):
        item = staffed_project.floral_items[0]
        submit(client, auth_headers(freelancer.user_id), item.id)
        view = client.get(f'/api/projects/{staffed_project.id}', headers=auth_headers(admin_user.user_id)).get_json()
        assert len(view['floral_items'][0]['designs']) == 1
        assert view['attention']['reasons'][0]['code'] == 'designs_in_review'
        assert view['attention']['review_tab'] == 'designs'
