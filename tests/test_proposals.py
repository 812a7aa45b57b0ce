# tests/test_proposals.py
"""
Student proposal submission, mentor review, and the client ProposalForm.
"""

from unittest.mock import MagicMock

import pytest

from ssrportal.client.proposal_form import ProposalForm
from ssrportal.client.upload_coordinator import LocalFile, UploadCoordinator
from ssrportal.extension.extensions import db
from ssrportal.models import Proposal, ProposalState

STUDENT = "/api/student/proposals"
DESCRIPTION = "A door-to-door survey of rainwater harvesting in the ward, " \
              "followed by two awareness sessions and a short report to the municipality."


def proposal_payload(**overrides):
    payload = {
        "title": "Rainwater survey",
        "description": DESCRIPTION,
        "attachment": ["https://cdn.test/report.pdf"],
        "posterAttachment": "https://cdn.test/poster.png",
        "pptAttachment": ["https://cdn.test/a.pptx", "https://cdn.test/b.pptx"],
    }
    payload.update(overrides)
    return payload


class TestStudentProposals:

    def test_no_proposal_yet(self, client, student_headers):
        response = client.get(STUDENT, headers=student_headers)
        assert response.status_code == 200
        assert response.get_json() == {"proposal": None}

    def test_create_then_edit(self, client, seed, student_headers):
        created = client.post(STUDENT, json=proposal_payload(), headers=student_headers)
        assert created.status_code == 201
        proposal = created.get_json()["proposal"]
        assert proposal["state"] == "PENDING"
        assert proposal["pptAttachment"] == ["https://cdn.test/a.pptx", "https://cdn.test/b.pptx"]
        assert Proposal.query.one().ppt_attachment == "https://cdn.test/a.pptx,https://cdn.test/b.pptx"

        edited = client.post(STUDENT, json=proposal_payload(title="Rainwater survey v2"), headers=student_headers)
        assert edited.status_code == 200
        assert Proposal.query.count() == 1
        assert Proposal.query.one().title == "Rainwater survey v2"

    def test_validation(self, client, student_headers):
        response = client.post(STUDENT, json=proposal_payload(title="abc", description="short", pptAttachment=[]),
                               headers=student_headers)
        assert response.status_code == 400
        fields = {d["field"] for d in response.get_json()["details"]}
        assert fields == {"title", "description", "pptAttachment"}

    def test_student_without_team_is_403(self, client, seed):
        from conftest import auth_headers
        response = client.get(STUDENT, headers=auth_headers(seed.outsider))
        assert response.status_code == 403

    def test_approved_proposal_is_locked(self, client, seed, student_headers, mentor_headers):
        proposal_id = client.post(STUDENT, json=proposal_payload(), headers=student_headers).get_json()["proposal"]["id"]
        client.put(f"/api/mentor/proposals/{proposal_id}", json={"state": "APPROVED"}, headers=mentor_headers)

        response = client.post(STUDENT, json=proposal_payload(), headers=student_headers)
        assert response.status_code == 403
        assert response.get_json() == {"error": "Approved proposals cannot be edited"}

    def test_editing_rejected_proposal_resets_to_pending(self, client, seed, student_headers, mentor_headers):
        proposal_id = client.post(STUDENT, json=proposal_payload(), headers=student_headers).get_json()["proposal"]["id"]
        client.put(f"/api/mentor/proposals/{proposal_id}", json={"state": "REJECTED"}, headers=mentor_headers)

        response = client.post(STUDENT, json=proposal_payload(), headers=student_headers)
        assert response.get_json()["proposal"]["state"] == "PENDING"


class TestMentorReview:

    @pytest.fixture
    def proposal_id(self, client, student_headers):
        return client.post(STUDENT, json=proposal_payload(), headers=student_headers).get_json()["proposal"]["id"]

    @pytest.mark.parametrize("state, remarks", [
        ("APPROVED", "Proposal approved"),
        ("REJECTED", "Proposal needs revision"),
    ])
    def test_default_remarks(self, client, mentor_headers, proposal_id, state, remarks):
        response = client.put(f"/api/mentor/proposals/{proposal_id}", json={"state": state}, headers=mentor_headers)
        assert response.status_code == 200
        proposal = response.get_json()["proposal"]
        assert proposal["state"] == state
        assert proposal["remarks"] == remarks
        assert proposal["remarkUpdatedAt"] is not None

    def test_custom_remarks(self, client, mentor_headers, proposal_id):
        response = client.put(f"/api/mentor/proposals/{proposal_id}",
                              json={"state": "REJECTED", "remarks": "Add a budget"}, headers=mentor_headers)
        assert response.get_json()["proposal"]["remarks"] == "Add a budget"

    def test_bad_state(self, client, mentor_headers, proposal_id):
        response = client.put(f"/api/mentor/proposals/{proposal_id}", json={"state": "PENDING"},
                              headers=mentor_headers)
        assert response.status_code == 400
        assert db.session.get(Proposal, proposal_id).state == ProposalState.PENDING

    def test_unassigned_mentor(self, client, other_mentor_headers, proposal_id):
        response = client.get(f"/api/mentor/proposals/{proposal_id}", headers=other_mentor_headers)
        assert response.status_code == 403


class TestProposalForm:

    def test_uploads_new_files_and_keeps_existing(self):
        client = MagicMock()
        client.get_json.return_value = {"proposal": {
            "id": 7, "state": "REJECTED",
            "attachment": ["https://cdn.test/old-report.pdf"],
            "posterAttachment": ["https://cdn.test/old-poster.png"],
            "pptAttachment": [],
        }}
        client.upload.side_effect = lambda f: {"url": f"https://cdn.test/{f.filename}"}
        client.post_json.return_value = {"proposal": {"id": 7, "state": "PENDING"}}

        form = ProposalForm(client, UploadCoordinator(client, sleep=lambda s: None)).load()
        form.select("poster", [LocalFile("poster-v2.png", "image/png", data=b"p")])
        form.select("ppt", [LocalFile("a.pptx", "application/vnd.ms-powerpoint", data=b"a"),
                            LocalFile("b.pptx", "application/vnd.ms-powerpoint", data=b"b")])
        form.submit("Rainwater survey", DESCRIPTION)

        path, payload = client.post_json.call_args.args
        assert path == STUDENT
        assert payload["attachment"] == "https://cdn.test/old-report.pdf"
        assert payload["posterAttachment"] == "https://cdn.test/poster-v2.png"
        assert payload["pptAttachment"] == "https://cdn.test/a.pptx,https://cdn.test/b.pptx"
        assert [c.args[0].filename for c in client.upload.call_args_list] == ["poster-v2.png", "a.pptx", "b.pptx"]
