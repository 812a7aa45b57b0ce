# tests/test_teams.py
"""
Mentor team detail and status updates, and the student's own team view.
"""

import uuid

from conftest import auth_headers
from ssrportal.extension.extensions import db
from ssrportal.models import Team, TeamStatus

STUDENT_TEAM = "/api/student/team"


def team_url(team):
    return f"/api/mentor/teams/{team.id}"


class TestMentorTeamDetail:

    def test_detail_lists_current_members(self, client, seed, mentor_headers):
        response = client.get(team_url(seed.team), headers=mentor_headers)
        assert response.status_code == 200
        team = response.get_json()["team"]
        assert team["teamNumber"] == "SSR-101"
        assert [m["name"] for m in team["members"]] == ["Asha", "Bilal", "Chen"]
        assert team["mentor"]["email"] == "mentor@test.edu"
        assert team["lead"]["email"] == "asha@test.edu"
        assert team["proposals"] == []

    def test_unassigned_mentor_is_403(self, client, seed, other_mentor_headers):
        response = client.get(team_url(seed.team), headers=other_mentor_headers)
        assert response.status_code == 403
        assert response.get_json() == {"error": "You are not assigned to this team"}

    def test_unknown_team_is_403(self, client, seed, mentor_headers):
        response = client.get(f"/api/mentor/teams/{uuid.uuid4()}", headers=mentor_headers)
        assert response.status_code == 403

    def test_student_cannot_read(self, client, seed, student_headers):
        response = client.get(team_url(seed.team), headers=student_headers)
        assert response.status_code == 403


class TestMentorTeamUpdate:

    def test_patch_status_only(self, client, seed, mentor_headers):
        response = client.patch(team_url(seed.team), json={"status": "COMPLETED"}, headers=mentor_headers)
        assert response.status_code == 200
        body = response.get_json()
        assert body["message"] == "Team updated successfully"
        assert body["team"]["status"] == "COMPLETED"
        assert body["team"]["projectTitle"] == "Rainwater harvesting survey"
        assert db.session.get(Team, seed.team.id).status == TeamStatus.COMPLETED

    def test_patch_invalid_status(self, client, seed, mentor_headers):
        response = client.patch(team_url(seed.team), json={"status": "ARCHIVED"}, headers=mentor_headers)
        assert response.status_code == 400
        details = response.get_json()["details"]
        assert [d["field"] for d in details] == ["status"]
        assert "PENDING, APPROVED, REJECTED, COMPLETED" in details[0]["message"]
        assert db.session.get(Team, seed.team.id).status == TeamStatus.APPROVED

    def test_put_requires_every_field(self, client, seed, mentor_headers):
        response = client.put(team_url(seed.team), json={"status": "PENDING"}, headers=mentor_headers)
        assert response.status_code == 400
        fields = {d["field"] for d in response.get_json()["details"]}
        assert fields == {"projectTitle", "projectPillar"}

    def test_put_replaces_fields(self, client, seed, mentor_headers):
        response = client.put(team_url(seed.team), json={
            "status": "PENDING",
            "projectTitle": "Rainwater audit",
            "projectPillar": "Water",
            "teamNumber": "SSR-201",
        }, headers=mentor_headers)
        assert response.status_code == 200
        team = response.get_json()["team"]
        assert team["projectTitle"] == "Rainwater audit"
        assert team["projectCategory"] == "Water"
        assert team["teamNumber"] == "SSR-201"

    def test_put_taken_team_number_is_409(self, client, seed, mentor_headers):
        response = client.put(team_url(seed.team), json={
            "status": "APPROVED",
            "projectTitle": "Rainwater harvesting survey",
            "projectPillar": "Environment",
            "teamNumber": "SSR-102",
        }, headers=mentor_headers)
        assert response.status_code == 409
        assert db.session.get(Team, seed.team.id).team_number == "SSR-101"

    def test_patch_blank_title(self, client, seed, mentor_headers):
        response = client.patch(team_url(seed.team), json={"projectTitle": "  "}, headers=mentor_headers)
        assert response.status_code == 400

    def test_unassigned_mentor_cannot_update(self, client, seed, other_mentor_headers):
        response = client.patch(team_url(seed.team), json={"status": "REJECTED"}, headers=other_mentor_headers)
        assert response.status_code == 403
        assert db.session.get(Team, seed.team.id).status == TeamStatus.APPROVED


class TestStudentTeam:

    def test_stage_follows_proposal_approval(self, client, seed, student_headers, mentor_headers):
        response = client.get(STUDENT_TEAM, headers=student_headers)
        assert response.status_code == 200
        team = response.get_json()["team"]
        assert team["teamNumber"] == "SSR-101"
        assert team["stats"] == {"proposals": 0, "members": 3, "stage": "PROPOSAL_SUBMISSION"}

        proposal = client.post("/api/student/proposals", json={
            "title": "Rainwater survey",
            "description": "A door-to-door survey of rainwater harvesting in the ward, "
                           "followed by two awareness sessions and a short report to the municipality.",
            "attachment": ["https://cdn.test/report.pdf"],
            "posterAttachment": ["https://cdn.test/poster.png"],
            "pptAttachment": ["https://cdn.test/slides.pptx"],
        }, headers=student_headers).get_json()["proposal"]
        client.put(f"/api/mentor/proposals/{proposal['id']}", json={"state": "APPROVED"}, headers=mentor_headers)

        stats = client.get(STUDENT_TEAM, headers=student_headers).get_json()["team"]["stats"]
        assert stats == {"proposals": 1, "members": 3, "stage": "PROPOSAL_ACCEPTED"}

    def test_student_without_team_is_403(self, client, seed):
        response = client.get(STUDENT_TEAM, headers=auth_headers(seed.outsider))
        assert response.status_code == 403
        assert response.get_json() == {"error": "You are not part of any team"}

    def test_mentor_cannot_use_student_view(self, client, seed, mentor_headers):
        response = client.get(STUDENT_TEAM, headers=mentor_headers)
        assert response.status_code == 403
