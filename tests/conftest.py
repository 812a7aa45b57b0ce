# tests/conftest.py

"""
Pytest Fixtures - app on in-memory SQLite, seeded users and teams, JWT headers

SEED DATA REFERENCE:
- admin@test.edu        ADMIN
- mentor@test.edu       MENTOR, assigned to team SSR-101 (and SSR-102)
- other.mentor@test.edu MENTOR, assigned to nothing
- asha@test.edu         STUDENT, leader of SSR-101
- SSR-101: Asha, Bilal, Chen current; Dev removed
- SSR-102: one member, no proposal, no evaluation
"""

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from flask_jwt_extended import create_access_token

from ssrportal import create_app
from ssrportal.config import TestConfig
from ssrportal.extension.extensions import db
from ssrportal.models import User, UserRole, Team, TeamMember, TeamStatus, MemberRole


# =============================================================================
# APP / CLIENT FIXTURES
# =============================================================================

@pytest.fixture
def app():
    """Fresh app and schema per test; the app context stays pushed for the whole test."""
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


# =============================================================================
# SEED DATA
# =============================================================================

def _user(email, first, role, password="secret123"):
    u = User(email=email, first_name=first, last_name="Test", role=role)
    u.set_password(password)
    db.session.add(u)
    return u


@pytest.fixture
def seed(app):
    admin = _user("admin@test.edu", "Ada", UserRole.ADMIN)
    mentor = _user("mentor@test.edu", "Meera", UserRole.MENTOR)
    other_mentor = _user("other.mentor@test.edu", "Omar", UserRole.MENTOR)
    student = _user("asha@test.edu", "Asha", UserRole.STUDENT)
    outsider = _user("loner@test.edu", "Lena", UserRole.STUDENT)
    db.session.flush()

    team = Team(team_number="SSR-101", project_title="Rainwater harvesting survey",
                project_category="Environment", batch="2025", status=TeamStatus.APPROVED,
                mentor_id=mentor.id, lead_id=student.id)
    team.members = [
        TeamMember(user_id=student.id, name="Asha", email="asha@test.edu", roll_number="R1",
                   role=MemberRole.LEADER, position=0),
        TeamMember(name="Bilal", email="bilal@test.edu", roll_number="R2", position=1),
        TeamMember(name="Chen", email="chen@test.edu", roll_number="R3", position=2),
        TeamMember(name="Dev", email="dev@test.edu", roll_number="R4", position=3,
                   removed_at=datetime.now(timezone.utc)),
    ]
    second_team = Team(team_number="SSR-102", project_title="Literacy camp", batch="2025",
                       status=TeamStatus.APPROVED, mentor_id=mentor.id)
    second_team.members = [TeamMember(name="Esha", email="esha@test.edu", position=0)]

    db.session.add_all([team, second_team])
    db.session.commit()

    return SimpleNamespace(
        admin=admin, mentor=mentor, other_mentor=other_mentor, student=student, outsider=outsider,
        team=team, second_team=second_team,
    )


# =============================================================================
# AUTH HELPERS
# =============================================================================

def auth_headers(user):
    token = create_access_token(identity=str(user.id), additional_claims={"role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def mentor_headers(seed):
    return auth_headers(seed.mentor)


@pytest.fixture
def other_mentor_headers(seed):
    return auth_headers(seed.other_mentor)


@pytest.fixture
def student_headers(seed):
    return auth_headers(seed.student)


@pytest.fixture
def admin_headers(seed):
    return auth_headers(seed.admin)


# =============================================================================
# PAYLOADS
# =============================================================================

def member_marks(member, individual="2.5", learning="2", presentation="1.5", contribution="2"):
    return {
        "teamMemberId": str(member.id),
        "memberName": member.name,
        "memberEmail": member.email,
        "individualScore": individual,
        "learningContribution": learning,
        "presentationSkill": presentation,
        "contributionToProject": contribution,
    }


def evaluation_payload(team, members=None, **overrides):
    members = team.current_members if members is None else members
    payload = {
        "teamId": str(team.id),
        "posterMarks": 2,
        "videoMarks": 3,
        "reportMarks": 2.5,
        "pptMarks": 3,
        "individualEvaluations": [member_marks(m) for m in members],
        "externalEvaluatorName": "Dr. Iyer",
        "externalEvaluatorEmail": "iyer@test.edu",
        "status": "DRAFT",
        "remarks": "Good field work",
    }
    payload.update(overrides)
    return payload
