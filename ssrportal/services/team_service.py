# ssrportal/services/team_service.py
from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload

from ssrportal.extension.extensions import db
from ssrportal.errors import Conflict, FieldError, Forbidden, InternalError, ValidationError
from ssrportal.models.team import Team, TeamStatus
from ssrportal.models.proposal import ProposalState
from ssrportal.services.proposal_service import team_for_student

STAGE_PROPOSAL_SUBMISSION = "PROPOSAL_SUBMISSION"
STAGE_PROPOSAL_ACCEPTED = "PROPOSAL_ACCEPTED"

# payload key -> (model column, label)
EDITABLE_FIELDS = {
    "status": ("status", "Status"),
    "projectTitle": ("project_title", "Project title"),
    "projectPillar": ("project_category", "Project pillar"),
}


def mentor_team(mentor_id, team_id):
    team = (Team.query
            .options(selectinload(Team.members), selectinload(Team.proposals), selectinload(Team.evaluation))
            .filter(Team.id == team_id, Team.mentor_id == mentor_id)
            .first())
    if team is None:
        raise Forbidden("You are not assigned to this team")
    return team


def _parse_changes(payload, partial):
    errors = []
    changes = {}

    for key, (column, label) in EDITABLE_FIELDS.items():
        if key not in payload or payload[key] is None:
            if not partial:
                errors.append(FieldError(key, f"{label} is required"))
            continue
        value = payload[key]
        if key == "status":
            try:
                value = TeamStatus(value)
            except ValueError:
                errors.append(FieldError(key, f"Status must be one of {', '.join(s.value for s in TeamStatus)}",
                                         value=value))
                continue
        else:
            value = str(value).strip()
            if not value:
                errors.append(FieldError(key, f"{label} cannot be empty"))
                continue
        changes[column] = value

    # team number may only be replaced by a full update
    if not partial and payload.get("teamNumber"):
        changes["team_number"] = str(payload["teamNumber"]).strip()

    if errors:
        raise ValidationError(errors)
    return changes


def update_team(mentor_id, team_id, payload, partial):
    """PATCH when ``partial`` (only given fields), PUT otherwise (status, title and pillar required)."""
    team = mentor_team(mentor_id, team_id)
    changes = _parse_changes(payload, partial)

    previous = team.status
    for column, value in changes.items():
        setattr(team, column, value)

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict("Team number already in use")
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating team {team_id}: {str(e)}")
        raise InternalError("Failed to update team")

    if team.status != previous:
        current_app.logger.info(f"Team {team.id} status {previous.value} -> {team.status.value} by mentor {mentor_id}")
    return mentor_team(mentor_id, team_id)


def student_team(user_id):
    team = team_for_student(user_id)
    approved = any(p.state == ProposalState.APPROVED for p in team.proposals)
    stage = STAGE_PROPOSAL_ACCEPTED if approved else STAGE_PROPOSAL_SUBMISSION
    return team, stage
