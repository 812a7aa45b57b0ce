# ssrportal/services/proposal_service.py
from datetime import datetime, timezone

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from ssrportal.extension.extensions import db
from ssrportal.errors import FieldError, Forbidden, InternalError, ValidationError
from ssrportal.models.team import Team, TeamMember
from ssrportal.models.proposal import Proposal, ProposalState

MIN_TITLE_LENGTH = 5
MIN_DESCRIPTION_LENGTH = 100

# payload key -> (model column, label)
ATTACHMENT_FIELDS = {
    "attachment": ("attachment", "Report"),
    "posterAttachment": ("poster_attachment", "Poster"),
    "pptAttachment": ("ppt_attachment", "PPT"),
}

DEFAULT_REMARKS = {
    ProposalState.APPROVED: "Proposal approved",
    ProposalState.REJECTED: "Proposal needs revision",
}


def _join_urls(value):
    """Accept a list of URLs or an already comma-joined string."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ",".join(str(v).strip() for v in value if v and str(v).strip())
    return ",".join(u.strip() for u in str(value).split(",") if u.strip())


def team_for_student(user_id):
    team = (Team.query
            .outerjoin(TeamMember, TeamMember.team_id == Team.id)
            .filter(or_(Team.lead_id == user_id,
                        (TeamMember.user_id == user_id) & TeamMember.removed_at.is_(None)))
            .first())
    if team is None:
        raise Forbidden("You are not part of any team")
    return team


def get_team_proposal(team_id):
    return (Proposal.query
            .filter_by(team_id=team_id)
            .order_by(Proposal.created_at.desc(), Proposal.id.desc())
            .first())


def _validate(payload):
    errors = []
    title = (payload.get("title") or "").strip()
    description = (payload.get("description") or "").strip()

    if len(title) < MIN_TITLE_LENGTH:
        errors.append(FieldError("title", f"Title must be at least {MIN_TITLE_LENGTH} characters"))
    if len(description) < MIN_DESCRIPTION_LENGTH:
        errors.append(FieldError("description",
                                 f"Description must be at least {MIN_DESCRIPTION_LENGTH} characters"))

    attachments = {}
    for key, (column, label) in ATTACHMENT_FIELDS.items():
        joined = _join_urls(payload.get(key))
        if not joined:
            errors.append(FieldError(key, f"{label} file is required"))
        attachments[column] = joined

    if errors:
        raise ValidationError(errors)
    return title, description, attachments


def save_proposal(user_id, payload):
    """Create the team's proposal, or edit it and send it back for review."""
    team = team_for_student(user_id)
    title, description, attachments = _validate(payload)

    proposal = get_team_proposal(team.id)
    if proposal is not None and proposal.state == ProposalState.APPROVED:
        raise Forbidden("Approved proposals cannot be edited")

    created = proposal is None
    if created:
        proposal = Proposal(team_id=team.id, author_id=user_id)
        db.session.add(proposal)

    proposal.title = title
    proposal.description = description
    proposal.content = payload.get("content")
    proposal.link = (payload.get("link") or "").strip() or None
    for column, value in attachments.items():
        setattr(proposal, column, value)
    proposal.state = ProposalState.PENDING

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error saving proposal for team {team.id}: {str(e)}")
        raise InternalError("Failed to save proposal")

    current_app.logger.info(f"Proposal {proposal.id} {'created' if created else 'updated'} for team {team.id}")
    return proposal, created


def proposal_for_mentor(mentor_id, proposal_id):
    proposal = (Proposal.query
                .join(Team, Team.id == Proposal.team_id)
                .filter(Proposal.id == proposal_id, Team.mentor_id == mentor_id)
                .first())
    if proposal is None:
        raise Forbidden("You are not assigned to this team")
    return proposal


def review_proposal(mentor_id, proposal_id, payload):
    proposal = proposal_for_mentor(mentor_id, proposal_id)

    raw_state = payload.get("state")
    if raw_state not in (ProposalState.APPROVED.value, ProposalState.REJECTED.value):
        raise ValidationError([FieldError("state", "State must be APPROVED or REJECTED", value=raw_state)])
    state = ProposalState(raw_state)

    proposal.state = state
    proposal.remarks = (payload.get("remarks") or "").strip() or DEFAULT_REMARKS[state]
    proposal.remark_updated_at = datetime.now(timezone.utc)

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error reviewing proposal {proposal_id}: {str(e)}")
        raise InternalError("Failed to update proposal")

    current_app.logger.info(f"Proposal {proposal.id} marked {state.value} by mentor {mentor_id}")
    return proposal
