# ssrportal/services/evaluation_service.py
"""
Evaluation record store: one evaluation per team plus one individual row per
current team member.

Every write validates the whole payload first (collecting all field errors),
then recomputes derived marks and persists inside a single transaction.
Updates replace the individual rows wholesale while holding the team row lock.
"""
import re
import uuid
from collections import namedtuple
from datetime import datetime, timezone

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload

from ssrportal.extension.extensions import db
from ssrportal.errors import Conflict, FieldError, Forbidden, InternalError, NotFound, ValidationError
from ssrportal.models.team import Team
from ssrportal.models.evaluation import Evaluation, IndividualEvaluation, EvaluationStatus
from ssrportal.services import scoring

NOT_ASSIGNED = "You are not assigned to this team"
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

EvaluationLookup = namedtuple("EvaluationLookup", ["team", "evaluation"])
MemberInput = namedtuple("MemberInput", ["member", "position", "individual_score", "learning_contribution",
                                         "presentation_skill", "contribution_to_project"])
EvaluationInput = namedtuple("EvaluationInput", ["poster_marks", "video_marks", "report_marks", "ppt_marks",
                                                 "members", "external_evaluator_name", "external_evaluator_email",
                                                 "status", "remarks"])


def parse_team_id(raw):
    if raw is None or str(raw).strip() == "":
        raise ValidationError([FieldError("teamId", "Team ID is required")])
    try:
        return uuid.UUID(str(raw))
    except (ValueError, AttributeError):
        raise ValidationError([FieldError("teamId", "Team ID is invalid", value=raw)])


def _assigned_team(mentor_id, team_id):
    # same answer for "no such team" and "someone else's team"
    team = Team.query.filter(Team.id == team_id, Team.mentor_id == mentor_id).first()
    if team is None:
        raise Forbidden(NOT_ASSIGNED)
    return team


def _team_lock_query(team_id):
    return db.session.query(Team.id).filter(Team.id == team_id).with_for_update()


def _lock_team(team_id):
    """Serialise writers per team: row lock on the team until commit/rollback."""
    _team_lock_query(team_id).one()


def _optional_text(payload, key):
    value = payload.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _parse_mark(errors, bound, raw, field=None, label=None):
    field = field or bound.field
    label = label or bound.label
    try:
        value = scoring.to_marks(field, raw, label)
        return scoring.validate_bounds(field, value, bound.minimum, bound.maximum, label=label)
    except FieldError as e:
        errors.append(e)
        return None


def _parse_members(errors, items, team):
    if not isinstance(items, list):
        errors.append(FieldError("individualEvaluations", "Individual evaluations are required"))
        return []

    current = team.current_members
    by_id = {m.id: m for m in current}
    positions = {m.id: i for i, m in enumerate(current)}
    seen = set()
    parsed = []

    for i, item in enumerate(items):
        prefix = f"individualEvaluations[{i}]"
        if not isinstance(item, dict):
            errors.append(FieldError(prefix, "Each individual evaluation must be an object"))
            continue

        raw_id = item.get("teamMemberId")
        try:
            member_id = uuid.UUID(str(raw_id)) if raw_id else None
        except ValueError:
            member_id = None
        member = by_id.get(member_id)
        name = member.name if member else (item.get("memberName") or f"member {i + 1}")

        if member is None:
            errors.append(FieldError(f"{prefix}.teamMemberId", f"{name} is not a current member of this team",
                                     value=raw_id))
        elif member_id in seen:
            errors.append(FieldError(f"{prefix}.teamMemberId", f"{name} is evaluated more than once", value=raw_id))

        marks = [
            _parse_mark(errors, b, item.get(b.field), field=f"{prefix}.{b.field}", label=f"{b.label} for {name}")
            for b in scoring.MEMBER_BOUNDS
        ]

        if member is not None and member_id not in seen:
            seen.add(member_id)
            parsed.append(MemberInput(member, positions[member_id], *marks))

    missing = [m.name for m in current if m.id not in seen]
    if missing:
        errors.append(FieldError("individualEvaluations", f"Missing evaluation for {', '.join(missing)}"))

    return sorted(parsed, key=lambda m: m.position)


def parse_evaluation_payload(payload, team):
    """
    Validate a create/update payload against the rubric and the team's current
    membership. Raises ValidationError listing every offending field.
    """
    errors = []
    group = [_parse_mark(errors, b, payload.get(b.field)) for b in scoring.GROUP_BOUNDS]
    members = _parse_members(errors, payload.get("individualEvaluations"), team)

    status = payload.get("status")
    if status is not None:
        try:
            status = EvaluationStatus(status)
        except ValueError:
            errors.append(FieldError("status", "Status must be DRAFT or SUBMITTED", value=status))

    evaluator_email = _optional_text(payload, "externalEvaluatorEmail")
    if evaluator_email and not EMAIL_RE.match(evaluator_email):
        errors.append(FieldError("externalEvaluatorEmail", "External evaluator email is invalid",
                                 value=evaluator_email))

    if errors:
        raise ValidationError(errors)

    return EvaluationInput(
        *group,
        members=members,
        external_evaluator_name=_optional_text(payload, "externalEvaluatorName"),
        external_evaluator_email=evaluator_email,
        status=status,
        remarks=_optional_text(payload, "remarks"),
    )


def _apply_group_marks(evaluation, data):
    evaluation.poster_marks = data.poster_marks
    evaluation.video_marks = data.video_marks
    evaluation.report_marks = data.report_marks
    evaluation.ppt_marks = data.ppt_marks
    evaluation.group_score = scoring.group_score(data.poster_marks, data.video_marks,
                                                 data.report_marks, data.ppt_marks)
    evaluation.external_evaluator_name = data.external_evaluator_name
    evaluation.external_evaluator_email = data.external_evaluator_email
    evaluation.remarks = data.remarks


def _build_rows(group, members):
    rows = []
    for m in members:
        external = scoring.external_evaluator_marks(m.learning_contribution, m.presentation_skill,
                                                    m.contribution_to_project)
        rows.append(IndividualEvaluation(
            team_member_id=m.member.id,
            member_name=m.member.name,
            member_email=m.member.email,
            position=m.position,
            individual_score=m.individual_score,
            learning_contribution=m.learning_contribution,
            presentation_skill=m.presentation_skill,
            contribution_to_project=m.contribution_to_project,
            external_evaluator_marks=external,
            total_individual_marks=scoring.grand_total(group, m.individual_score, external),
        ))
    return rows


def _load_evaluation(team_id):
    return (Evaluation.query
            .options(selectinload(Evaluation.individual_evaluations).selectinload(IndividualEvaluation.team_member))
            .filter(Evaluation.team_id == team_id)
            .populate_existing()
            .first())


def get_evaluation(mentor_id, team_id):
    """The team's evaluation, or ``evaluation=None`` with the team to seed a blank form."""
    team = _assigned_team(mentor_id, team_id)
    return EvaluationLookup(team, _load_evaluation(team.id))


def create_evaluation(mentor_id, team_id, payload):
    team = _assigned_team(mentor_id, team_id)
    if Evaluation.query.filter_by(team_id=team.id).first() is not None:
        raise Conflict("Evaluation already exists. Use PUT to update.")
    data = parse_evaluation_payload(payload, team)

    evaluation = Evaluation(team_id=team.id, mentor_id=mentor_id,
                            status=data.status or EvaluationStatus.DRAFT)
    _apply_group_marks(evaluation, data)
    evaluation.individual_evaluations = _build_rows(evaluation.group_score, data.members)
    db.session.add(evaluation)

    try:
        db.session.commit()
    except IntegrityError:
        # lost a create race against another request for the same team
        db.session.rollback()
        raise Conflict("Evaluation already exists. Use PUT to update.")
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error creating evaluation for team {team.id}: {str(e)}")
        raise InternalError("Failed to create evaluation")

    current_app.logger.info(
        f"Evaluation {evaluation.id} created for team {team.id}: group={evaluation.group_score}, "
        f"members={len(data.members)}, status={evaluation.status.value}"
    )
    return _load_evaluation(team.id)


def update_evaluation(mentor_id, team_id, payload):
    team = _assigned_team(mentor_id, team_id)
    if Evaluation.query.filter_by(team_id=team.id).first() is None:
        raise NotFound("Evaluation not found. Use POST to create.")
    data = parse_evaluation_payload(payload, team)

    try:
        _lock_team(team.id)
        evaluation = _load_evaluation(team.id)
        if evaluation is None:
            db.session.rollback()
            raise NotFound("Evaluation not found. Use POST to create.")

        _apply_group_marks(evaluation, data)
        # the team may have been reassigned since the evaluation was created
        evaluation.mentor_id = mentor_id
        if data.status is not None:
            evaluation.status = data.status
        evaluation.updated_at = datetime.now(timezone.utc)

        # deletes must hit the table before the re-inserts reuse the same member ids
        evaluation.individual_evaluations.clear()
        db.session.flush()
        evaluation.individual_evaluations.extend(_build_rows(evaluation.group_score, data.members))
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating evaluation for team {team.id}: {str(e)}")
        raise InternalError("Failed to update evaluation")

    current_app.logger.info(
        f"Evaluation {evaluation.id} replaced for team {team.id}: group={evaluation.group_score}, "
        f"members={len(data.members)}, status={evaluation.status.value}"
    )
    return _load_evaluation(team.id)


def list_mentor_teams(mentor_id):
    return (Team.query
            .options(selectinload(Team.members), selectinload(Team.evaluation))
            .filter(Team.mentor_id == mentor_id)
            .order_by(Team.team_number.asc())
            .all())
