# ssrportal/services/payload_formatters.py
from decimal import Decimal
from typing import Any, Dict, List, Optional


def _marks(val: Optional[Decimal]) -> Optional[float]:
    # half-steps are exact in binary floating point, so float is lossless here
    return float(val) if val is not None else None


def _iso(val: Any) -> Optional[str]:
    return val.isoformat() if val is not None else None


def _enum(val: Any) -> Optional[str]:
    return getattr(val, "value", val)


def format_member(member) -> Dict[str, Any]:
    return {
        "id": str(member.id),
        "name": member.name,
        "email": member.email,
        "rollNumber": member.roll_number,
        "role": _enum(member.role),
    }


def format_team_shell(team) -> Dict[str, Any]:
    """Just enough of the team to seed a blank evaluation form."""
    return {
        "teamId": str(team.id),
        "teamNumber": team.team_number,
        "projectTitle": team.project_title,
        "batch": team.batch,
        "members": [format_member(m) for m in team.current_members],
    }


def format_individual_evaluation(row) -> Dict[str, Any]:
    return {
        "id": str(row.id),
        "teamMemberId": str(row.team_member_id),
        "memberName": row.member_name,
        "memberEmail": row.member_email,
        "position": row.position,
        "individualScore": _marks(row.individual_score),
        "learningContribution": _marks(row.learning_contribution),
        "presentationSkill": _marks(row.presentation_skill),
        "contributionToProject": _marks(row.contribution_to_project),
        "externalEvaluatorMarks": _marks(row.external_evaluator_marks),
        "totalIndividualMarks": _marks(row.total_individual_marks),
    }


def format_evaluation(evaluation) -> Dict[str, Any]:
    return {
        "id": str(evaluation.id),
        "teamId": str(evaluation.team_id),
        "mentorId": evaluation.mentor_id,
        "posterMarks": _marks(evaluation.poster_marks),
        "videoMarks": _marks(evaluation.video_marks),
        "reportMarks": _marks(evaluation.report_marks),
        "pptMarks": _marks(evaluation.ppt_marks),
        "groupScore": _marks(evaluation.group_score),
        "externalEvaluatorName": evaluation.external_evaluator_name,
        "externalEvaluatorEmail": evaluation.external_evaluator_email,
        "status": _enum(evaluation.status),
        "remarks": evaluation.remarks,
        "evaluatedAt": _iso(evaluation.evaluated_at),
        "updatedAt": _iso(evaluation.updated_at),
        "individualEvaluations": [format_individual_evaluation(r) for r in evaluation.individual_evaluations],
    }


def format_evaluation_lookup(lookup) -> Dict[str, Any]:
    if lookup.evaluation is not None:
        return {
            "found": True,
            "message": "Evaluation found",
            "evaluation": format_evaluation(lookup.evaluation),
        }
    return {
        "found": False,
        "message": "No evaluation yet for this team",
        "teamShell": format_team_shell(lookup.team),
    }


def format_team_summary(team) -> Dict[str, Any]:
    evaluation = team.evaluation
    return {
        "teamId": str(team.id),
        "teamNumber": team.team_number,
        "projectTitle": team.project_title,
        "projectCategory": team.project_category,
        "batch": team.batch,
        "status": _enum(team.status),
        "memberCount": len(team.current_members),
        "evaluationStatus": _enum(evaluation.status) if evaluation else None,
        "groupScore": _marks(evaluation.group_score) if evaluation else None,
    }


def _split_urls(val: Optional[str]) -> List[str]:
    return [u for u in (val or "").split(",") if u]


def format_proposal(proposal) -> Dict[str, Any]:
    return {
        "id": proposal.id,
        "teamId": str(proposal.team_id),
        "authorId": proposal.author_id,
        "title": proposal.title,
        "description": proposal.description,
        "content": proposal.content,
        "attachment": _split_urls(proposal.attachment),
        "posterAttachment": _split_urls(proposal.poster_attachment),
        "pptAttachment": _split_urls(proposal.ppt_attachment),
        "link": proposal.link,
        "state": _enum(proposal.state),
        "remarks": proposal.remarks,
        "remarkUpdatedAt": _iso(proposal.remark_updated_at),
        "createdAt": _iso(proposal.created_at),
        "updatedAt": _iso(proposal.updated_at),
    }


def _person(user) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return {"id": user.id, "name": user.full_name, "email": user.email}


def format_team_detail(team) -> Dict[str, Any]:
    return {
        **format_team_summary(team),
        "members": [format_member(m) for m in team.current_members],
        "mentor": _person(team.mentor),
        "lead": _person(team.lead),
        "proposals": [format_proposal(p) for p in team.proposals],
        "updatedAt": _iso(team.updated_at),
    }


def format_student_team(team, stage: str) -> Dict[str, Any]:
    detail = format_team_detail(team)
    detail["stats"] = {
        "proposals": len(detail["proposals"]),
        "members": len(detail["members"]),
        "stage": stage,
    }
    return detail
