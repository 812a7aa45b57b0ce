# ssrportal/controllers/proposal_controller.py
from flask import Blueprint, request, jsonify

from ssrportal.middleware.role_guard import role_required, current_user_id
from ssrportal.models.user import UserRole
from ssrportal.services import proposal_service
from ssrportal.services.payload_formatters import format_proposal

bp_student_proposals = Blueprint('student_proposals', __name__, url_prefix='/api/student/proposals')
bp_mentor_proposals = Blueprint('mentor_proposals', __name__, url_prefix='/api/mentor/proposals')


@bp_student_proposals.get('')
@role_required(UserRole.STUDENT)
def get_my_proposal():
    team = proposal_service.team_for_student(current_user_id())
    proposal = proposal_service.get_team_proposal(team.id)
    return jsonify({"proposal": format_proposal(proposal) if proposal else None}), 200


@bp_student_proposals.post('')
@role_required(UserRole.STUDENT)
def save_my_proposal():
    payload = request.get_json(silent=True) or {}
    proposal, created = proposal_service.save_proposal(current_user_id(), payload)
    return jsonify({
        "message": "Proposal submitted successfully" if created else "Proposal updated successfully",
        "proposal": format_proposal(proposal),
    }), 201 if created else 200


@bp_mentor_proposals.get('/<int:proposal_id>')
@role_required(UserRole.MENTOR)
def get_proposal(proposal_id):
    proposal = proposal_service.proposal_for_mentor(current_user_id(), proposal_id)
    return jsonify({"proposal": format_proposal(proposal)}), 200


@bp_mentor_proposals.put('/<int:proposal_id>')
@role_required(UserRole.MENTOR)
def review_proposal(proposal_id):
    payload = request.get_json(silent=True) or {}
    proposal = proposal_service.review_proposal(current_user_id(), proposal_id, payload)
    return jsonify({
        "message": "Proposal updated successfully",
        "proposal": format_proposal(proposal),
    }), 200
