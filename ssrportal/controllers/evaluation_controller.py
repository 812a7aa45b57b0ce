# ssrportal/controllers/evaluation_controller.py
from flask import Blueprint, request, jsonify

from ssrportal.middleware.role_guard import role_required, current_user_id
from ssrportal.models.user import UserRole
from ssrportal.services import evaluation_service, team_service
from ssrportal.services.notification_service import notify_evaluation_saved
from ssrportal.services.payload_formatters import (format_evaluation, format_evaluation_lookup, format_student_team,
                                                  format_team_detail, format_team_summary)

bp_mentor = Blueprint('mentor', __name__, url_prefix='/api/mentor/teams')
bp_student_team = Blueprint('student_team', __name__, url_prefix='/api/student/team')


def _json_body():
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


@bp_mentor.get('')
@role_required(UserRole.MENTOR)
def list_teams():
    teams = evaluation_service.list_mentor_teams(current_user_id())
    return jsonify([format_team_summary(t) for t in teams]), 200


@bp_mentor.get('/evaluate')
@role_required(UserRole.MENTOR)
def get_evaluation():
    team_id = evaluation_service.parse_team_id(request.args.get("teamId"))
    lookup = evaluation_service.get_evaluation(current_user_id(), team_id)
    return jsonify(format_evaluation_lookup(lookup)), 200


@bp_mentor.post('/evaluate')
@role_required(UserRole.MENTOR)
def create_evaluation():
    payload = _json_body()
    team_id = evaluation_service.parse_team_id(payload.get("teamId"))
    evaluation = evaluation_service.create_evaluation(current_user_id(), team_id, payload)
    notify_evaluation_saved(evaluation, created=True)
    return jsonify({
        "message": "Evaluation created successfully",
        "evaluation": format_evaluation(evaluation),
    }), 201


@bp_mentor.put('/evaluate')
@role_required(UserRole.MENTOR)
def update_evaluation():
    payload = _json_body()
    team_id = evaluation_service.parse_team_id(payload.get("teamId"))
    evaluation = evaluation_service.update_evaluation(current_user_id(), team_id, payload)
    notify_evaluation_saved(evaluation, created=False)
    return jsonify({
        "message": "Evaluation updated successfully",
        "evaluation": format_evaluation(evaluation),
    }), 200


@bp_mentor.get('/<uuid:team_id>')
@role_required(UserRole.MENTOR)
def get_team(team_id):
    team = team_service.mentor_team(current_user_id(), team_id)
    return jsonify({"team": format_team_detail(team)}), 200


@bp_mentor.route('/<uuid:team_id>', methods=['PATCH', 'PUT'])
@role_required(UserRole.MENTOR)
def update_team(team_id):
    team = team_service.update_team(current_user_id(), team_id, _json_body(),
                                    partial=request.method == 'PATCH')
    return jsonify({
        "message": "Team updated successfully",
        "team": format_team_detail(team),
    }), 200


@bp_student_team.get('')
@role_required(UserRole.STUDENT)
def get_my_team():
    team, stage = team_service.student_team(current_user_id())
    return jsonify({"team": format_student_team(team, stage)}), 200
