# ssrportal/services/notification_service.py
from flask import current_app, request
from flask_socketio import join_room, emit

from ssrportal.extension.extensions import socketio


def _rooms(team_id, mentor_id):
    return f"team_{team_id}", f"mentor_{mentor_id}"


def register_portal_events():

    @socketio.on("connect")
    def on_connect():
        current_app.logger.info(f"Socket connected: {request.sid}")

    @socketio.on("join_team")
    def on_join_team(data):
        team_id = (data or {}).get("teamId")
        if not team_id:
            emit("error", {"error": "teamId is required"})
            return
        join_room(f"team_{team_id}")
        emit("joined", {"room": f"team_{team_id}"})

    @socketio.on("join_mentor")
    def on_join_mentor(data):
        mentor_id = (data or {}).get("mentorId")
        if not mentor_id:
            emit("error", {"error": "mentorId is required"})
            return
        join_room(f"mentor_{mentor_id}")
        emit("joined", {"room": f"mentor_{mentor_id}"})


def notify_evaluation_saved(evaluation, created):
    r_team, r_mentor = _rooms(evaluation.team_id, evaluation.mentor_id)
    payload = {
        "teamId": str(evaluation.team_id),
        "evaluationId": str(evaluation.id),
        "status": evaluation.status.value,
        "groupScore": float(evaluation.group_score),
        "created": created,
    }
    socketio.emit("evaluation_saved", payload, room=r_team)
    socketio.emit("evaluation_saved", payload, room=r_mentor)
