# ssrportal/controllers/admin_controller.py
from datetime import date

from flask import Blueprint, Response, jsonify

from ssrportal.middleware.role_guard import role_required
from ssrportal.models.user import UserRole
from ssrportal.services import report_service
from ssrportal.services.payload_formatters import format_evaluation, format_team_summary

bp_admin = Blueprint('admin', __name__, url_prefix='/api/admin/evaluations')


@bp_admin.get('')
@role_required(UserRole.ADMIN)
def list_evaluations():
    teams = report_service.all_teams()
    return jsonify([{
        **format_team_summary(t),
        "mentor": t.mentor.full_name if t.mentor else None,
        "evaluation": format_evaluation(t.evaluation) if t.evaluation else None,
    } for t in teams]), 200


@bp_admin.get('/export')
@role_required(UserRole.ADMIN)
def export_evaluations():
    filename = f"ssr_evaluations_{date.today().isoformat()}.csv"
    return Response(
        report_service.export_csv(),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
