# ssrportal/services/report_service.py
import csv
import io

from sqlalchemy.orm import selectinload

from ssrportal.models.team import Team
from ssrportal.models.evaluation import Evaluation
from ssrportal.services import scoring

EXPORT_COLUMNS = [
    "Team Number", "Project Title", "Batch", "Mentor", "Member", "Member Email",
    "Poster", "Video", "Report", "PPT", "Group Score",
    "Individual Score", "Philosophy/Idea", "Presentation", "Learnings",
    "External Evaluator Marks", "Mentor Total", "Total", "Status",
]


def all_teams():
    return (Team.query
            .options(selectinload(Team.members),
                     selectinload(Team.mentor),
                     selectinload(Team.evaluation).selectinload(Evaluation.individual_evaluations))
            .order_by(Team.team_number.asc())
            .all())


def export_rows():
    """One row per scored member, teams in team-number order, members in member-list order."""
    for team in all_teams():
        evaluation = team.evaluation
        if evaluation is None:
            continue
        mentor = team.mentor.full_name if team.mentor else ""
        for row in evaluation.individual_evaluations:
            yield [
                team.team_number, team.project_title or "", team.batch or "", mentor,
                row.member_name, row.member_email,
                evaluation.poster_marks, evaluation.video_marks, evaluation.report_marks, evaluation.ppt_marks,
                evaluation.group_score,
                row.individual_score, row.learning_contribution, row.presentation_skill,
                row.contribution_to_project, row.external_evaluator_marks,
                scoring.mentor_total(evaluation.group_score, row.individual_score),
                row.total_individual_marks, evaluation.status.value,
            ]


def write_csv(out):
    writer = csv.writer(out)
    writer.writerow(EXPORT_COLUMNS)
    count = 0
    for row in export_rows():
        writer.writerow(row)
        count += 1
    return count


def export_csv():
    buf = io.StringIO()
    write_csv(buf)
    return buf.getvalue()
