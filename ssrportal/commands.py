import click
from flask.cli import with_appcontext

from ssrportal.extension.extensions import db


@click.command('export-evaluations')
@click.option('--out', 'out_path', default='-', type=click.Path(allow_dash=True, dir_okay=False, writable=True),
              help='CSV file to write (default: stdout)')
@with_appcontext
def export_evaluations_command(out_path):
    """
    Export every scored member as CSV.

    Usage: flask export-evaluations --out evaluations.csv
    """
    from ssrportal.services.report_service import write_csv

    with click.open_file(out_path, 'w', encoding='utf-8', lazy=False) as out:
        count = write_csv(out)

    if out_path != '-':
        click.echo(f"Exported {count} member row(s) to {out_path}")


@click.command('seed-demo')
@click.option('--password', default='password123', help='Password for every demo account')
@with_appcontext
def seed_demo_command(password):
    """
    Create demo admin/mentor/student accounts and one team with four members.
    Safe to run twice: existing accounts and teams are left alone.
    """
    from ssrportal.models import User, UserRole, Team, TeamMember, TeamStatus, MemberRole

    def user(email, first, last, role):
        existing = User.query.filter_by(email=email).first()
        if existing:
            return existing
        u = User(email=email, first_name=first, last_name=last, role=role)
        u.set_password(password)
        db.session.add(u)
        return u

    admin = user('admin@ssr.local', 'Portal', 'Admin', UserRole.ADMIN)
    mentor = user('mentor@ssr.local', 'Meera', 'Rao', UserRole.MENTOR)
    students = [
        user(f'student{i}@ssr.local', name, 'Student', UserRole.STUDENT)
        for i, name in enumerate(['Arjun', 'Bela', 'Chirag', 'Divya'], start=1)
    ]
    db.session.flush()

    team = Team.query.filter_by(team_number='SSR-001').first()
    if team is None:
        team = Team(team_number='SSR-001', project_title='Clean water awareness drive',
                    project_category='Environment', batch='2025', status=TeamStatus.APPROVED,
                    mentor_id=mentor.id, lead_id=students[0].id)
        for position, s in enumerate(students):
            team.members.append(TeamMember(
                user_id=s.id, name=s.full_name, email=s.email, roll_number=f'R{1000 + position}',
                role=MemberRole.LEADER if position == 0 else MemberRole.MEMBER, position=position
            ))
        db.session.add(team)

    db.session.commit()
    click.echo(f"Seeded admin {admin.email}, mentor {mentor.email}, team {team.team_number} "
               f"with {len(team.current_members)} member(s)")
