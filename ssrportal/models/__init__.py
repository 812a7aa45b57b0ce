# ssrportal/models/__init__.py

# Import models in the correct order so string relationships resolve
from .user import User, UserRole
from .team import Team, TeamMember, TeamStatus, MemberRole
from .evaluation import Evaluation, IndividualEvaluation, EvaluationStatus
from .proposal import Proposal, ProposalState


__all__ = [
    'User', 'UserRole',
    'Team', 'TeamMember', 'TeamStatus', 'MemberRole',
    'Evaluation', 'IndividualEvaluation', 'EvaluationStatus',
    'Proposal', 'ProposalState',
]
