# models/evaluation.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum, Numeric, Uuid, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
import uuid
from ssrportal.extension.extensions import db

# marks are half-point decimals; Numeric(4, 1) keeps them exact
Marks = Numeric(4, 1, asdecimal=True)


class EvaluationStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"


class Evaluation(db.Model):
    __tablename__ = 'team_evaluations'
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    team_id = Column(Uuid(as_uuid=True), ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, unique=True)
    mentor_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True)

    # group marks, same for everyone in the team
    poster_marks = Column(Marks, nullable=False, default=0)   # 2
    video_marks = Column(Marks, nullable=False, default=0)    # 3
    report_marks = Column(Marks, nullable=False, default=0)   # 3
    ppt_marks = Column(Marks, nullable=False, default=0)      # 3
    group_score = Column(Marks, nullable=False, default=0)    # 11

    external_evaluator_name = Column(String(255), nullable=True)
    external_evaluator_email = Column(String(255), nullable=True)
    status = Column(Enum(EvaluationStatus), nullable=False, default=EvaluationStatus.DRAFT, index=True)
    remarks = Column(Text, nullable=True)

    evaluated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    team = relationship('Team', back_populates='evaluation')
    mentor = relationship('User')
    individual_evaluations = relationship(
        'IndividualEvaluation',
        back_populates='evaluation',
        order_by='IndividualEvaluation.position',
        cascade='all, delete-orphan',
        passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint('group_score >= 0 AND group_score <= 11', name='ck_evaluation_group_score_range'),
    )


class IndividualEvaluation(db.Model):
    __tablename__ = 'individual_evaluations'
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    team_evaluation_id = Column(Uuid(as_uuid=True), ForeignKey('team_evaluations.id', ondelete='CASCADE'), nullable=False, index=True)
    team_member_id = Column(Uuid(as_uuid=True), ForeignKey('team_members.id', ondelete='CASCADE'), nullable=False, index=True)

    # snapshot of the member at write time
    member_name = Column(String(255), nullable=False)
    member_email = Column(String(255), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    individual_score = Column(Marks, nullable=False, default=0)          # 3, mentor input
    learning_contribution = Column(Marks, nullable=False, default=0)     # 2
    presentation_skill = Column(Marks, nullable=False, default=0)        # 2
    contribution_to_project = Column(Marks, nullable=False, default=0)   # 2
    external_evaluator_marks = Column(Marks, nullable=False, default=0)  # 6
    total_individual_marks = Column(Marks, nullable=False, default=0)    # 20

    evaluation = relationship('Evaluation', back_populates='individual_evaluations')
    team_member = relationship('TeamMember')

    __table_args__ = (
        db.UniqueConstraint('team_evaluation_id', 'team_member_id', name='uq_individual_eval_member'),
        CheckConstraint('total_individual_marks >= 0 AND total_individual_marks <= 20', name='ck_individual_total_range'),
    )
