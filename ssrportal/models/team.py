# models/team.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
import uuid
from ssrportal.extension.extensions import db


class TeamStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    COMPLETED = "COMPLETED"


class MemberRole(str, enum.Enum):
    LEADER = "LEADER"
    MEMBER = "MEMBER"


class Team(db.Model):
    __tablename__ = 'teams'
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    team_number = Column(String(32), unique=True, nullable=False)
    project_title = Column(String(255), nullable=True)
    project_category = Column(String(120), nullable=True)
    batch = Column(String(32), nullable=True)
    status = Column(Enum(TeamStatus), nullable=False, default=TeamStatus.PENDING, index=True)
    mentor_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True)
    lead_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    mentor = relationship('User', foreign_keys=[mentor_id])
    lead = relationship('User', foreign_keys=[lead_id])
    members = relationship(
        'TeamMember',
        back_populates='team',
        order_by='TeamMember.position',
        cascade='all, delete-orphan'
    )
    evaluation = relationship('Evaluation', back_populates='team', uselist=False, cascade='all, delete-orphan')
    proposals = relationship('Proposal', back_populates='team', cascade='all, delete-orphan')

    @property
    def current_members(self):
        """Members still on the team, in member-list order."""
        return [m for m in self.members if m.removed_at is None]

    def __str__(self):
        return f"Team(id={self.id}, number={self.team_number})"


class TeamMember(db.Model):
    __tablename__ = 'team_members'
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    team_id = Column(Uuid(as_uuid=True), ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    roll_number = Column(String(64), nullable=True)
    role = Column(Enum(MemberRole), nullable=False, default=MemberRole.MEMBER)
    position = Column(Integer, nullable=False, default=0)
    joined_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    removed_at = Column(DateTime(timezone=True), nullable=True)

    team = relationship('Team', back_populates='members')
    user = relationship('User')

    __table_args__ = (
        db.UniqueConstraint('team_id', 'email', name='uq_team_member_email'),
    )
