from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from ssrportal.extension.extensions import db


class ProposalState(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Proposal(db.Model):
    __tablename__ = 'proposals'
    id = Column(Integer, primary_key=True)
    team_id = Column(Uuid(as_uuid=True), ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, index=True)
    author_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    content = Column(Text, nullable=True)

    # comma-joined URL lists, one per file category
    attachment = Column(Text, nullable=True)          # report
    poster_attachment = Column(Text, nullable=True)
    ppt_attachment = Column(Text, nullable=True)
    link = Column(Text, nullable=True)

    state = Column(Enum(ProposalState), nullable=False, default=ProposalState.PENDING, index=True)
    remarks = Column(Text, nullable=True)
    remark_updated_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    team = relationship('Team', back_populates='proposals')
    author = relationship('User')
