import uuid
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel, Relationship

from .course import utcnow

if TYPE_CHECKING:
    from .user import User
    from .assessment import Assessment


class Result(SQLModel, table=True):
    __tablename__ = "results"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    assessment_id: uuid.UUID = Field(foreign_key="assessments.id", index=True, ondelete="CASCADE")
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    submitted_answers: str = Field(sa_column=Column(Text, nullable=False))
    score: int
    attempt_date: datetime = Field(default_factory=utcnow)
    submitted_at: datetime = Field(default_factory=utcnow)

    assessment: Optional["Assessment"] = Relationship(back_populates="results")
    user: Optional["User"] = Relationship(back_populates="results")
