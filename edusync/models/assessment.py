import uuid
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel, Relationship

if TYPE_CHECKING:
    from .course import Course
    from .result import Result


class Assessment(SQLModel, table=True):
    __tablename__ = "assessments"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    title: str
    # Serialized question payload, stored as-is
    questions: str = Field(sa_column=Column(Text, nullable=False))
    course_id: uuid.UUID = Field(foreign_key="courses.id", index=True, ondelete="CASCADE")
    max_score: int = 0

    course: Optional["Course"] = Relationship(back_populates="assessments")
    results: List["Result"] = Relationship(
        back_populates="assessment", sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )
