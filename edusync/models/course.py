import uuid
from datetime import datetime, timezone
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel, Relationship

if TYPE_CHECKING:
    from .user import User
    from .assessment import Assessment
    from .enrollment import Enrollment


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Course(SQLModel, table=True):
    __tablename__ = "courses"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    title: str
    description: str
    instructor_id: uuid.UUID = Field(foreign_key="users.id", index=True, ondelete="RESTRICT")
    media_url: str = ""
    course_content: str = Field(default="", sa_column=Column(Text, nullable=False, default=""))
    created_at: datetime = Field(default_factory=utcnow, index=True)
    last_updated: datetime = Field(default_factory=utcnow)

    instructor: Optional["User"] = Relationship(back_populates="courses")
    assessments: List["Assessment"] = Relationship(
        back_populates="course", sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )
    enrollments: List["Enrollment"] = Relationship(
        back_populates="course", sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )
