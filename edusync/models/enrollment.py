import uuid
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel, Relationship

from .course import utcnow

if TYPE_CHECKING:
    from .user import User
    from .course import Course


class Enrollment(SQLModel, table=True):
    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_enrollment_user_course"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    course_id: uuid.UUID = Field(foreign_key="courses.id", index=True, ondelete="CASCADE")
    enrollment_date: datetime = Field(default_factory=utcnow)
    is_completed: bool = False

    user: Optional["User"] = Relationship(back_populates="enrollments")
    course: Optional["Course"] = Relationship(back_populates="enrollments")
