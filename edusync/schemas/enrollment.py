import uuid
from datetime import datetime

from .base import CamelModel


class EnrollmentForm(CamelModel):
    course_id: uuid.UUID


class UpdateEnrollmentForm(CamelModel):
    enrollment_id: uuid.UUID
    is_completed: bool


class EnrollmentResponse(CamelModel):
    enrollment_id: uuid.UUID
    user_id: uuid.UUID
    course_id: uuid.UUID
    enrollment_date: datetime
    is_completed: bool

    @classmethod
    def from_enrollment(cls, enrollment) -> "EnrollmentResponse":
        return cls(
            enrollment_id=enrollment.id,
            user_id=enrollment.user_id,
            course_id=enrollment.course_id,
            enrollment_date=enrollment.enrollment_date,
            is_completed=enrollment.is_completed,
        )


class StudentDto(CamelModel):
    user_id: uuid.UUID
    name: str
    email: str
    enrollment_date: datetime
    is_completed: bool
