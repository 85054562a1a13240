import uuid
from datetime import datetime
from typing import Optional

from .base import CamelModel


class CourseDto(CamelModel):
    course_id: uuid.UUID
    title: str
    description: str
    instructor_id: uuid.UUID
    instructor_name: str = "Unknown"
    media_url: str = ""
    enrollment_count: int = 0
    assessment_count: int = 0
    course_content: str = ""
    last_updated: datetime
    created_at: datetime
    is_enrolled: bool = False


class CourseForm(CamelModel):
    title: str
    description: str
    media_url: str = ""
    course_content: str = ""
    # Accepted for client compatibility; the caller is always the instructor
    instructor_id: Optional[uuid.UUID] = None


class UpdateCourseForm(CourseForm):
    course_id: Optional[uuid.UUID] = None


class CourseUrls(CamelModel):
    course_content_url: Optional[str] = None
    media_url: Optional[str] = None
