import uuid

from .base import CamelModel


class AssessmentDto(CamelModel):
    assessment_id: uuid.UUID
    title: str
    questions: str = ""
    course_id: uuid.UUID
    course_title: str = ""
    max_score: int = 0

    @classmethod
    def from_assessment(cls, assessment) -> "AssessmentDto":
        return cls(
            assessment_id=assessment.id,
            title=assessment.title,
            questions=assessment.questions,
            course_id=assessment.course_id,
            course_title=assessment.course.title if assessment.course else "",
            max_score=assessment.max_score,
        )


class AssessmentForm(CamelModel):
    course_id: uuid.UUID
    title: str
    questions: str
    max_score: int
