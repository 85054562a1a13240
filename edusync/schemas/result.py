import uuid
from datetime import datetime

from .base import CamelModel


class ResultDto(CamelModel):
    result_id: uuid.UUID
    assessment_id: uuid.UUID
    assessment_title: str = ""
    submitted_answers: str = ""
    user_id: uuid.UUID
    user_name: str = ""
    score: int
    attempt_date: datetime
    submitted_at: datetime

    @classmethod
    def from_result(cls, result) -> "ResultDto":
        return cls(
            result_id=result.id,
            assessment_id=result.assessment_id,
            assessment_title=result.assessment.title if result.assessment else "",
            submitted_answers=result.submitted_answers,
            user_id=result.user_id,
            user_name=result.user.name if result.user else "",
            score=result.score,
            attempt_date=result.attempt_date,
            submitted_at=result.submitted_at,
        )


class MyResultDto(CamelModel):
    result_id: uuid.UUID
    score: int
    attempt_date: datetime
    assessment_title: str = "Untitled"


class ResultForm(CamelModel):
    assessment_id: uuid.UUID
    submitted_answers: str
    score: int


class UpdateResultForm(CamelModel):
    result_id: uuid.UUID
    submitted_answers: str
    score: int
