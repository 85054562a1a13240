import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlmodel import Session, select

from ..db import get_session
from ..dependencies import Principal, get_current_principal
from ..models import Result, Role
from ..models.course import utcnow
from ..schemas.result import MyResultDto, ResultDto, ResultForm, UpdateResultForm
from .assessments import get_assessment_or_404

logger = logging.getLogger(__name__)

router = APIRouter()


def get_result_or_404(session: Session, result_id: uuid.UUID) -> Result:
    result = session.get(Result, result_id)
    if not result:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Result not found")
    return result


def ensure_owner(result: Result, principal: Principal) -> None:
    if result.user_id != principal.id:
        logger.warning("User %s tried to modify result %s owned by %s", principal.id, result.id, result.user_id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only modify your own results")


@router.get("", response_model=List[ResultDto])
async def get_results(
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
):
    results = session.exec(select(Result).order_by(Result.submitted_at)).all()
    return [ResultDto.from_result(r) for r in results]


@router.get("/my", response_model=List[MyResultDto])
async def get_my_results(
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
):
    results = session.exec(
        select(Result).where(Result.user_id == principal.id).order_by(Result.attempt_date)
    ).all()
    return [
        MyResultDto(
            result_id=r.id,
            score=r.score,
            attempt_date=r.attempt_date,
            assessment_title=r.assessment.title if r.assessment else "Untitled",
        )
        for r in results
    ]


@router.get("/byAssessment/{assessment_id}", response_model=List[ResultDto])
async def get_results_by_assessment(
    assessment_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
):
    assessment = get_assessment_or_404(session, assessment_id)

    if principal.role == Role.INSTRUCTOR.value and assessment.course.instructor_id != principal.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You are not the instructor of this course")

    statement = select(Result).where(Result.assessment_id == assessment_id)
    if principal.role == Role.STUDENT.value:
        statement = statement.where(Result.user_id == principal.id)
    results = session.exec(statement.order_by(Result.submitted_at)).all()
    return [ResultDto.from_result(r) for r in results]


@router.get("/{result_id}", response_model=ResultDto)
async def get_result(
    result_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
):
    return ResultDto.from_result(get_result_or_404(session, result_id))


@router.post("", response_model=ResultDto, status_code=status.HTTP_201_CREATED)
async def create_result(
    form_data: ResultForm,
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
):
    get_assessment_or_404(session, form_data.assessment_id)

    now = utcnow()
    result = Result(
        assessment_id=form_data.assessment_id,
        submitted_answers=form_data.submitted_answers,
        user_id=principal.id,
        score=form_data.score,
        attempt_date=now,
        submitted_at=now,
    )
    session.add(result)
    session.commit()
    session.refresh(result)
    logger.info("User %s submitted result %s for assessment %s", principal.id, result.id, result.assessment_id)
    return ResultDto.from_result(result)


@router.put("/{result_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_result(
    result_id: uuid.UUID,
    form_data: UpdateResultForm,
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
):
    if form_data.result_id != result_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Result ID mismatch")

    result = get_result_or_404(session, result_id)
    ensure_owner(result, principal)

    result.submitted_answers = form_data.submitted_answers
    result.score = form_data.score
    result.submitted_at = utcnow()
    session.add(result)
    session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{result_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_result(
    result_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
):
    result = get_result_or_404(session, result_id)
    ensure_owner(result, principal)

    session.delete(result)
    session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
