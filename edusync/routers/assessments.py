import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlmodel import Session, select

from ..db import get_session
from ..dependencies import Principal, require_role
from ..models import Assessment, Course, Result, Role
from ..schemas.assessment import AssessmentDto, AssessmentForm
from .courses import ensure_instructor_of, get_course_or_404

logger = logging.getLogger(__name__)

router = APIRouter()


def get_assessment_or_404(session: Session, assessment_id: uuid.UUID) -> Assessment:
    assessment = session.get(Assessment, assessment_id)
    if not assessment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Assessment not found")
    return assessment


@router.get("", response_model=List[AssessmentDto])
async def get_assessments(session: Session = Depends(get_session)):
    assessments = session.exec(select(Assessment)).all()
    return [AssessmentDto.from_assessment(a) for a in assessments]


@router.get("/byCourse/{course_id}", response_model=List[AssessmentDto])
async def get_assessments_by_course(course_id: uuid.UUID, session: Session = Depends(get_session)):
    assessments = session.exec(select(Assessment).where(Assessment.course_id == course_id)).all()
    return [AssessmentDto.from_assessment(a) for a in assessments]


@router.get("/my", response_model=List[AssessmentDto])
async def get_my_assessments(
    principal: Principal = Depends(require_role(Role.INSTRUCTOR.value)),
    session: Session = Depends(get_session),
):
    assessments = session.exec(
        select(Assessment).join(Course).where(Course.instructor_id == principal.id)
    ).all()
    return [AssessmentDto.from_assessment(a) for a in assessments]


@router.get("/{assessment_id}", response_model=AssessmentDto)
async def get_assessment(assessment_id: uuid.UUID, session: Session = Depends(get_session)):
    return AssessmentDto.from_assessment(get_assessment_or_404(session, assessment_id))


@router.post("", response_model=AssessmentDto, status_code=status.HTTP_201_CREATED)
async def create_assessment(
    form_data: AssessmentForm,
    principal: Principal = Depends(require_role(Role.INSTRUCTOR.value)),
    session: Session = Depends(get_session),
):
    course = get_course_or_404(session, form_data.course_id)
    ensure_instructor_of(course, principal)

    assessment = Assessment(
        title=form_data.title,
        questions=form_data.questions,
        course_id=course.id,
        max_score=form_data.max_score,
    )
    session.add(assessment)
    session.commit()
    session.refresh(assessment)
    logger.info("Instructor %s created assessment %s in course %s", principal.id, assessment.id, course.id)
    return AssessmentDto.from_assessment(assessment)


@router.put("/{assessment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_assessment(
    assessment_id: uuid.UUID,
    form_data: AssessmentDto,
    principal: Principal = Depends(require_role(Role.INSTRUCTOR.value)),
    session: Session = Depends(get_session),
):
    if form_data.assessment_id != assessment_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Assessment ID mismatch")

    assessment = get_assessment_or_404(session, assessment_id)
    ensure_instructor_of(assessment.course, principal)
    if form_data.course_id != assessment.course_id:
        # Moving an assessment requires owning the destination course as well
        ensure_instructor_of(get_course_or_404(session, form_data.course_id), principal)

    assessment.title = form_data.title
    assessment.questions = form_data.questions
    assessment.course_id = form_data.course_id
    assessment.max_score = form_data.max_score
    session.add(assessment)
    session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{assessment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_assessment(
    assessment_id: uuid.UUID,
    principal: Principal = Depends(require_role(Role.INSTRUCTOR.value)),
    session: Session = Depends(get_session),
):
    assessment = get_assessment_or_404(session, assessment_id)
    ensure_instructor_of(assessment.course, principal)

    results = session.exec(select(Result).where(Result.assessment_id == assessment_id)).all()
    for result in results:
        session.delete(result)
    session.delete(assessment)
    session.commit()
    logger.info("Instructor %s deleted assessment %s and %d results", principal.id, assessment_id, len(results))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
