import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..db import get_session
from ..dependencies import Principal, get_current_principal, require_role
from ..models import Course, Enrollment, Role, User
from ..schemas.course import CourseDto
from ..schemas.enrollment import EnrollmentForm, EnrollmentResponse, StudentDto, UpdateEnrollmentForm
from ..services.courses import build_course_dtos
from ..services.object_urls import BlobObjectUrlStore, get_object_url_store

logger = logging.getLogger(__name__)

router = APIRouter()

ALREADY_ENROLLED = "User is already enrolled in this course"


def get_enrollment_or_404(session: Session, enrollment_id: uuid.UUID) -> Enrollment:
    enrollment = session.get(Enrollment, enrollment_id)
    if not enrollment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Enrollment not found")
    return enrollment


def is_enrolled(session: Session, user_id: uuid.UUID, course_id: uuid.UUID) -> bool:
    statement = select(Enrollment.id).where(Enrollment.user_id == user_id, Enrollment.course_id == course_id)
    return session.exec(statement).first() is not None


@router.get("/student", response_model=List[CourseDto])
async def get_student_enrollments(
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
    store: BlobObjectUrlStore = Depends(get_object_url_store),
):
    courses = session.exec(
        select(Course).join(Enrollment).where(Enrollment.user_id == principal.id)
    ).all()
    return await build_course_dtos(courses, store, {course.id for course in courses})


@router.get("/check/{course_id}", response_model=bool)
async def check_enrollment(
    course_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
):
    return is_enrolled(session, principal.id, course_id)


@router.get("/course/{course_id}/students", response_model=List[StudentDto])
async def get_enrolled_students(
    course_id: uuid.UUID,
    principal: Principal = Depends(require_role(Role.INSTRUCTOR.value)),
    session: Session = Depends(get_session),
):
    rows = session.exec(
        select(Enrollment, User)
        .join(User, Enrollment.user_id == User.id)
        .where(Enrollment.course_id == course_id)
        .order_by(User.name)
    ).all()
    return [
        StudentDto(
            user_id=user.id,
            name=user.name,
            email=user.email,
            enrollment_date=enrollment.enrollment_date,
            is_completed=enrollment.is_completed,
        )
        for enrollment, user in rows
    ]


@router.get("", response_model=List[EnrollmentResponse])
async def get_enrollments(
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
):
    enrollments = session.exec(select(Enrollment)).all()
    return [EnrollmentResponse.from_enrollment(e) for e in enrollments]


@router.get("/{enrollment_id}", response_model=EnrollmentResponse)
async def get_enrollment(
    enrollment_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
):
    return EnrollmentResponse.from_enrollment(get_enrollment_or_404(session, enrollment_id))


@router.post("", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
async def create_enrollment(
    form_data: EnrollmentForm,
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
):
    if not session.get(User, principal.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User with ID {principal.id} not found")
    if not session.get(Course, form_data.course_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Course with ID {form_data.course_id} not found")
    if is_enrolled(session, principal.id, form_data.course_id):
        logger.info("Duplicate enrollment of %s in %s rejected", principal.id, form_data.course_id)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ALREADY_ENROLLED)

    enrollment = Enrollment(user_id=principal.id, course_id=form_data.course_id, is_completed=False)
    session.add(enrollment)
    try:
        session.commit()
    except IntegrityError:
        # A concurrent request enrolled the same pair between the check and the insert
        session.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ALREADY_ENROLLED)
    session.refresh(enrollment)
    logger.info("User %s enrolled in course %s", principal.id, form_data.course_id)
    return EnrollmentResponse.from_enrollment(enrollment)


@router.put("/{enrollment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_enrollment(
    enrollment_id: uuid.UUID,
    form_data: UpdateEnrollmentForm,
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
):
    if form_data.enrollment_id != enrollment_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Enrollment ID mismatch")

    enrollment = get_enrollment_or_404(session, enrollment_id)
    if enrollment.user_id != principal.id and not principal.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only update your own enrollments")

    enrollment.is_completed = form_data.is_completed
    session.add(enrollment)
    session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{enrollment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_enrollment(
    enrollment_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
):
    enrollment = get_enrollment_or_404(session, enrollment_id)
    teaches_course = enrollment.course is not None and enrollment.course.instructor_id == principal.id
    if enrollment.user_id != principal.id and not principal.is_admin and not teaches_course:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You cannot remove this enrollment")

    session.delete(enrollment)
    session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
