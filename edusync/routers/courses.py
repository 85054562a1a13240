import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlmodel import Session, select

from ..db import get_session
from ..dependencies import Principal, get_optional_principal, require_role
from ..errors import ObjectStoreError
from ..models import Course, Role, User
from ..models.course import utcnow
from ..schemas.course import CourseDto, CourseForm, UpdateCourseForm
from ..services.courses import build_course_dto, build_course_dtos, enrolled_course_ids, write_overlay
from ..services.object_urls import BlobObjectUrlStore, get_object_url_store

logger = logging.getLogger(__name__)

router = APIRouter()


def get_course_or_404(session: Session, course_id: uuid.UUID) -> Course:
    course = session.get(Course, course_id)
    if not course:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
    return course


def ensure_instructor_of(course: Course, principal: Principal) -> None:
    if course.instructor_id != principal.id:
        logger.warning("User %s is not the instructor of course %s", principal.id, course.id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You are not the instructor of this course")


async def _catalogue(session: Session, store: BlobObjectUrlStore, principal: Optional[Principal]) -> List[CourseDto]:
    courses = session.exec(select(Course).order_by(Course.created_at)).all()
    enrolled = enrolled_course_ids(session, principal.id if principal else None)
    return await build_course_dtos(courses, store, enrolled)


@router.get("", response_model=List[CourseDto])
async def get_courses(
    principal: Optional[Principal] = Depends(get_optional_principal),
    session: Session = Depends(get_session),
    store: BlobObjectUrlStore = Depends(get_object_url_store),
):
    return await _catalogue(session, store, principal)


@router.get("/available", response_model=List[CourseDto])
async def get_available_courses(
    principal: Optional[Principal] = Depends(get_optional_principal),
    session: Session = Depends(get_session),
    store: BlobObjectUrlStore = Depends(get_object_url_store),
):
    courses = await _catalogue(session, store, principal)
    logger.info("Found %d available courses", len(courses))
    return courses


@router.get("/my", response_model=List[CourseDto])
async def get_my_courses(
    principal: Principal = Depends(require_role(Role.INSTRUCTOR.value)),
    session: Session = Depends(get_session),
    store: BlobObjectUrlStore = Depends(get_object_url_store),
):
    courses = session.exec(
        select(Course).where(Course.instructor_id == principal.id).order_by(Course.created_at)
    ).all()
    return await build_course_dtos(courses, store, enrolled_course_ids(session, principal.id))


@router.get("/{course_id}", response_model=CourseDto)
async def get_course(
    course_id: uuid.UUID,
    principal: Optional[Principal] = Depends(get_optional_principal),
    session: Session = Depends(get_session),
    store: BlobObjectUrlStore = Depends(get_object_url_store),
):
    course = get_course_or_404(session, course_id)
    enrolled = enrolled_course_ids(session, principal.id if principal else None)
    return await build_course_dto(course, store, course.id in enrolled)


@router.post("", response_model=CourseDto, status_code=status.HTTP_201_CREATED)
async def create_course(
    form_data: CourseForm,
    principal: Principal = Depends(require_role(Role.INSTRUCTOR.value)),
    session: Session = Depends(get_session),
    store: BlobObjectUrlStore = Depends(get_object_url_store),
):
    if not session.get(User, principal.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Instructor not found")

    course = Course(
        title=form_data.title,
        description=form_data.description,
        instructor_id=principal.id,
        media_url=form_data.media_url,
        course_content=form_data.course_content,
    )
    session.add(course)
    session.flush()

    try:
        await write_overlay(store, course.id, form_data.media_url, form_data.course_content)
    except ObjectStoreError:
        session.rollback()
        logger.exception("Error saving URLs for new course by %s", principal.id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error saving course URLs")

    session.commit()
    session.refresh(course)
    logger.info("Instructor %s created course %s", principal.id, course.id)
    return await build_course_dto(course, store)


@router.put("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_course(
    course_id: uuid.UUID,
    form_data: UpdateCourseForm,
    principal: Principal = Depends(require_role(Role.INSTRUCTOR.value)),
    session: Session = Depends(get_session),
    store: BlobObjectUrlStore = Depends(get_object_url_store),
):
    if form_data.course_id is not None and form_data.course_id != course_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Course ID mismatch")

    course = get_course_or_404(session, course_id)
    ensure_instructor_of(course, principal)

    try:
        await write_overlay(store, course.id, form_data.media_url, form_data.course_content)
    except ObjectStoreError:
        logger.exception("Error updating URLs for course %s", course_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error updating course URLs")

    course.title = form_data.title
    course.description = form_data.description
    course.media_url = form_data.media_url
    course.course_content = form_data.course_content
    course.last_updated = utcnow()
    session.add(course)
    session.commit()
    logger.info("Instructor %s updated course %s", principal.id, course_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_course(
    course_id: uuid.UUID,
    principal: Principal = Depends(require_role(Role.INSTRUCTOR.value)),
    session: Session = Depends(get_session),
    store: BlobObjectUrlStore = Depends(get_object_url_store),
):
    course = get_course_or_404(session, course_id)
    ensure_instructor_of(course, principal)

    # Enrollments, assessments and their results go with the course
    session.delete(course)
    session.commit()
    logger.info("Instructor %s deleted course %s", principal.id, course_id)

    try:
        await store.delete_course_urls(str(course_id))
    except ObjectStoreError as e:
        logger.warning("Course %s deleted but its object-store URLs remain: %s", course_id, e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
