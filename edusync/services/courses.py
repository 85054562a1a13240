from __future__ import annotations

import logging
import uuid
from typing import Iterable, Optional

from sqlmodel import Session, select

from ..errors import ObjectStoreError
from ..models import Course, Enrollment
from ..schemas.course import CourseDto
from .object_urls import BlobObjectUrlStore

logger = logging.getLogger(__name__)


async def read_overlay(store: BlobObjectUrlStore, course_id: uuid.UUID) -> tuple[Optional[str], Optional[str]]:
    """Object-store URLs for a course, or (None, None) when the store cannot be read."""
    try:
        return await store.get_course_urls(str(course_id))
    except ObjectStoreError as e:
        logger.warning("URLs not available from object store for course %s: %s", course_id, e)
        return None, None


async def write_overlay(store: BlobObjectUrlStore, course_id: uuid.UUID, media_url: str, course_content: str) -> None:
    """
    Writes each non-empty value. If any write fails, the blobs already touched are
    put back the way they were and the ObjectStoreError propagates to the caller.
    """
    key = str(course_id)
    if not media_url and not course_content:
        return

    previous_content, previous_media = await store.get_course_urls(key)
    writes = []
    if media_url:
        writes.append((store.save_media_url, store.delete_media_url, media_url, previous_media))
    if course_content:
        writes.append((store.save_content_url, store.delete_content_url, course_content, previous_content))

    attempted = []
    try:
        for save, delete, value, previous in writes:
            attempted.append((save, delete, previous))
            await save(key, value)
    except ObjectStoreError:
        await _restore_overlay(key, attempted)
        raise


async def _restore_overlay(course_id: str, attempted: list) -> None:
    for save, delete, previous in reversed(attempted):
        try:
            if previous is None:
                await delete(course_id)
            else:
                await save(course_id, previous)
        except ObjectStoreError as e:
            logger.warning("Could not restore object-store URLs for course %s: %s", course_id, e)


def enrolled_course_ids(session: Session, user_id: Optional[uuid.UUID]) -> set[uuid.UUID]:
    if user_id is None:
        return set()
    return set(session.exec(select(Enrollment.course_id).where(Enrollment.user_id == user_id)).all())


async def build_course_dto(
    course: Course,
    store: BlobObjectUrlStore,
    is_enrolled: bool = False,
) -> CourseDto:
    content_url, media_url = await read_overlay(store, course.id)
    return CourseDto(
        course_id=course.id,
        title=course.title,
        description=course.description,
        instructor_id=course.instructor_id,
        instructor_name=course.instructor.name if course.instructor else "Unknown",
        media_url=media_url if media_url is not None else course.media_url,
        enrollment_count=len(course.enrollments),
        assessment_count=len(course.assessments),
        course_content=content_url if content_url is not None else course.course_content,
        last_updated=course.last_updated,
        created_at=course.created_at,
        is_enrolled=is_enrolled,
    )


async def build_course_dtos(
    courses: Iterable[Course],
    store: BlobObjectUrlStore,
    enrolled: set[uuid.UUID] = frozenset(),
) -> list[CourseDto]:
    return [await build_course_dto(course, store, course.id in enrolled) for course in courses]
