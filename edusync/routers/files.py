import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session

from ..db import get_session
from ..dependencies import Principal, require_role
from ..models import Course, Role
from ..schemas.course import CourseUrls
from ..services.object_urls import BlobObjectUrlStore, get_object_url_store
from .courses import ensure_instructor_of

logger = logging.getLogger(__name__)

router = APIRouter()


def find_course(session: Session, course_id: str) -> Optional[Course]:
    try:
        return session.get(Course, uuid.UUID(course_id))
    except ValueError:
        return None


@router.post("/upload")
async def save_course_urls(
    urls: CourseUrls,
    course_id: Optional[str] = Query(None, alias="courseId"),
    principal: Principal = Depends(require_role(Role.INSTRUCTOR.value)),
    session: Session = Depends(get_session),
    store: BlobObjectUrlStore = Depends(get_object_url_store),
):
    if not course_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="CourseId is required")
    if not urls.course_content_url and not urls.media_url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No URLs provided")

    # URLs of an existing course may only be replaced by its instructor
    course = find_course(session, course_id)
    if course is not None:
        ensure_instructor_of(course, principal)

    if urls.course_content_url:
        await store.save_content_url(course_id, urls.course_content_url)
    if urls.media_url:
        await store.save_media_url(course_id, urls.media_url)

    logger.info("Instructor %s saved URLs for course %s", principal.id, course_id)
    return {"courseId": course_id, "urls": urls.model_dump(by_alias=True)}


@router.get("/{course_id}")
async def get_course_urls(course_id: str, store: BlobObjectUrlStore = Depends(get_object_url_store)):
    content_url, media_url = await store.get_course_urls(course_id)
    return CourseUrls(course_content_url=content_url, media_url=media_url).model_dump(by_alias=True)


@router.delete("/{course_id}")
async def delete_course_urls(
    course_id: str,
    principal: Principal = Depends(require_role(Role.INSTRUCTOR.value)),
    store: BlobObjectUrlStore = Depends(get_object_url_store),
):
    if not await store.delete_course_urls(course_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course URLs not found")
    logger.info("Instructor %s deleted URLs for course %s", principal.id, course_id)
    return {"courseId": course_id, "deleted": True}
