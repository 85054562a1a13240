import pytest
from httpx import AsyncClient
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from edusync.models import Enrollment
from tests.conftest import auth_headers


@pytest.mark.asyncio
async def test_enrolling_twice_conflicts(client: AsyncClient, session: Session, course, student):
    first = await client.post("/api/Enrollments", json={"courseId": str(course.id)}, headers=auth_headers(student))
    assert first.status_code == 201
    body = first.json()
    assert body["userId"] == str(student.id)
    assert body["isCompleted"] is False

    second = await client.post("/api/Enrollments", json={"courseId": str(course.id)}, headers=auth_headers(student))
    assert second.status_code == 409
    assert second.json()["detail"] == "User is already enrolled in this course"
    assert len(session.exec(select(Enrollment)).all()) == 1


@pytest.mark.asyncio
async def test_enroll_in_unknown_course(client: AsyncClient, student):
    response = await client.post("/api/Enrollments", json={"courseId": str(student.id)}, headers=auth_headers(student))
    assert response.status_code == 404


def test_unique_constraint_backs_the_existence_check(session: Session, course, student, enroll):
    enroll(student, course)
    session.add(Enrollment(user_id=student.id, course_id=course.id))
    with pytest.raises(IntegrityError):
        session.commit()
    session.rollback()


@pytest.mark.asyncio
async def test_check_enrollment(client: AsyncClient, course, student, other_student, enroll):
    enroll(student, course)

    enrolled = await client.get(f"/api/Enrollments/check/{course.id}", headers=auth_headers(student))
    assert enrolled.json() is True

    not_enrolled = await client.get(f"/api/Enrollments/check/{course.id}", headers=auth_headers(other_student))
    assert not_enrolled.json() is False


@pytest.mark.asyncio
async def test_student_enrollments_are_course_dtos(client: AsyncClient, course, student, enroll):
    enroll(student, course)

    response = await client.get("/api/Enrollments/student", headers=auth_headers(student))
    assert response.status_code == 200
    [dto] = response.json()
    assert dto["courseId"] == str(course.id)
    assert dto["isEnrolled"] is True
    assert dto["enrollmentCount"] == 1


@pytest.mark.asyncio
async def test_list_and_get_enrollments(client: AsyncClient, course, student, enroll):
    enrollment = enroll(student, course)

    listing = await client.get("/api/Enrollments", headers=auth_headers(student))
    assert [e["enrollmentId"] for e in listing.json()] == [str(enrollment.id)]

    single = await client.get(f"/api/Enrollments/{enrollment.id}", headers=auth_headers(student))
    assert single.json()["courseId"] == str(course.id)

    missing = await client.get(f"/api/Enrollments/{course.id}", headers=auth_headers(student))
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_roster_is_instructor_only(client: AsyncClient, course, instructor, student, other_student, enroll):
    enroll(student, course)
    enroll(other_student, course)

    response = await client.get(f"/api/Enrollments/course/{course.id}/students", headers=auth_headers(instructor))
    assert response.status_code == 200
    roster = response.json()
    assert [s["name"] for s in roster] == ["Linus", "Margaret"]
    assert roster[0]["email"] == student.email
    assert "password" not in roster[0]

    forbidden = await client.get(f"/api/Enrollments/course/{course.id}/students", headers=auth_headers(student))
    assert forbidden.status_code == 403


@pytest.mark.asyncio
async def test_owner_marks_enrollment_completed(client: AsyncClient, session: Session, course, student, enroll):
    enrollment = enroll(student, course)
    body = {"enrollmentId": str(enrollment.id), "isCompleted": True}

    response = await client.put(f"/api/Enrollments/{enrollment.id}", json=body, headers=auth_headers(student))
    assert response.status_code == 204
    session.refresh(enrollment)
    assert enrollment.is_completed is True


@pytest.mark.asyncio
async def test_other_student_cannot_update_enrollment(client: AsyncClient, course, student, other_student, enroll):
    enrollment = enroll(student, course)
    body = {"enrollmentId": str(enrollment.id), "isCompleted": True}

    response = await client.put(f"/api/Enrollments/{enrollment.id}", json=body, headers=auth_headers(other_student))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delete_enrollment_permissions(
    client: AsyncClient, session: Session, course, student, other_student, other_instructor, instructor, enroll
):
    enrollment = enroll(student, course)

    for outsider in (other_student, other_instructor):
        response = await client.delete(f"/api/Enrollments/{enrollment.id}", headers=auth_headers(outsider))
        assert response.status_code == 403

    # The course's instructor may drop a student
    response = await client.delete(f"/api/Enrollments/{enrollment.id}", headers=auth_headers(instructor))
    assert response.status_code == 204
    session.expire_all()
    assert session.get(Enrollment, enrollment.id) is None


@pytest.mark.asyncio
async def test_student_drops_own_enrollment(client: AsyncClient, session: Session, course, student, enroll):
    enrollment = enroll(student, course)

    response = await client.delete(f"/api/Enrollments/{enrollment.id}", headers=auth_headers(student))
    assert response.status_code == 204
