import pytest
from httpx import AsyncClient
from sqlmodel import Session, select

from edusync.models import Enrollment, Result, User
from tests.conftest import auth_headers


@pytest.mark.asyncio
async def test_list_users_strips_password(client: AsyncClient, student, instructor):
    response = await client.get("/api/Users", headers=auth_headers(student))
    assert response.status_code == 200
    users = response.json()
    assert {u["name"] for u in users} == {"Ada", "Linus"}
    for user in users:
        assert set(user) == {"userId", "name", "email", "role"}


@pytest.mark.asyncio
async def test_get_user(client: AsyncClient, student):
    response = await client.get(f"/api/Users/{student.id}", headers=auth_headers(student))
    assert response.status_code == 200
    assert response.json()["email"] == student.email


@pytest.mark.asyncio
async def test_get_unknown_user(client: AsyncClient, student, course):
    response = await client.get(f"/api/Users/{course.id}", headers=auth_headers(student))
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_admin_creates_user(client: AsyncClient, admin, session: Session):
    body = {"name": "Ken", "email": "ken@school.edu", "role": "Instructor", "password": "secret1"}
    response = await client.post("/api/Users", json=body, headers=auth_headers(admin))
    assert response.status_code == 201
    assert response.json()["role"] == "Instructor"
    user = session.exec(select(User).where(User.email == "ken@school.edu")).one()
    assert user.check_password("secret1")


@pytest.mark.asyncio
async def test_create_user_rejects_duplicate_email(client: AsyncClient, admin, student):
    body = {"name": "Copy", "email": student.email, "role": "Student", "password": "secret1"}
    response = await client.post("/api/Users", json=body, headers=auth_headers(admin))
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_non_admin_cannot_create_user(client: AsyncClient, instructor):
    body = {"name": "Ken", "email": "ken@school.edu", "role": "Admin", "password": "secret1"}
    response = await client.post("/api/Users", json=body, headers=auth_headers(instructor))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_user_updates_own_profile(client: AsyncClient, session: Session, student):
    body = {"name": "Linus T.", "email": "linus.t@school.edu", "role": "Student"}
    response = await client.put(f"/api/Users/{student.id}", json=body, headers=auth_headers(student))
    assert response.status_code == 204
    session.refresh(student)
    assert student.name == "Linus T."
    assert student.email == "linus.t@school.edu"


@pytest.mark.asyncio
async def test_user_cannot_update_someone_else(client: AsyncClient, student, other_student):
    body = {"name": "Hacked", "email": other_student.email, "role": "Student"}
    response = await client.put(f"/api/Users/{other_student.id}", json=body, headers=auth_headers(student))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_user_cannot_promote_self(client: AsyncClient, student):
    body = {"name": student.name, "email": student.email, "role": "Admin"}
    response = await client.put(f"/api/Users/{student.id}", json=body, headers=auth_headers(student))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_update_rejects_taken_email(client: AsyncClient, student, other_student):
    body = {"name": student.name, "email": other_student.email, "role": "Student"}
    response = await client.put(f"/api/Users/{student.id}", json=body, headers=auth_headers(student))
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_admin_changes_role(client: AsyncClient, session: Session, admin, student):
    body = {"name": student.name, "email": student.email, "role": "Instructor"}
    response = await client.put(f"/api/Users/{student.id}", json=body, headers=auth_headers(admin))
    assert response.status_code == 204
    session.refresh(student)
    assert student.role == "Instructor"


@pytest.mark.asyncio
async def test_admin_deletes_user_and_their_records(
    client: AsyncClient, session: Session, admin, student, course, assessment, enroll, make_result
):
    enroll(student, course)
    make_result(student, assessment)

    response = await client.delete(f"/api/Users/{student.id}", headers=auth_headers(admin))
    assert response.status_code == 204
    session.expire_all()
    assert session.exec(select(Enrollment)).all() == []
    assert session.exec(select(Result)).all() == []


@pytest.mark.asyncio
async def test_cannot_delete_instructor_with_courses(client: AsyncClient, admin, instructor, course):
    response = await client.delete(f"/api/Users/{instructor.id}", headers=auth_headers(admin))
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_only_admin_deletes_users(client: AsyncClient, instructor, student):
    response = await client.delete(f"/api/Users/{student.id}", headers=auth_headers(instructor))
    assert response.status_code == 403
