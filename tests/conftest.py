import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from edusync.db import get_session
from edusync.errors import ObjectStoreError
from edusync.main import app
from edusync.models import Assessment, Course, Enrollment, Result, Role, User
from edusync.security import create_access_token
from edusync.services.object_urls import get_object_url_store

DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False}, poolclass=StaticPool)


class InMemoryObjectUrlStore:
    """
    Stands in for the blob container. Set `failing` to simulate an outage, or
    add method names to `fail_on` to make only those operations fail.
    """

    def __init__(self):
        self.blobs = {}
        self.failing = False
        self.fail_on = set()

    def _check(self, operation):
        if self.failing or operation in self.fail_on:
            raise ObjectStoreError(f"object store refused {operation}")

    async def save_content_url(self, course_id, value):
        self._check("save_content_url")
        self.blobs[f"{course_id}/content-url.txt"] = value

    async def save_media_url(self, course_id, value):
        self._check("save_media_url")
        self.blobs[f"{course_id}/media-url.txt"] = value

    async def get_course_urls(self, course_id):
        self._check("get_course_urls")
        return (
            self.blobs.get(f"{course_id}/content-url.txt"),
            self.blobs.get(f"{course_id}/media-url.txt"),
        )

    async def delete_content_url(self, course_id):
        self._check("delete_content_url")
        return self.blobs.pop(f"{course_id}/content-url.txt", None) is not None

    async def delete_media_url(self, course_id):
        self._check("delete_media_url")
        return self.blobs.pop(f"{course_id}/media-url.txt", None) is not None

    async def delete_course_urls(self, course_id):
        self._check("delete_course_urls")
        deleted = False
        for name in (f"{course_id}/content-url.txt", f"{course_id}/media-url.txt"):
            deleted |= self.blobs.pop(name, None) is not None
        return deleted


@pytest.fixture(name="session")
def session_fixture():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="store")
def store_fixture():
    return InMemoryObjectUrlStore()


@pytest.fixture(name="client")
def client_fixture(session: Session, store: InMemoryObjectUrlStore):
    def get_session_override():
        yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_object_url_store] = lambda: store
    client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="make_user")
def make_user_fixture(session: Session):
    def make_user(name: str, role: str = Role.STUDENT.value, email: str = None, password: str = "secret1") -> User:
        user = User(name=name, email=email or f"{name.lower().replace(' ', '.')}@school.edu", role=role)
        user.set_password(password)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
    return make_user


def auth_headers(user: User) -> dict:
    token = create_access_token(subject=str(user.id), name=user.name, role=user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(name="instructor")
def instructor_fixture(make_user):
    return make_user("Ada", Role.INSTRUCTOR.value)


@pytest.fixture(name="other_instructor")
def other_instructor_fixture(make_user):
    return make_user("Grace", Role.INSTRUCTOR.value)


@pytest.fixture(name="student")
def student_fixture(make_user):
    return make_user("Linus", Role.STUDENT.value)


@pytest.fixture(name="other_student")
def other_student_fixture(make_user):
    return make_user("Margaret", Role.STUDENT.value)


@pytest.fixture(name="admin")
def admin_fixture(make_user):
    return make_user("Root", Role.ADMIN.value)


@pytest.fixture(name="course")
def course_fixture(session: Session, instructor: User) -> Course:
    course = Course(
        title="Algorithms",
        description="Sorting and searching",
        instructor_id=instructor.id,
        media_url="https://cdn.school.edu/algo.mp4",
        course_content="https://cdn.school.edu/algo.pdf",
    )
    session.add(course)
    session.commit()
    session.refresh(course)
    return course


@pytest.fixture(name="assessment")
def assessment_fixture(session: Session, course: Course) -> Assessment:
    assessment = Assessment(title="Quiz 1", questions='[{"q": "2+2?"}]', course_id=course.id, max_score=10)
    session.add(assessment)
    session.commit()
    session.refresh(assessment)
    return assessment


@pytest.fixture(name="make_result")
def make_result_fixture(session: Session):
    def make_result(user: User, assessment: Assessment, score: int = 5) -> Result:
        result = Result(assessment_id=assessment.id, user_id=user.id, submitted_answers='["4"]', score=score)
        session.add(result)
        session.commit()
        session.refresh(result)
        return result
    return make_result


@pytest.fixture(name="enroll")
def enroll_fixture(session: Session):
    def enroll(user: User, course: Course) -> Enrollment:
        enrollment = Enrollment(user_id=user.id, course_id=course.id)
        session.add(enrollment)
        session.commit()
        session.refresh(enrollment)
        return enrollment
    return enroll
