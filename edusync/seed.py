import argparse

from sqlmodel import Session, select

from .db import engine, init_db
from .models import Course, Role, User

SAMPLE_COURSES = [
    {
        "title": "Introduction to Programming",
        "description": "Learn the basics of programming with this comprehensive course.",
        "media_url": "https://example.com/video1.mp4",
        "course_content": "Course content goes here",
    },
    {
        "title": "Web Development Fundamentals",
        "description": "Master HTML, CSS, and JavaScript basics.",
        "media_url": "https://example.com/video2.mp4",
        "course_content": "Web development content",
    },
    {
        "title": "Database Design",
        "description": "Learn database design principles and SQL.",
        "media_url": "https://example.com/video3.mp4",
        "course_content": "Database content",
    },
]


def get_or_create_user(session: Session, email: str, name: str, role: str, password: str) -> User:
    user = session.exec(select(User).where(User.email == email)).first()
    if user:
        print(f"{role} user {email} already exists.")
        return user

    print(f"Creating {role} user {email}...")
    user = User(name=name, email=email, role=role)
    user.set_password(password)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def create_admin_user(session: Session) -> User:
    """
    Creates a default admin user if one doesn't already exist.
    """
    return get_or_create_user(session, "admin@example.com", "Admin User", Role.ADMIN.value, "admin123")


def create_sample_courses(session: Session) -> None:
    instructor = get_or_create_user(
        session, "test.instructor@example.com", "Test Instructor", Role.INSTRUCTOR.value, "instructor123"
    )
    existing = set(session.exec(select(Course.title).where(Course.instructor_id == instructor.id)).all())
    for data in SAMPLE_COURSES:
        if data["title"] in existing:
            continue
        session.add(Course(instructor_id=instructor.id, **data))
    session.commit()
    print(f"Sample courses ready for {instructor.email}.")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Seed the EduSync database.")
    parser.add_argument("--sample", action="store_true", help="also create a sample instructor and courses")
    args = parser.parse_args(argv)

    init_db()
    with Session(engine) as session:
        create_admin_user(session)
        if args.sample:
            create_sample_courses(session)


if __name__ == "__main__":
    main()
