import uuid
from enum import Enum
from typing import List, TYPE_CHECKING

from sqlmodel import Field, SQLModel, Relationship

from ..security import hash_password, verify_and_update_password

if TYPE_CHECKING:
    from .course import Course
    from .enrollment import Enrollment
    from .result import Result


class Role(str, Enum):
    STUDENT = "Student"
    INSTRUCTOR = "Instructor"
    ADMIN = "Admin"


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(max_length=100)
    email: str = Field(unique=True, index=True, max_length=255)
    role: str = Field(default=Role.STUDENT.value, max_length=20)
    password_hash: str

    # Instructor side; the foreign key is RESTRICT so no cascade here
    courses: List["Course"] = Relationship(back_populates="instructor")
    enrollments: List["Enrollment"] = Relationship(
        back_populates="user", sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )
    results: List["Result"] = Relationship(
        back_populates="user", sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )

    def set_password(self, password: str):
        self.password_hash = hash_password(password)

    def check_password(self, password: str) -> bool:
        verified, new_hash = verify_and_update_password(password, self.password_hash)
        if verified and new_hash:
            self.password_hash = new_hash
        return verified

    def __repr__(self):
        return f"<User id={self.id} {self.name} role={self.role}>"
