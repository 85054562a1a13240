import uuid

from .base import CamelModel


class UserDto(CamelModel):
    user_id: uuid.UUID
    name: str
    email: str
    role: str

    @classmethod
    def from_user(cls, user) -> "UserDto":
        return cls(user_id=user.id, name=user.name, email=user.email, role=user.role)


class CreateUserForm(CamelModel):
    name: str
    email: str
    role: str
    password: str


class UpdateUserForm(CamelModel):
    name: str
    email: str
    role: str
