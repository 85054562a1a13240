import uuid
from typing import Optional

from .base import CamelModel


class LoginForm(CamelModel):
    email: str
    password: str


class RegisterForm(CamelModel):
    # Optional so that missing fields reach the registration checks and get their message
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None
    role: Optional[str] = None


class TokenResponse(CamelModel):
    token: str
    role: str
    user_id: uuid.UUID
    name: str
    redirect_to: Optional[str] = None
