import logging

from email_validator import EmailNotValidError, validate_email
from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select

from ..db import get_session
from ..models import Role, User
from ..schemas.auth import LoginForm, RegisterForm, TokenResponse
from ..security import create_access_token

logger = logging.getLogger(__name__)

router = APIRouter()

MIN_PASSWORD_LENGTH = 6
SELF_REGISTER_ROLES = (Role.STUDENT.value, Role.INSTRUCTOR.value)
DASHBOARDS = {
    Role.STUDENT.value: "/student-dashboard",
    Role.INSTRUCTOR.value: "/instructor-dashboard",
}


def is_valid_email(email: str) -> bool:
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def issue_token(user: User) -> str:
    return create_access_token(subject=str(user.id), name=user.name, role=user.role)


def _reject(reason: str, detail: str):
    logger.warning("Registration rejected: %s", reason)
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


@router.post("/login", response_model=TokenResponse, response_model_exclude_none=True)
async def login(form_data: LoginForm, session: Session = Depends(get_session)):
    logger.info("Login attempt for %s", form_data.email)
    user = session.exec(select(User).where(User.email == form_data.email.strip())).first()
    if not user or not user.check_password(form_data.password):
        logger.warning("Login failed for %s", form_data.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )

    # check_password may have upgraded a deprecated hash
    if session.is_modified(user):
        session.add(user)
        session.commit()
        session.refresh(user)

    return TokenResponse(token=issue_token(user), role=user.role, user_id=user.id, name=user.name)


@router.post("/register", response_model=TokenResponse)
async def register(form_data: RegisterForm, session: Session = Depends(get_session)):
    if not form_data.email or not form_data.password or not form_data.name:
        _reject("missing fields", "Email, password, and name are required")
    email = form_data.email.strip()
    if not is_valid_email(email):
        _reject("invalid email format", "Invalid email format")
    if len(form_data.password) < MIN_PASSWORD_LENGTH:
        _reject("password too short", f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if form_data.password != form_data.confirm_password:
        _reject("password mismatch", "The password and confirmation password do not match")
    if form_data.role not in SELF_REGISTER_ROLES:
        _reject(f"invalid role {form_data.role!r}", "Role must be either 'Student' or 'Instructor'")
    if session.exec(select(User).where(User.email == email)).first():
        _reject("email already registered", "User with this email already exists")

    user = User(name=form_data.name.strip(), email=email, role=form_data.role)
    user.set_password(form_data.password)
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info("Registered %s user %s", user.role, user.id)

    return TokenResponse(
        token=issue_token(user),
        role=user.role,
        user_id=user.id,
        name=user.name,
        redirect_to=DASHBOARDS[user.role],
    )
