import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlmodel import Session, select

from ..db import get_session
from ..dependencies import Principal, get_current_principal, require_role
from ..models import Course, Role, User
from ..schemas.user import CreateUserForm, UpdateUserForm, UserDto

logger = logging.getLogger(__name__)

router = APIRouter()

VALID_ROLES = {role.value for role in Role}


def get_user_or_404(session: Session, user_id: uuid.UUID) -> User:
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("", response_model=List[UserDto])
async def get_users(
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
):
    users = session.exec(select(User).order_by(User.name)).all()
    return [UserDto.from_user(user) for user in users]


@router.get("/{user_id}", response_model=UserDto)
async def get_user(
    user_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
):
    return UserDto.from_user(get_user_or_404(session, user_id))


@router.post("", response_model=UserDto, status_code=status.HTTP_201_CREATED)
async def create_user(
    form_data: CreateUserForm,
    principal: Principal = Depends(require_role(Role.ADMIN.value)),
    session: Session = Depends(get_session),
):
    if form_data.role not in VALID_ROLES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid role")
    email = form_data.email.strip()
    if session.exec(select(User).where(User.email == email)).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")

    user = User(name=form_data.name, email=email, role=form_data.role)
    user.set_password(form_data.password)
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info("Admin %s created user %s", principal.id, user.id)
    return UserDto.from_user(user)


@router.put("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_user(
    user_id: uuid.UUID,
    form_data: UpdateUserForm,
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
):
    if user_id != principal.id and not principal.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only update your own profile")

    user = get_user_or_404(session, user_id)

    if form_data.role != user.role:
        if not principal.is_admin:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only administrators can change roles")
        if form_data.role not in VALID_ROLES:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid role")

    email = form_data.email.strip()
    if email != user.email and session.exec(select(User).where(User.email == email)).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")

    user.name = form_data.name
    user.email = email
    user.role = form_data.role
    session.add(user)
    session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: uuid.UUID,
    principal: Principal = Depends(require_role(Role.ADMIN.value)),
    session: Session = Depends(get_session),
):
    user = get_user_or_404(session, user_id)
    if session.exec(select(Course.id).where(Course.instructor_id == user_id)).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User still instructs courses; delete or reassign them first",
        )

    session.delete(user)
    session.commit()
    logger.info("Admin %s deleted user %s", principal.id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
