import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .models.user import Role
from .security import decode_access_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """The caller as asserted by the claims of a verified token."""
    id: uuid.UUID
    name: str
    role: str

    def has_role(self, *roles: str) -> bool:
        return self.role in roles

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _principal_from_token(token: str) -> Principal:
    payload = decode_access_token(token)
    if not payload:
        raise _unauthorized("Invalid or expired token")
    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise _unauthorized("Invalid user ID in token")
    role = payload.get("role")
    if not role:
        raise _unauthorized("Role missing from token")
    return Principal(id=user_id, name=payload.get("name", ""), role=role)


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:
    """Dependency that requires a valid bearer token."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    return _principal_from_token(credentials.credentials)


def get_optional_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Principal]:
    """Like get_current_principal, but anonymous callers get None instead of a 401.

    A stale or malformed token is treated as no token at all.
    """
    if credentials is None:
        return None
    try:
        return _principal_from_token(credentials.credentials)
    except HTTPException as e:
        logger.info("Ignoring unusable bearer token on anonymous route: %s", e.detail)
        return None


def require_role(*roles: str):
    """Dependency factory that ensures the caller has one of the required roles."""
    def role_checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not principal.has_role(*roles):
            logger.warning("Role %s denied; requires one of %s", principal.role, roles)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Permission denied")
        return principal
    return role_checker
