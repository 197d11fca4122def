from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from dataclasses import dataclass
from typing import Optional

from classroom.core.database import get_db
from classroom.core.security import decode_token, ADMIN_TOKEN_ID
from classroom.core.exceptions import AuthenticationError, ForbiddenError
from classroom.core.logging_config import set_user_id
from classroom.core.types import is_valid_uuid
from classroom.models.user import User, UserRole

security = HTTPBearer(auto_error=False)


@dataclass
class CurrentIdentity:
    """
    Request-scoped identity.

    `id` and `role` come from the token; the remaining fields are hydrated
    from the account row and stay None when no row matches (or for the
    configured admin).
    """
    id: str
    role: str
    name: Optional[str] = None
    email: Optional[str] = None
    section: Optional[str] = None
    roll_year: Optional[str] = None
    roll_dept: Optional[str] = None
    user: Optional[User] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def is_teacher(self) -> bool:
        return self.role == UserRole.TEACHER.value

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT.value


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> CurrentIdentity:
    """Verify the bearer token and hydrate the caller's identity"""
    if not credentials or not credentials.credentials:
        raise AuthenticationError("No token provided.")

    payload = decode_token(credentials.credentials)
    identity = CurrentIdentity(id=str(payload["id"]), role=str(payload["role"]))
    set_user_id(identity.id)

    if identity.id == ADMIN_TOKEN_ID or not is_valid_uuid(identity.id):
        return identity

    result = await db.execute(select(User).where(User.id == identity.id))
    user = result.scalar_one_or_none()

    if user:
        identity.user = user
        identity.name = user.name
        identity.email = user.email
        identity.section = user.section
        identity.roll_year = user.roll_year or None
        identity.roll_dept = user.roll_dept or None

    return identity


async def require_admin(
    identity: CurrentIdentity = Depends(get_current_identity)
) -> CurrentIdentity:
    """Gate for hierarchy writes and user administration"""
    if not identity.is_admin:
        raise ForbiddenError("Admin access required.")
    return identity


async def get_current_teacher(
    identity: CurrentIdentity = Depends(get_current_identity)
) -> CurrentIdentity:
    if not identity.is_teacher:
        raise ForbiddenError("Teacher access required.")
    return identity


async def get_current_student(
    identity: CurrentIdentity = Depends(get_current_identity)
) -> CurrentIdentity:
    if not identity.is_student:
        raise ForbiddenError("Student access required.")
    return identity


async def get_teacher_or_admin(
    identity: CurrentIdentity = Depends(get_current_identity)
) -> CurrentIdentity:
    if not (identity.is_teacher or identity.is_admin):
        raise ForbiddenError("Teacher access required.")
    return identity
