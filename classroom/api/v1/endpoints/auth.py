from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from classroom.core.database import get_db
from classroom.modules.auth.dependencies import CurrentIdentity, get_current_identity
from classroom.schemas.base import MessageResponse
from classroom.schemas.auth import (
    SignupRequest,
    SigninRequest,
    AdminLoginRequest,
    ProfileUpdateRequest,
    CheckEmailRequest,
    CheckEmailResponse,
    AuthResponse,
    UserUpdateResponse,
    CurrentIdentityResponse,
    UserResponse,
)
from classroom.models.user import UserRole
from classroom.services.identity_service import IdentityService

router = APIRouter()


@router.post("/signup", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    data: SignupRequest,
    db: AsyncSession = Depends(get_db)
):
    """Register a student or a teacher"""
    await IdentityService(db).signup(data)
    if data.role == UserRole.TEACHER.value:
        return MessageResponse(message="Teacher registered successfully.")
    return MessageResponse(message="User registered successfully.")


@router.post("/signin", response_model=AuthResponse)
async def signin(
    data: SigninRequest,
    db: AsyncSession = Depends(get_db)
):
    """Sign in with an email or a student roll number"""
    return await IdentityService(db).signin(data.identifier, data.password)


@router.post("/admin-login", response_model=AuthResponse)
async def admin_login(
    data: AdminLoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """Sign in with the configured administrator credential"""
    return IdentityService(db).admin_login(data.email, data.password)


@router.post("/check-email", response_model=CheckEmailResponse)
async def check_email(
    data: CheckEmailRequest,
    db: AsyncSession = Depends(get_db)
):
    """Tell the signup form whether an email is already registered"""
    exists = await IdentityService(db).email_exists(data.email)
    return CheckEmailResponse(exists=exists)


@router.get("/me", response_model=CurrentIdentityResponse)
async def me(identity: CurrentIdentity = Depends(get_current_identity)):
    """Identity attached to the current token"""
    return CurrentIdentityResponse(
        id=identity.id,
        role=identity.role,
        name=identity.name,
        email=identity.email,
        section=identity.section,
        roll_year=identity.roll_year,
        roll_dept=identity.roll_dept,
    )


@router.put("/profile", response_model=UserUpdateResponse)
async def update_profile(
    data: ProfileUpdateRequest,
    identity: CurrentIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Update the caller's name, email or profile picture"""
    user = await IdentityService(db).update_profile(identity.id, data)
    return UserUpdateResponse(
        message="Profile updated successfully.",
        user=UserResponse.from_user(user),
    )
