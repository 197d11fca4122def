"""
Academic hierarchy and user administration

Reads of years/departments/sections are public so signup forms can list
them; every write and every /users route requires an admin token.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from classroom.core.database import get_db
from classroom.modules.auth.dependencies import CurrentIdentity, require_admin
from classroom.schemas.base import MessageResponse
from classroom.schemas.auth import UserResponse, UserUpdateResponse
from classroom.schemas.admin import (
    YearCreate,
    YearUpdate,
    YearResponse,
    DepartmentCreate,
    DepartmentUpdate,
    DepartmentResponse,
    SectionCreate,
    SectionResponse,
    UserAdminUpdate,
)
from classroom.services.hierarchy_service import HierarchyService
from classroom.services.identity_service import IdentityService

router = APIRouter()


# ==================== Years ====================

@router.get("/years", response_model=List[YearResponse])
async def list_years(db: AsyncSession = Depends(get_db)):
    return await HierarchyService(db).list_years()


@router.post("/years", response_model=YearResponse, status_code=status.HTTP_201_CREATED)
async def create_year(
    data: YearCreate,
    admin: CurrentIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await HierarchyService(db).create_year(data)


@router.put("/years/{year_id}", response_model=YearResponse)
async def update_year(
    year_id: str,
    data: YearUpdate,
    admin: CurrentIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await HierarchyService(db).update_year(year_id, data)


@router.delete("/years/{year_id}", response_model=MessageResponse)
async def delete_year(
    year_id: str,
    admin: CurrentIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await HierarchyService(db).delete_year(year_id)
    return MessageResponse(message="Year deleted.")


# ==================== Departments ====================

@router.get("/departments", response_model=List[DepartmentResponse])
async def list_departments(db: AsyncSession = Depends(get_db)):
    return await HierarchyService(db).list_departments()


@router.post("/departments", response_model=DepartmentResponse, status_code=status.HTTP_201_CREATED)
async def create_department(
    data: DepartmentCreate,
    admin: CurrentIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await HierarchyService(db).create_department(data)


@router.put("/departments/{department_id}", response_model=DepartmentResponse)
async def update_department(
    department_id: str,
    data: DepartmentUpdate,
    admin: CurrentIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await HierarchyService(db).update_department(department_id, data)


@router.delete("/departments/{department_id}", response_model=MessageResponse)
async def delete_department(
    department_id: str,
    admin: CurrentIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await HierarchyService(db).delete_department(department_id)
    return MessageResponse(message="Department deleted.")


# ==================== Sections ====================

@router.get("/sections", response_model=List[SectionResponse])
async def list_sections(db: AsyncSession = Depends(get_db)):
    return await HierarchyService(db).list_sections()


@router.get("/sections/department/{department_id}", response_model=List[SectionResponse])
async def list_sections_by_department(
    department_id: str,
    db: AsyncSession = Depends(get_db)
):
    return await HierarchyService(db).list_sections_by_department(department_id)


@router.post("/sections", response_model=SectionResponse, status_code=status.HTTP_201_CREATED)
async def create_section(
    data: SectionCreate,
    admin: CurrentIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await HierarchyService(db).create_section(data)


@router.delete("/sections/{section_id}", response_model=MessageResponse)
async def delete_section(
    section_id: str,
    admin: CurrentIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await HierarchyService(db).delete_section(section_id)
    return MessageResponse(message="Section deleted.")


# ==================== Users ====================

@router.get("/users", response_model=List[UserResponse])
async def list_users(
    admin: CurrentIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """All accounts, newest first"""
    users = await IdentityService(db).list_users()
    return [UserResponse.from_user(u) for u in users]


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    admin: CurrentIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    user = await IdentityService(db).get_user(user_id)
    return UserResponse.from_user(user)


@router.put("/users/{user_id}", response_model=UserUpdateResponse)
async def update_user(
    user_id: str,
    data: UserAdminUpdate,
    admin: CurrentIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    user = await IdentityService(db).admin_update_user(user_id, data)
    return UserUpdateResponse(message="User updated.", user=UserResponse.from_user(user))


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    admin: CurrentIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await IdentityService(db).delete_user(user_id)
    return MessageResponse(message="User deleted.")
