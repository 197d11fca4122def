from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from classroom.core.database import get_db
from classroom.modules.auth.dependencies import CurrentIdentity, get_current_teacher
from classroom.schemas.base import MessageResponse, parse_form
from classroom.schemas.coursework import (
    CourseworkCreate,
    CourseworkUpdate,
    AssignmentResponse,
    AssignmentMutationResponse,
)
from classroom.services.coursework_service import CourseworkService, ASSIGNMENT
from classroom.services.storage_service import StorageService, get_storage_service
from classroom.api.v1.endpoints.upload import read_upload

router = APIRouter()


@router.post("", response_model=AssignmentMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_assignment(
    title: Optional[str] = Form(None),
    course_name: Optional[str] = Form(None, alias="courseName"),
    section: Optional[str] = Form(None),
    start_date: Optional[str] = Form(None, alias="startDate"),
    due_date: Optional[str] = Form(None, alias="dueDate"),
    year: Optional[str] = Form(None),
    department: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    teacher: CurrentIdentity = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
):
    """Create an assignment with an optional PDF/DOCX attachment"""
    data = parse_form(
        CourseworkCreate,
        title=title,
        course_name=course_name,
        section=section,
        start_date=start_date,
        due_date=due_date,
        year=year,
        department=department,
    )
    upload = await read_upload(file)
    assignment = await CourseworkService(db, ASSIGNMENT, storage).create(teacher, data, upload)
    return AssignmentMutationResponse(
        message="Assignment created successfully.",
        assignment=AssignmentResponse.model_validate(assignment),
    )


@router.get("", response_model=List[AssignmentResponse])
async def list_assignments(
    teacher: CurrentIdentity = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db),
):
    """Assignments created by the calling teacher, newest first"""
    return await CourseworkService(db, ASSIGNMENT).list_for_teacher(teacher)


@router.get("/{assignment_id}", response_model=AssignmentResponse)
async def get_assignment(
    assignment_id: str,
    teacher: CurrentIdentity = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db),
):
    return await CourseworkService(db, ASSIGNMENT).get(assignment_id)


@router.put("/{assignment_id}", response_model=AssignmentMutationResponse)
async def update_assignment(
    assignment_id: str,
    title: Optional[str] = Form(None),
    course_name: Optional[str] = Form(None, alias="courseName"),
    section: Optional[str] = Form(None),
    start_date: Optional[str] = Form(None, alias="startDate"),
    due_date: Optional[str] = Form(None, alias="dueDate"),
    year: Optional[str] = Form(None),
    department: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    teacher: CurrentIdentity = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
):
    """Partial update; a new file replaces the attachment"""
    data = parse_form(
        CourseworkUpdate,
        title=title,
        course_name=course_name,
        section=section,
        start_date=start_date,
        due_date=due_date,
        year=year,
        department=department,
    )
    upload = await read_upload(file)
    assignment = await CourseworkService(db, ASSIGNMENT, storage).update(assignment_id, teacher, data, upload)
    return AssignmentMutationResponse(
        message="Assignment updated successfully.",
        assignment=AssignmentResponse.model_validate(assignment),
    )


@router.delete("/{assignment_id}", response_model=MessageResponse)
async def delete_assignment(
    assignment_id: str,
    teacher: CurrentIdentity = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db),
):
    await CourseworkService(db, ASSIGNMENT).delete(assignment_id, teacher)
    return MessageResponse(message="Assignment deleted successfully.")
