from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from classroom.core.database import get_db
from classroom.modules.auth.dependencies import CurrentIdentity, get_current_teacher
from classroom.schemas.base import MessageResponse, parse_form
from classroom.schemas.coursework import QuizCreate, QuizUpdate, QuizResponse, QuizMutationResponse
from classroom.services.coursework_service import CourseworkService, QUIZ
from classroom.services.storage_service import StorageService, get_storage_service
from classroom.api.v1.endpoints.upload import read_upload

router = APIRouter()


@router.post("", response_model=QuizMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_quiz(
    title: Optional[str] = Form(None),
    course_name: Optional[str] = Form(None, alias="courseName"),
    section: Optional[str] = Form(None),
    start_date: Optional[str] = Form(None, alias="startDate"),
    due_date: Optional[str] = Form(None, alias="dueDate"),
    marks: Optional[str] = Form(None),
    year: Optional[str] = Form(None),
    department: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    teacher: CurrentIdentity = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
):
    """Create a quiz; marks must be positive"""
    data = parse_form(
        QuizCreate,
        title=title,
        course_name=course_name,
        section=section,
        start_date=start_date,
        due_date=due_date,
        marks=marks,
        year=year,
        department=department,
    )
    upload = await read_upload(file)
    quiz = await CourseworkService(db, QUIZ, storage).create(teacher, data, upload)
    return QuizMutationResponse(message="Quiz created successfully.", quiz=QuizResponse.model_validate(quiz))


@router.get("", response_model=List[QuizResponse])
async def list_quizzes(
    teacher: CurrentIdentity = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db),
):
    return await CourseworkService(db, QUIZ).list_for_teacher(teacher)


@router.get("/{quiz_id}", response_model=QuizResponse)
async def get_quiz(
    quiz_id: str,
    teacher: CurrentIdentity = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db),
):
    return await CourseworkService(db, QUIZ).get(quiz_id)


@router.put("/{quiz_id}", response_model=QuizMutationResponse)
async def update_quiz(
    quiz_id: str,
    title: Optional[str] = Form(None),
    course_name: Optional[str] = Form(None, alias="courseName"),
    section: Optional[str] = Form(None),
    start_date: Optional[str] = Form(None, alias="startDate"),
    due_date: Optional[str] = Form(None, alias="dueDate"),
    marks: Optional[str] = Form(None),
    year: Optional[str] = Form(None),
    department: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    teacher: CurrentIdentity = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
):
    data = parse_form(
        QuizUpdate,
        title=title,
        course_name=course_name,
        section=section,
        start_date=start_date,
        due_date=due_date,
        marks=marks,
        year=year,
        department=department,
    )
    upload = await read_upload(file)
    quiz = await CourseworkService(db, QUIZ, storage).update(quiz_id, teacher, data, upload)
    return QuizMutationResponse(message="Quiz updated successfully.", quiz=QuizResponse.model_validate(quiz))


@router.delete("/{quiz_id}", response_model=MessageResponse)
async def delete_quiz(
    quiz_id: str,
    teacher: CurrentIdentity = Depends(get_current_teacher),
    db: AsyncSession = Depends(get_db),
):
    await CourseworkService(db, QUIZ).delete(quiz_id, teacher)
    return MessageResponse(message="Quiz deleted successfully.")
