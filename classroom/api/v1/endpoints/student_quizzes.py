from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from classroom.core.database import get_db
from classroom.modules.auth.dependencies import (
    CurrentIdentity,
    get_current_student,
    get_teacher_or_admin,
)
from classroom.schemas.coursework import (
    QuizResponse,
    QuizSubmissionResponse,
    QuizSubmitResponse,
    PendingStatusResponse,
)
from classroom.services.coursework_service import QUIZ
from classroom.services.submission_service import SubmissionService
from classroom.services.storage_service import StorageService, get_storage_service
from classroom.api.v1.endpoints.upload import read_upload

router = APIRouter()


@router.get("", response_model=List[QuizResponse])
async def list_student_quizzes(
    student: CurrentIdentity = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    """Quizzes for the student's section (and year/department when set)"""
    return await SubmissionService(db, QUIZ).list_for_student(student)


@router.get("/{quiz_id}/submission-status")
async def get_submission_status(
    quiz_id: str,
    student: CurrentIdentity = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    """The student's submission, or {"status": "pending"}"""
    submission = await SubmissionService(db, QUIZ).get_status(quiz_id, student)
    if submission is None:
        return PendingStatusResponse().model_dump(mode="json", by_alias=True)
    return QuizSubmissionResponse.model_validate(submission).model_dump(mode="json", by_alias=True)


@router.post("/submit", response_model=QuizSubmitResponse)
async def submit_quiz(
    quiz_id: Optional[str] = Form(None, alias="quizId"),
    file: Optional[UploadFile] = File(None),
    student: CurrentIdentity = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
):
    """Submit or resubmit an answer file (PDF/DOCX)"""
    upload = await read_upload(file)
    submission = await SubmissionService(db, QUIZ, storage).submit(quiz_id, student, upload)
    return QuizSubmitResponse(
        message="Quiz submitted successfully.",
        submission=QuizSubmissionResponse.model_validate(submission),
    )


@router.get("/{quiz_id}/submissions", response_model=List[QuizSubmissionResponse])
async def list_quiz_submissions(
    quiz_id: str,
    identity: CurrentIdentity = Depends(get_teacher_or_admin),
    db: AsyncSession = Depends(get_db),
):
    """Roster of submissions for the teacher view"""
    return await SubmissionService(db, QUIZ).roster(quiz_id, identity)
