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
    AssignmentResponse,
    AssignmentSubmissionResponse,
    AssignmentSubmitResponse,
    PendingStatusResponse,
)
from classroom.services.coursework_service import ASSIGNMENT
from classroom.services.submission_service import SubmissionService
from classroom.services.storage_service import StorageService, get_storage_service
from classroom.api.v1.endpoints.upload import read_upload

router = APIRouter()


@router.get("", response_model=List[AssignmentResponse])
async def list_student_assignments(
    student: CurrentIdentity = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    """Assignments for the student's section (and year/department when set)"""
    return await SubmissionService(db, ASSIGNMENT).list_for_student(student)


@router.get("/{assignment_id}/submission-status")
async def get_submission_status(
    assignment_id: str,
    student: CurrentIdentity = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
):
    """The student's submission, or {"status": "pending"}"""
    submission = await SubmissionService(db, ASSIGNMENT).get_status(assignment_id, student)
    if submission is None:
        return PendingStatusResponse().model_dump(mode="json", by_alias=True)
    return AssignmentSubmissionResponse.model_validate(submission).model_dump(mode="json", by_alias=True)


@router.post("/submit", response_model=AssignmentSubmitResponse)
async def submit_assignment(
    assignment_id: Optional[str] = Form(None, alias="assignmentId"),
    file: Optional[UploadFile] = File(None),
    student: CurrentIdentity = Depends(get_current_student),
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
):
    """Submit or resubmit an answer file (PDF/DOCX)"""
    upload = await read_upload(file)
    submission = await SubmissionService(db, ASSIGNMENT, storage).submit(assignment_id, student, upload)
    return AssignmentSubmitResponse(
        message="Assignment submitted successfully.",
        submission=AssignmentSubmissionResponse.model_validate(submission),
    )


@router.get("/{assignment_id}/submissions", response_model=List[AssignmentSubmissionResponse])
async def list_assignment_submissions(
    assignment_id: str,
    identity: CurrentIdentity = Depends(get_teacher_or_admin),
    db: AsyncSession = Depends(get_db),
):
    """Roster of submissions for the teacher view"""
    return await SubmissionService(db, ASSIGNMENT).roster(assignment_id, identity)
