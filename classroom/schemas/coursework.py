"""
Coursework schemas
==================

Assignments and quizzes arrive as multipart forms (metadata plus an optional
PDF/DOCX attachment), so the create/update models here are validated from
form fields via `parse_form` rather than from a JSON body.
"""
from pydantic import field_validator, model_validator
from typing import Optional
from datetime import datetime, timezone

from classroom.schemas.base import CamelModel
from classroom.models.academic import SECTION_CODES
from classroom.models.coursework import FileType, SubmissionStatus


def _strip(v):
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


def _upper(v):
    v = _strip(v)
    return v.upper() if isinstance(v, str) else v


def _naive_utc(v: Optional[datetime]) -> Optional[datetime]:
    # Stored as naive UTC
    if v is not None and v.tzinfo is not None:
        return v.astimezone(timezone.utc).replace(tzinfo=None)
    return v


def _check_section(section: Optional[str]) -> None:
    if section is not None and section not in SECTION_CODES:
        raise ValueError("Section must be one of A, B, C, D, E, F.")


class CourseworkCreate(CamelModel):
    title: Optional[str] = None
    course_name: Optional[str] = None
    section: Optional[str] = None
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    year: Optional[str] = None
    department: Optional[str] = None

    @field_validator('title', 'course_name', 'start_date', 'due_date', mode='before')
    @classmethod
    def strip_blank(cls, v):
        return _strip(v)

    @field_validator('section', 'year', 'department', mode='before')
    @classmethod
    def upper_codes(cls, v):
        return _upper(v)

    @field_validator('start_date', 'due_date')
    @classmethod
    def to_naive_utc(cls, v):
        return _naive_utc(v)

    @model_validator(mode='after')
    def validate_fields(self):
        if not self.title or not self.course_name or not self.section \
                or not self.start_date or not self.due_date:
            raise ValueError(
                "Title, course name, section, start date, and due date are required."
            )
        _check_section(self.section)
        if self.due_date < self.start_date:
            raise ValueError("Due date must be after start date.")
        return self


class QuizCreate(CourseworkCreate):
    marks: Optional[float] = None

    @field_validator('marks', mode='before')
    @classmethod
    def blank_marks(cls, v):
        return _strip(v)

    @model_validator(mode='after')
    def validate_marks(self):
        if self.marks is None or self.marks <= 0:
            raise ValueError("Marks must be a positive number.")
        return self


class CourseworkUpdate(CamelModel):
    title: Optional[str] = None
    course_name: Optional[str] = None
    section: Optional[str] = None
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    year: Optional[str] = None
    department: Optional[str] = None

    @field_validator('title', 'course_name', 'start_date', 'due_date', mode='before')
    @classmethod
    def strip_blank(cls, v):
        return _strip(v)

    @field_validator('section', 'year', 'department', mode='before')
    @classmethod
    def upper_codes(cls, v):
        return _upper(v)

    @field_validator('start_date', 'due_date')
    @classmethod
    def to_naive_utc(cls, v):
        return _naive_utc(v)

    @model_validator(mode='after')
    def validate_section(self):
        _check_section(self.section)
        return self


class QuizUpdate(CourseworkUpdate):
    marks: Optional[float] = None

    @field_validator('marks', mode='before')
    @classmethod
    def blank_marks(cls, v):
        return _strip(v)

    @model_validator(mode='after')
    def validate_marks(self):
        if self.marks is not None and self.marks <= 0:
            raise ValueError("Marks must be a positive number.")
        return self


# ============================================
# Responses
# ============================================

class CreatorSummary(CamelModel):
    id: str
    name: str
    email: str


class StudentSummary(CamelModel):
    id: str
    name: str
    email: str
    roll_number: Optional[str] = None
    section: Optional[str] = None


class AssignmentResponse(CamelModel):
    id: str
    title: str
    course_name: str
    year: Optional[str] = None
    department: Optional[str] = None
    section: str
    start_date: datetime
    due_date: datetime
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_type: Optional[FileType] = None
    created_by: str
    creator: Optional[CreatorSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class QuizResponse(AssignmentResponse):
    marks: float


class AssignmentSubmissionResponse(CamelModel):
    id: str
    assignment_id: str
    student_id: str
    submission_file_url: Optional[str] = None
    submission_file_name: Optional[str] = None
    submission_file_type: Optional[FileType] = None
    status: SubmissionStatus
    submitted_at: Optional[datetime] = None
    student: Optional[StudentSummary] = None


class QuizSubmissionResponse(CamelModel):
    id: str
    quiz_id: str
    student_id: str
    submission_file_url: Optional[str] = None
    submission_file_name: Optional[str] = None
    submission_file_type: Optional[FileType] = None
    status: SubmissionStatus
    submitted_at: Optional[datetime] = None
    student: Optional[StudentSummary] = None


class AssignmentMutationResponse(CamelModel):
    message: str
    assignment: AssignmentResponse


class QuizMutationResponse(CamelModel):
    message: str
    quiz: QuizResponse


class AssignmentSubmitResponse(CamelModel):
    message: str
    submission: AssignmentSubmissionResponse


class QuizSubmitResponse(CamelModel):
    message: str
    submission: QuizSubmissionResponse


class PendingStatusResponse(CamelModel):
    status: SubmissionStatus = SubmissionStatus.PENDING


class UploadResponse(CamelModel):
    url: str

