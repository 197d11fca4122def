# Re-export all models for convenient imports
from classroom.models.user import User, UserRole, derive_roll_number
from classroom.models.academic import Year, Department, Section, TeacherClass, SECTION_CODES
from classroom.models.coursework import (
    Assignment,
    Quiz,
    AssignmentSubmission,
    QuizSubmission,
    FileType,
    SubmissionStatus,
)

__all__ = [
    # Identity
    "User",
    "UserRole",
    "derive_roll_number",
    # Hierarchy
    "Year",
    "Department",
    "Section",
    "TeacherClass",
    "SECTION_CODES",
    # Coursework
    "Assignment",
    "Quiz",
    "AssignmentSubmission",
    "QuizSubmission",
    "FileType",
    "SubmissionStatus",
]
