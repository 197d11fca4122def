"""
Coursework models
- Assignment and Quiz items created by teachers
- One submission row per (item, student)
"""

from sqlalchemy import Column, String, DateTime, Float, Text, ForeignKey, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship, declared_attr
from datetime import datetime
import enum

from classroom.core.database import Base
from classroom.core.types import GUID, generate_uuid


class FileType(str, enum.Enum):
    PDF = "pdf"
    DOCX = "docx"


class SubmissionStatus(str, enum.Enum):
    PENDING = "pending"
    SUBMITTED = "submitted"


class CourseworkMixin:
    """Fields shared by assignments and quizzes"""

    id = Column(GUID, primary_key=True, default=generate_uuid)
    title = Column(String(255), nullable=False)
    course_name = Column(String(255), nullable=False)

    # Scope by codes: year/department are optional, section is required
    year = Column(String(20), nullable=True, index=True)
    department = Column(String(20), nullable=True, index=True)
    section = Column(String(1), nullable=False, index=True)

    start_date = Column(DateTime, nullable=False)
    due_date = Column(DateTime, nullable=False)

    file_url = Column(Text, nullable=True)
    file_name = Column(String(255), nullable=True)
    file_type = Column(SQLEnum(FileType), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @declared_attr
    def created_by(cls):
        return Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    @declared_attr
    def creator(cls):
        return relationship("User", lazy="selectin")


class Assignment(CourseworkMixin, Base):
    __tablename__ = "assignments"

    submissions = relationship(
        "AssignmentSubmission",
        back_populates="assignment",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Assignment {self.title}>"


class Quiz(CourseworkMixin, Base):
    __tablename__ = "quizzes"

    marks = Column(Float, nullable=False)

    submissions = relationship(
        "QuizSubmission",
        back_populates="quiz",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Quiz {self.title}>"


class SubmissionMixin:
    """Uploaded answer file and its state"""

    id = Column(GUID, primary_key=True, default=generate_uuid)

    submission_file_url = Column(Text, nullable=True)
    submission_file_name = Column(String(255), nullable=True)
    submission_file_type = Column(SQLEnum(FileType), nullable=True)
    status = Column(SQLEnum(SubmissionStatus), default=SubmissionStatus.PENDING, nullable=False)
    submitted_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @declared_attr
    def student_id(cls):
        return Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    @declared_attr
    def student(cls):
        return relationship("User", lazy="selectin")


class AssignmentSubmission(SubmissionMixin, Base):
    __tablename__ = "assignment_submissions"
    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_assignment_submissions_item_student"),
    )

    assignment_id = Column(GUID, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    assignment = relationship("Assignment", back_populates="submissions")

    @property
    def item_id(self) -> str:
        return self.assignment_id


class QuizSubmission(SubmissionMixin, Base):
    __tablename__ = "quiz_submissions"
    __table_args__ = (
        UniqueConstraint("quiz_id", "student_id", name="uq_quiz_submissions_item_student"),
    )

    quiz_id = Column(GUID, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    quiz = relationship("Quiz", back_populates="submissions")

    @property
    def item_id(self) -> str:
        return self.quiz_id
