from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Text, event
from sqlalchemy.orm import relationship
from datetime import datetime
from typing import Optional
import enum

from classroom.core.database import Base
from classroom.core.types import GUID, generate_uuid


class UserRole(str, enum.Enum):
    """Account kinds sharing the users table"""
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


def derive_roll_number(roll_year: Optional[str], roll_dept: Optional[str],
                       roll_serial: Optional[str]) -> Optional[str]:
    """
    Build the student login handle: lowercase(year + dept + serial).

    Returns None unless all three parts are present.
    """
    if not roll_year or not roll_dept or not roll_serial:
        return None
    return f"{roll_year}{roll_dept}{roll_serial}".lower()


class User(Base):
    """
    Student, teacher or admin account.

    Student-only fields: roll_year, roll_dept, roll_serial, section, roll_number.
    Teacher-only data lives in the `classes` relationship (TeacherClass rows).
    """
    __tablename__ = "users"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(SQLEnum(UserRole), default=UserRole.STUDENT, nullable=False)
    profile_image = Column(Text, nullable=True)

    # Student roll number components
    roll_year = Column(String(20), nullable=True)
    roll_dept = Column(String(20), nullable=True)
    roll_serial = Column(String(20), nullable=True)
    section = Column(String(1), nullable=True)
    roll_number = Column(String(64), unique=True, index=True, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    classes = relationship(
        "TeacherClass",
        back_populates="teacher",
        cascade="all, delete-orphan",
        order_by="[TeacherClass.year_code, TeacherClass.department_code, TeacherClass.section_code]",
        lazy="selectin",
    )

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT

    @property
    def is_teacher(self) -> bool:
        return self.role == UserRole.TEACHER

    @property
    def department(self) -> Optional[str]:
        """Teacher's class codes joined as "YEAR-DEPT-SECTION,..." """
        if not self.classes:
            return None
        return ",".join(c.code for c in self.classes)

    def refresh_roll_number(self) -> None:
        if self.role == UserRole.STUDENT:
            derived = derive_roll_number(self.roll_year, self.roll_dept, self.roll_serial)
            if derived:
                self.roll_number = derived

    def __repr__(self):
        return f"<User {self.email} ({self.role.value if self.role else '-'})>"


@event.listens_for(User, "before_insert")
@event.listens_for(User, "before_update")
def _sync_roll_number(mapper, connection, target: User) -> None:
    target.refresh_roll_number()
