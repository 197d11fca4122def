"""
Academic hierarchy models
- Year -> Department -> Section tree
- Teacher to Section class assignments
"""

from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime

from classroom.core.database import Base
from classroom.core.types import GUID, generate_uuid

SECTION_CODES = ("A", "B", "C", "D", "E", "F")


class Year(Base):
    """Academic intake, e.g. FA24 / Fall 2024"""
    __tablename__ = "years"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    code = Column(String(20), unique=True, nullable=False)
    label = Column(String(255), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    departments = relationship("Department", back_populates="year", passive_deletes=True)

    def __repr__(self):
        return f"<Year {self.code}>"


class Department(Base):
    """Department/program inside a year, e.g. BCS"""
    __tablename__ = "departments"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    code = Column(String(20), unique=True, nullable=False)
    label = Column(String(255), nullable=False)
    year_id = Column(GUID, ForeignKey("years.id"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    year = relationship("Year", back_populates="departments", lazy="selectin")
    sections = relationship(
        "Section",
        back_populates="department",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Section.code",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Department {self.code}>"


class Section(Base):
    """Section letter (A-F) inside a department"""
    __tablename__ = "sections"
    __table_args__ = (
        UniqueConstraint("code", "department_id", name="uq_sections_code_department"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    code = Column(String(1), nullable=False)
    department_id = Column(GUID, ForeignKey("departments.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    department = relationship("Department", back_populates="sections", lazy="selectin")

    def __repr__(self):
        return f"<Section {self.code}>"


class TeacherClass(Base):
    """A teacher's assignment to one section"""
    __tablename__ = "teacher_classes"
    __table_args__ = (
        UniqueConstraint("teacher_id", "section_id", name="uq_teacher_classes_teacher_section"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    teacher_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    section_id = Column(GUID, ForeignKey("sections.id", ondelete="CASCADE"), nullable=False)

    # Copies of the section tree codes, renamed together with the tree
    year_code = Column(String(20), nullable=False)
    department_code = Column(String(20), nullable=False)
    section_code = Column(String(1), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    teacher = relationship("User", back_populates="classes")
    section = relationship("Section")

    @property
    def code(self) -> str:
        return f"{self.year_code}-{self.department_code}-{self.section_code}"

    def __repr__(self):
        return f"<TeacherClass {self.code}>"
