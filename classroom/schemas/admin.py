"""
Academic hierarchy and user administration schemas
"""
from pydantic import EmailStr, field_validator, model_validator
from typing import Optional, List
from datetime import datetime

from classroom.schemas.base import CamelModel
from classroom.models.academic import SECTION_CODES


def _upper_code(v):
    if isinstance(v, str):
        v = v.strip().upper()
        return v or None
    return v


# ============================================
# Years
# ============================================

class YearCreate(CamelModel):
    code: Optional[str] = None
    label: Optional[str] = None

    @field_validator('code', mode='before')
    @classmethod
    def normalize_code(cls, v):
        return _upper_code(v)

    @model_validator(mode='after')
    def require_code_and_label(self):
        if not self.code or not self.label or not self.label.strip():
            raise ValueError("Code and label are required.")
        return self


class YearUpdate(CamelModel):
    code: Optional[str] = None
    label: Optional[str] = None

    @field_validator('code', mode='before')
    @classmethod
    def normalize_code(cls, v):
        return _upper_code(v)


class YearResponse(CamelModel):
    id: str
    code: str
    label: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================
# Departments / Sections
# ============================================

class DepartmentCreate(CamelModel):
    code: Optional[str] = None
    label: Optional[str] = None
    year_id: Optional[str] = None

    @field_validator('code', mode='before')
    @classmethod
    def normalize_code(cls, v):
        return _upper_code(v)

    @model_validator(mode='after')
    def require_fields(self):
        if not self.code or not self.label or not self.label.strip():
            raise ValueError("Code and label are required.")
        if not self.year_id:
            raise ValueError("Year is required.")
        return self


class DepartmentUpdate(CamelModel):
    code: Optional[str] = None
    label: Optional[str] = None
    year_id: Optional[str] = None

    @field_validator('code', mode='before')
    @classmethod
    def normalize_code(cls, v):
        return _upper_code(v)


class SectionCreate(CamelModel):
    code: Optional[str] = None
    department_id: Optional[str] = None

    @field_validator('code', mode='before')
    @classmethod
    def normalize_code(cls, v):
        return _upper_code(v)

    @model_validator(mode='after')
    def require_fields(self):
        if not self.code or not self.department_id:
            raise ValueError("Code and department are required.")
        if self.code not in SECTION_CODES:
            raise ValueError("Section must be one of A, B, C, D, E, F.")
        return self


class SectionSummary(CamelModel):
    id: str
    code: str


class DepartmentSummary(CamelModel):
    id: str
    code: str
    label: str
    year_id: str


class DepartmentResponse(CamelModel):
    id: str
    code: str
    label: str
    year_id: str
    year: Optional[YearResponse] = None
    sections: List[SectionSummary] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SectionResponse(CamelModel):
    id: str
    code: str
    department_id: str
    department: Optional[DepartmentSummary] = None
    created_at: Optional[datetime] = None


# ============================================
# Users
# ============================================

class UserAdminUpdate(CamelModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[str] = None
    roll_year: Optional[str] = None
    roll_dept: Optional[str] = None
    roll_serial: Optional[str] = None
    section: Optional[str] = None

    @field_validator('roll_year', 'roll_dept', 'section', mode='before')
    @classmethod
    def normalize_codes(cls, v):
        return _upper_code(v)

    @field_validator('role')
    @classmethod
    def validate_role(cls, v):
        if v is None:
            return v
        v = v.strip().lower()
        if v not in ("student", "teacher", "admin"):
            raise ValueError("Role must be student, teacher or admin.")
        return v

    @field_validator('section')
    @classmethod
    def validate_section(cls, v):
        if v is not None and v not in SECTION_CODES:
            raise ValueError("Section must be one of A, B, C, D, E, F.")
        return v
