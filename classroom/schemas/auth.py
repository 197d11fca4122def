from pydantic import BaseModel, EmailStr, field_validator, model_validator, model_serializer
from typing import Optional, List, Any, Dict
from datetime import datetime

from classroom.schemas.base import CamelModel
from classroom.models.academic import SECTION_CODES
from classroom.models.user import User, UserRole

SIGNUP_ROLES = (UserRole.STUDENT.value, UserRole.TEACHER.value)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class SignupRequest(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    role: Optional[str] = None

    # Student fields
    roll_year: Optional[str] = None
    roll_dept: Optional[str] = None
    roll_serial: Optional[str] = None
    section: Optional[str] = None

    # Teacher classes, e.g. "FA24-BCS-A,FA24-BCS-B"
    department: Optional[str] = None

    profile_image: Optional[str] = None

    @field_validator(
        'first_name', 'last_name', 'role', 'roll_year', 'roll_dept',
        'roll_serial', 'section', 'department', 'profile_image', mode='before'
    )
    @classmethod
    def strip_strings(cls, v):
        if isinstance(v, str):
            return _clean(v)
        return v

    @model_validator(mode='after')
    def validate_role_fields(self):
        """Validate required fields for the requested role"""
        if not self.first_name or not self.last_name or not self.password:
            raise ValueError("First name, last name, and password are required.")

        self.role = (self.role or UserRole.STUDENT.value).lower()
        if self.role not in SIGNUP_ROLES:
            raise ValueError("Role must be student or teacher.")

        if self.email:
            self.email = self.email.lower()

        if self.role == UserRole.STUDENT.value:
            if not self.email or not self.roll_year or not self.roll_dept \
                    or not self.roll_serial or not self.section:
                raise ValueError(
                    "Email and roll number components (year, dept, serial) "
                    "and section are required for students."
                )
            if not self.profile_image:
                raise ValueError("Profile picture is required for students.")
            self.section = self.section.upper()
            if self.section not in SECTION_CODES:
                raise ValueError("Section must be one of A, B, C, D, E, F.")
            self.roll_year = self.roll_year.upper()
            self.roll_dept = self.roll_dept.upper()
        else:
            if not self.email or not self.department:
                raise ValueError("Email and department are required for teachers.")
            if not self.profile_image:
                raise ValueError("Profile picture is required for teachers.")

        return self

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class SigninRequest(CamelModel):
    # Email, or a student's roll number
    identifier: Optional[str] = None
    password: Optional[str] = None

    @model_validator(mode='after')
    def require_credentials(self):
        self.identifier = _clean(self.identifier)
        if not self.identifier or not self.password:
            raise ValueError("Missing credentials.")
        return self


class AdminLoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None

    @model_validator(mode='after')
    def require_credentials(self):
        self.email = _clean(self.email)
        if not self.email or not self.password:
            raise ValueError("Email and password are required.")
        return self


class ProfileUpdateRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    profile_image: Optional[str] = None

    @field_validator('name', 'profile_image', mode='before')
    @classmethod
    def strip_strings(cls, v):
        if isinstance(v, str):
            return _clean(v)
        return v


class CheckEmailRequest(CamelModel):
    email: EmailStr


class CheckEmailResponse(CamelModel):
    exists: bool


class TeacherClassResponse(CamelModel):
    year: str
    department: str
    section: str


class UserResponse(CamelModel):
    """
    Account as returned to clients.

    Roll fields are only emitted for students and class fields only for
    teachers; the password hash is never part of the model.
    """
    id: str
    name: str
    email: str
    role: str
    profile_image: Optional[str] = None

    # Student
    roll_number: Optional[str] = None
    roll_year: Optional[str] = None
    roll_dept: Optional[str] = None
    roll_serial: Optional[str] = None
    section: Optional[str] = None

    # Teacher
    department: Optional[str] = None
    classes: Optional[List[TeacherClassResponse]] = None

    created_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        role = user.role.value if isinstance(user.role, UserRole) else str(user.role)
        data = {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "role": role,
            "profile_image": user.profile_image,
            "created_at": user.created_at,
        }
        if role == UserRole.STUDENT.value:
            data.update(
                roll_number=user.roll_number,
                roll_year=user.roll_year,
                roll_dept=user.roll_dept,
                roll_serial=user.roll_serial,
                section=user.section,
            )
        elif role == UserRole.TEACHER.value:
            data.update(
                department=user.department,
                classes=[
                    TeacherClassResponse(
                        year=c.year_code, department=c.department_code, section=c.section_code
                    )
                    for c in user.classes
                ],
            )
        return cls(**data)

    @model_serializer(mode='wrap')
    def drop_other_role_fields(self, handler) -> Dict[str, Any]:
        data = handler(self)
        if self.role != UserRole.STUDENT.value:
            for key in ("rollNumber", "rollYear", "rollDept", "rollSerial", "section",
                        "roll_number", "roll_year", "roll_dept", "roll_serial"):
                data.pop(key, None)
        if self.role != UserRole.TEACHER.value:
            for key in ("department", "classes"):
                data.pop(key, None)
        return data


class AuthResponse(BaseModel):
    token: str
    user: UserResponse


class UserUpdateResponse(BaseModel):
    message: str
    user: UserResponse


class CurrentIdentityResponse(CamelModel):
    """Request-scoped identity as hydrated from the token"""
    id: str
    role: str
    name: Optional[str] = None
    email: Optional[str] = None
    section: Optional[str] = None
    roll_year: Optional[str] = None
    roll_dept: Optional[str] = None
