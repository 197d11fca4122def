# Pydantic schemas
from classroom.schemas.base import CamelModel, MessageResponse, first_error_message, parse_form
from classroom.schemas.auth import (
    SignupRequest,
    SigninRequest,
    AdminLoginRequest,
    ProfileUpdateRequest,
    CheckEmailRequest,
    CheckEmailResponse,
    UserResponse,
    AuthResponse,
    UserUpdateResponse,
    CurrentIdentityResponse,
)
from classroom.schemas.admin import (
    YearCreate,
    YearUpdate,
    YearResponse,
    DepartmentCreate,
    DepartmentUpdate,
    DepartmentResponse,
    SectionCreate,
    SectionResponse,
    UserAdminUpdate,
)
from classroom.schemas.coursework import (
    CourseworkCreate,
    CourseworkUpdate,
    QuizCreate,
    QuizUpdate,
    AssignmentResponse,
    QuizResponse,
    AssignmentSubmissionResponse,
    QuizSubmissionResponse,
    UploadResponse,
)
