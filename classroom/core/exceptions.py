"""
Custom Exceptions for the Virtual Classroom API
===============================================

Services raise these instead of HTTPException so the business rules stay
independent of the web layer. The handlers registered in `classroom.main`
turn every ClassroomError into a JSON body of the form {"message": ...}
with the exception's status code.

Usage:
    from classroom.core.exceptions import ConflictError, ResourceNotFoundError

    if existing:
        raise ConflictError("Email already in use.")

    if not year:
        raise ResourceNotFoundError("Year", year_id)
"""

from typing import Optional, Any, Dict, List


class ClassroomError(Exception):
    """Base exception for all application errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(ClassroomError):
    """Missing or malformed input"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class InvalidFileTypeError(ValidationError):
    """Uploaded file type not allowed"""

    def __init__(self, file_type: str, allowed_types: List[str], message: Optional[str] = None):
        super().__init__(
            message or f"File type '{file_type}' not allowed. Allowed: {', '.join(allowed_types)}"
        )
        self.code = "INVALID_FILE_TYPE"
        self.details = {"file_type": file_type, "allowed_types": allowed_types}


class ConflictError(ClassroomError):
    """Unique value already taken (email, roll number, codes)"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="CONFLICT", details=details)


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(ClassroomError):
    """Missing, malformed or expired token"""

    status_code = 401

    def __init__(self, message: str = "Invalid or expired token."):
        super().__init__(message, code="AUTH_FAILED")


class InvalidCredentialsError(AuthenticationError):
    """Wrong identifier/password pair at sign-in"""

    status_code = 400

    def __init__(self, message: str = "Invalid credentials."):
        super().__init__(message)
        self.code = "INVALID_CREDENTIALS"


class ForbiddenError(ClassroomError):
    """Authenticated but not allowed"""

    status_code = 403

    def __init__(self, message: str = "Access denied."):
        super().__init__(message, code="FORBIDDEN")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(ClassroomError):
    """Referenced entity does not exist"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: Optional[str] = None):
        super().__init__(
            f"{resource_type} not found.",
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


# ============================================
# Storage / Server Errors
# ============================================

class UploadError(ClassroomError):
    """Object storage upload failed"""

    status_code = 500

    def __init__(self, key: str = "", message: str = "File upload failed."):
        super().__init__(message, code="UPLOAD_FAILED")
        if key:
            self.details["key"] = key


class ServerError(ClassroomError):
    """Unexpected failure, detail is logged and never returned"""

    status_code = 500

    def __init__(self, message: str = "Server error"):
        super().__init__(message, code="SERVER_ERROR")


def error_response(error: ClassroomError) -> Dict[str, Any]:
    """Client-facing body for an error"""
    return {"message": error.message}
