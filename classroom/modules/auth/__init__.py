# Authentication module

from classroom.modules.auth.dependencies import (
    CurrentIdentity,
    get_current_identity,
    require_admin,
    get_current_teacher,
    get_current_student,
    get_teacher_or_admin,
)

__all__ = [
    "CurrentIdentity",
    "get_current_identity",
    "require_admin",
    "get_current_teacher",
    "get_current_student",
    "get_teacher_or_admin",
]
