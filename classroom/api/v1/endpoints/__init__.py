# API endpoints
from . import auth, admin, upload, assignments, quizzes, student_assignments, student_quizzes

__all__ = ["auth", "admin", "upload", "assignments", "quizzes", "student_assignments", "student_quizzes"]
