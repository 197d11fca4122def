from fastapi import APIRouter
from classroom.api.v1.endpoints import (
    auth,
    admin,
    upload,
    assignments,
    quizzes,
    student_assignments,
    student_quizzes,
)

api_router = APIRouter()


@api_router.get("/health", tags=["Health"])
async def health_check():
    """Simple health check endpoint for load balancer"""
    return {"status": "healthy", "service": "virtual-classroom-backend"}


api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(admin.router, prefix="/admin", tags=["Administration"])
api_router.include_router(upload.router, prefix="/upload", tags=["Uploads"])
api_router.include_router(assignments.router, prefix="/assignments", tags=["Assignments"])
api_router.include_router(quizzes.router, prefix="/quizzes", tags=["Quizzes"])
api_router.include_router(student_assignments.router, prefix="/student-assignments", tags=["Student Assignments"])
api_router.include_router(student_quizzes.router, prefix="/student-quizzes", tags=["Student Quizzes"])
