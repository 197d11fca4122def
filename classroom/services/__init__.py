from classroom.services.storage_service import StorageService, UploadedFile, get_storage_service
from classroom.services.identity_service import IdentityService
from classroom.services.hierarchy_service import HierarchyService
from classroom.services.coursework_service import CourseworkService, ASSIGNMENT, QUIZ
from classroom.services.submission_service import SubmissionService
