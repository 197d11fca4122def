"""
Coursework Service - teacher-side assignments and quizzes

Assignment and Quiz share one code path; a CourseworkKind describes the
model, its storage folder and the label used in messages.
"""

from dataclasses import dataclass
from typing import List, Optional, Type, Union
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from classroom.core.config import settings
from classroom.core.exceptions import ForbiddenError, ResourceNotFoundError, ValidationError
from classroom.core.logging_config import logger
from classroom.core.types import is_valid_uuid
from classroom.models.coursework import (
    Assignment,
    Quiz,
    AssignmentSubmission,
    QuizSubmission,
)
from classroom.modules.auth.dependencies import CurrentIdentity
from classroom.schemas.coursework import CourseworkCreate, CourseworkUpdate
from classroom.services.storage_service import (
    StorageService,
    UploadedFile,
    document_file_type,
    ASSIGNMENTS_FOLDER,
    QUIZZES_FOLDER,
    ASSIGNMENT_SUBMISSIONS_FOLDER,
    QUIZ_SUBMISSIONS_FOLDER,
)

OWNER_POLICY = "owner"
ANY_TEACHER_POLICY = "any_teacher"

CourseworkItem = Union[Assignment, Quiz]


@dataclass(frozen=True)
class CourseworkKind:
    label: str
    model: Type[CourseworkItem]
    submission_model: Type[Union[AssignmentSubmission, QuizSubmission]]
    item_column: str
    folder: str
    submission_folder: str


ASSIGNMENT = CourseworkKind(
    label="Assignment",
    model=Assignment,
    submission_model=AssignmentSubmission,
    item_column="assignment_id",
    folder=ASSIGNMENTS_FOLDER,
    submission_folder=ASSIGNMENT_SUBMISSIONS_FOLDER,
)

QUIZ = CourseworkKind(
    label="Quiz",
    model=Quiz,
    submission_model=QuizSubmission,
    item_column="quiz_id",
    folder=QUIZZES_FOLDER,
    submission_folder=QUIZ_SUBMISSIONS_FOLDER,
)


def mutation_policy() -> str:
    policy = (settings.COURSEWORK_MUTATION_POLICY or OWNER_POLICY).strip().lower()
    return policy if policy in (OWNER_POLICY, ANY_TEACHER_POLICY) else OWNER_POLICY


def can_manage(identity: CurrentIdentity, item: CourseworkItem) -> bool:
    """
    Whether the caller may edit/delete the item or read its roster.

    Admins always may; teachers depend on COURSEWORK_MUTATION_POLICY.
    """
    if identity.is_admin:
        return True
    if not identity.is_teacher:
        return False
    if mutation_policy() == ANY_TEACHER_POLICY:
        return True
    return str(item.created_by) == str(identity.id)


class CourseworkService:
    """Create/list/get/update/delete for one coursework kind"""

    def __init__(self, db: AsyncSession, kind: CourseworkKind, storage: Optional[StorageService] = None):
        self.db = db
        self.kind = kind
        self.storage = storage

    async def get(self, item_id: str) -> CourseworkItem:
        if not is_valid_uuid(item_id):
            raise ResourceNotFoundError(self.kind.label, item_id)
        model = self.kind.model
        result = await self.db.execute(select(model).where(model.id == item_id))
        item = result.scalar_one_or_none()
        if not item:
            raise ResourceNotFoundError(self.kind.label, item_id)
        return item

    async def get_managed(self, item_id: str, identity: CurrentIdentity) -> CourseworkItem:
        item = await self.get(item_id)
        if not can_manage(identity, item):
            raise ForbiddenError(f"Only the teacher who created this {self.kind.label.lower()} can manage it.")
        return item

    async def _attach_file(self, item: CourseworkItem, upload: UploadedFile) -> None:
        # Validated before the upload so a rejected type never reaches storage
        file_type = document_file_type(upload.content_type)
        stored = await self.storage.upload_bytes(
            self.kind.folder, upload.filename, upload.content, upload.content_type
        )
        item.file_url = stored["url"]
        item.file_name = upload.filename
        item.file_type = file_type

    async def create(
        self,
        identity: CurrentIdentity,
        data: CourseworkCreate,
        upload: Optional[UploadedFile] = None,
    ) -> CourseworkItem:
        values = data.model_dump()
        item = self.kind.model(**values, created_by=identity.id)

        if upload is not None:
            await self._attach_file(item, upload)

        self.db.add(item)
        await self.db.commit()
        await self.db.refresh(item)
        logger.info(f"[Coursework] {self.kind.label} {item.id} created by {identity.id}")
        return item

    async def list_for_teacher(self, identity: CurrentIdentity) -> List[CourseworkItem]:
        """The caller's own items, newest first"""
        model = self.kind.model
        result = await self.db.execute(
            select(model)
            .where(model.created_by == identity.id)
            .order_by(model.created_at.desc())
        )
        return list(result.scalars().all())

    async def update(
        self,
        item_id: str,
        identity: CurrentIdentity,
        data: CourseworkUpdate,
        upload: Optional[UploadedFile] = None,
    ) -> CourseworkItem:
        item = await self.get_managed(item_id, identity)

        for field, value in data.model_dump(exclude_none=True).items():
            setattr(item, field, value)

        if item.due_date < item.start_date:
            raise ValidationError("Due date must be after start date.")

        if upload is not None:
            await self._attach_file(item, upload)

        await self.db.commit()
        await self.db.refresh(item)
        logger.info(f"[Coursework] {self.kind.label} {item.id} updated by {identity.id}")
        return item

    async def delete(self, item_id: str, identity: CurrentIdentity) -> None:
        """Delete the item; its submissions go with it"""
        item = await self.get_managed(item_id, identity)
        await self.db.delete(item)
        await self.db.commit()
        logger.info(f"[Coursework] {self.kind.label} {item_id} deleted by {identity.id}")
