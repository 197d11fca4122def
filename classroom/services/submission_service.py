"""
Submission Service - student-side coursework

- listing scoped to the student's section (and year/department when known)
- one submission row per (item, student), resubmission overwrites it
- roster of submissions for the teacher view
"""

from datetime import datetime
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select

from classroom.core.exceptions import ForbiddenError, ResourceNotFoundError, ValidationError
from classroom.core.logging_config import logger
from classroom.models.coursework import SubmissionStatus
from classroom.modules.auth.dependencies import CurrentIdentity
from classroom.services.coursework_service import (
    CourseworkKind,
    CourseworkService,
    CourseworkItem,
    can_manage,
)
from classroom.services.storage_service import StorageService, UploadedFile, document_file_type


class SubmissionService:

    def __init__(self, db: AsyncSession, kind: CourseworkKind, storage: Optional[StorageService] = None):
        self.db = db
        self.kind = kind
        self.storage = storage
        self.coursework = CourseworkService(db, kind, storage)

    async def list_for_student(self, identity: CurrentIdentity) -> List[CourseworkItem]:
        """
        Items visible to a student, newest first.

        Section must match; year and department only narrow the result when
        the student has them. Items without a year/department are therefore
        hidden from students who have one.
        """
        if not identity.section:
            raise ValidationError("Student section not found in profile.")

        model = self.kind.model
        query = select(model).where(model.section == identity.section)
        if identity.roll_year:
            query = query.where(model.year == identity.roll_year)
        if identity.roll_dept:
            query = query.where(model.department == identity.roll_dept)

        result = await self.db.execute(query.order_by(model.created_at.desc()))
        return list(result.scalars().all())

    async def find(self, item_id: str, student_id: str):
        submission_model = self.kind.submission_model
        result = await self.db.execute(
            select(submission_model).where(
                getattr(submission_model, self.kind.item_column) == item_id,
                submission_model.student_id == student_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_status(self, item_id: str, identity: CurrentIdentity):
        """Stored submission, or None when the student has not submitted"""
        return await self.find(item_id, identity.id)

    async def submit(self, item_id: Optional[str], identity: CurrentIdentity,
                     upload: Optional[UploadedFile]):
        """
        Upload the answer file, then upsert the (item, student) row.

        A concurrent first submission that loses the insert race hits the
        unique constraint and is applied as an update instead.
        """
        if not item_id:
            raise ValidationError(f"{self.kind.label} ID is required.")
        if upload is None or not upload.content:
            raise ValidationError("File is required for submission.")

        file_type = document_file_type(upload.content_type)
        item = await self.coursework.get(item_id)
        # Rows are expired by a rollback below; keep the key
        item_id = item.id
        if identity.user is None:
            raise ResourceNotFoundError("User", identity.id)

        stored = await self.storage.upload_bytes(
            self.kind.submission_folder,
            f"{item_id}-{identity.id}-{upload.filename}",
            upload.content,
            upload.content_type,
        )
        fields = {
            "submission_file_url": stored["url"],
            "submission_file_name": upload.filename,
            "submission_file_type": file_type,
            "status": SubmissionStatus.SUBMITTED,
            "submitted_at": datetime.utcnow(),
        }

        submission = await self.find(item_id, identity.id)
        if submission is None:
            submission = self.kind.submission_model(
                **{self.kind.item_column: item_id},
                student_id=identity.id,
                **fields,
            )
            self.db.add(submission)
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                submission = await self.find(item_id, identity.id)
                if submission is None:
                    raise
                logger.info(f"[Submission] Concurrent insert for {item_id}/{identity.id}, updating")
            else:
                await self.db.refresh(submission)
                logger.info(f"[Submission] {self.kind.label} {item_id} submitted by {identity.id}")
                return submission

        for field, value in fields.items():
            setattr(submission, field, value)
        await self.db.commit()
        await self.db.refresh(submission)
        logger.info(f"[Submission] {self.kind.label} {item_id} resubmitted by {identity.id}")
        return submission

    async def roster(self, item_id: str, identity: CurrentIdentity):
        """All submissions for an item, most recent first"""
        item = await self.coursework.get(item_id)
        if not can_manage(identity, item):
            raise ForbiddenError(f"Only the teacher who created this {self.kind.label.lower()} can view its submissions.")

        submission_model = self.kind.submission_model
        result = await self.db.execute(
            select(submission_model)
            .where(getattr(submission_model, self.kind.item_column) == item.id)
            .order_by(submission_model.submitted_at.desc())
        )
        return list(result.scalars().all())
