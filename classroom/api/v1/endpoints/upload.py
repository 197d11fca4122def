from fastapi import APIRouter, Depends, File, UploadFile
from typing import Optional

from classroom.core.config import settings
from classroom.core.exceptions import InvalidFileTypeError, ValidationError
from classroom.modules.auth.dependencies import CurrentIdentity, get_current_identity
from classroom.schemas.coursework import UploadResponse
from classroom.services.storage_service import (
    StorageService,
    UploadedFile,
    get_storage_service,
    is_image,
    PROFILE_IMAGES_FOLDER,
)

router = APIRouter()


async def read_upload(file: Optional[UploadFile]) -> Optional[UploadedFile]:
    """Read a multipart file into memory, enforcing MAX_UPLOAD_SIZE_MB"""
    if file is None or not file.filename:
        return None
    content = await file.read()
    if len(content) > settings.max_upload_size_bytes:
        raise ValidationError(f"File exceeds the {settings.MAX_UPLOAD_SIZE_MB} MB limit.", field="file")
    return UploadedFile(
        filename=file.filename,
        content_type=file.content_type or "application/octet-stream",
        content=content,
    )


@router.post("/image", response_model=UploadResponse)
async def upload_image(
    image: Optional[UploadFile] = File(None),
    identity: CurrentIdentity = Depends(get_current_identity),
    storage: StorageService = Depends(get_storage_service),
):
    """Upload a profile picture and return its public URL"""
    upload = await read_upload(image)
    if upload is None or not upload.content:
        raise ValidationError("No file uploaded.", field="image")
    if not is_image(upload.content_type):
        raise InvalidFileTypeError(upload.content_type, ["image/*"], message="Only image files are allowed.")

    stored = await storage.upload_bytes(
        PROFILE_IMAGES_FOLDER, upload.filename, upload.content, upload.content_type
    )
    return UploadResponse(url=stored["url"])
