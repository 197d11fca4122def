"""
Storage Service - Handles uploaded files in S3/MinIO
With retry logic for resilient operations

Folders used by the API:
- assignments / quizzes: teacher attachments
- student_submissions / student_quiz_submissions: student answers
- classroom-profiles: profile pictures
"""

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
import asyncio
import re
import uuid

from classroom.core.config import settings
from classroom.core.exceptions import InvalidFileTypeError, UploadError
from classroom.core.logging_config import logger
from classroom.models.coursework import FileType

ASSIGNMENTS_FOLDER = "assignments"
QUIZZES_FOLDER = "quizzes"
ASSIGNMENT_SUBMISSIONS_FOLDER = "student_submissions"
QUIZ_SUBMISSIONS_FOLDER = "student_quiz_submissions"
PROFILE_IMAGES_FOLDER = "classroom-profiles"

DOCUMENT_MIME_TYPES = {
    "application/pdf": FileType.PDF,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": FileType.DOCX,
}

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def document_file_type(content_type: Optional[str]) -> FileType:
    """Map an upload's MIME type to pdf/docx, rejecting anything else"""
    file_type = DOCUMENT_MIME_TYPES.get((content_type or "").split(";")[0].strip().lower())
    if file_type is None:
        raise InvalidFileTypeError(
            content_type or "unknown",
            list(DOCUMENT_MIME_TYPES),
            message="Only PDF and DOCX files are allowed.",
        )
    return file_type


def is_image(content_type: Optional[str]) -> bool:
    return bool(content_type) and content_type.lower().startswith("image/")


class StorageService:
    """
    Object storage supporting AWS S3 and MinIO.

    The boto3 client is created on first use; the bucket is created when it
    does not exist yet.
    """

    def __init__(self, client=None, bucket_name: Optional[str] = None,
                 max_retries: int = 3, retry_delay: float = 1.0):
        self._client = client
        self._bucket_name = bucket_name or settings.S3_BUCKET_NAME
        self._initialized = client is not None
        self._max_retries = max_retries
        self._retry_delay = retry_delay

    def _get_client(self):
        """Lazy initialization of S3/MinIO client"""
        if self._client is None:
            if settings.use_minio:
                self._client = boto3.client(
                    's3',
                    endpoint_url=f"http://{settings.MINIO_ENDPOINT}",
                    aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                    aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                    config=Config(
                        signature_version='s3v4',
                        s3={'addressing_style': 'path'}
                    ),
                    region_name=settings.AWS_REGION
                )
            elif settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
                self._client = boto3.client(
                    's3',
                    aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                    aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                    region_name=settings.AWS_REGION
                )
            else:
                # Instance/role credentials
                self._client = boto3.client('s3', region_name=settings.AWS_REGION)
                logger.info("S3 client using IAM role credentials")

            self._ensure_bucket()

        return self._client

    def _ensure_bucket(self):
        """Create bucket if it doesn't exist"""
        if self._initialized:
            return

        try:
            self._client.head_bucket(Bucket=self._bucket_name)
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', '')
            if error_code in ['404', 'NoSuchBucket']:
                try:
                    if settings.use_minio or settings.AWS_REGION == 'us-east-1':
                        self._client.create_bucket(Bucket=self._bucket_name)
                    else:
                        self._client.create_bucket(
                            Bucket=self._bucket_name,
                            CreateBucketConfiguration={'LocationConstraint': settings.AWS_REGION}
                        )
                    logger.info(f"Created bucket '{self._bucket_name}'")
                except ClientError as create_error:
                    logger.error(f"Failed to create bucket: {create_error}")
            else:
                logger.error(f"Error checking bucket: {e}")

        self._initialized = True

    @staticmethod
    def build_key(folder: str, filename: str) -> str:
        """folder/<timestamp>-<uuid>-<sanitized name>"""
        safe_name = _UNSAFE_CHARS.sub("_", (filename or "file").replace("\\", "/").split("/")[-1])
        stamp = int(datetime.utcnow().timestamp() * 1000)
        return f"{folder}/{stamp}-{uuid.uuid4().hex[:8]}-{safe_name}"

    def public_url(self, key: str) -> str:
        if settings.STORAGE_PUBLIC_URL:
            return f"{settings.STORAGE_PUBLIC_URL.rstrip('/')}/{key}"
        if settings.use_minio:
            return f"http://{settings.MINIO_ENDPOINT}/{self._bucket_name}/{key}"
        return f"https://{self._bucket_name}.s3.{settings.AWS_REGION}.amazonaws.com/{key}"

    async def upload_bytes(
        self,
        folder: str,
        filename: str,
        content: bytes,
        content_type: str = 'application/octet-stream'
    ) -> dict:
        """
        Upload content under `folder` with retry logic.

        Returns:
            dict with url, key, size_bytes

        Retry behavior:
            - Retries on ClientError, BotoCoreError, ConnectionError, TimeoutError
            - Exponential backoff: 1s, 2s, 4s...
            - Raises UploadError once retries are exhausted
        """
        key = self.build_key(folder, filename)
        size_bytes = len(content)

        for attempt in range(self._max_retries):
            try:
                client = self._get_client()
                await asyncio.to_thread(
                    client.put_object,
                    Bucket=self._bucket_name,
                    Key=key,
                    Body=content,
                    ContentType=content_type,
                )
                logger.info(f"[S3-Upload] Uploaded: {key} ({size_bytes} bytes)")
                return {
                    'url': self.public_url(key),
                    'key': key,
                    'size_bytes': size_bytes,
                }
            except (ClientError, BotoCoreError, ConnectionError, TimeoutError) as e:
                if attempt < self._max_retries - 1:
                    delay = self._retry_delay * (2 ** attempt)
                    logger.warning(
                        f"[S3-Upload] Attempt {attempt + 1}/{self._max_retries} failed for {key}: {e}. "
                        f"Retrying in {delay:.1f}s..."
                    )
                    await asyncio.sleep(delay)
                else:
                    logger.error(f"[S3-Upload] All {self._max_retries} attempts failed for {key}: {e}")

        raise UploadError(key=key)


_storage_service: Optional[StorageService] = None


def get_storage_service() -> StorageService:
    """FastAPI dependency returning the shared storage service"""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service


@dataclass
class UploadedFile:
    """In-memory copy of a multipart upload"""
    filename: str
    content_type: str
    content: bytes
