"""Allow-list and size checks for uploaded attachments."""

from dataclasses import dataclass, field

from fastapi import UploadFile

from investtrack.config import settings
from investtrack.core.exceptions import (
    PayloadTooLargeException,
    UnsupportedMediaTypeException,
    ValidationException,
)

# Images and office documents only
ALLOWED_MIME_TYPES = frozenset(
    {
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "image/bmp",
        "image/webp",
        "image/tiff",
        "image/svg+xml",
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-powerpoint",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        "application/vnd.ms-outlook",
        "application/rtf",
        "application/x-rtf",
        "text/plain",
    }
)


@dataclass
class UploadedPayload:
    """An attachment that passed the allow-list and size checks, not yet persisted."""

    original_name: str
    mime_type: str
    content: bytes
    tags: list[str] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.content)


def validate_upload(original_name: str, mime_type: str, content: bytes) -> UploadedPayload:
    """
    Check MIME type and size of an attachment.

    Raises:
        UnsupportedMediaTypeException: MIME type not on the allow-list
        PayloadTooLargeException: content larger than MAX_UPLOAD_SIZE_MB
        ValidationException: empty content or missing filename
    """
    mime_type = (mime_type or "").split(";")[0].strip().lower()
    if mime_type not in ALLOWED_MIME_TYPES:
        raise UnsupportedMediaTypeException(
            f"Invalid file type '{mime_type}'! Only accepts images and documents"
        )
    if len(content) > settings.max_upload_size_bytes:
        raise PayloadTooLargeException(
            f"File too large. Maximum size is {settings.MAX_UPLOAD_SIZE_MB}MB"
        )
    if not content:
        raise ValidationException(
            "File is empty", fields=[{"field": "file", "message": "File is empty"}]
        )
    if not original_name:
        raise ValidationException(
            "File name is required", fields=[{"field": "file", "message": "File name is required"}]
        )
    return UploadedPayload(original_name=original_name, mime_type=mime_type, content=content)


def read_upload(upload: UploadFile) -> UploadedPayload:
    """
    Read a multipart upload into memory and validate it.

    At most one byte past the size limit is read, so an oversized body is
    rejected without being buffered in full. Blocking file I/O: call from a
    plain `def` route so it runs in the threadpool.
    """
    content = upload.file.read(settings.max_upload_size_bytes + 1)
    return validate_upload(upload.filename or "", upload.content_type or "", content)


def read_optional_upload(upload: UploadFile | None) -> UploadedPayload | None:
    if upload is None:
        return None
    return read_upload(upload)
