"""
Complaint attachment storage on the local filesystem.

Uploaded files are validated as a whole before any of them is written, then
stored under UPLOAD_DIR/complaints with a random name and served read-only
from UPLOAD_URL_PREFIX.
"""

import os
import uuid
from dataclasses import dataclass
from pathlib import Path

import structlog
from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from core.config import settings
from core.exceptions import ValidationError
from models.cosmos_documents import AttachmentDocument

logger = structlog.get_logger(__name__)

COMPLAINT_SUBDIR = "complaints"


@dataclass(frozen=True)
class PendingAttachment:
    """An upload that passed validation and is ready to be written."""

    original_name: str
    mime_type: str
    content: bytes


async def read_uploads(files: list[UploadFile]) -> list[PendingAttachment]:
    """
    Read and validate uploaded files.

    Raises:
        ValidationError: Too many files, a disallowed type, or a file over the size limit
    """
    files = [f for f in files if f.filename]
    if len(files) > settings.MAX_COMPLAINT_ATTACHMENTS:
        raise ValidationError(f"At most {settings.MAX_COMPLAINT_ATTACHMENTS} attachments are allowed")

    pending: list[PendingAttachment] = []
    for upload in files:
        mime_type = (upload.content_type or "").lower()
        if mime_type not in settings.allowed_attachment_types:
            raise ValidationError(f"File type not allowed: {upload.filename}")

        content = await upload.read(settings.MAX_ATTACHMENT_BYTES + 1)
        if len(content) > settings.MAX_ATTACHMENT_BYTES:
            raise ValidationError(f"File too large: {upload.filename}")

        pending.append(PendingAttachment(original_name=upload.filename, mime_type=mime_type, content=content))
    return pending


class AttachmentStorage:
    """Writes and removes attachment files under a base directory."""

    def __init__(self, base_dir: str | os.PathLike | None = None, url_prefix: str | None = None):
        self.base_dir = Path(base_dir or settings.UPLOAD_DIR)
        self.url_prefix = (url_prefix or settings.UPLOAD_URL_PREFIX).rstrip("/")

    def _write(self, filename: str, content: bytes) -> None:
        directory = self.base_dir / COMPLAINT_SUBDIR
        directory.mkdir(parents=True, exist_ok=True)
        (directory / filename).write_bytes(content)

    def _remove(self, filename: str) -> None:
        (self.base_dir / COMPLAINT_SUBDIR / filename).unlink(missing_ok=True)

    async def save(self, attachments: list[PendingAttachment]) -> list[AttachmentDocument]:
        """Write files to disk, returning their descriptors in upload order."""
        saved: list[AttachmentDocument] = []
        try:
            for attachment in attachments:
                extension = Path(attachment.original_name).suffix.lower()
                filename = f"{uuid.uuid4().hex}{extension}"
                await run_in_threadpool(self._write, filename, attachment.content)
                saved.append(
                    AttachmentDocument(
                        path=f"{self.url_prefix}/{COMPLAINT_SUBDIR}/{filename}",
                        filename=filename,
                        original_name=attachment.original_name,
                        mime_type=attachment.mime_type,
                        size=len(attachment.content),
                    )
                )
        except OSError:
            await self.remove(saved)
            raise
        return saved

    async def remove(self, attachments: list[AttachmentDocument]) -> None:
        """Delete stored files; failures are logged and skipped."""
        for attachment in attachments:
            try:
                await run_in_threadpool(self._remove, attachment.filename)
            except OSError as e:
                logger.warning("attachment_remove_failed", filename=attachment.filename, error=str(e))


def get_attachment_storage() -> AttachmentStorage:
    return AttachmentStorage()
