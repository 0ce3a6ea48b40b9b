"""Application layer orchestration for expense attachments (application/services)."""
from __future__ import annotations

import io
import os
from typing import Iterable, Optional, Tuple
from uuid import UUID

from application.dto import AttachmentDTO
from application.ports.storage import FileContent, FileResource, FileStorageService
from core.logging_config import get_logger
from domain.attachment import AttachmentRepository, ExpenseAttachment
from domain.common.exceptions import InvalidOperationException, ResourceNotFoundException

logger = get_logger(__name__)

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
DEFAULT_ALLOWED_MIME_TYPES = ("application/pdf", "image/jpeg", "image/jpg", "image/png")


class ExpenseAttachmentService:
    """Upload, list, download and delete files attached to expenses."""

    def __init__(
        self,
        repository: AttachmentRepository,
        storage: FileStorageService,
        *,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        allowed_mime_types: Iterable[str] = DEFAULT_ALLOWED_MIME_TYPES,
    ):
        self._repository = repository
        self._storage = storage
        self._max_file_size = max_file_size
        # configured order is kept for the rejection message
        self._allowed_mime_types = tuple(dict.fromkeys(m.lower() for m in allowed_mime_types))

    async def upload_attachment(
        self,
        expense_id: str,
        *,
        content: FileContent,
        filename: Optional[str],
        content_type: Optional[str],
        size: Optional[int] = None,
    ) -> AttachmentDTO:
        """Validate and store a file, then record it against the expense.

        ``size`` defaults to the length of ``content``; streams are measured
        from their current position and rewound.
        """
        if size is None:
            size = _content_size(content)
        logger.info("attachment_upload_started", expense_id=str(expense_id), filename=filename, size=size)

        self._validate_file(filename=filename, content_type=content_type, size=size)

        stored_path = await self._storage.store_file(content, filename, str(expense_id))
        attachment = ExpenseAttachment(
            expense_id=str(expense_id),
            filename=filename,
            original_filename=filename,
            stored_path=stored_path,
            mime_type=content_type,
            file_size=size,
        )
        saved = await self._repository.save(attachment)
        logger.info("attachment_uploaded", attachment_id=str(saved.id), expense_id=saved.expense_id)
        return AttachmentDTO.model_validate(saved)

    async def get_attachments_by_expense(self, expense_id: str) -> list[AttachmentDTO]:
        attachments = await self._repository.list_by_expense(str(expense_id))
        logger.info("attachments_listed", expense_id=str(expense_id), count=len(attachments))
        return [AttachmentDTO.model_validate(a) for a in attachments]

    async def get_attachment(self, attachment_id: UUID, *, expense_id: Optional[str] = None) -> ExpenseAttachment:
        """Fetch an attachment, optionally requiring it to belong to ``expense_id``."""
        attachment = await self._repository.get_by_id(attachment_id)
        if attachment is None or (expense_id is not None and not attachment.belongs_to(expense_id)):
            logger.warning("attachment_not_found", attachment_id=str(attachment_id))
            raise ResourceNotFoundException("Attachment", str(attachment_id))
        return attachment

    async def download_attachment(
        self,
        attachment_id: UUID,
        *,
        expense_id: Optional[str] = None,
    ) -> Tuple[ExpenseAttachment, FileResource]:
        attachment = await self.get_attachment(attachment_id, expense_id=expense_id)
        resource = await self._storage.load_file_as_resource(attachment.stored_path)
        logger.info("attachment_downloaded", attachment_id=str(attachment_id))
        return attachment, resource

    async def delete_attachment(self, attachment_id: UUID, *, expense_id: Optional[str] = None) -> None:
        attachment = await self.get_attachment(attachment_id, expense_id=expense_id)
        await self._storage.delete_file(attachment.stored_path)
        await self._repository.delete(attachment.id)
        logger.info("attachment_deleted", attachment_id=str(attachment_id))

    def _validate_file(self, *, filename: Optional[str], content_type: Optional[str], size: int) -> None:
        if size <= 0:
            raise InvalidOperationException("Cannot upload empty file")

        if size > self._max_file_size:
            raise InvalidOperationException(
                f"File size exceeds maximum allowed size of {self._max_file_size // 1024 // 1024}MB"
            )

        if not content_type or content_type.lower() not in self._allowed_mime_types:
            allowed = ", ".join(dict.fromkeys(m.split("/")[-1].upper() for m in self._allowed_mime_types))
            raise InvalidOperationException(f"File type not allowed. Allowed types: {allowed}")

        if not filename or ".." in filename:
            raise InvalidOperationException("Invalid filename")


def _content_size(content: FileContent) -> int:
    if isinstance(content, (bytes, bytearray, memoryview)):
        return len(content)
    try:
        start = content.tell()
        content.seek(0, os.SEEK_END)
        end = content.tell()
        content.seek(start)
    except (AttributeError, io.UnsupportedOperation) as e:
        raise InvalidOperationException("File size is required for unseekable uploads") from e
    return end - start
