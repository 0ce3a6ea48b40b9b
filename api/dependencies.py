"""
API dependencies - service wiring
"""
from functools import lru_cache

from fastapi import Depends

from application.ports.storage import FileStorageService
from application.services.expense_attachment_service import ExpenseAttachmentService
from core.config import settings
from domain.attachment import AttachmentRepository
from infrastructure.repositories.attachment_repository import InMemoryAttachmentRepository
from infrastructure.storage import get_file_storage


@lru_cache
def get_attachment_repository() -> AttachmentRepository:
    # One repository per process; attachment metadata is not persisted across restarts
    return InMemoryAttachmentRepository()


async def get_attachment_service(
    storage: FileStorageService = Depends(get_file_storage),
    repository: AttachmentRepository = Depends(get_attachment_repository),
) -> ExpenseAttachmentService:
    return ExpenseAttachmentService(
        repository=repository,
        storage=storage,
        max_file_size=settings.storage.max_file_size,
        allowed_mime_types=settings.storage.allowed_mime_types,
    )
