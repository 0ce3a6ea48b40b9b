"""Pytest bootstrap configuration.

Point the storage root at a throwaway directory before application settings
are imported, so importing ``main`` never touches the working tree.
"""
import os
import tempfile

os.environ.setdefault("STORAGE__UPLOAD_DIR", os.path.join(tempfile.gettempdir(), "expense-uploads-test"))

import pytest

from application.services.expense_attachment_service import ExpenseAttachmentService
from infrastructure.repositories.attachment_repository import InMemoryAttachmentRepository
from infrastructure.storage import LocalFileStorageService


@pytest.fixture
def upload_root(tmp_path):
    return tmp_path / "uploads" / "expenses"


@pytest.fixture
def storage(upload_root) -> LocalFileStorageService:
    return LocalFileStorageService(str(upload_root))


@pytest.fixture
def attachment_repository() -> InMemoryAttachmentRepository:
    return InMemoryAttachmentRepository()


@pytest.fixture
def attachment_service(storage, attachment_repository) -> ExpenseAttachmentService:
    return ExpenseAttachmentService(repository=attachment_repository, storage=storage)
