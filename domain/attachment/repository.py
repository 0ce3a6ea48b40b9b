"""Repository abstraction for expense attachments."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from .entity import ExpenseAttachment


class AttachmentRepository(ABC):
    """Contract for persisting and querying attachment metadata."""

    @abstractmethod
    async def save(self, attachment: ExpenseAttachment) -> ExpenseAttachment:
        ...

    @abstractmethod
    async def get_by_id(self, attachment_id: UUID) -> Optional[ExpenseAttachment]:
        ...

    @abstractmethod
    async def list_by_expense(self, expense_id: str) -> list[ExpenseAttachment]:
        ...

    @abstractmethod
    async def delete(self, attachment_id: UUID) -> None:
        ...
