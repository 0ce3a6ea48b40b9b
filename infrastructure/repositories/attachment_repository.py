"""In-memory implementation of AttachmentRepository.

Single-process only. Expense and attachment persistence proper lives in the
relational data layer; this keeps the attachment workflow usable without it.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Optional
from uuid import UUID

from domain.attachment import AttachmentRepository, ExpenseAttachment


class InMemoryAttachmentRepository(AttachmentRepository):
    def __init__(self) -> None:
        self._items: Dict[UUID, ExpenseAttachment] = {}
        self._lock = asyncio.Lock()

    async def save(self, attachment: ExpenseAttachment) -> ExpenseAttachment:  # type: ignore[override]
        async with self._lock:
            self._items[attachment.id] = attachment
        return attachment

    async def get_by_id(self, attachment_id: UUID) -> Optional[ExpenseAttachment]:  # type: ignore[override]
        async with self._lock:
            return self._items.get(attachment_id)

    async def list_by_expense(self, expense_id: str) -> list[ExpenseAttachment]:  # type: ignore[override]
        async with self._lock:
            items = [a for a in self._items.values() if a.belongs_to(expense_id)]
        return sorted(items, key=lambda a: a.uploaded_at)

    async def delete(self, attachment_id: UUID) -> None:  # type: ignore[override]
        async with self._lock:
            self._items.pop(attachment_id, None)
