"""Domain entity describing a file attached to an expense."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ExpenseAttachment:
    """Metadata of a stored attachment; the bytes live in file storage."""

    expense_id: str
    filename: str
    original_filename: str
    stored_path: str
    mime_type: Optional[str]
    file_size: int
    id: UUID = field(default_factory=uuid4)
    uploaded_at: datetime = field(default_factory=_utcnow)

    def belongs_to(self, expense_id: str) -> bool:
        return self.expense_id == str(expense_id)
