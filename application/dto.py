"""
Data transfer objects between the application and presentation layers.
"""
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, model_serializer


class DTOBase(BaseModel):
    """Base DTO: unify datetime serialization to UTC-Z for all subclasses."""

    @model_serializer(mode="wrap")
    def _serialize_model(self, handler):  # type: ignore[override]
        data = handler(self)

        def convert(value):
            if isinstance(value, datetime):
                ts = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
                s = ts.astimezone(timezone.utc).isoformat()
                return s.replace("+00:00", "Z")
            if isinstance(value, list):
                return [convert(v) for v in value]
            if isinstance(value, dict):
                return {k: convert(v) for k, v in value.items()}
            return value

        return convert(data)


class AttachmentDTO(DTOBase):
    """Attachment metadata returned to API clients (never the stored path)."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    expense_id: str
    filename: str
    original_filename: str
    mime_type: Optional[str]
    file_size: int
    uploaded_at: datetime
