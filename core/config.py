"""
Application settings.
"""
import json
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_DEFAULT_ALLOWED_MIME_TYPES = ["application/pdf", "image/jpeg", "image/jpg", "image/png"]


class StorageSettings(BaseModel):
    # Root directory for expense attachments, relative paths resolve against the CWD
    upload_dir: str = "uploads/expenses"
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    allowed_mime_types: list[str] = Field(default_factory=lambda: list(_DEFAULT_ALLOWED_MIME_TYPES))

    @field_validator("allowed_mime_types", mode="before")
    @classmethod
    def _parse_mime_types(cls, v):
        """Accept a JSON array or a comma separated string."""
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("[") and s.endswith("]"):
                return json.loads(s)
            return [item.strip() for item in s.split(",") if item.strip()]
        return v


class Settings(BaseSettings):
    """Project settings."""

    PROJECT_NAME: str = "Expense Segmentation Backend"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: Optional[str] = None

    API_PREFIX: str = "/api/v1"

    storage: StorageSettings = Field(default_factory=StorageSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )


settings = Settings()
