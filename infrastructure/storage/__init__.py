"""File storage entry point and lifecycle management."""
from typing import Optional

from application.ports.storage import FileStorageService
from core.config import settings
from core.logging_config import get_logger
from .local import LocalFileStorageService, clean_filename

logger = get_logger(__name__)

# Global storage instance
_file_storage: Optional[FileStorageService] = None


def init_file_storage(upload_dir: Optional[str] = None) -> FileStorageService:
    """Create the local storage service once per process.

    A broken storage root is fatal: the exception propagates and the
    application does not start.
    """
    global _file_storage

    if _file_storage is not None:
        logger.warning("file_storage_already_initialized")
        return _file_storage

    _file_storage = LocalFileStorageService(upload_dir or settings.storage.upload_dir)
    logger.info("file_storage_initialized", root=str(_file_storage.get_absolute_path(".")))
    return _file_storage


def get_file_storage_client() -> Optional[FileStorageService]:
    return _file_storage


def shutdown_file_storage() -> None:
    global _file_storage

    if _file_storage is None:
        return
    logger.info("file_storage_shutdown")
    _file_storage = None


async def get_file_storage() -> FileStorageService:
    """FastAPI dependency for the storage service.

    Raises:
        RuntimeError: If storage was not initialized at startup
    """
    client = get_file_storage_client()
    if client is None:
        raise RuntimeError(
            "File storage not initialized. "
            "Call init_file_storage() during startup."
        )
    return client


__all__ = [
    "init_file_storage",
    "get_file_storage_client",
    "shutdown_file_storage",
    "get_file_storage",
    "LocalFileStorageService",
    "clean_filename",
]
