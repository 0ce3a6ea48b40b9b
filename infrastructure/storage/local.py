"""Local file system implementation of the file storage port."""
import mimetypes
import os
import uuid
from pathlib import Path, PurePosixPath
from typing import Optional

import aiofiles
import aiofiles.os

from application.ports.storage import FileContent, FileResource, FileStorageService
from core.logging_config import get_logger
from domain.common.exceptions import (
    FileStorageException,
    InvalidOperationException,
    ResourceNotFoundException,
)

logger = get_logger(__name__)

_COPY_CHUNK_SIZE = 64 * 1024


class LocalFileStorageService(FileStorageService):
    """Stores attachments under ``<root>/<expense_id>/<uuid>-<filename>``."""

    def __init__(self, upload_dir: str = "uploads/expenses"):
        """Create the storage root if missing.

        Raises:
            FileStorageException: If the root directory cannot be created
        """
        self.root = Path(upload_dir).resolve()
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("storage_root_create_failed", root=str(self.root), error=str(e))
            raise FileStorageException(
                "Could not create the directory where the uploaded files will be stored."
            ) from e
        logger.info("storage_root_initialized", root=str(self.root))

    async def store_file(
        self,
        content: FileContent,
        filename: Optional[str],
        expense_id: str,
    ) -> str:
        """Write ``content`` next to the other files of the expense.

        Returns:
            Stored path relative to the root, ``<expense_id>/<uuid>-<filename>``

        Raises:
            InvalidOperationException: If the filename or expense id would escape the root
            FileStorageException: If the write fails
        """
        original_filename = clean_filename(filename)
        expense_key = str(expense_id)
        if expense_key in ("", ".", "..") or any(c in expense_key for c in ("/", "\\", "\x00")):
            raise InvalidOperationException(f"Invalid expense id: {expense_key}")
        expense_dir = self.root / expense_key

        unique_filename = f"{uuid.uuid4()}-{original_filename}"
        target = expense_dir / unique_filename
        try:
            expense_dir.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(target, "wb") as f:
                if isinstance(content, (bytes, bytearray, memoryview)):
                    await f.write(content)
                else:
                    while True:
                        chunk = content.read(_COPY_CHUNK_SIZE)
                        if not chunk:
                            break
                        await f.write(chunk)
        except OSError as e:
            logger.error("file_store_failed", filename=original_filename, error=str(e))
            raise FileStorageException(f"Could not store file: {original_filename}") from e

        stored_path = f"{expense_key}/{unique_filename}"
        logger.info("file_stored", stored_path=stored_path)
        return stored_path

    async def load_file_as_resource(self, stored_path: str) -> FileResource:
        try:
            file_path = self._inside_root(self.get_absolute_path(stored_path), stored_path)
        except (InvalidOperationException, ValueError, OSError) as e:
            logger.error("file_path_rejected", stored_path=stored_path, error=str(e))
            raise ResourceNotFoundException(message=f"File not found: {stored_path}") from e

        if not (file_path.is_file() and os.access(file_path, os.R_OK)):
            logger.error("file_not_found", stored_path=stored_path)
            raise ResourceNotFoundException(message=f"File not found: {stored_path}")

        content_type, _ = mimetypes.guess_type(file_path.name)
        return FileResource(
            path=file_path,
            filename=file_path.name,
            size=file_path.stat().st_size,
            content_type=content_type or "application/octet-stream",
        )

    async def delete_file(self, stored_path: str) -> None:
        """Remove the file; absent files are not an error."""
        file_path = self._inside_root(self.get_absolute_path(stored_path), stored_path)
        try:
            await aiofiles.os.remove(file_path)
        except FileNotFoundError:
            logger.debug("file_delete_skipped", stored_path=stored_path)
            return
        except OSError as e:
            logger.error("file_delete_failed", stored_path=stored_path, error=str(e))
            raise FileStorageException(f"Could not delete file: {stored_path}") from e
        logger.info("file_deleted", stored_path=stored_path)

    async def file_exists(self, stored_path: str) -> bool:
        # Any failure reads as "does not exist"
        try:
            file_path = self._inside_root(self.get_absolute_path(stored_path), stored_path)
            return file_path.exists()
        except Exception as e:
            logger.error("file_exists_check_failed", stored_path=stored_path, error=str(e))
            return False

    def get_absolute_path(self, stored_path: str) -> Path:
        return Path(os.path.normpath(self.root / stored_path))

    def _inside_root(self, path: Path, original: str) -> Path:
        try:
            resolved = path.resolve()
            resolved.relative_to(self.root)
        except ValueError:
            raise InvalidOperationException(f"Path escapes the storage root: {original}")
        if resolved == self.root:
            raise InvalidOperationException(f"Invalid storage path: {original}")
        return resolved


def clean_filename(filename: Optional[str]) -> str:
    """Normalize an uploaded filename down to a single safe path segment.

    Raises:
        InvalidOperationException: If any segment of the name is ``..`` or it holds a NUL byte
    """
    name = (filename or "").replace("\\", "/").strip()
    if not name:
        return "file"
    if "\x00" in name or ".." in PurePosixPath(name).parts:
        raise InvalidOperationException(f"Filename contains invalid path sequence: {name}")
    return PurePosixPath(name).name or "file"
