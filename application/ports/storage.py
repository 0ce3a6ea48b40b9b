"""Application-owned file storage port.

Use cases depend on this protocol only, so the local-disk implementation can
be swapped for an object store without touching callers.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, BinaryIO, Optional, Protocol, Union, runtime_checkable

import aiofiles


FileContent = Union[bytes, BinaryIO]


@dataclass(frozen=True)
class FileResource:
    """Readable handle on a stored file."""

    path: Path
    filename: str
    size: int
    content_type: Optional[str] = None

    async def read(self) -> bytes:
        async with aiofiles.open(self.path, "rb") as f:
            return await f.read()

    async def iter_chunks(self, chunk_size: int = 64 * 1024) -> AsyncIterator[bytes]:
        async with aiofiles.open(self.path, "rb") as f:
            while True:
                chunk = await f.read(chunk_size)
                if not chunk:
                    break
                yield chunk


@runtime_checkable
class FileStorageService(Protocol):
    async def store_file(
        self,
        content: FileContent,
        filename: Optional[str],
        expense_id: str,
    ) -> str:
        """Persist ``content`` under the expense and return the stored path."""
        ...

    async def load_file_as_resource(self, stored_path: str) -> FileResource: ...

    async def delete_file(self, stored_path: str) -> None: ...

    async def file_exists(self, stored_path: str) -> bool: ...

    def get_absolute_path(self, stored_path: str) -> Path: ...
