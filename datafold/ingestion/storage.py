"""Byte storage backends holding uploaded files."""
from __future__ import annotations

import asyncio
import io
import logging
import threading
import uuid
from pathlib import Path
from typing import BinaryIO, Dict, Protocol

from .request import UploadRequest

logger = logging.getLogger(__name__)

MEMORY_PREFIX = "memory://"


class SourceNotFoundError(FileNotFoundError):
    """Raised when a stored file cannot be found."""


class ByteStorage(Protocol):
    """Storage backend consumed by the processing pipeline."""

    async def exists(self, path: str) -> bool:
        """Return True when *path* is stored."""

    async def open(self, path: str) -> BinaryIO:
        """Open *path* for binary reading."""

    async def save(self, request: UploadRequest) -> str:
        """Persist the upload and return its storage path."""

    async def delete(self, path: str) -> None:
        """Remove *path* if it is stored."""


def _copy_stream(read_handle: BinaryIO, target: BinaryIO) -> int:
    bytes_written = 0
    while True:
        chunk = read_handle.read(1024 * 64)
        if not chunk:
            break
        target.write(chunk)
        bytes_written += len(chunk)
    return bytes_written


class LocalStorage:
    """Store uploads as files below *root*."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def _save(self, request: UploadRequest) -> str:
        self.root.mkdir(parents=True, exist_ok=True)
        target = self.root / f"{uuid.uuid4().hex}_{request.file_name}"
        with target.open("wb") as handle:
            written = _copy_stream(request.stream, handle)
        logger.info("Saved %s (%d bytes) to %s", request.file_name, written, target)
        return str(target)

    def _open(self, path: str) -> BinaryIO:
        file_path = Path(path)
        if not file_path.is_file():
            raise SourceNotFoundError(f"File not found: {path}")
        return file_path.open("rb")

    async def exists(self, path: str) -> bool:
        if not path:
            return False
        return await asyncio.to_thread(Path(path).is_file)

    async def open(self, path: str) -> BinaryIO:
        return await asyncio.to_thread(self._open, path)

    async def save(self, request: UploadRequest) -> str:
        return await asyncio.to_thread(self._save, request)

    async def delete(self, path: str) -> None:
        file_path = Path(path)
        if file_path.is_file():
            await asyncio.to_thread(file_path.unlink)
            logger.info("Deleted %s", file_path)


class InMemoryStorage:
    """Keep uploads in process memory, addressed by ``memory://`` paths."""

    def __init__(self) -> None:
        self._files: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def put(self, file_name: str, data: bytes) -> str:
        """Store *data* directly and return its path."""

        path = f"{MEMORY_PREFIX}{uuid.uuid4().hex}/{file_name}"
        with self._lock:
            self._files[path] = bytes(data)
        return path

    async def exists(self, path: str) -> bool:
        with self._lock:
            return path in self._files

    async def open(self, path: str) -> BinaryIO:
        with self._lock:
            data = self._files.get(path)
        if data is None:
            raise SourceNotFoundError(f"File not found: {path}")
        return io.BytesIO(data)

    async def save(self, request: UploadRequest) -> str:
        buffer = io.BytesIO()
        _copy_stream(request.stream, buffer)
        return self.put(request.file_name, buffer.getvalue())

    async def delete(self, path: str) -> None:
        with self._lock:
            self._files.pop(path, None)

    def __len__(self) -> int:
        return len(self._files)
