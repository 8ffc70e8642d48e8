"""Upload request model."""
from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import BinaryIO


@dataclass(slots=True)
class UploadRequest:
    """A user upload awaiting validation and storage."""

    file_name: str
    file_size: int
    stream: BinaryIO = field(default_factory=io.BytesIO)
    content_type: str | None = None

    @classmethod
    def from_bytes(cls, file_name: str, data: bytes, content_type: str | None = None) -> "UploadRequest":
        return cls(
            file_name=file_name,
            file_size=len(data),
            stream=io.BytesIO(data),
            content_type=content_type,
        )

    @property
    def extension(self) -> str:
        return PurePath(self.file_name or "").suffix.lower()
