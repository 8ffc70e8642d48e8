"""Upload validation, byte storage and the dataset processing pipeline."""
from __future__ import annotations

from .history import HistoryEntry, ProcessingHistory
from .pipeline import DatasetProcessor
from .request import UploadRequest
from .storage import ByteStorage, InMemoryStorage, LocalStorage, SourceNotFoundError
from .validation import validate_upload

__all__ = [
    "ByteStorage",
    "DatasetProcessor",
    "HistoryEntry",
    "InMemoryStorage",
    "LocalStorage",
    "ProcessingHistory",
    "SourceNotFoundError",
    "UploadRequest",
    "validate_upload",
]
