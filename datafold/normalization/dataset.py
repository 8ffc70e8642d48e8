"""Processed dataset result returned by the pipeline."""
from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from datafold.core.formats import FileType


def json_default(value: Any) -> Any:
    """Render values the json module cannot encode natively."""

    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return value.hex()
    return str(value)


def dumps(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, default=json_default)


@dataclass(slots=True, frozen=True)
class ProcessedDataset:
    """Normalized view of one uploaded file.

    Exactly one of ``is_processed`` and ``processing_errors`` is set. When
    ``use_separate_table`` is true the full rows are not carried inline and
    ``processed_data`` is ``None``; the preview is always available for a
    processed dataset.
    """

    file_name: str
    file_path: str
    file_type: Optional[FileType]
    file_size: int = 0
    is_processed: bool = False
    row_count: int = 0
    column_count: int = 0
    schema: Optional[Tuple[str, ...]] = None
    column_types: Optional[Dict[str, str]] = None
    preview_data: Optional[str] = None
    processed_data: Optional[str] = None
    use_separate_table: bool = False
    data_hash: Optional[str] = None
    processing_errors: Optional[str] = None

    @classmethod
    def failed(
        cls,
        *,
        file_name: str,
        file_path: str,
        file_type: Optional[FileType],
        error: str,
        file_size: int = 0,
    ) -> "ProcessedDataset":
        return cls(
            file_name=file_name,
            file_path=file_path,
            file_type=file_type,
            file_size=file_size,
            processing_errors=error or "Unknown processing error",
        )

    def preview_rows(self) -> List[Dict[str, Any]]:
        if self.preview_data is None:
            return []
        return json.loads(self.preview_data)["rows"]

    def rows(self) -> Optional[List[Dict[str, Any]]]:
        """Decode the inline rows, or ``None`` when they are stored out of line."""

        if self.processed_data is None:
            return None
        return json.loads(self.processed_data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fileName": self.file_name,
            "filePath": self.file_path,
            "fileType": self.file_type.value if self.file_type else None,
            "fileSize": self.file_size,
            "isProcessed": self.is_processed,
            "rowCount": self.row_count,
            "columnCount": self.column_count,
            "schema": list(self.schema) if self.schema is not None else None,
            "columnTypes": self.column_types,
            "previewData": self.preview_data,
            "processedData": self.processed_data,
            "useSeparateTable": self.use_separate_table,
            "dataHash": self.data_hash,
            "processingErrors": self.processing_errors,
        }
