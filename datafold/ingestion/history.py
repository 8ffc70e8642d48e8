"""SQLite persistence for processing runs."""
from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from datafold.normalization import ProcessedDataset

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class HistoryEntry:
    file_name: str
    file_path: str
    file_type: str | None
    file_size: int
    is_processed: bool
    row_count: int
    column_count: int
    use_separate_table: bool
    data_hash: str | None
    processing_errors: str | None
    recorded_at: datetime
    metadata: Dict[str, Any]

    @classmethod
    def from_dataset(
        cls, dataset: ProcessedDataset, metadata: Dict[str, Any] | None = None
    ) -> "HistoryEntry":
        return cls(
            file_name=dataset.file_name,
            file_path=dataset.file_path,
            file_type=dataset.file_type.value if dataset.file_type else None,
            file_size=dataset.file_size,
            is_processed=dataset.is_processed,
            row_count=dataset.row_count,
            column_count=dataset.column_count,
            use_separate_table=dataset.use_separate_table,
            data_hash=dataset.data_hash,
            processing_errors=dataset.processing_errors,
            recorded_at=datetime.now(timezone.utc),
            metadata=dict(metadata or {}),
        )


class ProcessingHistory:
    """Utility wrapper around SQLite for processing logging."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        with sqlite3.connect(self.path) as connection:
            connection.execute(
                """
                CREATE TABLE IF NOT EXISTS processing_log (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    file_name TEXT NOT NULL,
                    file_path TEXT NOT NULL,
                    file_type TEXT,
                    file_size INTEGER NOT NULL,
                    is_processed INTEGER NOT NULL,
                    row_count INTEGER NOT NULL,
                    column_count INTEGER NOT NULL,
                    use_separate_table INTEGER NOT NULL,
                    data_hash TEXT,
                    processing_errors TEXT,
                    recorded_at TEXT NOT NULL,
                    metadata TEXT NOT NULL
                )
                """
            )

    def record(self, entry: HistoryEntry) -> None:
        metadata = json.dumps(entry.metadata or {}, ensure_ascii=False)
        with sqlite3.connect(self.path) as connection:
            connection.execute(
                """
                INSERT INTO processing_log (
                    file_name,
                    file_path,
                    file_type,
                    file_size,
                    is_processed,
                    row_count,
                    column_count,
                    use_separate_table,
                    data_hash,
                    processing_errors,
                    recorded_at,
                    metadata
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.file_name,
                    entry.file_path,
                    entry.file_type,
                    entry.file_size,
                    int(entry.is_processed),
                    entry.row_count,
                    entry.column_count,
                    int(entry.use_separate_table),
                    entry.data_hash,
                    entry.processing_errors,
                    entry.recorded_at.isoformat(),
                    metadata,
                ),
            )
        logger.debug("Recorded processing of %s (processed=%s)", entry.file_path, entry.is_processed)

    def fetch(self, *, limit: int | None = None) -> List[HistoryEntry]:
        """Return recorded entries, newest first."""

        query = "SELECT * FROM processing_log ORDER BY id DESC"
        params: tuple = ()
        if limit is not None:
            query += " LIMIT ?"
            params = (limit,)
        with sqlite3.connect(self.path) as connection:
            connection.row_factory = sqlite3.Row
            rows = connection.execute(query, params).fetchall()

        entries: List[HistoryEntry] = []
        for row in rows:
            try:
                metadata = json.loads(row["metadata"] or "{}")
            except json.JSONDecodeError:
                metadata = {}
            entries.append(
                HistoryEntry(
                    file_name=row["file_name"],
                    file_path=row["file_path"],
                    file_type=row["file_type"],
                    file_size=row["file_size"],
                    is_processed=bool(row["is_processed"]),
                    row_count=row["row_count"],
                    column_count=row["column_count"],
                    use_separate_table=bool(row["use_separate_table"]),
                    data_hash=row["data_hash"],
                    processing_errors=row["processing_errors"],
                    recorded_at=datetime.fromisoformat(row["recorded_at"]),
                    metadata=metadata,
                )
            )
        return entries
