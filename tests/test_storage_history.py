from __future__ import annotations

import asyncio
import sqlite3
from datetime import datetime, timezone

import pytest

from datafold.ingestion import (
    HistoryEntry,
    InMemoryStorage,
    LocalStorage,
    ProcessingHistory,
    SourceNotFoundError,
    UploadRequest,
)
from datafold.normalization import ProcessedDataset
from datafold.core import FileType


def test_local_storage_round_trip(tmp_path) -> None:
    storage = LocalStorage(tmp_path / "uploads")
    request = UploadRequest.from_bytes("people.csv", b"Name\nJohn\n")

    async def scenario():
        path = await storage.save(request)
        assert await storage.exists(path)
        stream = await storage.open(path)
        with stream:
            content = stream.read()
        await storage.delete(path)
        return path, content, await storage.exists(path)

    path, content, exists_after_delete = asyncio.run(scenario())

    assert path.endswith("_people.csv")
    assert content == b"Name\nJohn\n"
    assert exists_after_delete is False


def test_local_storage_missing_file(tmp_path) -> None:
    storage = LocalStorage(tmp_path)

    assert asyncio.run(storage.exists(str(tmp_path / "absent.csv"))) is False
    assert asyncio.run(storage.exists("")) is False
    with pytest.raises(SourceNotFoundError):
        asyncio.run(storage.open(str(tmp_path / "absent.csv")))


def test_in_memory_storage() -> None:
    storage = InMemoryStorage()
    path = asyncio.run(storage.save(UploadRequest.from_bytes("a.txt", b"hello")))

    assert path.startswith("memory://")
    assert path.endswith("/a.txt")
    assert len(storage) == 1
    assert asyncio.run(storage.open(path)).read() == b"hello"

    asyncio.run(storage.delete(path))
    assert len(storage) == 0
    with pytest.raises(SourceNotFoundError):
        asyncio.run(storage.open(path))


def test_processing_history_records_entries(tmp_path) -> None:
    db_path = tmp_path / "history.sqlite"
    history = ProcessingHistory(db_path)
    processed = ProcessedDataset(
        file_name="a.csv",
        file_path="/data/a.csv",
        file_type=FileType.CSV,
        file_size=12,
        is_processed=True,
        row_count=2,
        column_count=1,
        schema=("a",),
        data_hash="f" * 64,
    )
    failed = ProcessedDataset.failed(
        file_name="b.xlsx",
        file_path="/data/b.xlsx",
        file_type=FileType.EXCEL,
        error="Error processing file /data/b.xlsx: broken",
    )

    history.record(HistoryEntry.from_dataset(processed, {"command": "process"}))
    history.record(HistoryEntry.from_dataset(failed))

    entries = history.fetch()
    assert [entry.file_name for entry in entries] == ["b.xlsx", "a.csv"]
    latest, earliest = entries
    assert latest.is_processed is False
    assert latest.file_type == "Excel"
    assert latest.processing_errors.endswith("broken")
    assert earliest.is_processed is True
    assert earliest.data_hash == "f" * 64
    assert earliest.metadata == {"command": "process"}
    assert earliest.recorded_at <= datetime.now(timezone.utc)
    assert len(history.fetch(limit=1)) == 1

    with sqlite3.connect(db_path) as connection:
        count = connection.execute("SELECT COUNT(*) FROM processing_log").fetchone()[0]
    assert count == 2
