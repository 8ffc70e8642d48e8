from __future__ import annotations

import asyncio
import io
from pathlib import PurePosixPath
from typing import Callable, Iterable, Sequence

import pytest
from openpyxl import Workbook

from datafold.core import NullStepSink
from datafold.ingestion import DatasetProcessor, InMemoryStorage
from datafold.normalization import ProcessedDataset
from datafold.settings import ProcessingLimits, UploadLimits


def make_xlsx(rows: Iterable[Sequence[object]], *, extra_sheet: bool = False) -> bytes:
    """Build an in-memory workbook whose first sheet holds *rows*."""

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Data"
    for row in rows:
        sheet.append(list(row))
    if extra_sheet:
        workbook.create_sheet("Other").append(["ignored", "sheet"])
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def make_workbook() -> Callable[..., bytes]:
    return make_xlsx


@pytest.fixture
def upload_limits() -> UploadLimits:
    return UploadLimits()


@pytest.fixture
def processing_limits() -> ProcessingLimits:
    return ProcessingLimits(
        max_rows_per_dataset=5,
        max_columns_per_dataset=4,
        max_preview_rows=3,
    )


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def processor(
    storage: InMemoryStorage,
    upload_limits: UploadLimits,
    processing_limits: ProcessingLimits,
) -> DatasetProcessor:
    return DatasetProcessor(storage, upload_limits, processing_limits, steps=NullStepSink())


@pytest.fixture
def process_bytes(
    processor: DatasetProcessor, storage: InMemoryStorage
) -> Callable[[str, bytes], ProcessedDataset]:
    """Store *data* under *file_name* and run it through the processor."""

    def _process(file_name: str, data: bytes) -> ProcessedDataset:
        path = storage.put(file_name, data)
        return asyncio.run(processor.process(path, PurePosixPath(file_name).suffix))

    return _process
