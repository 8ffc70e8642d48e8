"""Dataset processing pipeline: validate, parse, cap, describe and fingerprint."""
from __future__ import annotations

import asyncio
import logging
from pathlib import PurePosixPath
from typing import BinaryIO, Optional

from datafold.core import (
    Deadline,
    FileType,
    LoggingStepSink,
    ParserRegistry,
    ProcessingCancelled,
    ProcessingContext,
    StepSink,
    UnsupportedFormatError,
    registry as default_registry,
)
from datafold.core.context import SafeStepSink
from datafold.core.formats import ParserCallable
from datafold.normalization import (
    ProcessedDataset,
    apply_limits,
    build_preview,
    build_schema,
    compute_data_hash,
    infer_column_types,
)
from datafold.normalization.dataset import dumps
from datafold.settings import ProcessingLimits, UploadLimits

from .parsers import ParsedDataset, ParseError, ParseOptions
from .request import UploadRequest
from .storage import ByteStorage, SourceNotFoundError
from .validation import validate_upload

logger = logging.getLogger(__name__)


def _file_name(path: str) -> str:
    return PurePosixPath(path.replace("\\", "/")).name


def _read_all(stream: BinaryIO) -> bytes:
    with stream:
        return stream.read()


class DatasetProcessor:
    """Turn stored uploads into :class:`ProcessedDataset` results.

    Only :class:`UnsupportedFormatError` and :class:`SourceNotFoundError`
    escape :meth:`process`; every other failure is reported through
    ``processing_errors`` on the returned dataset.
    """

    def __init__(
        self,
        storage: ByteStorage,
        upload_limits: UploadLimits | None = None,
        processing_limits: ProcessingLimits | None = None,
        *,
        steps: StepSink | None = None,
        parsers: ParserRegistry | None = None,
    ) -> None:
        self.storage = storage
        self.upload_limits = upload_limits or UploadLimits()
        self.processing_limits = processing_limits or ProcessingLimits()
        self._steps = SafeStepSink(steps or LoggingStepSink())
        self._parsers = parsers or default_registry

    @property
    def preview_limit(self) -> int:
        """Preview rows kept per dataset; the stricter of the upload and processing limits."""

        return min(self.upload_limits.max_preview_rows, self.processing_limits.max_preview_rows)

    def validate(self, request: UploadRequest) -> bool:
        """Return True when *request* passes the upload validation gate."""

        context = ProcessingContext("validate", metadata={"file_name": request.file_name})
        accepted = validate_upload(request, self.upload_limits)
        self._steps.log_step(context, "validation finished", accepted=accepted)
        self._steps.log_summary(context, accepted, None if accepted else "upload rejected")
        return accepted

    async def process(
        self,
        path: str,
        file_extension: str,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> ProcessedDataset:
        """Parse the stored file at *path* according to *file_extension*."""

        context = ProcessingContext(
            "process", metadata={"file_path": path, "file_type": file_extension}
        )
        self._steps.log_step(context, "processing started")
        try:
            if not await self.storage.exists(path):
                raise SourceNotFoundError(f"File not found: {path}")
            definition = self._parsers.resolve(file_extension)
        except (SourceNotFoundError, UnsupportedFormatError) as exc:
            self._steps.log_summary(context, False, str(exc))
            raise

        deadline = Deadline(self.processing_limits.max_processing_time_seconds, cancel_event)
        dataset = await self._run(path, definition.file_type, definition.parser, deadline, context)
        self._steps.log_summary(context, dataset.is_processed, dataset.processing_errors)
        return dataset

    async def _run(
        self,
        path: str,
        file_type: FileType,
        parser: ParserCallable,
        deadline: Deadline,
        context: ProcessingContext,
    ) -> ProcessedDataset:
        file_name = _file_name(path)
        file_size = 0
        try:
            stream = await self.storage.open(path)
            data = await asyncio.wait_for(
                asyncio.to_thread(_read_all, stream), timeout=deadline.remaining()
            )
            file_size = len(data)
            self._steps.log_step(context, "file read", size_bytes=file_size)
            deadline.check()

            limits = self.processing_limits
            options = ParseOptions(
                row_limit=limits.max_rows_per_dataset + 1,
                strict=limits.enable_data_validation,
                deadline=deadline,
            )
            parsed = parser(data, options)
            self._steps.log_step(context, "file parsed", rows=parsed.row_count)
            deadline.check()

            return self._assemble(path, file_name, file_type, file_size, parsed, context)
        except SourceNotFoundError:
            raise
        except asyncio.TimeoutError:
            error = (
                f"Processing {path} exceeded the maximum processing time of "
                f"{self.processing_limits.max_processing_time_seconds} seconds"
            )
        except (ParseError, ProcessingCancelled) as exc:
            error = f"Error processing file {path}: {exc}"
            logger.warning("%s", error)
        except Exception as exc:
            logger.exception("Unexpected failure while processing %s", path)
            error = f"Error processing file {path}: {exc}"
        self._steps.log_step(context, "processing failed", error=error)
        return ProcessedDataset.failed(
            file_name=file_name,
            file_path=path,
            file_type=file_type,
            error=error,
            file_size=file_size,
        )

    def _assemble(
        self,
        path: str,
        file_name: str,
        file_type: FileType,
        file_size: int,
        parsed: ParsedDataset,
        context: ProcessingContext,
    ) -> ProcessedDataset:
        limits = self.processing_limits
        capped = apply_limits(parsed, file_size, limits)
        schema = build_schema(capped.columns)
        self._steps.log_step(
            context,
            "limits applied",
            rows=capped.row_count,
            columns=capped.column_count,
            use_separate_table=capped.use_separate_table,
            rows_truncated=capped.rows_truncated,
            columns_truncated=capped.columns_truncated,
        )
        column_types: Optional[dict] = None
        if limits.enable_schema_inference:
            column_types = infer_column_types(schema, capped.records)
        dataset = ProcessedDataset(
            file_name=file_name,
            file_path=path,
            file_type=file_type,
            file_size=file_size,
            is_processed=True,
            row_count=capped.row_count,
            column_count=len(schema),
            schema=schema,
            column_types=column_types,
            preview_data=build_preview(schema, capped.records, self.preview_limit),
            processed_data=None if capped.use_separate_table else dumps(capped.records),
            use_separate_table=capped.use_separate_table,
            data_hash=compute_data_hash(capped.records),
        )
        self._steps.log_step(context, "dataset assembled", data_hash=dataset.data_hash)
        return dataset
