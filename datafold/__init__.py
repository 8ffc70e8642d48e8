"""datafold - normalize uploaded CSV, JSON, Excel, XML and text files into tabular datasets."""
from __future__ import annotations

from importlib import metadata

from datafold.core import FileType, UnsupportedFormatError, registry
from datafold.ingestion import (
    DatasetProcessor,
    InMemoryStorage,
    LocalStorage,
    SourceNotFoundError,
    UploadRequest,
)
from datafold.normalization import ProcessedDataset
from datafold.settings import ProcessingLimits, Settings, UploadLimits

__all__ = [
    "__version__",
    "DatasetProcessor",
    "FileType",
    "InMemoryStorage",
    "LocalStorage",
    "ProcessedDataset",
    "ProcessingLimits",
    "Settings",
    "SourceNotFoundError",
    "UnsupportedFormatError",
    "UploadLimits",
    "UploadRequest",
    "create_default_processor",
    "pipeline_version",
    "registry",
]


def pipeline_version() -> str:
    """Installed package version, recorded alongside processing history."""

    try:
        return metadata.version("datafold")
    except metadata.PackageNotFoundError:  # pragma: no cover - source checkout
        return "0.0.0"


def __getattr__(name: str):  # pragma: no cover - passthrough to package metadata
    if name == "__version__":
        return pipeline_version()
    raise AttributeError(name)


def create_default_processor(settings: Settings | None = None) -> DatasetProcessor:
    """Construct a processor backed by local storage for command-line runs."""

    settings = settings or Settings.load()
    settings.ensure_directories()
    upload_limits, processing_limits = settings.load_limits()
    return DatasetProcessor(
        LocalStorage(settings.data_dir),
        upload_limits,
        processing_limits,
    )
