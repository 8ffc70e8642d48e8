"""Environment-driven configuration for datafold."""
from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Tuple

import yaml


class ConfigurationError(ValueError):
    """Raised when limits or settings are invalid."""


_DEFAULT_ALLOWED = (".csv", ".json", ".xlsx", ".xls", ".xml", ".txt")
_DEFAULT_BLOCKED = (".exe", ".bat", ".cmd", ".ps1", ".sh", ".dll", ".so", ".dylib")


def _check_range(name: str, value: int, minimum: int, maximum: int) -> None:
    if not minimum <= value <= maximum:
        raise ConfigurationError(f"{name} must be between {minimum:,} and {maximum:,}, got {value:,}")


def _normalize_extensions(values: Any) -> Tuple[str, ...]:
    if isinstance(values, str):
        values = [values]
    result = []
    for value in values or ():
        text = str(value).strip().lower()
        if not text:
            continue
        if not text.startswith("."):
            text = f".{text}"
        if text not in result:
            result.append(text)
    return tuple(result)


@dataclass(slots=True, frozen=True)
class UploadLimits:
    """Limits applied by the validation gate before a file is stored."""

    max_file_size: int = 10 * 1024 * 1024
    allowed_extensions: Tuple[str, ...] = _DEFAULT_ALLOWED
    blocked_extensions: Tuple[str, ...] = _DEFAULT_BLOCKED
    max_preview_rows: int = 100
    max_concurrent_uploads: int = 5

    def validate(self) -> "UploadLimits":
        _check_range("max_file_size", self.max_file_size, 1024, 100 * 1024 * 1024)
        _check_range("max_preview_rows", self.max_preview_rows, 1, 1_000_000)
        _check_range("max_concurrent_uploads", self.max_concurrent_uploads, 1, 100)
        if not self.allowed_extensions:
            raise ConfigurationError("At least one file extension must be allowed")
        return self


@dataclass(slots=True, frozen=True)
class ProcessingLimits:
    """Limits applied while parsing and normalizing a stored file."""

    max_rows_per_dataset: int = 10_000
    max_columns_per_dataset: int = 100
    max_preview_rows: int = 100
    max_processing_time_seconds: int = 30
    enable_schema_inference: bool = True
    enable_data_validation: bool = True
    inline_storage_max_bytes: int = 10 * 1024 * 1024

    def validate(self) -> "ProcessingLimits":
        _check_range("max_rows_per_dataset", self.max_rows_per_dataset, 1, 1_000_000)
        _check_range("max_columns_per_dataset", self.max_columns_per_dataset, 1, 1000)
        _check_range("max_preview_rows", self.max_preview_rows, 1, 100)
        _check_range("max_processing_time_seconds", self.max_processing_time_seconds, 1, 100)
        if self.inline_storage_max_bytes < 0:
            raise ConfigurationError("inline_storage_max_bytes must not be negative")
        return self


def _build(cls, payload: Mapping[str, Any] | None, section: str):
    if payload is None:
        return cls()
    if not isinstance(payload, Mapping):
        raise ConfigurationError(f"'{section}' must be a mapping")
    known = {field.name for field in fields(cls)}
    unknown = set(payload) - known
    if unknown:
        raise ConfigurationError(f"Unknown keys {sorted(unknown)} in '{section}' section")
    values = dict(payload)
    for key in ("allowed_extensions", "blocked_extensions"):
        if key in values:
            values[key] = _normalize_extensions(values[key])
    try:
        return replace(cls(), **values)
    except TypeError as exc:  # pragma: no cover - guarded by the key check above
        raise ConfigurationError(str(exc)) from exc


def load_limits(path: Path | None) -> tuple[UploadLimits, ProcessingLimits]:
    """Load upload and processing limits from the YAML file at *path*.

    A missing file yields the defaults. Both sections are optional.
    """

    if path is None or not path.exists():
        return UploadLimits(), ProcessingLimits()
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse limits file {path}: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise ConfigurationError(f"Limits file {path} must contain a mapping")
    upload = _build(UploadLimits, payload.get("upload"), "upload").validate()
    processing = _build(ProcessingLimits, payload.get("processing"), "processing").validate()
    return upload, processing


@dataclass(slots=True)
class Settings:
    """Runtime settings loaded from environment variables."""

    data_dir: Path
    sqlite_path: Path
    limits_config: Path
    log_level: str

    @classmethod
    def load(cls) -> "Settings":
        """Load settings from environment variables with sensible defaults."""

        return cls(
            data_dir=Path(os.getenv("DATAFOLD_DATA_DIR", "data")),
            sqlite_path=Path(os.getenv("DATAFOLD_DB_PATH", "datafold.sqlite")),
            limits_config=Path(os.getenv("DATAFOLD_LIMITS_CONFIG", "config/limits.yaml")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    def load_limits(self) -> tuple[UploadLimits, ProcessingLimits]:
        return load_limits(self.limits_config)

    def ensure_directories(self) -> None:
        """Create directories required for the runtime to operate."""

        for path in {self.data_dir, self.sqlite_path.parent}:
            if not path.exists():
                path.mkdir(parents=True, exist_ok=True)
