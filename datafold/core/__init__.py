"""Core utilities for the datafold runtime."""
from __future__ import annotations

from .context import (
    Deadline,
    LoggingStepSink,
    NullStepSink,
    ProcessingCancelled,
    ProcessingContext,
    StepSink,
)
from .formats import FileType, ParserDefinition
from .registry import ParserRegistry, UnsupportedFormatError, register_parser, registry

__all__ = [
    "Deadline",
    "FileType",
    "LoggingStepSink",
    "NullStepSink",
    "ParserDefinition",
    "ParserRegistry",
    "ProcessingCancelled",
    "ProcessingContext",
    "StepSink",
    "UnsupportedFormatError",
    "register_parser",
    "registry",
]
