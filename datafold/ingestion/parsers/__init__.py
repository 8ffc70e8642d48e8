"""Parser dispatch for ingestion."""
from __future__ import annotations

from datafold.core import FileType, ParserDefinition, UnsupportedFormatError, registry

from . import csv_loader, json_loader, text_loader, xlsx_loader, xml_loader  # noqa: F401  (registration)
from .base import ParsedDataset, ParseError, ParseOptions


def resolve_parser(extension: str) -> ParserDefinition:
    """Return the registered parser for *extension* or raise ``UnsupportedFormatError``."""

    return registry.resolve(extension)


def parse_bytes(data: bytes, extension: str, options: ParseOptions | None = None) -> ParsedDataset:
    """Parse *data* with the parser registered for *extension*."""

    definition = resolve_parser(extension)
    return definition.parser(data, options or ParseOptions())


__all__ = [
    "FileType",
    "ParseError",
    "ParseOptions",
    "ParsedDataset",
    "UnsupportedFormatError",
    "parse_bytes",
    "resolve_parser",
]
