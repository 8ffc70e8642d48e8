"""Format primitives shared by the parser registry and the pipeline."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Protocol, Tuple

if TYPE_CHECKING:  # pragma: no cover
    from datafold.ingestion.parsers.base import ParsedDataset, ParseOptions

Row = Dict[str, Any]


class FileType(str, Enum):
    """Dataset formats understood by the pipeline."""

    CSV = "CSV"
    JSON = "JSON"
    EXCEL = "Excel"
    XML = "XML"
    TXT = "TXT"


class ParserCallable(Protocol):
    """Callable protocol for a format parser."""

    def __call__(self, data: bytes, options: "ParseOptions") -> "ParsedDataset":
        """Convert raw bytes into ordered rows."""


@dataclass(slots=True, frozen=True)
class ParserDefinition:
    """Metadata about a registered parser."""

    file_type: FileType
    parser: ParserCallable
    extensions: Tuple[str, ...]
    description: str
    module: str
