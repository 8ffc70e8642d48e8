"""Common parsing primitives for ingestion."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from datafold.core.context import Deadline
from datafold.core.formats import Row

_CHECK_INTERVAL = 256


class ParseError(ValueError):
    """Raised when file content is malformed for its declared format."""


@dataclass(slots=True, frozen=True)
class ParseOptions:
    """Knobs passed from the pipeline to every parser."""

    row_limit: int | None = None
    strict: bool = True
    encoding: str = "utf-8"
    deadline: Deadline = field(default_factory=Deadline.unlimited)

    def reached(self, count: int) -> bool:
        """Return True once *count* rows satisfy the row limit."""

        return self.row_limit is not None and count >= self.row_limit

    def tick(self, index: int) -> None:
        """Check the deadline every few hundred rows."""

        if index % _CHECK_INTERVAL == 0:
            self.deadline.check()


@dataclass(slots=True)
class ParsedDataset:
    """Container for parsed rows and associated metadata.

    ``columns`` holds the columns the format declares up front (CSV and Excel
    headers, the fixed text columns). Formats without a header leave it empty
    and the schema is derived from the rows.
    """

    records: List[Row]
    columns: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def row_count(self) -> int:
        return len(self.records)


def decode_text(data: bytes, encoding: str) -> str:
    """Decode *data*, dropping a UTF-8 byte order mark when present."""

    if encoding.lower().replace("_", "-") in {"utf-8", "utf8"}:
        encoding = "utf-8-sig"
    try:
        return data.decode(encoding)
    except UnicodeDecodeError as exc:
        raise ParseError(f"File is not valid {encoding} text: {exc}") from exc
