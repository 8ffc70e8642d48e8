"""Plain text parser for ingestion."""
from __future__ import annotations

from typing import List

from datafold.core import FileType, register_parser

from .base import ParsedDataset, ParseOptions, Row, decode_text

LINE_NUMBER_COLUMN = "LineNumber"
CONTENT_COLUMN = "Content"


@register_parser(FileType.TXT, ".txt", description="One row per line of text.")
def parse_text(data: bytes, options: ParseOptions) -> ParsedDataset:
    text = decode_text(data, options.encoding)
    # Universal newlines only; form feeds and unicode separators stay in the content.
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    while lines and not lines[-1].strip():
        lines.pop()
    records: List[Row] = []
    for number, line in enumerate(lines, start=1):
        if options.reached(len(records)):
            break
        options.tick(number)
        records.append({LINE_NUMBER_COLUMN: number, CONTENT_COLUMN: line})
    return ParsedDataset(
        records=records,
        columns=[LINE_NUMBER_COLUMN, CONTENT_COLUMN],
        metadata={"encoding": options.encoding},
    )
