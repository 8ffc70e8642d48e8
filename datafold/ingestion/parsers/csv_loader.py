"""CSV parser for ingestion."""
from __future__ import annotations

import csv
import io
from typing import List

from datafold.core import FileType, register_parser

from .base import ParsedDataset, ParseError, ParseOptions, Row, decode_text


@register_parser(FileType.CSV, ".csv", description="Comma separated values with a header row.")
def parse_csv(data: bytes, options: ParseOptions) -> ParsedDataset:
    text = decode_text(data, options.encoding)
    reader = csv.reader(io.StringIO(text, newline=""), strict=options.strict)
    records: List[Row] = []
    try:
        headers = next(reader, [])
        for fields in reader:
            if options.reached(len(records)):
                break
            if not any(field.strip() for field in fields):
                continue
            options.tick(len(records))
            if len(fields) > len(headers):
                if options.strict:
                    raise ParseError(
                        f"Row {reader.line_num} has {len(fields)} fields but the header declares {len(headers)}"
                    )
                fields = fields[: len(headers)]
            fields += [""] * (len(headers) - len(fields))
            records.append(dict(zip(headers, fields)))
    except csv.Error as exc:
        raise ParseError(f"Malformed CSV near line {reader.line_num}: {exc}") from exc
    metadata = {
        "encoding": options.encoding,
        "header_count": len(headers),
    }
    return ParsedDataset(records=records, columns=list(headers), metadata=metadata)
