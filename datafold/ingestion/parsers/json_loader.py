"""JSON parser for ingestion."""
from __future__ import annotations

import json
from typing import Any, List

from datafold.core import FileType, register_parser

from .base import ParsedDataset, ParseError, ParseOptions, Row, decode_text


def _records_from_array(items: List[Any], options: ParseOptions) -> List[Row]:
    records: List[Row] = []
    for index, item in enumerate(items):
        if options.reached(len(records)):
            break
        options.tick(index)
        if not isinstance(item, dict):
            if options.strict:
                raise ParseError(
                    f"Array item {index} is a {type(item).__name__}, expected an object"
                )
            continue
        records.append(item)
    return records


@register_parser(FileType.JSON, ".json", description="A JSON array of objects or a single object.")
def parse_json(data: bytes, options: ParseOptions) -> ParsedDataset:
    text = decode_text(data, options.encoding)
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON at line {exc.lineno} column {exc.colno}: {exc.msg}") from exc
    if isinstance(payload, list):
        records = _records_from_array(payload, options)
        structure = "array"
    elif isinstance(payload, dict):
        records = [payload]
        structure = "object"
    else:
        raise ParseError(
            f"Unsupported JSON structure: expected an array or object, got {type(payload).__name__}"
        )
    return ParsedDataset(records=records, metadata={"structure": structure})
