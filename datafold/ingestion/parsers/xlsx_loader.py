"""XLSX parser for ingestion."""
from __future__ import annotations

import io
import zipfile
from typing import Any, List, Sequence

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from datafold.core import FileType, register_parser

from .base import ParsedDataset, ParseError, ParseOptions, Row

DEFAULT_COLUMN_PREFIX = "Column"


def _headers(cells: Sequence[Any]) -> List[str]:
    values = list(cells)
    while values and (values[-1] is None or str(values[-1]).strip() == ""):
        values.pop()
    headers: List[str] = []
    for index, value in enumerate(values, start=1):
        text = str(value).strip() if value is not None else ""
        headers.append(text or f"{DEFAULT_COLUMN_PREFIX}{index}")
    return headers


def _is_empty(values: Sequence[Any]) -> bool:
    return all(value is None or (isinstance(value, str) and not value.strip()) for value in values)


@register_parser(FileType.EXCEL, ".xlsx", ".xls", description="First worksheet of an Excel workbook.")
def parse_xlsx(data: bytes, options: ParseOptions) -> ParsedDataset:
    try:
        workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as exc:
        raise ParseError(f"Unable to read Excel workbook: {exc}") from exc
    try:
        if not workbook.worksheets:
            raise ParseError("Excel workbook does not contain any worksheet")
        sheet = workbook.worksheets[0]
        rows = sheet.iter_rows(values_only=True)
        header_cells = next(rows, None)
        if header_cells is None:
            return ParsedDataset(records=[], columns=[], metadata={"worksheet": sheet.title})
        headers = _headers(header_cells)
        width = len(headers)
        records: List[Row] = []
        for index, values in enumerate(rows):
            if options.reached(len(records)):
                break
            options.tick(index)
            cells = list(values[:width]) + [None] * max(0, width - len(values))
            if _is_empty(cells):
                continue
            records.append(dict(zip(headers, cells)))
        metadata = {
            "worksheet": sheet.title,
            "worksheets": len(workbook.sheetnames),
        }
    finally:
        workbook.close()
    return ParsedDataset(records=records, columns=headers, metadata=metadata)
