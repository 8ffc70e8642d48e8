"""Schema, preview and column type derivation."""
from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from datafold.core.formats import Row

from .dataset import dumps
from .inference import infer_type


def build_schema(columns: Sequence[str]) -> Tuple[str, ...]:
    """Return *columns* de-duplicated in first-seen order."""

    return tuple(dict.fromkeys(columns))


def build_preview(columns: Sequence[str], records: Sequence[Row], max_preview_rows: int) -> str:
    """Serialize the leading rows of *records* as a preview document."""

    rows: List[Row] = list(records[:max_preview_rows])
    return dumps(
        {
            "columns": list(columns),
            "rows": rows,
            "totalRows": len(records),
            "maxPreviewRows": max_preview_rows,
            "previewRowCount": len(rows),
        }
    )


def infer_column_types(columns: Sequence[str], records: Sequence[Row]) -> Dict[str, str]:
    return {column: infer_type(record.get(column) for record in records) for column in columns}
