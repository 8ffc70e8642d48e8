"""Row and column capping plus the inline storage decision."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Sequence

from datafold.core.formats import Row
from datafold.settings import ProcessingLimits

if TYPE_CHECKING:  # pragma: no cover
    from datafold.ingestion.parsers.base import ParsedDataset

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CappedDataset:
    """Rows and columns after the configured ceilings were applied."""

    records: List[Row]
    columns: List[str]
    use_separate_table: bool
    rows_truncated: bool
    columns_truncated: bool

    @property
    def row_count(self) -> int:
        return len(self.records)

    @property
    def column_count(self) -> int:
        return len(self.columns)


def collect_columns(declared: Sequence[str], records: Sequence[Row]) -> List[str]:
    """Return declared columns followed by any row keys, first seen first."""

    seen = dict.fromkeys(declared)
    for record in records:
        for key in record:
            if key not in seen:
                seen[key] = None
    return list(seen)


def should_use_separate_table(rows_truncated: bool, file_size: int, limits: ProcessingLimits) -> bool:
    return rows_truncated or file_size > limits.inline_storage_max_bytes


def apply_limits(dataset: ParsedDataset, file_size: int, limits: ProcessingLimits) -> CappedDataset:
    """Truncate *dataset* to the row and column ceilings of *limits*."""

    max_rows = limits.max_rows_per_dataset
    rows_truncated = len(dataset.records) > max_rows
    records = dataset.records[:max_rows] if rows_truncated else list(dataset.records)
    if rows_truncated:
        logger.info("Row count exceeds %d; rows beyond the cap were dropped", max_rows)

    columns = collect_columns(dataset.columns, records)
    columns_truncated = len(columns) > limits.max_columns_per_dataset
    if columns_truncated:
        logger.warning(
            "Column count %d exceeds limit of %d; keeping the first %d columns",
            len(columns),
            limits.max_columns_per_dataset,
            limits.max_columns_per_dataset,
        )
        columns = columns[: limits.max_columns_per_dataset]
        kept = set(columns)
        records = [{key: value for key, value in row.items() if key in kept} for row in records]

    return CappedDataset(
        records=records,
        columns=columns,
        use_separate_table=should_use_separate_table(rows_truncated, file_size, limits),
        rows_truncated=rows_truncated,
        columns_truncated=columns_truncated,
    )
