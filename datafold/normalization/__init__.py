"""Capping, schema, preview and hashing for parsed datasets."""
from __future__ import annotations

from .capping import CappedDataset, apply_limits, collect_columns, should_use_separate_table
from .dataset import ProcessedDataset
from .hashing import canonical_bytes, compute_data_hash
from .schema import build_preview, build_schema, infer_column_types

__all__ = [
    "CappedDataset",
    "ProcessedDataset",
    "apply_limits",
    "build_preview",
    "build_schema",
    "canonical_bytes",
    "collect_columns",
    "compute_data_hash",
    "infer_column_types",
    "should_use_separate_table",
]
