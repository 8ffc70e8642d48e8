from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal

import pytest

from datafold.ingestion.parsers import ParsedDataset
from datafold.normalization import (
    apply_limits,
    build_preview,
    build_schema,
    canonical_bytes,
    collect_columns,
    compute_data_hash,
    infer_column_types,
    should_use_separate_table,
)
from datafold.normalization.dataset import ProcessedDataset
from datafold.normalization.inference import (
    infer_type,
    is_boolean,
    is_datetime,
    is_numeric,
)
from datafold.settings import ProcessingLimits


def test_apply_limits_truncates_rows_and_flags_separate_table() -> None:
    limits = ProcessingLimits(max_rows_per_dataset=2)
    parsed = ParsedDataset(records=[{"n": i} for i in range(3)], columns=["n"])

    capped = apply_limits(parsed, file_size=10, limits=limits)

    assert capped.records == [{"n": 0}, {"n": 1}]
    assert capped.rows_truncated is True
    assert capped.use_separate_table is True
    assert capped.columns_truncated is False


def test_apply_limits_projects_rows_onto_kept_columns() -> None:
    limits = ProcessingLimits(max_columns_per_dataset=2)
    parsed = ParsedDataset(records=[{"a": 1, "b": 2, "c": 3}, {"d": 4, "a": 5}])

    capped = apply_limits(parsed, file_size=10, limits=limits)

    assert capped.columns == ["a", "b"]
    assert capped.records == [{"a": 1, "b": 2}, {"a": 5}]
    assert capped.columns_truncated is True
    assert capped.use_separate_table is False


def test_collect_columns_preserves_declared_then_first_seen_order() -> None:
    records = [{"b": 1, "z": 2}, {"y": 3, "a": 4}]

    assert collect_columns(["a", "b"], records) == ["a", "b", "z", "y"]


def test_should_use_separate_table() -> None:
    limits = ProcessingLimits(inline_storage_max_bytes=100)

    assert should_use_separate_table(False, 100, limits) is False
    assert should_use_separate_table(False, 101, limits) is True
    assert should_use_separate_table(True, 1, limits) is True


def test_build_schema_removes_duplicates() -> None:
    assert build_schema(["a", "b", "a"]) == ("a", "b")
    assert build_schema([]) == ()


def test_build_preview_document_shape() -> None:
    preview = json.loads(build_preview(["a"], [{"a": 1}, {"a": 2}, {"a": 3}], 2))

    assert preview == {
        "columns": ["a"],
        "rows": [{"a": 1}, {"a": 2}],
        "totalRows": 3,
        "maxPreviewRows": 2,
        "previewRowCount": 2,
    }


def test_infer_column_types() -> None:
    records = [
        {"n": "1", "flag": "true", "when": "2024-01-05", "label": "x"},
        {"n": 2.5, "flag": "False", "when": "", "label": "1"},
    ]

    assert infer_column_types(["n", "flag", "when", "label", "missing"], records) == {
        "n": "numeric",
        "flag": "boolean",
        "when": "datetime",
        "label": "string",
        "missing": "unknown",
    }


@pytest.mark.parametrize(
    "value, expected",
    [
        ("3.5", True),
        (" 42 ", True),
        ("1e3", True),
        (7, True),
        (True, False),
        ("abc", False),
        ("nan", False),
        ("", False),
        ("1_000", False),
        ("inf", False),
        ("-Infinity", False),
        (float("inf"), False),
    ],
)
def test_is_numeric(value, expected) -> None:
    assert is_numeric(value) is expected


def test_is_boolean_and_is_datetime() -> None:
    assert is_boolean("TRUE") and is_boolean(False)
    assert not is_boolean("yes")
    assert is_datetime("2024-01-05T10:30:00") and is_datetime(date(2024, 1, 5))
    assert not is_datetime("yesterday")
    assert infer_type([None, ""]) == "unknown"


def test_hash_is_independent_of_key_order() -> None:
    first = [{"a": 1, "b": "x"}, {"c": None}]
    second = [{"b": "x", "a": 1}, {"c": None}]

    assert canonical_bytes(first) == b'[{"a":1,"b":"x"},{"c":null}]'
    assert compute_data_hash(first) == compute_data_hash(second)


def test_hash_depends_on_row_order_and_values() -> None:
    rows = [{"a": 1}, {"a": 2}]

    assert compute_data_hash(rows) != compute_data_hash(list(reversed(rows)))
    assert compute_data_hash([{"a": 1}]) != compute_data_hash([{"a": "1"}])


def test_hash_of_native_cell_values() -> None:
    rows = [{"when": datetime(2024, 1, 5, 10, 30), "amount": Decimal("1.50")}]

    assert canonical_bytes(rows) == b'[{"amount":"1.50","when":"2024-01-05T10:30:00"}]'


def test_failed_dataset_shape() -> None:
    dataset = ProcessedDataset.failed(
        file_name="a.csv", file_path="/tmp/a.csv", file_type=None, error=""
    )

    assert dataset.is_processed is False
    assert dataset.processing_errors == "Unknown processing error"
    assert dataset.rows() is None
    assert dataset.preview_rows() == []
    assert dataset.to_dict()["processingErrors"] == "Unknown processing error"
