from __future__ import annotations

import pytest

from datafold.ingestion import UploadRequest, validate_upload
from datafold.settings import UploadLimits


@pytest.mark.parametrize(
    "file_name, size, expected",
    [
        ("data.csv", 1024, True),
        ("REPORT.XLSX", 2048, True),
        ("notes.txt", 1, True),
        ("../etc/passwd.csv", 10, False),
        ("dir/data.csv", 10, False),
        ("dir\\data.csv", 10, False),
        ("", 10, False),
        ("   ", 10, False),
        ("tool.exe", 10, False),
        ("script.sh", 10, False),
        ("document.pdf", 10, False),
        ("no_extension", 10, False),
        ("empty.csv", 0, False),
        ("huge.csv", 10 * 1024 * 1024 + 1, False),
        ("limit.csv", 10 * 1024 * 1024, True),
    ],
)
def test_validate_upload(file_name: str, size: int, expected: bool) -> None:
    request = UploadRequest(file_name=file_name, file_size=size)

    assert validate_upload(request, UploadLimits()) is expected


def test_blocked_list_wins_over_allowed_list() -> None:
    limits = UploadLimits(allowed_extensions=(".csv", ".exe"))

    assert validate_upload(UploadRequest(file_name="run.exe", file_size=5), limits) is False
    assert validate_upload(UploadRequest(file_name="run.csv", file_size=5), limits) is True


def test_upload_request_from_bytes() -> None:
    request = UploadRequest.from_bytes("Data.JSON", b"{}")

    assert request.file_size == 2
    assert request.extension == ".json"
    assert request.stream.read() == b"{}"
