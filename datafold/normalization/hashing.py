"""Content fingerprint over normalized rows."""
from __future__ import annotations

import hashlib
import json
from typing import Sequence

from datafold.core.formats import Row

from .dataset import json_default


def canonical_bytes(records: Sequence[Row]) -> bytes:
    """Render *records* in row order with keys sorted and no insignificant whitespace."""

    text = json.dumps(
        list(records),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=json_default,
    )
    return text.encode("utf-8")


def compute_data_hash(records: Sequence[Row]) -> str:
    """Return the SHA-256 hex digest of the canonical row content."""

    return hashlib.sha256(canonical_bytes(records)).hexdigest()
