"""Centralized canonical JSON serialization.

This module provides the single function used to turn export documents
into bytes. Every export goes through it so that two machines produce
byte-identical files for the same data.
"""

import json
from typing import Any


JSON_INDENT = 2


def canonical_dumps(obj: Any) -> str:
    """
    Canonical JSON serialization for export files.

    Rules:
    - Sorted keys
    - Two-space indentation (diff-friendly, readable)
    - Non-ASCII text written as-is (UTF-8 on encode)
    - NaN and Infinity rejected
    - Deterministic list ordering (lists must already be sorted before calling)

    Args:
        obj: Python object to serialize

    Returns:
        Canonical JSON string

    Raises:
        ValueError: If obj contains a non-finite float
        TypeError: If obj contains a non-JSON type
    """
    return json.dumps(
        obj,
        sort_keys=True,
        indent=JSON_INDENT,
        separators=(",", ": "),
        ensure_ascii=False,
        allow_nan=False,
    )


def canonical_dump_bytes(obj: Any) -> bytes:
    """canonical_dumps() encoded as UTF-8."""
    return canonical_dumps(obj).encode("utf-8")
