"""Failure code constants for daroku export/import.

These constants prevent stringly-typed failure reasons and let callers
branch on why an export or import was rejected.
"""

from enum import Enum


class FailureCode(str, Enum):
    """Export/import failure codes."""

    # Export
    ENCODING_FAILURE = "ENCODING_FAILURE"

    # Import (parse + validation)
    MALFORMED_INPUT = "MALFORMED_INPUT"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    INVALID_TIMESTAMP_FORMAT = "INVALID_TIMESTAMP_FORMAT"
    INVALID_FIELD_TYPE = "INVALID_FIELD_TYPE"

    # Store boundary
    MATERIALIZATION_FAILURE = "MATERIALIZATION_FAILURE"
