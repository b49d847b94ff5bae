"""Parse canonical JSON bytes back into a CanonicalDocument."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from daroku.codes import FailureCode
from daroku.kernel.document import CanonicalDocument


logger = logging.getLogger(__name__)


class DocumentImportError(ValueError):
    """Raised when import input is not a valid canonical document."""

    def __init__(self, code: FailureCode, message: str):
        super().__init__(message)
        self.code = code


_MISSING_TYPES = {"missing"}
_MALFORMED_TYPES = {"json_invalid", "json_type"}
_TIMESTAMP_TYPES = {"timestamp_format"}


def _classify(error: Dict[str, Any]) -> FailureCode:
    error_type = error.get("type")
    if error_type in _MALFORMED_TYPES:
        return FailureCode.MALFORMED_INPUT
    if error_type in _MISSING_TYPES:
        return FailureCode.MISSING_REQUIRED_FIELD
    if error_type in _TIMESTAMP_TYPES:
        return FailureCode.INVALID_TIMESTAMP_FORMAT
    return FailureCode.INVALID_FIELD_TYPE


def _describe(error: Dict[str, Any]) -> str:
    loc = ".".join(str(part) for part in error.get("loc", ()))
    msg = error.get("msg", "invalid value")
    return f"{loc}: {msg}" if loc else msg


def parse_document(data: Union[bytes, bytearray, str]) -> CanonicalDocument:
    """
    Parse and validate import bytes.

    Validation is all-or-nothing: either the whole document is valid or
    DocumentImportError is raised. Record ordering in the input is not
    checked.

    Raises:
        DocumentImportError: With a FailureCode naming the first rule that failed
    """
    if data is None or len(data) == 0:
        raise DocumentImportError(FailureCode.MALFORMED_INPUT, "empty input")

    try:
        return CanonicalDocument.from_json_bytes(data)
    except ValidationError as e:
        errors = e.errors(include_url=False)
        if not errors:
            raise DocumentImportError(FailureCode.MALFORMED_INPUT, str(e)) from e
        first = errors[0]
        raise DocumentImportError(_classify(first), _describe(first)) from e


def import_from_json(
    data: Union[bytes, bytearray, str],
    log: Optional[logging.Logger] = None,
) -> Optional[CanonicalDocument]:
    """
    Decode import bytes into a CanonicalDocument.

    Returns None on any parse or validation failure; the reason is only
    available in the log. Use parse_document() for a tagged failure.
    """
    log = log or logger
    try:
        document = parse_document(data)
    except DocumentImportError as e:
        log.error("Failed to decode JSON (%s): %s", e.code.value, e)
        return None

    log.info(
        "Successfully decoded JSON with %d records for software: %s",
        len(document.records),
        document.software.name,
    )
    return document
