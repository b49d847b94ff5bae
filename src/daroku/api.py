"""Public API for daroku export/import.

High-level functions that return complete, structured results. UI code
should use these instead of importing from daroku.kernel or _internal.
"""

import logging
from typing import Any, Optional, Union

from pydantic import BaseModel

from daroku.codes import FailureCode
from daroku.contracts import MaterializationError, Materializer, SoftwareExportable
from daroku.kernel.exporter import export_to_json
from daroku.kernel.importer import DocumentImportError, parse_document


logger = logging.getLogger(__name__)


class ImportResult(BaseModel):
    """Outcome of importing one export file into a store."""
    ok: bool
    code: Optional[FailureCode] = None  # Set when ok is False
    message: Optional[str] = None
    software: Optional[Any] = None  # Entity returned by the materializer
    record_count: int = 0


def export_software(
    software: SoftwareExportable,
    log: Optional[logging.Logger] = None,
) -> Optional[bytes]:
    """
    Export one software entry as canonical JSON bytes.

    Returns None if the data could not be encoded.
    """
    return export_to_json(software, log=log)


def import_software(
    data: Union[bytes, bytearray, str],
    materializer: Materializer[Any],
    log: Optional[logging.Logger] = None,
) -> ImportResult:
    """
    Parse export bytes and hand the document to a materializer.

    Always creates new entities (copy semantics). Parse, validation and
    commit failures are reported through ImportResult, never raised.
    """
    log = log or logger
    try:
        document = parse_document(data)
    except DocumentImportError as e:
        log.error("Failed to decode JSON (%s): %s", e.code.value, e)
        return ImportResult(ok=False, code=e.code, message=str(e))

    log.info(
        "Successfully decoded JSON with %d records for software: %s",
        len(document.records),
        document.software.name,
    )

    try:
        software = materializer.materialize(document)
    except MaterializationError as e:
        log.error("Failed to import software %s: %s", document.software.name, e)
        return ImportResult(ok=False, code=e.code, message=str(e))

    return ImportResult(
        ok=True,
        software=software,
        record_count=len(document.records),
    )
