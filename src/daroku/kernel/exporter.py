"""Export a software entry and its records as a canonical JSON document."""

from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import ValidationError

from daroku.codes import FailureCode
from daroku.contracts import CustomFieldExportable, RecordExportable, SoftwareExportable
from daroku.kernel.document import CanonicalDocument, CustomField, Record, SoftwareInfo
from daroku._internal.canonical_json import canonical_dump_bytes


logger = logging.getLogger(__name__)


class ExportError(ValueError):
    """Raised when a software entry cannot be encoded."""

    def __init__(self, message: str, code: FailureCode = FailureCode.ENCODING_FAILURE):
        super().__init__(message)
        self.code = code


def _build_custom_field(view: CustomFieldExportable) -> CustomField:
    return CustomField(
        id=view.export_id,
        name=view.export_name,
        type=view.export_type,
        value=view.export_value,
    )


def _build_record(view: RecordExportable) -> Record:
    custom_fields = [_build_custom_field(f) for f in view.export_custom_fields]
    # Store relationships are unordered; order by name, then id for ties
    custom_fields.sort(key=lambda f: (f.name, str(f.id)))
    return Record(
        id=view.export_id,
        date=view.export_date,
        score=view.export_score,
        correct_keys=view.export_correct_keys,
        mistypes=view.export_mistypes,
        avg_keys_per_sec=view.export_avg_keys_per_sec,
        note=view.export_note,
        custom_fields=custom_fields,
    )


def build_document(software: SoftwareExportable) -> CanonicalDocument:
    """
    Project a software view into a CanonicalDocument.

    Records are sorted by date and custom fields by name, both ascending,
    with the id as tie-breaker so the result does not depend on the
    enumeration order of the source collections.

    Raises:
        ExportError: If a view yields a value the document cannot hold,
            including a non-finite score or speed
    """
    try:
        records: List[Record] = [_build_record(r) for r in software.export_records]
        records.sort(key=lambda r: (r.date, str(r.id)))
        info = SoftwareInfo(
            id=software.export_id,
            name=software.export_name,
            unit=software.export_unit,
            url=software.export_url,
            created_at=software.export_created_at,
        )
        return CanonicalDocument(software=info, records=records)
    except ValidationError as e:
        raise ExportError(f"Invalid export data: {e}") from e


def encode_document(document: CanonicalDocument) -> bytes:
    """
    Serialize a document to canonical JSON bytes.

    Raises:
        ExportError: If the document cannot be serialized as JSON
    """
    try:
        return canonical_dump_bytes(document.to_wire())
    except (TypeError, ValueError) as e:
        raise ExportError(f"Failed to encode JSON: {e}") from e


def export_to_json(
    software: SoftwareExportable,
    log: Optional[logging.Logger] = None,
) -> Optional[bytes]:
    """
    Export a software entry and its records as JSON bytes.

    Never raises for encoding problems: the failure is logged and None is
    returned so the caller can show a generic message.
    """
    log = log or logger
    try:
        document = build_document(software)
        data = encode_document(document)
    except ExportError as e:
        log.error("Failed to encode JSON: %s", e)
        return None

    log.info(
        "Successfully exported %d records for software: %s",
        len(document.records),
        document.software.name,
    )
    return data
