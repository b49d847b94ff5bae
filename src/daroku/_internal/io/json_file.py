"""Read and write export files."""

from __future__ import annotations

import logging
import os
from datetime import date
from pathlib import Path
from typing import Optional, Union

from daroku.contracts import SoftwareExportable
from daroku.kernel.document import CanonicalDocument
from daroku.kernel.exporter import export_to_json
from daroku.kernel.importer import import_from_json


logger = logging.getLogger(__name__)

JSON_SUFFIX = ".json"
JSON_CONTENT_TYPE = "application/json"


def _normalize_path(path: Union[str, os.PathLike, Path]) -> Path:
    return Path(path) if not isinstance(path, Path) else path


def default_export_filename(software_name: Optional[str], today: Optional[date] = None) -> str:
    """Suggested save-dialog name: "{name}_export_{YYYY-MM-DD}.json"."""
    name = software_name if software_name is not None else "unknown"
    today = today or date.today()
    return f"{name}_export_{today.isoformat()}{JSON_SUFFIX}"


def write_export(
    software: SoftwareExportable,
    path: Union[str, os.PathLike, Path],
    log: Optional[logging.Logger] = None,
) -> bool:
    """Export software to path. Returns False if encoding or writing fails."""
    log = log or logger
    data = export_to_json(software, log=log)
    if data is None:
        return False

    target = _normalize_path(path)
    try:
        target.write_bytes(data)
    except OSError as e:
        log.error("Failed to write JSON file: %s", e)
        return False

    log.info("Successfully exported JSON to: %s", target)
    return True


def read_import(
    path: Union[str, os.PathLike, Path],
    log: Optional[logging.Logger] = None,
) -> Optional[CanonicalDocument]:
    """Read and parse an export file. Returns None if reading or parsing fails."""
    log = log or logger
    source = _normalize_path(path)
    try:
        data = source.read_bytes()
    except OSError as e:
        log.error("Failed to read JSON file: %s", e)
        return None
    return import_from_json(data, log=log)
