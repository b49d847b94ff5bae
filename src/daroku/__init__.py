"""daroku: canonical JSON export/import for typing-practice records."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("daroku")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from daroku.api import ImportResult, export_software, import_software
from daroku.codes import FailureCode
from daroku.contracts import MaterializationError
from daroku.kernel.document import CanonicalDocument, CustomField, Record, SoftwareInfo

__all__ = [
    "__version__",
    "export_software",
    "import_software",
    "ImportResult",
    "FailureCode",
    "MaterializationError",
    "CanonicalDocument",
    "SoftwareInfo",
    "Record",
    "CustomField",
]
