"""Capability views and the materializer contract.

The exporter reads store entities only through these read-only views,
and the importer hands its document to a Materializer. Neither side
depends on how the store represents its entities.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Iterable, Optional, Protocol, TypeVar, runtime_checkable
from uuid import UUID

from daroku.codes import FailureCode

if TYPE_CHECKING:
    from daroku.kernel.document import CanonicalDocument


@runtime_checkable
class CustomFieldExportable(Protocol):
    """Read-only projection of a custom field."""

    @property
    def export_id(self) -> UUID: ...

    @property
    def export_name(self) -> str: ...

    @property
    def export_type(self) -> str: ...

    @property
    def export_value(self) -> str: ...


@runtime_checkable
class RecordExportable(Protocol):
    """Read-only projection of a record and its custom fields."""

    @property
    def export_id(self) -> UUID: ...

    @property
    def export_date(self) -> datetime: ...

    @property
    def export_score(self) -> float: ...

    @property
    def export_correct_keys(self) -> int: ...

    @property
    def export_mistypes(self) -> int: ...

    @property
    def export_avg_keys_per_sec(self) -> float: ...

    @property
    def export_note(self) -> Optional[str]: ...

    @property
    def export_custom_fields(self) -> Iterable[CustomFieldExportable]: ...


@runtime_checkable
class SoftwareExportable(Protocol):
    """Read-only projection of a typing software entry and its records.

    export_name is never None; stores coalesce a missing name to "".
    """

    @property
    def export_id(self) -> UUID: ...

    @property
    def export_name(self) -> str: ...

    @property
    def export_unit(self) -> Optional[str]: ...

    @property
    def export_url(self) -> Optional[str]: ...

    @property
    def export_created_at(self) -> datetime: ...

    @property
    def export_records(self) -> Iterable[RecordExportable]: ...


T_co = TypeVar("T_co", covariant=True)


class MaterializationError(ValueError):
    """Raised when a parsed document could not be committed to the store.

    Nothing created for the failed import is left in the store.
    """

    code = FailureCode.MATERIALIZATION_FAILURE


class Materializer(Protocol[T_co]):
    """Write path from a parsed document into a store.

    Implementations always create new entities with freshly minted ids
    (the document's ids are never reused as keys), link them into the
    software -> records -> custom fields chain and commit them as one
    unit. On commit failure everything is rolled back and
    MaterializationError is raised.
    """

    def materialize(self, document: "CanonicalDocument") -> T_co: ...
