"""In-memory object-graph store for typing software records.

Entities mirror the desktop app's persisted model: a TypingSoftware owns
a set of Records, each Record owns a set of CustomFields. Relationships
are unordered sets, so anything that needs a stable order must sort.

Each entity implements its export capability view. Missing attributes
are coalesced:
- software/custom field name -> ""
- custom field type -> "string"
- custom field value -> ""
- record date / software createdAt -> stamped once with the current UTC
  time when the entity is created, so repeated exports of the same entity
  stay byte-identical
note, unit and url stay optional.

MemoryMaterializer implements the import write path with copy semantics.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional, Set
from uuid import UUID, uuid4

from daroku.contracts import MaterializationError
from daroku.kernel.document import CanonicalDocument


logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoreError(RuntimeError):
    """Raised when a store transaction cannot be committed."""


@dataclass(eq=False)
class CustomField:
    id: UUID = field(default_factory=uuid4)
    name: Optional[str] = None
    type: Optional[str] = None
    value: Optional[str] = None
    record: Optional["Record"] = field(default=None, repr=False)

    @property
    def export_id(self) -> UUID:
        return self.id

    @property
    def export_name(self) -> str:
        return self.name or ""

    @property
    def export_type(self) -> str:
        return self.type or "string"

    @property
    def export_value(self) -> str:
        return self.value or ""


@dataclass(eq=False)
class Record:
    id: UUID = field(default_factory=uuid4)
    date: Optional[datetime] = None
    score: float = 0.0
    correct_keys: int = 0
    mistypes: int = 0
    avg_keys_per_sec: float = 0.0
    note: Optional[str] = None
    custom_fields: Set[CustomField] = field(default_factory=set, repr=False)
    typing_software: Optional["TypingSoftware"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.date is None:
            self.date = _utcnow()

    def add_custom_field(self, custom_field: CustomField) -> None:
        custom_field.record = self
        self.custom_fields.add(custom_field)

    @property
    def export_id(self) -> UUID:
        return self.id

    @property
    def export_date(self) -> datetime:
        return self.date

    @property
    def export_score(self) -> float:
        return self.score

    @property
    def export_correct_keys(self) -> int:
        return self.correct_keys

    @property
    def export_mistypes(self) -> int:
        return self.mistypes

    @property
    def export_avg_keys_per_sec(self) -> float:
        return self.avg_keys_per_sec

    @property
    def export_note(self) -> Optional[str]:
        return self.note

    @property
    def export_custom_fields(self) -> List[CustomField]:
        return list(self.custom_fields)


@dataclass(eq=False)
class TypingSoftware:
    id: UUID = field(default_factory=uuid4)
    name: Optional[str] = None
    unit: Optional[str] = None
    url: Optional[str] = None
    created_at: Optional[datetime] = None
    records: Set[Record] = field(default_factory=set, repr=False)

    def __post_init__(self) -> None:
        if self.created_at is None:
            self.created_at = _utcnow()

    def add_record(self, record: Record) -> None:
        record.typing_software = self
        self.records.add(record)

    @property
    def export_id(self) -> UUID:
        return self.id

    @property
    def export_name(self) -> str:
        return self.name or ""

    @property
    def export_unit(self) -> Optional[str]:
        return self.unit

    @property
    def export_url(self) -> Optional[str]:
        return self.url

    @property
    def export_created_at(self) -> datetime:
        return self.created_at

    @property
    def export_records(self) -> List[Record]:
        return list(self.records)


class MemoryStore:
    """Committed software entries keyed by id, with all-or-nothing transactions."""

    def __init__(self) -> None:
        self._software: Dict[UUID, TypingSoftware] = {}
        self._pending: Optional[List[TypingSoftware]] = None
        self.fail_next_commit = False

    def __len__(self) -> int:
        return len(self._software)

    def __contains__(self, software_id: object) -> bool:
        return software_id in self._software

    def get(self, software_id: UUID) -> Optional[TypingSoftware]:
        return self._software.get(software_id)

    def all(self) -> List[TypingSoftware]:
        """Committed entries, oldest first."""
        return sorted(
            self._software.values(),
            key=lambda s: (s.created_at or datetime.min.replace(tzinfo=timezone.utc), str(s.id)),
        )

    def record_count(self) -> int:
        return sum(len(s.records) for s in self._software.values())

    def add(self, software: TypingSoftware) -> None:
        """Stage a software entry (with its records) in the open transaction."""
        if self._pending is None:
            raise StoreError("add() called outside of a transaction")
        self._pending.append(software)

    @contextmanager
    def transaction(self) -> Iterator["MemoryStore"]:
        """
        Stage inserts and commit them together on exit.

        If the block raises, or the commit itself fails, everything staged
        is discarded and the store is left as it was.
        """
        if self._pending is not None:
            raise StoreError("nested transactions are not supported")
        self._pending = []
        try:
            yield self
            self._commit(self._pending)
        finally:
            self._pending = None

    def _commit(self, staged: List[TypingSoftware]) -> None:
        if self.fail_next_commit:
            self.fail_next_commit = False
            raise StoreError("commit failed")
        staged_ids = [s.id for s in staged]
        if len(set(staged_ids)) != len(staged_ids) or any(i in self._software for i in staged_ids):
            raise StoreError("duplicate software id in commit")
        for software in staged:
            self._software[software.id] = software


class MemoryMaterializer:
    """Create fresh store entities from a parsed document (copy semantics).

    Document ids are never reused: every software, record and custom
    field gets a newly minted id, so importing the same file twice yields
    two independent copies.
    """

    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    def materialize(self, document: CanonicalDocument) -> TypingSoftware:
        info = document.software
        software = TypingSoftware(
            id=uuid4(),
            name=info.name,
            unit=info.unit,
            url=info.url,
            created_at=info.created_at,
        )
        for doc_record in document.records:
            record = Record(
                id=uuid4(),
                date=doc_record.date,
                score=doc_record.score,
                correct_keys=doc_record.correct_keys,
                mistypes=doc_record.mistypes,
                avg_keys_per_sec=doc_record.avg_keys_per_sec,
                note=doc_record.note,
            )
            for doc_field in doc_record.custom_fields:
                record.add_custom_field(
                    CustomField(
                        id=uuid4(),
                        name=doc_field.name,
                        type=doc_field.type,
                        value=doc_field.value,
                    )
                )
            software.add_record(record)

        try:
            with self._store.transaction() as tx:
                tx.add(software)
        except StoreError as e:
            logger.error("Failed to save imported data: %s", e)
            raise MaterializationError(f"Failed to save imported data: {e}") from e

        logger.info(
            "Successfully imported software: %s with %d records",
            info.name,
            len(document.records),
        )
        return software
