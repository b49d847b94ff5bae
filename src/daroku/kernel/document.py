"""Canonical document models for the typing-record interchange format.

A CanonicalDocument is the single in-memory shape shared by export and
import: one software entry plus its records, each record owning its
custom fields. Instances are frozen and built fresh for every call.

Wire rules:
- Member names are camelCase (createdAt, correctKeys, avgKeysPerSec, customFields)
- Identifiers are canonical lowercase UUID strings
- Timestamps use exactly one format: UTC, second precision, trailing "Z"
- correctKeys/mistypes are signed 32-bit integers
- Real numbers must be finite (NaN, Infinity and overflowing literals are rejected)
- Unknown members are ignored on input
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Annotated, Any, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, PlainValidator
from pydantic_core import PydanticCustomError


TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
_TIMESTAMP_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}Z$")

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


def _to_utc(value: datetime) -> datetime:
    # Naive datetimes are taken to already be UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).replace(microsecond=0)


def format_timestamp(value: datetime) -> str:
    """Format a datetime in the single accepted wire format."""
    value = _to_utc(value)
    # strftime("%Y") does not zero-pad years below 1000 on every platform
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}Z"
    )


def parse_timestamp(text: str) -> datetime:
    """
    Parse a wire timestamp into an aware UTC datetime.

    Only "YYYY-MM-DDTHH:MM:SSZ" is accepted. Offsets, fractional seconds,
    date-only strings and alternative separators are rejected.

    Raises:
        ValueError: If text does not match the format or is not a real date
    """
    if not _TIMESTAMP_PATTERN.match(text):
        raise ValueError(f"timestamp must match {TIMESTAMP_FORMAT!r}, got {text!r}")
    return datetime.strptime(text, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def _validate_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return _to_utc(value)
    if not isinstance(value, str):
        raise PydanticCustomError(
            "timestamp_format",
            "Timestamp must be a string in {format} form",
            {"format": TIMESTAMP_FORMAT},
        )
    try:
        return parse_timestamp(value)
    except ValueError:
        raise PydanticCustomError(
            "timestamp_format",
            "Timestamp '{value}' does not match {format}",
            {"value": value, "format": TIMESTAMP_FORMAT},
        )


Timestamp = Annotated[
    datetime,
    PlainValidator(_validate_timestamp),
    PlainSerializer(format_timestamp, return_type=str),
]
Identifier = Annotated[UUID, PlainSerializer(str, return_type=str)]
Int32 = Annotated[int, Field(ge=INT32_MIN, le=INT32_MAX)]


class _DocumentModel(BaseModel):
    model_config = ConfigDict(
        strict=True,
        allow_inf_nan=False,
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )


class CustomField(_DocumentModel):
    """A user-defined key/value annotation on a record."""
    id: Identifier
    name: str
    type: str
    value: str


class Record(_DocumentModel):
    """One practice-session observation."""
    id: Identifier
    date: Timestamp
    score: float
    correct_keys: Int32 = Field(alias="correctKeys")
    mistypes: Int32
    avg_keys_per_sec: float = Field(alias="avgKeysPerSec")
    note: Optional[str] = None
    custom_fields: List[CustomField] = Field(alias="customFields")


class SoftwareInfo(_DocumentModel):
    """The typing program a document's records were taken in."""
    id: Identifier
    name: str
    unit: Optional[str] = None
    url: Optional[str] = None
    created_at: Timestamp = Field(alias="createdAt")


class CanonicalDocument(_DocumentModel):
    """Root of the interchange format."""
    software: SoftwareInfo
    records: List[Record]

    @classmethod
    def from_json_bytes(cls, data: Union[bytes, bytearray, str]) -> "CanonicalDocument":
        """Validate JSON text directly (raises pydantic.ValidationError)."""
        return cls.model_validate_json(data)

    def to_wire(self) -> dict:
        """JSON-ready mapping using wire member names.

        Values stay Python-native; the encoder is the single place that turns them into text.
        """
        return self.model_dump(by_alias=True)
