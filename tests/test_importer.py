"""Tests for the importer: round trip, validation rules, failure codes."""

import json
import logging
from datetime import datetime, timezone
from uuid import UUID

import pytest

from daroku.codes import FailureCode
from daroku.kernel.exporter import build_document, export_to_json
from daroku.kernel.importer import DocumentImportError, import_from_json, parse_document


SOFTWARE_ID = "6f1c2a4e-8b0d-4d3e-9a51-2f7c8e9d0b11"
RECORD_ID = "0b5d7e21-3c4f-4a8b-8e6d-1a2b3c4d5e6f"
FIELD_ID = "9e8d7c6b-5a49-4838-a726-15f4e3d2c1b0"


def valid_payload():
    """A minimal well-formed export document as a plain dict."""
    return {
        "software": {
            "id": SOFTWARE_ID,
            "name": "テストソフト",
            "unit": "点",
            "url": "https://example.com",
            "createdAt": "2024-01-01T00:00:00Z",
        },
        "records": [
            {
                "id": RECORD_ID,
                "date": "2024-01-01T00:00:00Z",
                "score": 1000.0,
                "correctKeys": 100,
                "mistypes": 10,
                "avgKeysPerSec": 5.5,
                "note": "テストメモ",
                "customFields": [
                    {"id": FIELD_ID, "name": "カスタムフィールド", "type": "string", "value": "カスタム値"},
                ],
            },
        ],
    }


def _encode(payload) -> bytes:
    return json.dumps(payload, ensure_ascii=False).encode("utf-8")


def _failure_code(data) -> FailureCode:
    with pytest.raises(DocumentImportError) as exc_info:
        parse_document(data)
    return exc_info.value.code


def test_parse_valid_document():
    document = parse_document(_encode(valid_payload()))

    assert document.software.id == UUID(SOFTWARE_ID)
    assert document.software.name == "テストソフト"
    assert document.software.created_at == datetime(2024, 1, 1, tzinfo=timezone.utc)
    record = document.records[0]
    assert record.correct_keys == 100
    assert record.mistypes == 10
    assert record.avg_keys_per_sec == 5.5
    assert record.custom_fields[0].value == "カスタム値"


def test_round_trip_basic_scenario(sample_software):
    original = build_document(sample_software)
    imported = import_from_json(export_to_json(sample_software))

    assert imported == original
    assert imported.records[0].note is None
    assert imported.records[0].custom_fields[0].name == "カスタムフィールド"
    assert [r.date for r in imported.records] == [
        datetime(2024, 1, 1, tzinfo=timezone.utc),
        datetime(2024, 1, 2, tzinfo=timezone.utc),
    ]


def test_parse_accepts_str_input():
    payload = json.dumps(valid_payload(), ensure_ascii=False)
    assert parse_document(payload).software.name == "テストソフト"


def test_unsorted_input_is_accepted_as_is():
    payload = valid_payload()
    later = dict(payload["records"][0], id="11111111-1111-4111-8111-111111111111", date="2024-01-05T00:00:00Z")
    payload["records"].insert(0, later)

    document = parse_document(_encode(payload))
    assert [r.date.day for r in document.records] == [5, 1]


def test_optional_members_may_be_null_or_absent():
    payload = valid_payload()
    payload["software"]["unit"] = None
    del payload["software"]["url"]
    del payload["records"][0]["note"]

    document = parse_document(_encode(payload))
    assert document.software.unit is None
    assert document.software.url is None
    assert document.records[0].note is None


def test_unknown_members_are_ignored():
    payload = valid_payload()
    payload["version"] = 2
    payload["records"][0]["extra"] = {"anything": True}

    assert parse_document(_encode(payload)).records[0].score == 1000.0


def test_empty_records_list_is_valid():
    payload = valid_payload()
    payload["records"] = []
    assert parse_document(_encode(payload)).records == []


@pytest.mark.parametrize("data", [b"", "", b"{ invalid json }", b"   ", b"\xff\xfe\x00"])
def test_malformed_input_rejected(data):
    assert _failure_code(data) == FailureCode.MALFORMED_INPUT
    assert import_from_json(data) is None


def test_missing_software_name_rejected():
    payload = valid_payload()
    del payload["software"]["name"]

    assert _failure_code(_encode(payload)) == FailureCode.MISSING_REQUIRED_FIELD
    assert import_from_json(_encode(payload)) is None


@pytest.mark.parametrize(
    "path",
    [
        ("software",),
        ("records",),
        ("software", "id"),
        ("software", "createdAt"),
        ("records", 0, "id"),
        ("records", 0, "date"),
        ("records", 0, "score"),
        ("records", 0, "correctKeys"),
        ("records", 0, "mistypes"),
        ("records", 0, "avgKeysPerSec"),
        ("records", 0, "customFields"),
        ("records", 0, "customFields", 0, "id"),
        ("records", 0, "customFields", 0, "name"),
        ("records", 0, "customFields", 0, "type"),
        ("records", 0, "customFields", 0, "value"),
    ],
)
def test_missing_required_member_rejected(path):
    payload = valid_payload()
    target = payload
    for part in path[:-1]:
        target = target[part]
    del target[path[-1]]

    assert _failure_code(_encode(payload)) == FailureCode.MISSING_REQUIRED_FIELD


@pytest.mark.parametrize(
    "value",
    ["2024/01/01", "2024-01-01", "2024-01-01T00:00:00+09:00", "2024-01-01T00:00:00.000Z", "\uff12\uff10\uff12\uff14-01-01T00:00:00Z", 1704067200],
)
def test_invalid_timestamp_rejected(value):
    payload = valid_payload()
    payload["records"][0]["date"] = value

    assert _failure_code(_encode(payload)) == FailureCode.INVALID_TIMESTAMP_FORMAT
    assert import_from_json(_encode(payload)) is None


@pytest.mark.parametrize("member", ["score", "avgKeysPerSec"])
@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity", "1e400", "-1e400"])
def test_non_finite_numbers_rejected(member, literal):
    payload = valid_payload()
    payload["records"][0][member] = 123456.789
    data = _encode(payload).replace(b"123456.789", literal.encode("ascii"))

    assert _failure_code(data) in (FailureCode.INVALID_FIELD_TYPE, FailureCode.MALFORMED_INPUT)
    assert import_from_json(data) is None


def test_invalid_created_at_rejected():
    payload = valid_payload()
    payload["software"]["createdAt"] = "2024/01/01"
    assert _failure_code(_encode(payload)) == FailureCode.INVALID_TIMESTAMP_FORMAT


@pytest.mark.parametrize(
    "path, value",
    [
        (("records", 0, "score"), "1000"),
        (("records", 0, "correctKeys"), 1.5),
        (("records", 0, "correctKeys"), 2**31),
        (("records", 0, "mistypes"), "10"),
        (("records", 0, "avgKeysPerSec"), None),
        (("records", 0, "customFields"), {}),
        (("records", 0, "customFields", 0, "value"), 3),
        (("software", "name"), None),
        (("software", "id"), "not-a-uuid"),
    ],
)
def test_wrong_shape_rejected(path, value):
    payload = valid_payload()
    target = payload
    for part in path[:-1]:
        target = target[part]
    target[path[-1]] = value

    assert _failure_code(_encode(payload)) == FailureCode.INVALID_FIELD_TYPE


@pytest.mark.parametrize("data", [b"[]", b"42", b'"text"', b"null"])
def test_non_object_document_rejected(data):
    assert _failure_code(data) == FailureCode.INVALID_FIELD_TYPE


def test_first_failure_decides_the_code():
    payload = valid_payload()
    del payload["software"]["name"]
    payload["records"][0]["date"] = "2024/01/01"

    assert _failure_code(_encode(payload)) == FailureCode.MISSING_REQUIRED_FIELD


def test_import_logs_success_and_failure(caplog):
    with caplog.at_level(logging.INFO, logger="daroku"):
        import_from_json(_encode(valid_payload()))
        import_from_json(b"")
    assert "Successfully decoded JSON with 1 records for software: テストソフト" in caplog.text
    assert "MALFORMED_INPUT" in caplog.text
