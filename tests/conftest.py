"""Pytest configuration and shared fixtures.

No sys.path hacks - tests import from the installed daroku package.
"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from daroku.adapters.memory_store import CustomField, MemoryStore, Record, TypingSoftware


JAN_1 = datetime(2024, 1, 1, tzinfo=timezone.utc)
JAN_2 = datetime(2024, 1, 2, tzinfo=timezone.utc)


def pytest_addoption(parser):
    """Add gated perf test option."""
    parser.addoption(
        "--run-perf",
        action="store_true",
        default=False,
        help="Run performance sentinel tests (gated)."
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "perf: large-volume export/import checks")


def pytest_collection_modifyitems(config, items):
    """Skip perf-marked tests unless --run-perf is set."""
    if config.getoption("--run-perf"):
        return
    skip_perf = pytest.mark.skip(reason="perf tests gated; pass --run-perf")
    for item in items:
        if "perf" in item.keywords:
            item.add_marker(skip_perf)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def sample_software():
    """The basic scenario: two records, one carrying a custom field."""
    software = TypingSoftware(
        id=uuid4(),
        name="テストソフト",
        unit="点",
        url="https://example.com",
        created_at=JAN_1,
    )
    first = Record(
        id=uuid4(),
        date=JAN_1,
        score=1000.0,
        correct_keys=100,
        mistypes=10,
        avg_keys_per_sec=5.5,
        note=None,
    )
    first.add_custom_field(
        CustomField(id=uuid4(), name="カスタムフィールド", type="string", value="カスタム値")
    )
    second = Record(
        id=uuid4(),
        date=JAN_2,
        score=2000.0,
        correct_keys=200,
        mistypes=5,
        avg_keys_per_sec=6.25,
        note="テストメモ",
    )
    # Inserted newest first
    software.add_record(second)
    software.add_record(first)
    return software
