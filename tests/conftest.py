"""
Pytest configuration for the prescription desk.

Provides fixtures for:
- Record factories and an in-memory record store for unit tests
- Database connection management
- Test data seeding
- Settings override for integration tests
"""

from __future__ import annotations

import itertools
import os
import tempfile
from datetime import datetime, timedelta, tzinfo
from pathlib import Path
from typing import Callable, Generator, List, Optional
from uuid import uuid4
from zoneinfo import ZoneInfo

import psycopg
import pytest

from prescription_desk.config import Settings
from prescription_desk.domain.models import Gender, NewRecord, Record, VisitType
from prescription_desk.errors import StoreError
from prescription_desk.infrastructure.abstract import ORDERABLE_COLUMNS, AbstractRecordStore
from prescription_desk.infrastructure.record_store import ensure_schema

IST = ZoneInfo("Asia/Kolkata")
BASE_TIME = datetime(2026, 3, 10, 10, 30, tzinfo=IST)


class FakeRecordStore(AbstractRecordStore):
    """
    In-memory store with the same contract as PostgresRecordStore.

    Set `fail_with` to a message to make every call raise StoreError.
    """

    def __init__(self, records: Optional[List[Record]] = None) -> None:
        self.records: List[Record] = list(records or [])
        self.fail_with: Optional[str] = None
        self.list_calls = 0
        self._clock = itertools.count(1)

    def _check(self) -> None:
        if self.fail_with is not None:
            raise StoreError(self.fail_with)

    def insert(self, record: NewRecord) -> Record:
        self._check()
        number = record.registration_number or (self.max_registration_number() or 0) + 1
        if any(r.registration_number == number for r in self.records):
            raise StoreError(f"duplicate registration number {number}")
        created = BASE_TIME + timedelta(minutes=next(self._clock))
        stored = Record(
            id=uuid4(),
            registration_number=number,
            created_at=created,
            updated_at=created,
            **record.model_dump(exclude={"registration_number"}),
        )
        self.records.append(stored)
        return stored

    def list(self, order_by: str = "created_at", descending: bool = True) -> List[Record]:
        self._check()
        if order_by not in ORDERABLE_COLUMNS:
            raise ValueError(order_by)
        self.list_calls += 1
        return sorted(self.records, key=lambda r: getattr(r, order_by), reverse=descending)

    def max_registration_number(self) -> Optional[int]:
        self._check()
        return max((r.registration_number for r in self.records), default=None)


@pytest.fixture(scope="session")
def ist() -> tzinfo:
    return IST


@pytest.fixture
def make_record() -> Callable[..., Record]:
    """
    Factory for stored records; registration numbers count up from 1 unless given.
    """
    counter = itertools.count(1)

    def _make(**overrides) -> Record:
        number = overrides.pop("registration_number", None) or next(counter)
        created = overrides.pop("created_at", BASE_TIME)
        values = {
            "id": uuid4(),
            "registration_number": number,
            "created_at": created,
            "updated_at": created,
            "name": "Ravi Kumar",
            "age": 34,
            "gender": Gender.MALE,
            "department": "General Medicine",
            "type": VisitType.GENERAL,
        }
        values.update(overrides)
        return Record(**values)

    return _make


@pytest.fixture
def fake_store() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "prescription_desk"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped database connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="session")
def db_schema_initialized(db_connection: psycopg.Connection) -> bool:
    """
    Ensure the prescriptions table exists.
    """
    ensure_schema(db_connection, "prescriptions")
    return True


@pytest.fixture(scope="function")
def clean_records_table(db_connection: psycopg.Connection, db_schema_initialized: bool):
    """
    Empty the prescriptions table (and reset its identity) around each test function.
    """
    with db_connection.cursor() as cur:
        cur.execute("TRUNCATE TABLE public.prescriptions RESTART IDENTITY;")
    db_connection.commit()
    yield
    with db_connection.cursor() as cur:
        cur.execute("TRUNCATE TABLE public.prescriptions RESTART IDENTITY;")
    db_connection.commit()


@pytest.fixture(scope="function")
def seeded_db_small(
    db_connection: psycopg.Connection,
    clean_records_table,
    test_dsn: str,
) -> int:
    """
    Seed a small dataset (100 prescriptions) for quick integration tests.

    Returns the number of rows seeded.
    """
    rows_to_seed = 100

    with tempfile.TemporaryDirectory() as tmpdir:
        csv_path = Path(tmpdir) / "test_data.csv"

        from scripts.generate_data import _copy_into_db, _generate_rows_csv

        _generate_rows_csv(csv_path, rows=rows_to_seed, batch_size=50, seed=42)
        _copy_into_db(test_dsn, csv_path, table="prescriptions")

    with db_connection.cursor() as cur:
        cur.execute("SELECT COUNT(*) FROM public.prescriptions;")
        count = cur.fetchone()[0]

    return count
