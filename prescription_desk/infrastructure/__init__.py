"""
Infrastructure package for the prescription desk.

Centralizes database connectivity (connection factory, pooling) and the PostgreSQL
record store. Keep this layer focused on I/O and resource management.
"""

from prescription_desk.infrastructure.abstract import AbstractRecordStore, RecordStore
from prescription_desk.infrastructure.db_factory import (
    build_dsn,
    get_sync_connection,
    get_sync_pool,
)
from prescription_desk.infrastructure.record_store import PostgresRecordStore, ensure_schema

__all__ = [
    "AbstractRecordStore",
    "PostgresRecordStore",
    "RecordStore",
    "build_dsn",
    "ensure_schema",
    "get_sync_connection",
    "get_sync_pool",
]
