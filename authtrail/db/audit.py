"""Audit record operations.

IMPORT CONVENTION:
- Core accesses these through core.audit property
- Implements the AuditStore protocol from authtrail.interfaces

The audit trail is append-only: there is no update or delete.
"""

import logging
import sqlite3
from dataclasses import replace

from ..events.audit import AuditRecord
from ..exceptions import StoreError
from ..utils import isodatetime

logger = logging.getLogger(__name__)


class AuditOperations:
    """sqlite-backed audit store."""

    def __init__(self, conn: sqlite3.Connection, autocommit: bool = True):
        self._conn = conn
        self._autocommit = autocommit

    def append(self, record: AuditRecord) -> AuditRecord:
        """
        Persist record.

        Returns:
            The record with its storage-assigned id

        Raises:
            StoreError: If the insert fails
        """
        try:
            cursor = self._conn.execute(
                """INSERT INTO audit_events (name, timestamp, description, correlation_id)
                   VALUES (?, ?, ?, ?)""",
                (
                    record.name,
                    isodatetime.to_timestamp(record.timestamp),
                    record.description,
                    record.correlation_id,
                )
            )
            if self._autocommit:
                self._conn.commit()
        except sqlite3.Error as e:
            logger.exception("Failed to append audit record %s", record.name)
            raise StoreError("Failed to append audit record", {"cause": str(e)}) from e

        return replace(record, id=cursor.lastrowid)

    def list_all(self) -> list[AuditRecord]:
        """All audit records in insertion order."""
        rows = self._conn.execute(
            "SELECT * FROM audit_events ORDER BY id"
        ).fetchall()
        return [_row_to_record(row) for row in rows]

    def list_by_correlation_id(self, correlation_id: str) -> list[AuditRecord]:
        """Records produced while serving one request."""
        rows = self._conn.execute(
            "SELECT * FROM audit_events WHERE correlation_id = ? ORDER BY id",
            (correlation_id,)
        ).fetchall()
        return [_row_to_record(row) for row in rows]


def _row_to_record(row: sqlite3.Row) -> AuditRecord:
    return AuditRecord(
        id=row["id"],
        name=row["name"],
        timestamp=isodatetime.to_datetime(row["timestamp"]),
        description=row["description"],
        correlation_id=row["correlation_id"],
    )
