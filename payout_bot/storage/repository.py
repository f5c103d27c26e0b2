"""
Repository pattern for data access.

Holds the single-record ledger of the last announced payout.
"""

import sqlite3
from typing import Optional

import structlog

from ..core.errors import PersistenceError
from .db import get_connection
from .models import PayoutLedgerRecord

logger = structlog.get_logger(__name__)


class PayoutLedger:
    """Single-record store of the last announced payout timestamp.

    The connection is opened on first use and kept for the lifetime of the
    ledger object, so a warm serverless process reuses it across
    invocations. Construct one ledger per process and pass it around.
    """

    def __init__(self, db_path: str = "payout_bot.db"):
        """Initialize the ledger with a database path.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Return the cached connection, opening it on first use."""
        if self._conn is None:
            try:
                self._conn = get_connection(self.db_path)
            except sqlite3.Error as e:
                raise PersistenceError(
                    f"Could not open payout ledger: {e}",
                    {"db_path": self.db_path}
                ) from e
            logger.debug("ledger_connected", db_path=self.db_path)
        return self._conn

    def initialize_schema(self) -> None:
        """Create the payouts table if it doesn't exist."""
        try:
            self.connection.execute("""
                CREATE TABLE IF NOT EXISTS payouts (
                    timestamp INTEGER NOT NULL
                )
            """)
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not create payouts table: {e}") from e

    def get_record(self) -> Optional[PayoutLedgerRecord]:
        """Read the ledger record, or None if the ledger was never seeded."""
        try:
            cursor = self.connection.execute("SELECT timestamp FROM payouts LIMIT 1")
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not read payout ledger: {e}") from e

        if row is None:
            return None
        return PayoutLedgerRecord(timestamp=int(row[0]))

    def get_last_timestamp(self) -> int:
        """Return the timestamp of the last announced payout.

        Raises:
            PersistenceError: If the ledger is unreadable or was never seeded
        """
        record = self.get_record()
        if record is None:
            raise PersistenceError(
                "Payout ledger is empty; seed it with `payout-bot init`",
                {"db_path": self.db_path}
            )
        return record.timestamp

    def set_last_timestamp(self, timestamp: int) -> None:
        """Replace the ledger record with a new timestamp.

        The delete and insert run in one transaction so the table never
        holds zero or two records.
        """
        conn = self.connection
        try:
            conn.execute("BEGIN")
            conn.execute("DELETE FROM payouts")
            conn.execute("INSERT INTO payouts (timestamp) VALUES (?)", (int(timestamp),))
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise PersistenceError(f"Could not write payout ledger: {e}") from e
        logger.info("ledger_updated", timestamp=int(timestamp))

    def verify_writable(self) -> int:
        """Check the ledger is seeded and accepts writes.

        Runs a no-op update under a write lock and rolls it back, so a
        read-only file or directory is reported before anything is
        announced.

        Returns:
            The current ledger timestamp

        Raises:
            PersistenceError: If the ledger is unseeded, unreadable or read-only
        """
        timestamp = self.get_last_timestamp()
        conn = self.connection
        try:
            conn.execute("BEGIN IMMEDIATE")
            conn.execute("UPDATE payouts SET timestamp = timestamp")
        except sqlite3.Error as e:
            raise PersistenceError(
                f"Payout ledger is not writable: {e}; "
                "PAYOUT_BOT_DB_PATH must point at persistent, writable storage",
                {"db_path": self.db_path}
            ) from e
        finally:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
        logger.debug("ledger_writable", db_path=self.db_path, timestamp=timestamp)
        return timestamp

    def seed(self, timestamp: int = 0) -> None:
        """Create the schema and write the initial record."""
        self.initialize_schema()
        self.set_last_timestamp(timestamp)

    def close(self) -> None:
        """Close the cached connection if one is open."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
