"""
Database connection management.

Provides the SQLite connection backing the payout ledger.
"""

import sqlite3
from pathlib import Path


def get_connection(db_path: str = "payout_bot.db") -> sqlite3.Connection:
    """Create and return a SQLite database connection.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLite connection in autocommit mode; callers open their own
        transactions with BEGIN
    """
    path = Path(db_path)
    conn = sqlite3.connect(str(path), isolation_level=None)
    return conn
