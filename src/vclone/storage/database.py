"""SQLite database shared by the clone store and local auth."""

import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from ..tts.errors import PersistenceError

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    salt TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS voice_clones (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    voice_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_voice_clones_user
ON voice_clones(user_id, created_at);

CREATE TABLE IF NOT EXISTS generated_speeches (
    id TEXT PRIMARY KEY,
    voice_clone_id TEXT NOT NULL REFERENCES voice_clones(id),
    text TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_generated_speeches_clone
ON generated_speeches(voice_clone_id, created_at);
"""


class Database:
    """SQLite database with per-operation connections.

    Each operation opens its own connection in WAL mode so the store can be
    used from worker threads (asyncio.to_thread) without sharing handles.
    """

    def __init__(self, db_path: Path):
        """Initialize database at the given path, creating the schema.

        Args:
            db_path: Location of the sqlite file

        Raises:
            PersistenceError: If the database cannot be created
        """
        self.db_path = db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with self.connection() as conn:
                conn.executescript(SCHEMA)
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to initialize database: {e}", e) from e

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection with WAL mode for concurrency."""
        conn = sqlite3.connect(
            str(self.db_path),
            timeout=30.0,  # 30 second timeout if locked
            check_same_thread=False,
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA busy_timeout=30000")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection]:
        """Yield a connection that commits on success and always closes."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
