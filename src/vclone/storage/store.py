"""Persistence of voice clones and generated-speech history."""

import logging
import sqlite3
import uuid
from datetime import datetime, timezone

from ..tts.errors import PersistenceError
from .database import Database
from .models import CloneRecord, SpeechRecord

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class VoiceStore:
    """Identity-scoped storage for clone records and speech records.

    Every operation requires an authenticated user; callers without one
    must not reach this store. Listings are newest-first.
    """

    def __init__(self, database: Database):
        self.database = database

    def save_clone(self, name: str, voice_id: str, user_id: str) -> CloneRecord:
        """Persist a ready voice clone for a user.

        Args:
            name: Display name of the clone
            voice_id: Remote voice identifier
            user_id: Owner of the clone

        Returns:
            The stored CloneRecord

        Raises:
            ValueError: If user_id is missing
            PersistenceError: If the write fails
        """
        if not user_id:
            raise ValueError("user_id is required to save a voice clone")

        record_id = str(uuid.uuid4())
        created_at = _now()
        try:
            with self.database.connection() as conn:
                conn.execute(
                    """
                    INSERT INTO voice_clones (id, name, voice_id, user_id, created_at)
                    VALUES (?, ?, ?, ?, ?)
                """,
                    (record_id, name, voice_id, user_id, created_at),
                )
        except sqlite3.Error as e:
            logger.error(f"Error saving voice clone: {e}")
            raise PersistenceError(f"Failed to save voice clone: {e}", e) from e

        return CloneRecord(
            id=record_id,
            name=name,
            voice_id=voice_id,
            user_id=user_id,
            created_at=datetime.fromisoformat(created_at),
        )

    def list_clones(self, user_id: str) -> list[CloneRecord]:
        """Return a user's clones, newest first.

        Raises:
            ValueError: If user_id is missing
            PersistenceError: If the read fails
        """
        if not user_id:
            raise ValueError("user_id is required to list voice clones")

        try:
            with self.database.connection() as conn:
                rows = conn.execute(
                    """
                    SELECT id, name, voice_id, user_id, created_at
                    FROM voice_clones
                    WHERE user_id = ?
                    ORDER BY created_at DESC, rowid DESC
                """,
                    (user_id,),
                ).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Error fetching voice clones: {e}")
            raise PersistenceError(f"Failed to list voice clones: {e}", e) from e

        return [self._clone_from_row(row) for row in rows]

    def get_clone(self, record_id: str) -> CloneRecord | None:
        """Look up a clone record by its local ID."""
        try:
            with self.database.connection() as conn:
                row = conn.execute(
                    """
                    SELECT id, name, voice_id, user_id, created_at
                    FROM voice_clones
                    WHERE id = ?
                """,
                    (record_id,),
                ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Error fetching voice clone: {e}")
            raise PersistenceError(f"Failed to load voice clone: {e}", e) from e

        return self._clone_from_row(row) if row is not None else None

    def save_speech(self, voice_clone_id: str, text: str) -> SpeechRecord:
        """Record text spoken with a saved clone.

        Raises:
            ValueError: If voice_clone_id is missing
            PersistenceError: If the write fails (including unknown clone IDs)
        """
        if not voice_clone_id:
            raise ValueError("voice_clone_id is required to save a speech")

        record_id = str(uuid.uuid4())
        created_at = _now()
        try:
            with self.database.connection() as conn:
                conn.execute(
                    """
                    INSERT INTO generated_speeches (id, voice_clone_id, text, created_at)
                    VALUES (?, ?, ?, ?)
                """,
                    (record_id, voice_clone_id, text, created_at),
                )
        except sqlite3.Error as e:
            logger.error(f"Error saving generated speech: {e}")
            raise PersistenceError(f"Failed to save generated speech: {e}", e) from e

        return SpeechRecord(
            id=record_id,
            voice_clone_id=voice_clone_id,
            text=text,
            created_at=datetime.fromisoformat(created_at),
        )

    def list_speeches(self, voice_clone_id: str) -> list[SpeechRecord]:
        """Return speeches generated with a clone, newest first."""
        try:
            with self.database.connection() as conn:
                rows = conn.execute(
                    """
                    SELECT id, voice_clone_id, text, created_at
                    FROM generated_speeches
                    WHERE voice_clone_id = ?
                    ORDER BY created_at DESC, rowid DESC
                """,
                    (voice_clone_id,),
                ).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Error fetching generated speeches: {e}")
            raise PersistenceError(f"Failed to list generated speeches: {e}", e) from e

        return [
            SpeechRecord(
                id=row["id"],
                voice_clone_id=row["voice_clone_id"],
                text=row["text"],
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]

    @staticmethod
    def _clone_from_row(row: sqlite3.Row) -> CloneRecord:
        return CloneRecord(
            id=row["id"],
            name=row["name"],
            voice_id=row["voice_id"],
            user_id=row["user_id"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
