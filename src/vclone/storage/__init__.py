"""Persistence for vclone: saved clones, speech history and accounts."""

from pathlib import Path

from ..paths import get_database_path, get_session_path
from .auth import LocalAuth
from .database import Database
from .models import AuthResult, CloneRecord, Identity, SpeechRecord
from .store import VoiceStore

__all__ = [
    "AuthResult",
    "CloneRecord",
    "Database",
    "Identity",
    "LocalAuth",
    "SpeechRecord",
    "VoiceStore",
    "open_storage",
]


def open_storage(
    db_path: Path | None = None, session_path: Path | None = None
) -> tuple[VoiceStore, LocalAuth]:
    """Open the default database and return the store and auth service.

    Args:
        db_path: Database location (defaults to the XDG data dir)
        session_path: Session file location (defaults to the XDG data dir)
    """
    database = Database(db_path or get_database_path())
    return VoiceStore(database), LocalAuth(database, session_path or get_session_path())
