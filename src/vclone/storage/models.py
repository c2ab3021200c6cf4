"""Data models for persisted clones, speeches and identities."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Identity:
    """An authenticated user.

    Attributes:
        id: Stable user identifier
        email: Sign-in email address
    """

    id: str
    email: str


@dataclass
class CloneRecord:
    """A voice clone saved for an authenticated user.

    Attributes:
        id: Local record identifier (distinct from the remote voice_id)
        name: Display name of the clone
        voice_id: Remote voice identifier issued by the provider
        user_id: Owner of the clone
        created_at: When the record was created
    """

    id: str
    name: str
    voice_id: str
    user_id: str
    created_at: datetime


@dataclass
class SpeechRecord:
    """Text spoken with a saved clone. Audio is not retained.

    Attributes:
        id: Local record identifier
        voice_clone_id: ID of the owning CloneRecord
        text: Text that was synthesized
        created_at: When the speech was generated
    """

    id: str
    voice_clone_id: str
    text: str
    created_at: datetime


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a sign-in or sign-up attempt."""

    success: bool
    identity: Identity | None = None
    error: str | None = None
