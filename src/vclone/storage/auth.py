"""Local account authentication for vclone.

Accounts live in the same sqlite database as the clone history. The
signed-in identity is kept in a small JSON session file so it survives
between CLI invocations.
"""

import hashlib
import hmac
import json
import logging
import re
import secrets
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path

from ..tts.errors import PersistenceError
from .database import Database
from .models import AuthResult, Identity

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
PBKDF2_ITERATIONS = 200_000

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def hash_password(password: str, salt: str) -> str:
    """Derive a PBKDF2-SHA256 hash for a password."""
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode(), bytes.fromhex(salt), PBKDF2_ITERATIONS
    )
    return digest.hex()


class LocalAuth:
    """Sign-up, sign-in and session tracking backed by sqlite."""

    def __init__(self, database: Database, session_path: Path):
        self.database = database
        self.session_path = session_path

    def sign_up(self, email: str, password: str) -> AuthResult:
        """Create an account and sign it in.

        Returns:
            AuthResult with the new identity, or a human-readable error
        """
        email = email.strip().lower()
        if not _EMAIL_PATTERN.match(email):
            return AuthResult(success=False, error="Unable to validate email address")
        if len(password) < MIN_PASSWORD_LENGTH:
            return AuthResult(
                success=False,
                error=f"Password should be at least {MIN_PASSWORD_LENGTH} characters",
            )

        salt = secrets.token_hex(16)
        identity = Identity(id=str(uuid.uuid4()), email=email)
        try:
            with self.database.connection() as conn:
                conn.execute(
                    """
                    INSERT INTO users (id, email, password_hash, salt, created_at)
                    VALUES (?, ?, ?, ?, ?)
                """,
                    (
                        identity.id,
                        email,
                        hash_password(password, salt),
                        salt,
                        datetime.now(timezone.utc).isoformat(),
                    ),
                )
        except sqlite3.IntegrityError:
            return AuthResult(success=False, error="User already registered")
        except sqlite3.Error as e:
            logger.error(f"Error creating account: {e}")
            raise PersistenceError(f"Failed to create account: {e}", e) from e

        self._write_session(identity)
        return AuthResult(success=True, identity=identity)

    def sign_in(self, email: str, password: str) -> AuthResult:
        """Check credentials and store the session on success."""
        email = email.strip().lower()
        try:
            with self.database.connection() as conn:
                row = conn.execute(
                    "SELECT id, email, password_hash, salt FROM users WHERE email = ?",
                    (email,),
                ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Error reading account: {e}")
            raise PersistenceError(f"Failed to read account: {e}", e) from e

        if row is None or not hmac.compare_digest(
            row["password_hash"], hash_password(password, row["salt"])
        ):
            return AuthResult(success=False, error="Invalid login credentials")

        identity = Identity(id=row["id"], email=row["email"])
        self._write_session(identity)
        return AuthResult(success=True, identity=identity)

    def sign_out(self) -> None:
        """Forget the signed-in identity."""
        self.session_path.unlink(missing_ok=True)

    def current_identity(self) -> Identity | None:
        """Return the signed-in identity, or None when signed out."""
        if not self.session_path.exists():
            return None
        try:
            data = json.loads(self.session_path.read_text())
            return Identity(id=data["id"], email=data["email"])
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.debug(f"Ignoring unreadable session file: {e}")
            return None

    def _write_session(self, identity: Identity) -> None:
        self.session_path.parent.mkdir(parents=True, exist_ok=True)
        self.session_path.write_text(
            json.dumps({"id": identity.id, "email": identity.email})
        )
        self.session_path.chmod(0o600)
