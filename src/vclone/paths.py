"""XDG-compliant directory paths for vclone data."""

import os
from pathlib import Path


def get_data_dir() -> Path:
    """Get XDG-compliant data directory.

    Priority:
    1. $XDG_DATA_HOME/vclone/
    2. ~/.local/share/vclone/

    Returns:
        Path to data directory
    """
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        path = Path(data_home) / "vclone"
    else:
        path = Path.home() / ".local" / "share" / "vclone"

    path.mkdir(parents=True, exist_ok=True, mode=0o700)
    return path


def get_database_path() -> Path:
    """Get the path of the sqlite database holding clones and accounts."""
    return get_data_dir() / "vclone.db"


def get_session_path() -> Path:
    """Get the path of the signed-in session file."""
    return get_data_dir() / "session.json"
