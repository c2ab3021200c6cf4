"""Small audio helpers."""

import io
import logging

import soundfile as sf

logger = logging.getLogger(__name__)


def get_audio_duration(audio_data: bytes) -> float:
    """Return the duration of encoded audio in seconds.

    Returns 0.0 when the data cannot be decoded.
    """
    try:
        return float(sf.info(io.BytesIO(audio_data)).duration)
    except (RuntimeError, TypeError, ValueError) as e:
        logger.debug(f"Could not determine audio duration: {e}")
        return 0.0


def format_time(seconds: float) -> str:
    """Format seconds as m:ss."""
    minutes = int(seconds // 60)
    remaining = int(seconds % 60)
    return f"{minutes}:{remaining:02d}"
