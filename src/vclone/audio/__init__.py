"""Audio capture and playback package for vclone.

Playback uses pygame; microphone capture uses sounddevice.
"""

from .player import AudioPlayer

__all__ = ["AudioPlayer"]
