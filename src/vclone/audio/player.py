"""Audio player for cross-platform audio playback using pygame."""

# ruff: noqa: E402
import os

# Suppress pygame's welcome message BEFORE any pygame import
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "1"

import warnings

# Suppress pygame's pkg_resources deprecation warning spam
warnings.filterwarnings("ignore", category=UserWarning, module="pygame.pkgdata")

import asyncio
import io
from collections.abc import Callable
from pathlib import Path

import pygame

from .utils import get_audio_duration

ProgressCallback = Callable[[float], None]


class AudioPlayer:
    """Cross-platform audio player using pygame.

    Provides methods to play audio from bytes, with optional progress
    reporting, or save it to a file.
    """

    def __init__(self) -> None:
        """Initialize the audio player with pygame mixer.

        Raises:
            RuntimeError: If pygame mixer fails to initialize.
        """
        try:
            pygame.mixer.init()
        except pygame.error as e:
            raise RuntimeError(f"Failed to initialize pygame audio mixer: {e}") from e

    def play_bytes(
        self, audio_data: bytes, on_progress: ProgressCallback | None = None
    ) -> None:
        """Play audio from bytes through system speakers (blocking).

        Args:
            audio_data: Audio data in WAV or MP3 format.
            on_progress: Called with playback progress (0-100) while playing,
                and with 0 once playback has finished.

        Raises:
            ValueError: If no audio data provided.
            RuntimeError: If audio playback fails.
        """
        if not audio_data:
            raise ValueError("No audio data provided")

        duration = get_audio_duration(audio_data) if on_progress else 0.0

        try:
            # Create in-memory file-like object
            audio_file = io.BytesIO(audio_data)

            # Load and play audio
            pygame.mixer.music.load(audio_file)
            pygame.mixer.music.play()

            # Wait for playback to complete
            clock = pygame.time.Clock()
            while pygame.mixer.music.get_busy():
                if on_progress and duration > 0:
                    position = pygame.mixer.music.get_pos() / 1000.0
                    on_progress(min(100.0, position / duration * 100.0))
                clock.tick(10)

        except pygame.error as e:
            raise RuntimeError(f"Failed to play audio: {e}") from e
        finally:
            if on_progress:
                on_progress(0.0)

    async def play_bytes_async(
        self, audio_data: bytes, on_progress: ProgressCallback | None = None
    ) -> None:
        """Play audio from bytes through system speakers (async).

        Args:
            audio_data: Audio data in WAV or MP3 format.
            on_progress: Progress callback, see play_bytes.

        Raises:
            ValueError: If no audio data provided.
            RuntimeError: If audio playback fails.
        """
        if not audio_data:
            raise ValueError("No audio data provided")

        try:
            # Run pygame operations in thread to avoid blocking event loop
            await asyncio.to_thread(self.play_bytes, audio_data, on_progress)
        except RuntimeError:
            raise
        except Exception as e:
            raise RuntimeError(f"Failed to play audio: {e}") from e

    @staticmethod
    def save_to_file(audio_data: bytes, filepath: str | Path) -> None:
        """Save audio bytes to a file, creating parent directories.

        Needs no mixer, so it is called on the class when saving instead
        of playing.

        Args:
            audio_data: Audio data to save.
            filepath: Path where the audio file should be saved.

        Raises:
            ValueError: If no audio data provided.
            OSError: If file cannot be written.
        """
        if not audio_data:
            raise ValueError("No audio data provided")

        # Convert to Path object if string
        filepath = Path(filepath)

        try:
            # Create parent directories if they don't exist
            filepath.parent.mkdir(parents=True, exist_ok=True)

            # Write audio data to file
            filepath.write_bytes(audio_data)

        except OSError as e:
            raise OSError(f"Failed to save audio to {filepath}: {e}") from e
