"""Microphone capture and file loading for voice samples."""

import io
import logging
import mimetypes
import threading
import time
from pathlib import Path

import numpy as np
import soundfile as sf

try:
    import sounddevice as sd
except OSError:  # PortAudio shared library is not installed
    sd = None

from ..tts.errors import DeviceUnavailableError
from ..tts.models import AudioCapture

logger = logging.getLogger(__name__)


class RecordingCapture:
    """Records a voice sample from the default input device.

    The device is held only between start_capture() and stop_capture()
    (or abort()); the stream is closed on every exit path.
    """

    def __init__(self, sample_rate: int = 44100, channels: int = 1) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self._stream = None
        self._chunks: list[np.ndarray] = []
        self._lock = threading.Lock()

    @property
    def is_recording(self) -> bool:
        return self._stream is not None

    def _on_audio(self, indata, frames, time_info, status) -> None:
        if status:
            logger.debug(f"Input stream status: {status}")
        with self._lock:
            self._chunks.append(indata.copy())

    def start_capture(self) -> None:
        """Acquire the input device and start accumulating audio.

        Raises:
            DeviceUnavailableError: If no input device can be opened
            RuntimeError: If a capture is already in progress
        """
        if self._stream is not None:
            raise RuntimeError("Recording already in progress")
        if sd is None:
            raise DeviceUnavailableError(
                "Audio input unavailable: PortAudio library not found"
            )

        self._chunks = []
        stream = None
        try:
            sd.query_devices(kind="input")
            stream = sd.InputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype="float32",
                callback=self._on_audio,
            )
            stream.start()
        except (sd.PortAudioError, ValueError) as e:
            if stream is not None:
                stream.close()
            self._chunks = []
            raise DeviceUnavailableError(f"Could not access microphone: {e}", e) from e

        self._stream = stream
        logger.debug(f"Recording started at {self.sample_rate} Hz")

    def stop_capture(self) -> AudioCapture:
        """Release the input device and return the recorded sample.

        Raises:
            RuntimeError: If no capture is in progress or nothing was recorded
        """
        if self._stream is None:
            raise RuntimeError("No recording in progress")

        self._release()

        with self._lock:
            chunks, self._chunks = self._chunks, []
        if not chunks:
            raise RuntimeError("No audio was recorded")

        frames = np.concatenate(chunks, axis=0)
        buffer = io.BytesIO()
        sf.write(buffer, frames, self.sample_rate, format="WAV", subtype="PCM_16")
        logger.debug(
            f"Recording stopped: {len(frames) / self.sample_rate:.1f}s, "
            f"{buffer.getbuffer().nbytes} bytes"
        )
        return AudioCapture(data=buffer.getvalue(), mime_type="audio/wav")

    def abort(self) -> None:
        """Release the input device and discard anything recorded."""
        if self._stream is not None:
            self._release()
        with self._lock:
            self._chunks = []

    def record(self, seconds: float) -> AudioCapture:
        """Record for a fixed duration (blocking).

        Raises:
            DeviceUnavailableError: If no input device can be opened
        """
        self.start_capture()
        try:
            time.sleep(seconds)
        except BaseException:
            self.abort()
            raise
        return self.stop_capture()

    def _release(self) -> None:
        stream, self._stream = self._stream, None
        try:
            stream.stop()
        finally:
            stream.close()


def load_from_file(
    data: bytes, mime_type: str | None = None, filename: str | None = None
) -> AudioCapture:
    """Wrap uploaded audio bytes as an AudioCapture.

    Args:
        data: Encoded audio file contents
        mime_type: MIME type, guessed from filename when omitted
        filename: Original file name

    Raises:
        ValueError: If data is empty
    """
    if mime_type is None and filename:
        mime_type, _ = mimetypes.guess_type(filename)
    return AudioCapture(
        data=data,
        mime_type=mime_type or "audio/wav",
        filename=Path(filename).name if filename else "voice.wav",
    )


def load_from_path(path: str | Path) -> AudioCapture:
    """Read an audio file from disk as an AudioCapture.

    Raises:
        OSError: If the file cannot be read
        ValueError: If the file is empty
    """
    path = Path(path)
    return load_from_file(path.read_bytes(), filename=path.name)
