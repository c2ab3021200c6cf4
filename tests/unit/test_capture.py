"""Unit tests for microphone capture and file loading."""

import io
import sys
from pathlib import Path
from unittest.mock import patch

import numpy as np
import pytest
import soundfile as sf

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from vclone.audio.capture import RecordingCapture, load_from_file, load_from_path
from vclone.tts.errors import DeviceUnavailableError


class PortAudioError(Exception):
    pass


@pytest.fixture
def mock_sd():
    """Patch sounddevice with a mock exposing a real PortAudioError class."""
    with patch("vclone.audio.capture.sd") as sd:
        sd.PortAudioError = PortAudioError
        yield sd


def feed(recorder: RecordingCapture, seconds: float) -> None:
    frames = int(recorder.sample_rate * seconds)
    block = np.zeros((frames, recorder.channels), dtype="float32")
    recorder._on_audio(block, frames, None, None)


class TestRecordingCapture:
    """Test device acquisition and release."""

    def test_stop_returns_wav_and_releases_device(self, mock_sd) -> None:
        recorder = RecordingCapture(sample_rate=8000)
        recorder.start_capture()
        stream = mock_sd.InputStream.return_value

        feed(recorder, 0.5)
        feed(recorder, 0.5)
        audio = recorder.stop_capture()

        assert audio.mime_type == "audio/wav"
        info = sf.info(io.BytesIO(audio.data))
        assert info.samplerate == 8000
        assert info.frames == 8000
        assert info.subtype == "PCM_16"
        stream.stop.assert_called_once()
        stream.close.assert_called_once()
        assert not recorder.is_recording

    def test_stream_opened_with_settings(self, mock_sd) -> None:
        recorder = RecordingCapture(sample_rate=16000, channels=1)

        recorder.start_capture()

        mock_sd.query_devices.assert_called_once_with(kind="input")
        kwargs = mock_sd.InputStream.call_args.kwargs
        assert kwargs["samplerate"] == 16000
        assert kwargs["channels"] == 1
        assert kwargs["callback"] == recorder._on_audio
        assert recorder.is_recording

    def test_device_failure_raises_device_unavailable(self, mock_sd) -> None:
        mock_sd.InputStream.return_value.start.side_effect = PortAudioError("denied")
        recorder = RecordingCapture()

        with pytest.raises(DeviceUnavailableError, match="Could not access microphone"):
            recorder.start_capture()

        mock_sd.InputStream.return_value.close.assert_called_once()
        assert not recorder.is_recording

    def test_no_input_device_raises_device_unavailable(self, mock_sd) -> None:
        mock_sd.query_devices.side_effect = ValueError("No input device matching")

        with pytest.raises(DeviceUnavailableError):
            RecordingCapture().start_capture()

        mock_sd.InputStream.assert_not_called()

    def test_missing_portaudio_raises_device_unavailable(self) -> None:
        with patch("vclone.audio.capture.sd", None):
            with pytest.raises(DeviceUnavailableError, match="PortAudio"):
                RecordingCapture().start_capture()

    def test_double_start_raises(self, mock_sd) -> None:
        recorder = RecordingCapture()
        recorder.start_capture()

        with pytest.raises(RuntimeError, match="already in progress"):
            recorder.start_capture()

    def test_stop_without_start_raises(self) -> None:
        with pytest.raises(RuntimeError, match="No recording in progress"):
            RecordingCapture().stop_capture()

    def test_stop_with_nothing_recorded_still_releases(self, mock_sd) -> None:
        recorder = RecordingCapture()
        recorder.start_capture()

        with pytest.raises(RuntimeError, match="No audio was recorded"):
            recorder.stop_capture()

        mock_sd.InputStream.return_value.close.assert_called_once()
        assert not recorder.is_recording

    def test_abort_discards_audio(self, mock_sd) -> None:
        recorder = RecordingCapture()
        recorder.start_capture()
        feed(recorder, 0.1)

        recorder.abort()

        assert not recorder.is_recording
        assert recorder._chunks == []
        mock_sd.InputStream.return_value.close.assert_called_once()

    def test_record_for_fixed_duration(self, mock_sd) -> None:
        recorder = RecordingCapture(sample_rate=8000)

        with patch(
            "vclone.audio.capture.time.sleep", side_effect=lambda s: feed(recorder, s)
        ) as mock_sleep:
            audio = recorder.record(2)

        mock_sleep.assert_called_once_with(2)
        assert sf.info(io.BytesIO(audio.data)).duration == pytest.approx(2.0)

    def test_interrupted_recording_releases_device(self, mock_sd) -> None:
        recorder = RecordingCapture()

        with patch("vclone.audio.capture.time.sleep", side_effect=KeyboardInterrupt):
            with pytest.raises(KeyboardInterrupt):
                recorder.record(5)

        assert not recorder.is_recording
        mock_sd.InputStream.return_value.close.assert_called_once()


class TestLoadFromFile:
    """Test wrapping uploaded audio."""

    def test_mime_type_guessed_from_filename(self) -> None:
        audio = load_from_file(b"ID3data", filename="/tmp/sample.mp3")

        assert audio.mime_type == "audio/mpeg"
        assert audio.filename == "sample.mp3"

    def test_defaults_to_wav(self) -> None:
        audio = load_from_file(b"RIFFdata")

        assert audio.mime_type == "audio/wav"
        assert audio.filename == "voice.wav"

    def test_explicit_mime_type_wins(self) -> None:
        audio = load_from_file(b"data", mime_type="audio/webm", filename="clip.bin")

        assert audio.mime_type == "audio/webm"

    def test_empty_file_raises(self) -> None:
        with pytest.raises(ValueError, match="Audio data cannot be empty"):
            load_from_file(b"", filename="empty.wav")

    def test_load_from_path(self, tmp_path: Path, make_wav) -> None:
        path = tmp_path / "voice.wav"
        path.write_bytes(make_wav(1))

        audio = load_from_path(path)

        assert audio.data == path.read_bytes()
        assert audio.filename == "voice.wav"

    def test_load_from_missing_path(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_from_path(tmp_path / "missing.wav")


def test_callback_status_is_logged(caplog) -> None:
    recorder = RecordingCapture()
    block = np.zeros((10, 1), dtype="float32")

    with caplog.at_level("DEBUG", logger="vclone.audio.capture"):
        recorder._on_audio(block, 10, None, "input overflow")

    assert "input overflow" in caplog.text
    assert len(recorder._chunks) == 1
