"""Pytest configuration and fixtures for vclone tests."""

import io
import sys
from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest
import soundfile as sf

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from vclone.clone.session import VoiceCloneSession
from vclone.providers.base import VoiceCloneProvider
from vclone.storage import open_storage
from vclone.storage.models import Identity
from vclone.tts.client import VoiceCloneClient
from vclone.tts.generator import SpeechGenerator
from vclone.tts.models import VoiceStatus


class FakeProvider(VoiceCloneProvider):
    """In-memory provider that records every call.

    ``statuses`` is consumed one entry per status query; the last entry
    repeats once the list is down to one item.
    """

    name = "fake"
    default_model = "fake-model"

    def __init__(self) -> None:
        self.voice_id = "voice-123"
        self.statuses: list[VoiceStatus] = [VoiceStatus.READY]
        self.audio = b"RIFF0000WAVEfake-audio"
        self.clone_error: Exception | None = None
        self.synth_error: Exception | None = None
        self.clone_gate = None
        self.clone_calls: list = []
        self.status_calls: list[str] = []
        self.synth_calls: list = []
        self.closed = False

    async def clone(self, audio, options) -> str:
        self.clone_calls.append((audio, options))
        if self.clone_gate is not None:
            await self.clone_gate.wait()
        if self.clone_error:
            raise self.clone_error
        return self.voice_id

    async def get_status(self, voice_id: str) -> VoiceStatus:
        self.status_calls.append(voice_id)
        if len(self.statuses) > 1:
            return self.statuses.pop(0)
        return self.statuses[0]

    async def synthesize(self, voice_id, text, settings) -> bytes:
        self.synth_calls.append((voice_id, text, settings))
        if self.synth_error:
            raise self.synth_error
        return self.audio

    async def aclose(self) -> None:
        self.closed = True


class FakePlayer:
    """Stands in for AudioPlayer; reports a few progress steps per playback."""

    def __init__(self) -> None:
        self.played: list[bytes] = []
        self.progress_seen: list[float] = []
        self.error: Exception | None = None

    async def play_bytes_async(self, audio_data: bytes, on_progress=None) -> None:
        if self.error:
            if on_progress:
                on_progress(0.0)
            raise self.error
        self.played.append(audio_data)
        if on_progress:
            for progress in (25.0, 50.0, 100.0):
                on_progress(progress)
                self.progress_seen.append(progress)
            on_progress(0.0)


class Recorder:
    """Collects session state changes and notifications."""

    def __init__(self) -> None:
        self.states: list = []
        self.notifications: list[tuple[str, str]] = []

    def on_state(self, state) -> None:
        self.states.append(state)

    def notify(self, level: str, message: str) -> None:
        self.notifications.append((level, message))

    def messages(self, level: str) -> list[str]:
        return [message for lvl, message in self.notifications if lvl == level]


@pytest.fixture(autouse=True)
def isolate_user_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep data, config and env overrides out of the real home directory."""
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("vclone.config.CONFIG_DIR", tmp_path / "config")
    monkeypatch.setattr("vclone.config.CONFIG_PATH", tmp_path / "config" / "config.toml")
    monkeypatch.setattr("vclone.config._cached_config", None)
    for name in (
        "VCLONE_PROVIDER",
        "VCLONE_MODEL",
        "VCLONE_LANGUAGE",
        "VCLONE_POLL_INTERVAL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_wav() -> Callable[..., bytes]:
    """Factory producing real 16-bit WAV bytes of a given duration."""

    def _make(seconds: float = 1.0, sample_rate: int = 8000) -> bytes:
        t = np.linspace(0, seconds, int(seconds * sample_rate), endpoint=False)
        tone = 0.2 * np.sin(2 * np.pi * 220 * t)
        buffer = io.BytesIO()
        sf.write(buffer, tone, sample_rate, format="WAV", subtype="PCM_16")
        return buffer.getvalue()

    return _make


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def fake_player() -> FakePlayer:
    return FakePlayer()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def make_session(fake_provider: FakeProvider, recorder: Recorder):
    """Factory for sessions wired to the fake provider and a fast poll."""

    def _make(
        provider: VoiceCloneProvider | None = None,
        store=None,
        player=None,
        welcome_message: str | None = None,
        poll_interval: float = 0.01,
        max_text_length: int = 500,
    ) -> VoiceCloneSession:
        provider = provider or fake_provider
        return VoiceCloneSession(
            VoiceCloneClient(provider),
            SpeechGenerator(provider, max_text_length=max_text_length),
            store=store,
            player=player,
            poll_interval=poll_interval,
            welcome_message=welcome_message,
            notifier=recorder.notify,
            on_state_change=recorder.on_state,
        )

    return _make


@pytest.fixture
def storage(tmp_path: Path):
    """Real sqlite-backed store and auth service in a temp dir."""
    return open_storage(tmp_path / "vclone.db", tmp_path / "session.json")


@pytest.fixture
def signed_in(storage) -> Identity:
    _, auth = storage
    result = auth.sign_up("ada@example.com", "secret123")
    assert result.success
    return result.identity
