"""High-level API for vclone library usage."""

from pathlib import Path

from .audio.capture import load_from_path
from .clone.session import Notifier, VoiceCloneSession
from .config import default_config
from .core import build_provider, build_session
from .storage.models import Identity
from .storage.store import VoiceStore
from .tts.models import AudioCapture


async def clone(
    audio: AudioCapture | bytes | str | Path,
    name: str,
    *,
    provider: str | None = None,
    identity: Identity | None = None,
    store: VoiceStore | None = None,
    poll_interval: float | None = None,
    notifier: Notifier | None = None,
) -> VoiceCloneSession:
    """Clone a voice and wait until the clone has settled.

    Args:
        audio: Sample as an AudioCapture, raw bytes, or a file path
        name: Display name for the clone
        provider: Provider name (defaults to the built-in config)
        identity: Signed-in user; the clone is saved to store when given
        store: Persistence store, required with identity
        poll_interval: Seconds between readiness checks
        notifier: Receives (level, message) notifications

    Returns:
        Session in a terminal state (check session.state)

    Raises:
        AudioTooShortError: If the sample is too small
        EmptyInputError: If the name is blank
        UnauthorizedError: If the provider API key is not configured
        KeyError: If provider not found
    """
    config = default_config()

    if isinstance(audio, (str, Path)):
        audio = load_from_path(audio)
    elif isinstance(audio, bytes):
        audio = AudioCapture(data=audio)

    session = build_session(
        config,
        build_provider(provider or config.provider.name),
        store=store,
        notifier=notifier,
    )
    if poll_interval is not None:
        session.poll_interval = poll_interval
    session.welcome_message = None

    await session.submit(audio, name, identity=identity)
    await session.wait_until_settled()
    return session


async def speak(
    session: VoiceCloneSession, text: str, output: str | Path | None = None
) -> bytes:
    """Generate speech with a ready session's clone.

    Args:
        session: Session whose clone is READY
        text: Text to speak (truncated to the configured maximum)
        output: File path to save audio (if None, plays audio)

    Returns:
        Generated audio bytes

    Raises:
        CloneNotReadyError: If the session's clone is not ready
        EmptyInputError: If text is blank
        RemoteError: If synthesis fails
        RuntimeError: If audio playback fails
        OSError: If file save fails
    """
    from .audio.player import AudioPlayer

    result = await session.generate(text)
    if output:
        AudioPlayer.save_to_file(result.audio, output)
        return result.audio

    if session.player is None:
        session.player = AudioPlayer()
    await session.play(result.audio)
    return result.audio
