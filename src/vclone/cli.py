"""Typer CLI definition for vclone."""

import asyncio
import logging
from pathlib import Path

import typer

from .audio.utils import format_time, get_audio_duration
from .clone.states import CloneState
from .config import VcloneConfig, load_config
from .core import build_provider, build_session, find_clone, list_history
from .storage import open_storage
from .storage.models import Identity
from .storage.store import VoiceStore
from .tts.errors import (
    DeviceUnavailableError,
    PersistenceError,
    UnauthorizedError,
    VoiceCloneError,
    user_message,
)
from .tts.models import AudioCapture

app = typer.Typer(help="Clone your voice and speak with it")

_STATE_MESSAGES = {
    CloneState.SUBMITTING: "Uploading voice sample...",
    CloneState.PROCESSING: "Voice clone is processing...",
}


def echo_notification(level: str, message: str) -> None:
    """Print a session notification."""
    if level == "error":
        typer.echo(f"Error: {message}", err=True)
    elif level == "success":
        typer.echo(f"✓ {message}")
    else:
        typer.echo(message)


def echo_state(state: CloneState) -> None:
    """Print an indicator for in-progress lifecycle states."""
    if state in _STATE_MESSAGES:
        typer.echo(_STATE_MESSAGES[state])


def _configure_logging(debug: bool) -> None:
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )


def _fail(label: str, error: Exception, message: str, debug: bool) -> typer.Exit:
    if debug:
        typer.echo(f"Debug - {label}: {error!r}", err=True)
    else:
        typer.echo(f"Error: {message}", err=True)
    return typer.Exit(1)


def _require_identity(auth_identity: Identity | None) -> Identity:
    if auth_identity is None:
        typer.echo("Error: Sign in first (vclone signin)", err=True)
        raise typer.Exit(1)
    return auth_identity


def capture_audio(
    config: VcloneConfig, file: Path | None, seconds: float | None, debug: bool
) -> AudioCapture:
    """Load a sample from a file or record one from the microphone."""
    if file:
        from .audio.capture import load_from_path

        try:
            return load_from_path(file)
        except FileNotFoundError as e:
            raise _fail("File not found", e, f"File not found: {file}", debug) from None
        except PermissionError as e:
            raise _fail(
                "Permission denied", e, f"Permission denied reading file: {file}", debug
            ) from None
        except ValueError as e:
            raise _fail("Invalid audio file", e, f"Audio file is empty: {file}", debug) from None

    from .audio.capture import RecordingCapture

    duration = seconds or config.capture.seconds
    recorder = RecordingCapture(
        sample_rate=config.capture.sample_rate, channels=config.capture.channels
    )
    typer.echo(f"Recording for {format_time(duration)}... speak naturally.")
    try:
        audio = recorder.record(duration)
    except DeviceUnavailableError as e:
        raise _fail("Device error", e, user_message(e), debug) from None
    except RuntimeError as e:
        raise _fail("Recording error", e, str(e), debug) from None

    typer.echo(
        f"Recorded {format_time(get_audio_duration(audio.data))} ({audio.size} bytes)"
    )
    return audio


async def run_clone(
    config: VcloneConfig,
    audio: AudioCapture,
    name: str,
    identity: Identity | None,
    store: VoiceStore | None,
    provider_name: str,
    text: str | None,
    interactive: bool,
    output: Path | None,
) -> CloneState:
    """Clone a voice, then speak the given text and/or prompt for more."""
    provider = build_provider(provider_name)

    player = None
    if output is None and (interactive or text or config.clone.welcome_message):
        from .audio.player import AudioPlayer

        player = AudioPlayer()

    session = build_session(
        config,
        provider,
        store=store if identity else None,
        player=player,
        notifier=echo_notification,
        on_state_change=echo_state,
    )
    try:
        await session.submit(audio, name, identity=identity)
        state = await session.wait_until_settled()
        if state is not CloneState.READY:
            return state

        if text:
            if output:
                from .audio.player import AudioPlayer

                result = await session.generate(text)
                AudioPlayer.save_to_file(result.audio, output)
                typer.echo(f"Audio saved to {output}")
            else:
                await session.speak(text)

        while interactive:
            line = await asyncio.to_thread(
                typer.prompt, "Text to speak (empty to quit)", default="", show_default=False
            )
            if not line.strip():
                break
            try:
                await session.speak(line)
            except (VoiceCloneError, RuntimeError):
                # Already reported through the notifier
                continue

        return state
    finally:
        await session.close()
        await provider.aclose()


@app.command()
def clone(
    name: str = typer.Option(..., "-n", "--name", help="Name for the voice clone"),
    file: Path | None = typer.Option(
        None, "-f", "--file", help="Use an audio file instead of recording"
    ),
    seconds: float | None = typer.Option(
        None, "-s", "--seconds", help="Recording length in seconds (from config if omitted)"
    ),
    text: str | None = typer.Option(
        None, "-t", "--text", help="Text to speak once the clone is ready"
    ),
    interactive: bool = typer.Option(
        True, "--interactive/--no-interactive", help="Prompt for text after cloning"
    ),
    output: Path | None = typer.Option(
        None, "-o", "--output", help="Save speech for --text to a file instead of playing"
    ),
    provider: str | None = typer.Option(
        None, "-p", "--provider", help="Voice-cloning provider (from config if omitted)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Show verbose error messages"),
) -> None:
    """Record or load a voice sample, clone it, and speak with it."""
    _configure_logging(debug)
    config = load_config()

    store, auth = open_storage()
    # Resolved once: signing in later does not save this clone
    identity = auth.current_identity()
    if identity is None:
        typer.echo("Not signed in: this clone will only last for this session.")

    audio = capture_audio(config, file, seconds, debug)

    try:
        state = asyncio.run(
            run_clone(
                config,
                audio,
                name,
                identity,
                store,
                provider or config.provider.name,
                text,
                interactive and output is None,
                output,
            )
        )
    except UnauthorizedError as e:
        raise _fail("Authentication error", e, str(e), debug) from None
    except KeyError as e:
        raise _fail("Provider error", e, str(e), debug) from None
    except VoiceCloneError as e:
        raise _fail("Voice clone error", e, user_message(e), debug) from None
    except ValueError as e:
        raise _fail("Configuration error", e, f"Invalid clone options: {e}", debug) from None
    except OSError as e:
        raise _fail("File system error", e, f"Failed to save audio file: {e}", debug) from None
    except RuntimeError as e:
        raise _fail("Audio playback error", e, f"Failed to play audio: {e}", debug) from None

    if state is not CloneState.READY:
        raise typer.Exit(1)


@app.command()
def speak(
    text: str = typer.Argument(..., help="Text to speak"),
    clone_ref: str = typer.Option(
        ..., "-c", "--clone", help="Saved clone to use (record ID, voice ID or name)"
    ),
    output: Path | None = typer.Option(
        None, "-o", "--output", help="Save output to file instead of playing"
    ),
    provider: str | None = typer.Option(
        None, "-p", "--provider", help="Voice-cloning provider (from config if omitted)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Show verbose error messages"),
) -> None:
    """Speak text with one of your saved voice clones."""
    _configure_logging(debug)
    config = load_config()

    store, auth = open_storage()
    identity = _require_identity(auth.current_identity())

    try:
        record = find_clone(store, identity, clone_ref)
    except PersistenceError as e:
        raise _fail("Storage error", e, user_message(e), debug) from None
    if record is None:
        typer.echo(f"Error: No saved voice clone matches '{clone_ref}'", err=True)
        raise typer.Exit(1)

    async def _run() -> None:
        voice_provider = build_provider(provider or config.provider.name)
        player = None
        if output is None:
            from .audio.player import AudioPlayer

            player = AudioPlayer()
        session = build_session(
            config, voice_provider, store=store, player=player, notifier=echo_notification
        )
        try:
            session.use_saved_clone(record, identity)
            if output:
                from .audio.player import AudioPlayer

                result = await session.generate(text)
                AudioPlayer.save_to_file(result.audio, output)
            else:
                await session.speak(text)
        finally:
            await session.close()
            await voice_provider.aclose()

    try:
        asyncio.run(_run())
        if output:
            typer.echo(f"Audio saved to {output}")
    except UnauthorizedError as e:
        raise _fail("Authentication error", e, str(e), debug) from None
    except KeyError as e:
        raise _fail("Provider error", e, str(e), debug) from None
    except VoiceCloneError as e:
        raise _fail("Voice clone error", e, user_message(e), debug) from None
    except OSError as e:
        raise _fail("File system error", e, f"Failed to save audio file: {e}", debug) from None
    except RuntimeError as e:
        raise _fail("Audio playback error", e, f"Failed to play audio: {e}", debug) from None


@app.command()
def clones(
    debug: bool = typer.Option(False, "--debug", help="Show verbose error messages"),
) -> None:
    """List your saved voice clones."""
    _configure_logging(debug)
    store, auth = open_storage()
    identity = _require_identity(auth.current_identity())

    try:
        records = store.list_clones(identity.id)
    except PersistenceError as e:
        raise _fail("Storage error", e, user_message(e), debug) from None

    if not records:
        typer.echo("No saved voice clones")
        return
    for record in records:
        typer.echo(
            f"{record.name}: {record.id} ({record.created_at:%Y-%m-%d %H:%M})"
        )


@app.command()
def history(
    debug: bool = typer.Option(False, "--debug", help="Show verbose error messages"),
) -> None:
    """Show your voice clones and the text spoken with each."""
    _configure_logging(debug)
    store, auth = open_storage()
    identity = _require_identity(auth.current_identity())

    try:
        entries = list_history(store, identity)
    except PersistenceError as e:
        raise _fail("Storage error", e, "Failed to load history", debug) from None

    if not entries:
        typer.echo("No voice clones yet")
        return

    typer.echo("=== Voice Clone History ===")
    for record, speeches in entries:
        typer.echo(f"\n{record.name} ({record.created_at:%Y-%m-%d %H:%M})")
        if not speeches:
            typer.echo("  No generated speech")
        for speech in speeches:
            typer.echo(f"  {speech.created_at:%Y-%m-%d %H:%M}  {speech.text}")


@app.command()
def signup(
    email: str = typer.Option(..., prompt=True, help="Email address"),
    password: str = typer.Option(
        ..., prompt=True, hide_input=True, confirmation_prompt=True, help="Password"
    ),
) -> None:
    """Create an account so clones and speech history are saved."""
    _, auth = open_storage()
    result = auth.sign_up(email, password)
    if not result.success:
        typer.echo(f"Error: {result.error}", err=True)
        raise typer.Exit(1)
    typer.echo(f"✓ Signed up as {result.identity.email}")


@app.command()
def signin(
    email: str = typer.Option(..., prompt=True, help="Email address"),
    password: str = typer.Option(..., prompt=True, hide_input=True, help="Password"),
) -> None:
    """Sign in to your account."""
    _, auth = open_storage()
    result = auth.sign_in(email, password)
    if not result.success:
        typer.echo(f"Error: {result.error}", err=True)
        raise typer.Exit(1)
    typer.echo(f"✓ Signed in as {result.identity.email}")


@app.command()
def signout() -> None:
    """Sign out of your account."""
    _, auth = open_storage()
    auth.sign_out()
    typer.echo("Signed out")


@app.command()
def whoami() -> None:
    """Show the signed-in account."""
    _, auth = open_storage()
    identity = auth.current_identity()
    if identity is None:
        typer.echo("Not signed in")
    else:
        typer.echo(identity.email)
