"""Voice-clone lifecycle controller.

Drives capture -> submit -> await readiness -> ready -> generate -> play for
one clone at a time, choosing between the anonymous path (clone lives only
in this session) and the authenticated path (clone and speech history are
persisted) once per submit.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..tts.client import VoiceCloneClient
from ..tts.errors import (
    CloneNotReadyError,
    EmptyInputError,
    LifecycleError,
    PersistenceError,
    VoiceCloneError,
    user_message,
)
from ..tts.generator import SpeechGenerator
from ..tts.models import AudioCapture, SpeechResult
from .poller import DEFAULT_POLL_INTERVAL, PollHandle, start_polling
from .states import SUBMITTABLE_STATES, CloneState

if TYPE_CHECKING:
    from ..audio.player import AudioPlayer
    from ..storage.models import CloneRecord, Identity
    from ..storage.store import VoiceStore

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = "Hello, your voice clone is ready! How do I sound?"

Notifier = Callable[[str, str], None]
StateListener = Callable[[CloneState], None]


def log_notification(level: str, message: str) -> None:
    """Default notifier: route user-facing messages to the log."""
    logger.info(f"[{level}] {message}")


class VoiceCloneSession:
    """Lifecycle controller for a single voice clone.

    Each submit starts a new lifecycle instance. Results from an earlier
    instance (a poll that was cancelled by reset, or a call that finished
    after a reset) are discarded and never change the current state.

    Example (anonymous):
        session = VoiceCloneSession(client, generator, player=AudioPlayer())
        await session.submit(audio, "My voice")      # -> PROCESSING
        await session.wait_until_settled()           # -> READY
        await session.speak("Hello there")

    Example (authenticated):
        state = await session.submit(audio, "My voice", identity=user)
        # Returns READY once the clone is ready and saved to the store
    """

    def __init__(
        self,
        client: VoiceCloneClient,
        generator: SpeechGenerator,
        store: "VoiceStore | None" = None,
        player: "AudioPlayer | None" = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        welcome_message: str | None = WELCOME_MESSAGE,
        notifier: Notifier | None = None,
        on_state_change: StateListener | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            client: Client used to submit clones and query their status
            generator: Speech generator for the ready clone
            store: Persistence store, required for authenticated submits
            player: Audio player; without one, nothing is played
            poll_interval: Seconds between readiness checks
            welcome_message: Spoken once the clone is ready (None disables)
            notifier: Receives (level, message) user notifications
            on_state_change: Called with each new lifecycle state
        """
        self.client = client
        self.generator = generator
        self.store = store
        self.player = player
        self.poll_interval = poll_interval
        self.welcome_message = welcome_message
        self.notifier = notifier or log_notification
        self.on_state_change = on_state_change

        self.state = CloneState.IDLE
        self.clone_id: str | None = None
        self.clone_name: str | None = None
        self.clone_record: "CloneRecord | None" = None
        self.identity: "Identity | None" = None
        self.last_error: Exception | None = None
        self.playback_progress = 0.0
        self.has_used_speech = False
        self.sign_up_prompted = False

        self._generation = 0
        self._poll: PollHandle | None = None
        self._pending_saves: set[asyncio.Task] = set()

    @property
    def is_ready(self) -> bool:
        return self.state is CloneState.READY and self.clone_id is not None

    @property
    def is_persisted(self) -> bool:
        return self.identity is not None and self.clone_record is not None

    def _notify(self, level: str, message: str) -> None:
        self.notifier(level, message)

    def _transition(self, state: CloneState) -> None:
        logger.debug(f"Lifecycle {self._generation}: {self.state.value} -> {state.value}")
        self.state = state
        if self.on_state_change:
            self.on_state_change(state)

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _cancel_poll(self) -> None:
        if self._poll is not None:
            self._poll.cancel()
            self._poll = None

    def _begin_instance(self, identity: "Identity | None") -> int:
        self._cancel_poll()
        self._generation += 1
        self.clone_id = None
        self.clone_name = None
        self.clone_record = None
        self.identity = identity
        self.last_error = None
        self.playback_progress = 0.0
        return self._generation

    async def submit(
        self, audio: AudioCapture | None, name: str, identity: "Identity | None" = None
    ) -> CloneState:
        """Submit an audio sample and start a new lifecycle instance.

        The identity is fixed for the instance: a sign-in that happens
        later does not move an anonymous clone into persisted storage.

        Args:
            audio: Recorded or uploaded sample
            name: Display name for the clone
            identity: Signed-in user, or None for the anonymous path

        Returns:
            PROCESSING on the anonymous path (polling continues in the
            background), the terminal state on the authenticated path, or
            ERROR if the submission itself failed

        Raises:
            EmptyInputError: If the name or audio is missing
            AudioTooShortError: If the sample is not above the minimum size
            LifecycleError: If a clone is already in progress or ready
            ValueError: If the configured clone options are invalid
        """
        if self.state not in SUBMITTABLE_STATES:
            raise LifecycleError(
                "A voice clone is already active; reset before creating a new one",
                self.state,
            )
        if audio is None:
            self._notify("error", "Please record or upload audio first")
            raise EmptyInputError("Please record or upload audio first")
        if not name or not name.strip():
            self._notify("error", "Voice clone name is required")
            raise EmptyInputError("Voice clone name is required")
        if identity is not None and self.store is None:
            raise ValueError("A store is required to save clones for signed-in users")
        try:
            self.client.validate_audio(audio)
        except VoiceCloneError as e:
            self._notify("error", user_message(e))
            raise
        try:
            self.client.build_options(name)
        except ValueError as e:
            self._notify("error", f"Invalid clone options: {e}")
            raise

        name = name.strip()
        generation = self._begin_instance(identity)
        self._transition(CloneState.SUBMITTING)

        try:
            clone_id = await self.client.submit_clone(audio, name)
        except VoiceCloneError as e:
            if not self._is_current(generation):
                return self.state
            logger.error(f"Voice cloning error: {e}")
            self.last_error = e
            self._transition(CloneState.ERROR)
            self._notify("error", f"Failed to clone voice: {user_message(e)}")
            return self.state

        if not self._is_current(generation):
            logger.debug(f"Discarding clone {clone_id} from a reset lifecycle")
            return self.state

        self.clone_id = clone_id
        self.clone_name = name
        self._transition(CloneState.PROCESSING)

        async def _settled(outcome: CloneState) -> None:
            await self._on_settled(generation, outcome)

        poll = start_polling(self.client, clone_id, self.poll_interval, _settled)
        self._poll = poll

        if identity is None:
            self._notify("info", "Voice cloning started. This may take a few minutes.")
            return self.state

        self._notify("info", "Processing voice clone. This may take a few minutes.")
        await poll.wait()
        return self.state

    async def _on_settled(self, generation: int, outcome: CloneState) -> None:
        if not self._is_current(generation):
            logger.debug(f"Ignoring stale {outcome.value} result for lifecycle {generation}")
            return
        self._poll = None

        if outcome is CloneState.NOT_FOUND:
            self._transition(CloneState.NOT_FOUND)
            self._notify("error", "Voice clone could not be found.")
            return
        if outcome is CloneState.ERROR:
            self._transition(CloneState.ERROR)
            self._notify("error", "Error creating voice clone.")
            return

        if self.identity is not None:
            try:
                record = await asyncio.to_thread(
                    self.store.save_clone, self.clone_name, self.clone_id, self.identity.id
                )
            except PersistenceError as e:
                if not self._is_current(generation):
                    return
                logger.error(f"Error saving voice clone: {e}")
                self.last_error = e
                self._transition(CloneState.ERROR)
                self._notify("error", f"Failed to save voice clone: {user_message(e)}")
                return
            if not self._is_current(generation):
                return
            self.clone_record = record

        self._transition(CloneState.READY)
        self._notify("success", "Voice clone is ready!")
        await self._speak_welcome(generation)

    async def _speak_welcome(self, generation: int) -> None:
        if not self.welcome_message or self.player is None:
            return
        try:
            result = await self.generator.generate(self.clone_id, self.welcome_message)
            if not self._is_current(generation) or self.player is None:
                return
            await self.player.play_bytes_async(result.audio)
        except (VoiceCloneError, RuntimeError) as e:
            logger.error(f"Error speaking welcome message: {e}")
            self._notify("error", "Couldn't play welcome message")

    async def wait_until_settled(self) -> CloneState:
        """Wait for an outstanding readiness poll and return the state."""
        if self._poll is not None:
            await self._poll.wait()
        return self.state

    def use_saved_clone(self, record: "CloneRecord", identity: "Identity") -> None:
        """Make a previously saved clone the active, ready clone.

        Raises:
            ValueError: If the record does not belong to the identity
        """
        if record.user_id != identity.id:
            raise ValueError("Voice clone belongs to a different user")
        generation = self._begin_instance(identity)
        logger.debug(f"Lifecycle {generation} loaded saved clone {record.id}")
        self.clone_id = record.voice_id
        self.clone_name = record.name
        self.clone_record = record
        self._transition(CloneState.READY)
        self._notify("success", f"Loaded voice clone: {record.name}")

    async def generate(self, text: str) -> SpeechResult:
        """Generate speech with the ready clone.

        Authenticated sessions record the text in the background; a failed
        save never blocks or fails the generation.

        Raises:
            CloneNotReadyError: If the clone is not READY (no request is made)
            EmptyInputError: If the text is blank (no request is made)
            RemoteError: If the provider rejects the request
        """
        if not self.is_ready:
            self._notify("error", "Voice clone is not ready yet")
            raise CloneNotReadyError(self.state)

        try:
            result = await self.generator.generate(self.clone_id, text)
        except VoiceCloneError as e:
            logger.error(f"Text-to-speech error: {e}")
            self._notify("error", f"Failed to generate speech: {user_message(e)}")
            raise

        if result.truncated:
            self._notify(
                "info",
                f"Text was shortened to {self.generator.max_text_length} characters",
            )

        if self.is_persisted:
            self._schedule_speech_save(self.clone_record.id, result.text)
        return result

    def _schedule_speech_save(self, voice_clone_id: str, text: str) -> None:
        async def _save() -> None:
            try:
                await asyncio.to_thread(self.store.save_speech, voice_clone_id, text)
            except (PersistenceError, ValueError) as e:
                logger.warning(f"Could not save generated speech: {e}")

        task = asyncio.create_task(_save())
        self._pending_saves.add(task)
        task.add_done_callback(self._pending_saves.discard)

    def _set_progress(self, progress: float) -> None:
        self.playback_progress = progress

    async def play(self, audio: bytes) -> None:
        """Play generated audio, tracking progress until it finishes.

        Raises:
            RuntimeError: If playback fails
        """
        if self.player is None:
            return
        try:
            await self.player.play_bytes_async(audio, on_progress=self._set_progress)
        except RuntimeError as e:
            logger.error(f"Error playing audio: {e}")
            self._notify("error", "Failed to play audio")
            raise
        finally:
            self.playback_progress = 0.0

        if self.identity is None and not self.has_used_speech:
            self.has_used_speech = True
            self.sign_up_prompted = True
            self._notify("info", "Sign up to save your voice clones and speech history.")

    async def speak(self, text: str) -> SpeechResult:
        """Generate speech and play it."""
        result = await self.generate(text)
        if self.player is not None:
            self._notify("success", "Speech generated and playing")
        await self.play(result.audio)
        return result

    def reset(self) -> None:
        """Discard the current clone and return to IDLE.

        Cancels any outstanding poll. Persisted records are not touched.
        Calling reset repeatedly has the same effect as calling it once.
        """
        self._begin_instance(None)
        if self.state is not CloneState.IDLE:
            self._transition(CloneState.IDLE)

    async def close(self) -> None:
        """Cancel polling and wait for background work to finish."""
        poll = self._poll
        self._cancel_poll()
        if poll is not None:
            await poll.wait()
        if self._pending_saves:
            await asyncio.gather(*self._pending_saves, return_exceptions=True)
