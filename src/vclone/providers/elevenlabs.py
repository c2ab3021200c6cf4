"""ElevenLabs voice-cloning provider implementation."""

import asyncio
import logging
import os

from elevenlabs.client import ElevenLabs

from ..tts.errors import (
    NotFoundError,
    RemoteError,
    UnauthorizedError,
    error_from_status,
)
from ..tts.models import (
    AudioCapture,
    CloneOptions,
    OutputFormat,
    SynthesisSettings,
    VoiceStatus,
)
from .base import VoiceCloneProvider

logger = logging.getLogger(__name__)


def _to_remote_error(e: Exception, audio_upload: bool = False) -> RemoteError:
    """Map an ElevenLabs SDK exception onto the vclone error taxonomy."""
    status_code = getattr(e, "status_code", None)
    return error_from_status(
        status_code, str(e), audio_upload=audio_upload, original_error=e
    )


def _output_format(fmt: OutputFormat) -> str:
    """Translate an OutputFormat into an ElevenLabs output_format string.

    ElevenLabs only streams raw PCM or MP3; any non-raw container is
    served as MP3 at the closest supported sample rate.
    """
    if fmt.container == "raw":
        return f"pcm_{fmt.sample_rate}"
    sample_rate = 22050 if fmt.sample_rate <= 22050 else 44100
    return f"mp3_{sample_rate}_128"


class ElevenLabsProvider(VoiceCloneProvider):
    """ElevenLabs provider implementation.

    Uses instant voice cloning (IVC) and the text-to-speech endpoint of
    the ElevenLabs API.
    """

    name = "elevenlabs"
    default_model = "eleven_multilingual_v2"

    def __init__(self, api_key: str | None = None) -> None:
        """Initialize ElevenLabs provider.

        Args:
            api_key: ElevenLabs API key. If not provided, reads from
                    ELEVENLABS_API_KEY environment variable.

        Raises:
            UnauthorizedError: If API key is not provided or invalid.
        """
        self._api_key = api_key or os.getenv("ELEVENLABS_API_KEY")
        if not self._api_key:
            raise UnauthorizedError(
                "ElevenLabs API key not found. Set ELEVENLABS_API_KEY environment "
                "variable or provide api_key parameter."
            )

        try:
            self._client = ElevenLabs(api_key=self._api_key)
        except Exception as e:
            raise UnauthorizedError(
                f"Failed to initialize ElevenLabs client: {e}", None, e
            ) from e

    async def clone(self, audio: AudioCapture, options: CloneOptions) -> str:
        """Create an instant voice clone.

        The ElevenLabs IVC endpoint has no mode or language parameters;
        ``enhance`` maps to background-noise removal.
        """

        def _sync_clone() -> str:
            response = self._client.voices.ivc.create(
                name=options.name,
                description=options.description,
                files=[(audio.filename, audio.data, audio.mime_type)],
                remove_background_noise=options.enhance,
            )
            return response.voice_id

        try:
            voice_id = await asyncio.to_thread(_sync_clone)
        except Exception as e:
            logger.error(f"ElevenLabs clone failed: {e}")
            raise _to_remote_error(e, audio_upload=True) from e

        if not voice_id:
            raise RemoteError("No voice ID returned from API")
        return voice_id

    async def get_status(self, voice_id: str) -> VoiceStatus:
        """Check whether a voice is ready.

        IVC voices are usable as soon as the voice lookup succeeds.
        """
        try:
            voice = await asyncio.to_thread(self._client.voices.get, voice_id)
        except Exception as e:
            if isinstance(_to_remote_error(e), NotFoundError):
                return VoiceStatus.NOT_FOUND
            logger.error(f"Error checking voice status: {e}")
            return VoiceStatus.ERROR

        if getattr(voice, "voice_id", None):
            return VoiceStatus.READY
        return VoiceStatus.PROCESSING

    async def synthesize(
        self, voice_id: str, text: str, settings: SynthesisSettings
    ) -> bytes:
        """Convert text to speech audio bytes."""

        def _sync_convert() -> bytes:
            audio_generator = self._client.text_to_speech.convert(
                text=text,
                voice_id=voice_id,
                model_id=settings.model_id or self.default_model,
                output_format=_output_format(settings.output_format),
            )
            # Collect all audio chunks
            return b"".join(audio_generator)

        try:
            audio_bytes = await asyncio.to_thread(_sync_convert)
        except Exception as e:
            logger.error(f"ElevenLabs TTS failed: {e}")
            raise _to_remote_error(e) from e

        if not audio_bytes:
            raise RemoteError("No audio data received from API")
        return audio_bytes
