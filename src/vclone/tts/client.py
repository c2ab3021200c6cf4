"""Voice-clone client wrapping a provider backend."""

import logging

from ..providers.base import VoiceCloneProvider
from .errors import AudioTooShortError, RemoteError
from .models import AudioCapture, CloneOptions, VoiceStatus

logger = logging.getLogger(__name__)

# Samples under ~5 KB are rejected by the remote service as unusable
MIN_AUDIO_BYTES = 5 * 1024


class VoiceCloneClient:
    """Client for submitting voice clones and checking their readiness.

    Validates samples locally so obviously unusable audio never reaches
    the remote service.
    """

    def __init__(
        self,
        provider: VoiceCloneProvider,
        min_audio_bytes: int = MIN_AUDIO_BYTES,
        mode: str = "stability",
        language: str = "en",
        enhance: bool = True,
    ) -> None:
        """Initialize voice-clone client.

        Args:
            provider: Backend used for the remote calls
            min_audio_bytes: Samples must be larger than this many bytes
            mode: Clone mode ("similarity" or "stability")
            language: Language code of submitted samples
            enhance: Whether the provider should enhance the sample
        """
        self.provider = provider
        self.min_audio_bytes = min_audio_bytes
        self.mode = mode
        self.language = language
        self.enhance = enhance

    def validate_audio(self, audio: AudioCapture) -> None:
        """Check a sample against the minimum size.

        Raises:
            AudioTooShortError: If the sample does not exceed min_audio_bytes
        """
        if audio.size <= self.min_audio_bytes:
            raise AudioTooShortError(audio.size, self.min_audio_bytes)

    def build_options(self, name: str) -> CloneOptions:
        """Build the options sent with a clone request.

        Raises:
            ValueError: If the name is blank or the configured mode is unknown
        """
        return CloneOptions(
            name=name.strip(),
            description=f"Voice clone of {name.strip()}",
            mode=self.mode,
            language=self.language,
            enhance=self.enhance,
        )

    async def submit_clone(self, audio: AudioCapture, name: str) -> str:
        """Submit an audio sample for cloning.

        Args:
            audio: Recorded or uploaded sample
            name: Display name for the clone

        Returns:
            Opaque clone ID issued by the remote service

        Raises:
            AudioTooShortError: If the sample is too small (no request is made)
            InvalidAudioError: If the service rejects the sample
            PayloadTooLargeError: If the sample exceeds the upload limit
            UnauthorizedError: If the API key is rejected
            RemoteError: For any other remote failure
        """
        self.validate_audio(audio)
        options = self.build_options(name)

        logger.debug(
            f"Submitting clone '{options.name}': {audio.size} bytes ({audio.mime_type})"
        )
        clone_id = await self.provider.clone(audio, options)
        if not clone_id:
            raise RemoteError("No voice ID returned from API")

        logger.debug(f"Voice clone created: {clone_id}")
        return clone_id

    async def get_status(self, clone_id: str) -> VoiceStatus:
        """Query the remote readiness of a clone."""
        return await self.provider.get_status(clone_id)
