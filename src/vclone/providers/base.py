"""Abstract base class for voice-cloning providers.

This module defines the interface that all voice-cloning backends must
implement, ensuring consistent behavior across different remote services.
"""

from abc import ABC, abstractmethod

from ..tts.models import AudioCapture, CloneOptions, SynthesisSettings, VoiceStatus


class VoiceCloneProvider(ABC):
    """Abstract base class for voice-cloning providers.

    All providers must inherit from this class and implement cloning,
    readiness checks and synthesis. Providers translate their service's
    failures into the vclone error taxonomy (see tts.errors).
    """

    name: str = ""
    default_model: str = ""

    @abstractmethod
    async def clone(self, audio: AudioCapture, options: CloneOptions) -> str:
        """Create a voice clone from an audio sample.

        Args:
            audio: Sample to clone
            options: Name, description, mode, language and enhancement flag

        Returns:
            Remote voice ID

        Raises:
            RemoteError: If the service rejects the request
        """
        pass

    @abstractmethod
    async def get_status(self, voice_id: str) -> VoiceStatus:
        """Report the readiness of a voice.

        Status queries never raise for remote failures; they are reported
        as VoiceStatus.ERROR (or NOT_FOUND for a missing voice).

        Args:
            voice_id: Remote voice ID returned by clone()

        Returns:
            Current VoiceStatus
        """
        pass

    @abstractmethod
    async def synthesize(
        self, voice_id: str, text: str, settings: SynthesisSettings
    ) -> bytes:
        """Convert text to audio bytes in the given voice.

        Args:
            voice_id: Remote voice ID
            text: Text to speak, sent as-is
            settings: Model, language and output format

        Returns:
            Encoded audio bytes

        Raises:
            RemoteError: If synthesis fails
        """
        pass

    async def aclose(self) -> None:
        """Release network resources held by the provider."""
        return None
