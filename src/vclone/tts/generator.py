"""Speech generation with a cloned voice."""

import logging

from ..providers.base import VoiceCloneProvider
from .errors import EmptyInputError, RemoteError
from .models import SpeechResult, SynthesisSettings

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH = 500


def truncate_text(text: str, max_length: int = MAX_TEXT_LENGTH) -> tuple[str, bool]:
    """Cut text down to max_length characters.

    Returns:
        Tuple of (text to submit, whether truncation happened)
    """
    if len(text) <= max_length:
        return text, False
    return text[:max_length], True


class SpeechGenerator:
    """Turns text into audio using a ready voice clone."""

    def __init__(
        self,
        provider: VoiceCloneProvider,
        settings: SynthesisSettings | None = None,
        max_text_length: int = MAX_TEXT_LENGTH,
    ) -> None:
        self.provider = provider
        self.settings = settings or SynthesisSettings()
        self.max_text_length = max_text_length

    async def generate(self, voice_id: str, text: str) -> SpeechResult:
        """Synthesize speech for text in the given voice.

        Args:
            voice_id: Remote ID of a ready clone
            text: Text to speak, truncated to max_text_length characters

        Returns:
            SpeechResult with audio bytes and truncation info

        Raises:
            EmptyInputError: If text is blank (no request is made)
            RemoteError: If the provider rejects the request
        """
        if not text or not text.strip():
            raise EmptyInputError("Please enter some text for speech generation")

        original_length = len(text)
        submitted, truncated = truncate_text(text, self.max_text_length)
        if truncated:
            logger.debug(
                f"Truncated text from {original_length} to {self.max_text_length} chars"
            )

        audio = await self.provider.synthesize(voice_id, submitted, self.settings)
        if not audio:
            raise RemoteError("No audio data received from API")

        return SpeechResult(
            audio=audio,
            text=submitted,
            truncated=truncated,
            original_length=original_length,
        )
