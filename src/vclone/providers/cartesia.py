"""Cartesia voice-cloning provider implementation."""

import logging
import os

import httpx

from ..tts.errors import RemoteError, UnauthorizedError, error_from_status
from ..tts.models import AudioCapture, CloneOptions, SynthesisSettings, VoiceStatus
from .base import VoiceCloneProvider

logger = logging.getLogger(__name__)


class CartesiaProvider(VoiceCloneProvider):
    """Cartesia provider implementation.

    Clones voices from a single clip and synthesizes speech through the
    Cartesia REST API.
    """

    name = "cartesia"
    default_model = "sonic-2"

    BASE_URL = "https://api.cartesia.ai"
    API_VERSION = "2024-11-13"

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize Cartesia provider.

        Args:
            api_key: Cartesia API key. If not provided, reads from
                    CARTESIA_API_KEY environment variable.
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used for testing)

        Raises:
            UnauthorizedError: If API key is not provided.
        """
        self._api_key = api_key or os.getenv("CARTESIA_API_KEY")
        if not self._api_key:
            raise UnauthorizedError(
                "Cartesia API key not found. Set CARTESIA_API_KEY environment "
                "variable or provide api_key parameter."
            )

        self._client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers={
                "X-API-Key": self._api_key,
                "Cartesia-Version": self.API_VERSION,
            },
            timeout=timeout,
            transport=transport,
        )

    @staticmethod
    def _detail(response: httpx.Response) -> str:
        """Extract an error message from a failed response."""
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase
        if isinstance(body, dict):
            return str(body.get("message") or body.get("error") or body)
        return str(body)

    async def clone(self, audio: AudioCapture, options: CloneOptions) -> str:
        """Clone a voice from a single audio clip.

        Args:
            audio: Sample to clone
            options: Clone options

        Returns:
            Cartesia voice ID

        Raises:
            InvalidAudioError: If Cartesia rejects the clip
            PayloadTooLargeError: If the clip exceeds the upload limit
            UnauthorizedError: If the API key is rejected
            RemoteError: For any other failure
        """
        try:
            response = await self._client.post(
                "/voices/clone",
                data={
                    "name": options.name,
                    "description": options.description,
                    "language": options.language,
                    "mode": options.mode,
                    "enhance": "true" if options.enhance else "false",
                },
                files={"clip": (audio.filename, audio.data, audio.mime_type)},
            )
        except httpx.HTTPError as e:
            raise RemoteError(f"Network error: {e}", None, e) from e

        if response.status_code >= 400:
            detail = self._detail(response)
            logger.error(f"Cartesia clone failed ({response.status_code}): {detail}")
            raise error_from_status(response.status_code, detail, audio_upload=True)

        try:
            voice_id = response.json().get("id")
        except (ValueError, AttributeError) as e:
            raise RemoteError(
                f"Unexpected clone response: {e}", response.status_code, e
            ) from e
        if not voice_id:
            raise RemoteError("No voice ID returned from API", response.status_code)
        return voice_id

    async def get_status(self, voice_id: str) -> VoiceStatus:
        """Check whether a voice is ready.

        Cartesia exposes no status field; a voice object carrying an ``id``
        is taken to mean the clone is usable.
        """
        try:
            response = await self._client.get(f"/voices/{voice_id}")
        except httpx.HTTPError as e:
            logger.error(f"Error checking voice status: {e}")
            return VoiceStatus.ERROR

        if response.status_code == 404:
            return VoiceStatus.NOT_FOUND
        if response.status_code >= 400:
            logger.error(
                f"Error checking voice status ({response.status_code}): "
                f"{self._detail(response)}"
            )
            return VoiceStatus.ERROR

        try:
            voice = response.json()
        except ValueError:
            return VoiceStatus.PROCESSING
        logger.debug(f"Voice object received: {voice}")

        if isinstance(voice, dict) and voice.get("id"):
            return VoiceStatus.READY
        return VoiceStatus.PROCESSING

    async def synthesize(
        self, voice_id: str, text: str, settings: SynthesisSettings
    ) -> bytes:
        """Generate speech bytes with a cloned voice.

        Raises:
            UnauthorizedError: If the API key is rejected
            NotFoundError: If the voice no longer exists
            RemoteError: For any other failure, with status_code preserved
        """
        payload = {
            "model_id": settings.model_id or self.default_model,
            "transcript": text,
            "voice": {"mode": "id", "id": voice_id},
            "language": settings.language,
            "output_format": settings.output_format.to_dict(),
        }

        try:
            response = await self._client.post("/tts/bytes", json=payload)
        except httpx.HTTPError as e:
            raise RemoteError(f"Network error: {e}", None, e) from e

        if response.status_code >= 400:
            detail = self._detail(response)
            logger.error(f"Cartesia TTS failed ({response.status_code}): {detail}")
            raise error_from_status(response.status_code, detail)

        return response.content

    async def aclose(self) -> None:
        await self._client.aclose()
