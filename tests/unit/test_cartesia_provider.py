"""Unit tests for CartesiaProvider request building and error mapping."""

import json
import os
import sys
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from vclone.providers.cartesia import CartesiaProvider
from vclone.tts.errors import (
    InvalidAudioError,
    NotFoundError,
    PayloadTooLargeError,
    RemoteError,
    UnauthorizedError,
)
from vclone.tts.models import AudioCapture, CloneOptions, SynthesisSettings, VoiceStatus


def make_provider(handler) -> CartesiaProvider:
    return CartesiaProvider(api_key="test_key", transport=httpx.MockTransport(handler))


class TestCartesiaProviderInitialization:
    def test_no_api_key_raises_auth_error(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(UnauthorizedError, match="Cartesia API key not found"):
                CartesiaProvider()

    def test_reads_api_key_from_env(self) -> None:
        with patch.dict(os.environ, {"CARTESIA_API_KEY": "env_key"}):
            provider = CartesiaProvider()

        assert provider._api_key == "env_key"


class TestCartesiaClone:
    """Test POST /voices/clone."""

    @pytest.mark.asyncio
    async def test_sends_multipart_clip_and_options(self) -> None:
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(200, json={"id": "voice-abc", "name": "Ada"})

        provider = make_provider(handler)
        voice_id = await provider.clone(
            AudioCapture(data=b"RIFFdata", filename="ada.wav"),
            CloneOptions(name="Ada", description="Voice clone of Ada"),
        )
        await provider.aclose()

        request = captured["request"]
        assert voice_id == "voice-abc"
        assert request.method == "POST"
        assert request.url.path == "/voices/clone"
        assert request.headers["X-API-Key"] == "test_key"
        assert request.headers["Cartesia-Version"] == CartesiaProvider.API_VERSION
        body = request.content
        assert b'name="clip"; filename="ada.wav"' in body
        assert b"RIFFdata" in body
        assert b'name="mode"\r\n\r\nstability' in body
        assert b'name="enhance"\r\n\r\ntrue' in body
        assert b"Voice clone of Ada" in body

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "error_type"),
        [
            (400, InvalidAudioError),
            (422, InvalidAudioError),
            (413, PayloadTooLargeError),
            (401, UnauthorizedError),
        ],
    )
    async def test_error_statuses_map_to_taxonomy(self, status: int, error_type) -> None:
        provider = make_provider(
            lambda request: httpx.Response(status, json={"message": "rejected"})
        )

        with pytest.raises(error_type) as exc_info:
            await provider.clone(AudioCapture(data=b"x"), CloneOptions(name="Ada"))

        assert exc_info.value.status_code == status
        assert "rejected" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_missing_id_raises_remote_error(self) -> None:
        provider = make_provider(lambda request: httpx.Response(200, json={}))

        with pytest.raises(RemoteError, match="No voice ID returned"):
            await provider.clone(AudioCapture(data=b"x"), CloneOptions(name="Ada"))

    @pytest.mark.asyncio
    async def test_network_failure_raises_remote_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        provider = make_provider(handler)

        with pytest.raises(RemoteError, match="Network error") as exc_info:
            await provider.clone(AudioCapture(data=b"x"), CloneOptions(name="Ada"))

        assert exc_info.value.status_code is None


class TestCartesiaStatus:
    """Test GET /voices/{id} readiness mapping."""

    @pytest.mark.asyncio
    async def test_voice_with_id_is_ready(self) -> None:
        provider = make_provider(
            lambda request: httpx.Response(200, json={"id": "voice-abc"})
        )

        assert await provider.get_status("voice-abc") is VoiceStatus.READY

    @pytest.mark.asyncio
    async def test_voice_without_id_is_processing(self) -> None:
        provider = make_provider(lambda request: httpx.Response(200, json={}))

        assert await provider.get_status("voice-abc") is VoiceStatus.PROCESSING

    @pytest.mark.asyncio
    async def test_404_is_not_found(self) -> None:
        provider = make_provider(lambda request: httpx.Response(404, json={}))

        assert await provider.get_status("voice-abc") is VoiceStatus.NOT_FOUND

    @pytest.mark.asyncio
    async def test_server_error_is_error(self) -> None:
        provider = make_provider(lambda request: httpx.Response(500, text="oops"))

        assert await provider.get_status("voice-abc") is VoiceStatus.ERROR

    @pytest.mark.asyncio
    async def test_network_failure_is_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        provider = make_provider(handler)

        assert await provider.get_status("voice-abc") is VoiceStatus.ERROR


class TestCartesiaSynthesize:
    """Test POST /tts/bytes."""

    @pytest.mark.asyncio
    async def test_sends_transcript_voice_and_format(self) -> None:
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["payload"] = json.loads(request.content)
            return httpx.Response(200, content=b"RIFFspeech")

        provider = make_provider(handler)
        audio = await provider.synthesize("voice-abc", "Hello there", SynthesisSettings())

        assert audio == b"RIFFspeech"
        assert captured["payload"] == {
            "model_id": "sonic-2",
            "transcript": "Hello there",
            "voice": {"mode": "id", "id": "voice-abc"},
            "language": "en",
            "output_format": {
                "container": "wav",
                "sample_rate": 44100,
                "encoding": "pcm_s16le",
            },
        }

    @pytest.mark.asyncio
    async def test_configured_model_overrides_default(self) -> None:
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["payload"] = json.loads(request.content)
            return httpx.Response(200, content=b"RIFF")

        provider = make_provider(handler)
        await provider.synthesize("v", "hi", SynthesisSettings(model_id="sonic-english"))

        assert captured["payload"]["model_id"] == "sonic-english"

    @pytest.mark.asyncio
    async def test_rate_limit_keeps_status_code(self) -> None:
        provider = make_provider(
            lambda request: httpx.Response(429, json={"error": "too many requests"})
        )

        with pytest.raises(RemoteError, match="Rate limit exceeded") as exc_info:
            await provider.synthesize("v", "hi", SynthesisSettings())

        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_unknown_voice_raises_not_found(self) -> None:
        provider = make_provider(lambda request: httpx.Response(404, json={}))

        with pytest.raises(NotFoundError):
            await provider.synthesize("missing", "hi", SynthesisSettings())
