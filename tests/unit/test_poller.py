"""Unit tests for readiness polling and cancellation."""

import asyncio
import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from vclone.clone.poller import CancellationToken, await_readiness, start_polling
from vclone.clone.states import CloneState
from vclone.tts.client import VoiceCloneClient
from vclone.tts.errors import RemoteError
from vclone.tts.models import VoiceStatus


class TestCancellationToken:
    @pytest.mark.asyncio
    async def test_sleep_times_out_when_not_cancelled(self) -> None:
        token = CancellationToken()

        assert await token.sleep(0.01) is False
        assert not token.cancelled

    @pytest.mark.asyncio
    async def test_cancel_wakes_sleeper(self) -> None:
        token = CancellationToken()
        sleeper = asyncio.create_task(token.sleep(10))
        await asyncio.sleep(0)

        token.cancel()

        assert await asyncio.wait_for(sleeper, timeout=1) is True

    @pytest.mark.asyncio
    async def test_zero_interval_reports_cancellation(self) -> None:
        token = CancellationToken()
        token.cancel()

        assert await token.sleep(0) is True


class TestAwaitReadiness:
    """Test the shared polling routine."""

    @pytest.mark.asyncio
    async def test_polls_until_ready(self, fake_provider) -> None:
        fake_provider.statuses = [
            VoiceStatus.PROCESSING,
            VoiceStatus.PROCESSING,
            VoiceStatus.READY,
        ]
        client = VoiceCloneClient(fake_provider)

        outcome = await await_readiness(client, "voice-123", 0.01, CancellationToken())

        assert outcome is CloneState.READY
        assert fake_provider.status_calls == ["voice-123"] * 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            (VoiceStatus.ERROR, CloneState.ERROR),
            (VoiceStatus.NOT_FOUND, CloneState.NOT_FOUND),
        ],
    )
    async def test_failure_statuses_settle(self, fake_provider, status, expected) -> None:
        fake_provider.statuses = [status]
        client = VoiceCloneClient(fake_provider)

        assert await await_readiness(client, "v", 0, CancellationToken()) is expected

    @pytest.mark.asyncio
    async def test_status_query_exception_counts_as_error(self, fake_provider) -> None:
        client = VoiceCloneClient(fake_provider)

        async def failing_status(voice_id: str) -> VoiceStatus:
            raise RemoteError("Network error: reset")

        fake_provider.get_status = failing_status

        assert await await_readiness(client, "v", 0, CancellationToken()) is CloneState.ERROR

    @pytest.mark.asyncio
    async def test_cancelled_token_issues_no_queries(self, fake_provider) -> None:
        token = CancellationToken()
        token.cancel()

        outcome = await await_readiness(VoiceCloneClient(fake_provider), "v", 0.01, token)

        assert outcome is None
        assert fake_provider.status_calls == []

    @pytest.mark.asyncio
    async def test_result_of_in_flight_query_is_discarded(self, fake_provider) -> None:
        token = CancellationToken()
        client = VoiceCloneClient(fake_provider)

        async def cancelling_status(voice_id: str) -> VoiceStatus:
            token.cancel()
            return VoiceStatus.READY

        fake_provider.get_status = cancelling_status

        assert await await_readiness(client, "v", 0, token) is None


class TestStartPolling:
    """Test background polling handles."""

    @pytest.mark.asyncio
    async def test_settled_callback_receives_outcome(self, fake_provider) -> None:
        fake_provider.statuses = [VoiceStatus.PROCESSING, VoiceStatus.READY]
        outcomes = []

        async def on_settled(outcome: CloneState) -> None:
            outcomes.append(outcome)

        handle = start_polling(VoiceCloneClient(fake_provider), "v", 0.01, on_settled)

        assert await handle.wait() is CloneState.READY
        assert handle.done()
        assert outcomes == [CloneState.READY]

    @pytest.mark.asyncio
    async def test_cancel_stops_queries_and_callback(self, fake_provider) -> None:
        fake_provider.statuses = [VoiceStatus.PROCESSING]
        outcomes = []

        async def on_settled(outcome: CloneState) -> None:
            outcomes.append(outcome)

        handle = start_polling(VoiceCloneClient(fake_provider), "v", 0.01, on_settled)
        while len(fake_provider.status_calls) < 2:
            await asyncio.sleep(0.005)

        handle.cancel()
        queries_at_cancel = len(fake_provider.status_calls)
        fake_provider.statuses = [VoiceStatus.READY]
        await asyncio.sleep(0.05)

        assert handle.cancelled
        assert await handle.wait() is None
        assert len(fake_provider.status_calls) == queries_at_cancel
        assert outcomes == []
