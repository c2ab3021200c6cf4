"""Readiness polling for submitted voice clones.

A single ``await_readiness`` routine serves both the anonymous path (run as
a background task) and the authenticated path (awaited inline before the
clone is persisted).
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from ..tts.client import VoiceCloneClient
from ..tts.errors import RemoteError
from ..tts.models import VoiceStatus
from .states import CloneState

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 5.0

_TERMINAL_STATUSES = {
    VoiceStatus.READY: CloneState.READY,
    VoiceStatus.ERROR: CloneState.ERROR,
    VoiceStatus.NOT_FOUND: CloneState.NOT_FOUND,
}


class CancellationToken:
    """Cooperative cancellation flag for a polling loop.

    Cancelling wakes any pending ``sleep`` immediately, so no timer is left
    running once the token is cancelled.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def sleep(self, seconds: float) -> bool:
        """Wait for the given time or until cancelled.

        Returns:
            True if the token was cancelled while waiting
        """
        if seconds <= 0:
            await asyncio.sleep(0)
            return self.cancelled
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True


async def await_readiness(
    client: VoiceCloneClient,
    clone_id: str,
    interval: float,
    token: CancellationToken,
) -> CloneState | None:
    """Poll a clone's status at a fixed interval until it settles.

    Each tick waits ``interval`` seconds and then issues one status query.
    A query that is in flight when the token is cancelled completes, but
    its result is discarded.

    Args:
        client: Voice-clone client used for status queries
        clone_id: Remote clone ID
        interval: Seconds between status queries
        token: Cancellation token for this poll

    Returns:
        Terminal CloneState (READY, ERROR or NOT_FOUND), or None if cancelled
    """
    ticks = 0
    while True:
        if await token.sleep(interval):
            logger.debug(f"Polling cancelled for {clone_id} after {ticks} ticks")
            return None

        try:
            status = await client.get_status(clone_id)
        except RemoteError as e:
            logger.error(f"Status check failed for {clone_id}: {e}")
            status = VoiceStatus.ERROR
        ticks += 1

        if token.cancelled:
            logger.debug(f"Discarding status '{status.value}' for cancelled poll {clone_id}")
            return None

        logger.debug(f"Voice {clone_id} status after {ticks} ticks: {status.value}")
        if status in _TERMINAL_STATUSES:
            return _TERMINAL_STATUSES[status]


class PollHandle:
    """Handle to a background readiness poll.

    Once ``cancel`` is called no further status queries are issued and the
    settled callback never fires.
    """

    def __init__(self, task: "asyncio.Task[CloneState | None]", token: CancellationToken) -> None:
        self._task = task
        self._token = token

    @property
    def cancelled(self) -> bool:
        return self._token.cancelled

    def done(self) -> bool:
        return self._task.done()

    def cancel(self) -> None:
        self._token.cancel()

    async def wait(self) -> CloneState | None:
        """Wait for the poll task to finish and return its outcome."""
        return await self._task


def start_polling(
    client: VoiceCloneClient,
    clone_id: str,
    interval: float,
    on_settled: Callable[[CloneState], Awaitable[None]],
) -> PollHandle:
    """Start polling a clone in a background task.

    Args:
        client: Voice-clone client used for status queries
        clone_id: Remote clone ID
        interval: Seconds between status queries
        on_settled: Coroutine called with the terminal state, unless cancelled

    Returns:
        PollHandle for cancelling or awaiting the poll
    """
    token = CancellationToken()

    async def _run() -> CloneState | None:
        outcome = await await_readiness(client, clone_id, interval, token)
        if outcome is not None and not token.cancelled:
            await on_settled(outcome)
        return outcome

    task = asyncio.create_task(_run(), name=f"vclone-poll-{clone_id}")
    return PollHandle(task, token)
