"""Voice-clone lifecycle: states, readiness polling and the session controller."""

from .poller import CancellationToken, PollHandle, await_readiness, start_polling
from .session import WELCOME_MESSAGE, VoiceCloneSession
from .states import TERMINAL_STATES, CloneState

__all__ = [
    "TERMINAL_STATES",
    "WELCOME_MESSAGE",
    "CancellationToken",
    "CloneState",
    "PollHandle",
    "VoiceCloneSession",
    "await_readiness",
    "start_polling",
]
