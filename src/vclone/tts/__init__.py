"""Voice cloning and speech package for vclone.

This package provides the clone client, speech generator, data models and
error taxonomy shared by every provider backend.
"""

from .client import MIN_AUDIO_BYTES, VoiceCloneClient
from .errors import (
    AudioTooShortError,
    CloneNotReadyError,
    DeviceUnavailableError,
    EmptyInputError,
    InvalidAudioError,
    LifecycleError,
    NotFoundError,
    PayloadTooLargeError,
    PersistenceError,
    RemoteError,
    UnauthorizedError,
    VoiceCloneError,
)
from .generator import MAX_TEXT_LENGTH, SpeechGenerator
from .models import (
    AudioCapture,
    CloneOptions,
    OutputFormat,
    SpeechResult,
    SynthesisSettings,
    VoiceStatus,
)

__all__ = [
    "MAX_TEXT_LENGTH",
    "MIN_AUDIO_BYTES",
    "AudioCapture",
    "AudioTooShortError",
    "CloneNotReadyError",
    "CloneOptions",
    "DeviceUnavailableError",
    "EmptyInputError",
    "InvalidAudioError",
    "LifecycleError",
    "NotFoundError",
    "OutputFormat",
    "PayloadTooLargeError",
    "PersistenceError",
    "RemoteError",
    "SpeechGenerator",
    "SpeechResult",
    "SynthesisSettings",
    "UnauthorizedError",
    "VoiceCloneClient",
    "VoiceCloneError",
    "VoiceStatus",
]
