"""Custom voice-clone exceptions."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..clone.states import CloneState


class VoiceCloneError(Exception):
    """Base exception for voice-clone related errors."""

    def __init__(
        self, message: str, original_error: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_error = original_error


class DeviceUnavailableError(VoiceCloneError):
    """Exception raised when no audio input device can be acquired.

    This typically occurs when:
    - Microphone permission is denied
    - No input device is attached
    - The PortAudio library is not installed
    """

    pass


class AudioTooShortError(VoiceCloneError):
    """Exception raised when an audio sample is below the minimum size."""

    def __init__(self, size: int, minimum: int) -> None:
        super().__init__(
            f"Audio sample is too short ({size} bytes, minimum {minimum} bytes)"
        )
        self.size = size
        self.minimum = minimum


class EmptyInputError(VoiceCloneError):
    """Exception raised when required text input is blank."""

    pass


class RemoteError(VoiceCloneError):
    """Exception raised for voice-clone API communication errors.

    This typically occurs when:
    - API server is unavailable (5xx errors)
    - Rate limits are exceeded (429 error)
    - Request format is invalid (4xx errors)
    - Network connectivity issues
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.status_code = status_code


class InvalidAudioError(RemoteError):
    """Remote service rejected the audio format or content."""

    pass


class PayloadTooLargeError(RemoteError):
    """Remote service rejected the upload because it is too large."""

    pass


class UnauthorizedError(RemoteError):
    """Exception raised for authentication failures.

    This typically occurs when:
    - API key is missing or invalid
    - Account has insufficient credits
    - API key permissions are insufficient
    """

    pass


class NotFoundError(RemoteError):
    """Remote record for a voice id does not exist."""

    pass


class PersistenceError(VoiceCloneError):
    """Exception raised when a storage read or write fails."""

    pass


class LifecycleError(VoiceCloneError):
    """Operation is not permitted in the current lifecycle state."""

    def __init__(self, message: str, state: "CloneState") -> None:
        super().__init__(message)
        self.state = state


class CloneNotReadyError(LifecycleError):
    """Speech generation was requested for a clone that is not ready."""

    def __init__(self, state: "CloneState") -> None:
        super().__init__(f"Voice clone is not ready (state: {state.value})", state)


def error_from_status(
    status_code: int | None,
    message: str,
    *,
    audio_upload: bool = False,
    original_error: Exception | None = None,
) -> RemoteError:
    """Build the RemoteError subclass matching an HTTP status code.

    Args:
        status_code: HTTP status returned by the provider, if known
        message: Human-readable error detail
        audio_upload: Whether the failing request was an audio upload, in
            which case 400/415/422 mean the audio itself was rejected
        original_error: Underlying exception, if any

    Returns:
        RemoteError instance (not raised)
    """
    if status_code is None:
        lowered = message.lower()
        if "unauthorized" in lowered or "401" in message:
            status_code = 401
        elif "not found" in lowered or "404" in message:
            status_code = 404

    if status_code in (401, 403):
        return UnauthorizedError(
            f"Authentication failed: {message}", status_code, original_error
        )
    if status_code == 404:
        return NotFoundError(f"Not found: {message}", status_code, original_error)
    if status_code == 413:
        return PayloadTooLargeError(
            f"Audio file too large: {message}", status_code, original_error
        )
    if audio_upload and status_code in (400, 415, 422):
        return InvalidAudioError(
            f"Invalid audio: {message}", status_code, original_error
        )
    if status_code == 429:
        return RemoteError(f"Rate limit exceeded: {message}", 429, original_error)
    if status_code is not None and status_code >= 500:
        return RemoteError(f"Server error: {message}", status_code, original_error)
    return RemoteError(f"API call failed: {message}", status_code, original_error)


_USER_MESSAGES: dict[type[Exception], str] = {
    DeviceUnavailableError: "Could not access a microphone. Check that one is connected and permitted.",
    AudioTooShortError: "The recording is too short. Record at least a few seconds of speech.",
    InvalidAudioError: "The audio sample was rejected. Try a different recording or file.",
    PayloadTooLargeError: "The audio file is too large. Try a shorter recording.",
    UnauthorizedError: "The voice service rejected the API key.",
    NotFoundError: "The voice clone could not be found.",
    PersistenceError: "Could not read or write saved voice clones.",
    CloneNotReadyError: "Voice clone is not ready yet.",
}


def user_message(error: Exception) -> str:
    """Return a short, user-facing description of an error."""
    if isinstance(error, EmptyInputError | LifecycleError) and not isinstance(
        error, CloneNotReadyError
    ):
        return str(error)
    for error_type in type(error).__mro__:
        if error_type in _USER_MESSAGES:
            return _USER_MESSAGES[error_type]
    if isinstance(error, RemoteError):
        if error.status_code is not None:
            return f"The voice service returned an error ({error.status_code})."
        return "The voice service could not be reached."
    return "An unexpected error occurred."
