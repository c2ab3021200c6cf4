"""Voice-clone data models with validation."""

from dataclasses import dataclass, field
from enum import Enum

CLONE_MODES = ("similarity", "stability")


class VoiceStatus(str, Enum):
    """Readiness of a voice as reported by the remote service."""

    PROCESSING = "processing"
    READY = "ready"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class AudioCapture:
    """A finished audio sample ready for submission.

    Args:
        data: Encoded audio bytes
        mime_type: MIME type of the encoded audio (e.g., "audio/wav")
        filename: Optional file name sent along with the upload
    """

    data: bytes
    mime_type: str = "audio/wav"
    filename: str = "voice.wav"

    def __post_init__(self) -> None:
        """Validate audio capture."""
        if not self.data:
            raise ValueError("Audio data cannot be empty")
        if not self.mime_type or "/" not in self.mime_type:
            raise ValueError(f"Invalid mime type: {self.mime_type!r}")

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class CloneOptions:
    """Options sent with a voice clone request.

    Args:
        name: Display name of the clone
        description: Free-form description
        mode: "similarity" or "stability"
        language: Language code of the sample
        enhance: Whether the provider should denoise the sample
    """

    name: str
    description: str = ""
    mode: str = "stability"
    language: str = "en"
    enhance: bool = True

    def __post_init__(self) -> None:
        """Validate clone options."""
        if not self.name or not self.name.strip():
            raise ValueError("name cannot be empty")
        if self.mode not in CLONE_MODES:
            raise ValueError(f"mode must be one of {', '.join(CLONE_MODES)}")


@dataclass(frozen=True)
class OutputFormat:
    """Audio container settings for synthesized speech."""

    container: str = "wav"
    sample_rate: int = 44100
    encoding: str = "pcm_s16le"

    def __post_init__(self) -> None:
        if self.sample_rate <= 0:
            raise ValueError("sample_rate must be positive")

    def to_dict(self) -> dict:
        return {
            "container": self.container,
            "sample_rate": self.sample_rate,
            "encoding": self.encoding,
        }


@dataclass(frozen=True)
class SynthesisSettings:
    """Settings for a speech synthesis request.

    Args:
        model_id: Provider model ID (None uses the provider default)
        language: Language code of the transcript
        output_format: Container settings for the returned audio
    """

    model_id: str | None = None
    language: str = "en"
    output_format: OutputFormat = field(default_factory=OutputFormat)


@dataclass(frozen=True)
class SpeechResult:
    """Synthesized speech and the text that produced it."""

    audio: bytes
    text: str
    truncated: bool = False
    original_length: int = 0
