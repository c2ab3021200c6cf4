"""Configuration management for vclone.

Loads configuration from ~/.config/vclone/config.toml.
Priority chain: CLI flags > env vars > config file.
"""

import os
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path

from .tts.models import CLONE_MODES

CONFIG_DIR = Path.home() / ".config" / "vclone"
CONFIG_PATH = CONFIG_DIR / "config.toml"

DEFAULT_CONFIG = """\
# vclone configuration

[provider]
# Voice-cloning service: "cartesia" or "elevenlabs"
name = "cartesia"

# Model ID for speech synthesis (empty = provider default)
# Cartesia: sonic-2   ElevenLabs: eleven_multilingual_v2
model = ""

# Language of your samples and of generated speech
language = "en"

# Clone mode: "stability" or "similarity" (Cartesia only)
mode = "stability"

# Let the provider clean up background noise in the sample
enhance = true

[output]
# Format of synthesized speech
container = "wav"
sample_rate = 44100
encoding = "pcm_s16le"

[clone]
# Seconds between readiness checks after submitting a sample
poll_interval = 5.0

# Samples smaller than this (in bytes) are rejected before upload
min_audio_bytes = 5120

# Longer text is cut to this many characters
max_text_length = 500

# Spoken once a new clone is ready (empty disables)
welcome_message = "Hello, your voice clone is ready! How do I sound?"

[capture]
# Microphone recording settings
sample_rate = 44100
channels = 1
seconds = 30

# API keys are read from environment variables, not this file:
#   CARTESIA_API_KEY    - Cartesia provider
#   ELEVENLABS_API_KEY  - ElevenLabs provider
"""


@dataclass(frozen=True)
class ProviderConfig:
    """Voice-cloning provider configuration."""

    name: str
    model: str | None
    language: str
    mode: str
    enhance: bool


@dataclass(frozen=True)
class OutputConfig:
    """Synthesized audio format."""

    container: str
    sample_rate: int
    encoding: str


@dataclass(frozen=True)
class CloneConfig:
    """Clone lifecycle settings."""

    poll_interval: float
    min_audio_bytes: int
    max_text_length: int
    welcome_message: str | None


@dataclass(frozen=True)
class CaptureConfig:
    """Microphone capture settings."""

    sample_rate: int
    channels: int
    seconds: float


@dataclass(frozen=True)
class VcloneConfig:
    """Top-level vclone configuration."""

    provider: ProviderConfig
    output: OutputConfig
    clone: CloneConfig
    capture: CaptureConfig


_cached_config: VcloneConfig | None = None


def generate_config() -> Path:
    """Generate default config file at ~/.config/vclone/config.toml."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    CONFIG_PATH.write_text(DEFAULT_CONFIG)
    return CONFIG_PATH


def parse_config(data: dict) -> VcloneConfig:
    """Build a validated config from parsed TOML data with env overrides.

    Raises:
        SystemExit: If required values are missing or invalid.
    """
    provider = data.get("provider", {})
    output = data.get("output", {})
    clone = data.get("clone", {})
    capture = data.get("capture", {})

    # Validate required fields
    missing = []
    if "name" not in provider:
        missing.append("provider.name")
    if "poll_interval" not in clone:
        missing.append("clone.poll_interval")

    if missing:
        print(
            f"Missing required config values: {', '.join(missing)}",
            file=sys.stderr,
        )
        print(f"Edit {CONFIG_PATH} or delete it to regenerate.", file=sys.stderr)
        raise SystemExit(1)

    # Env vars override config file values
    model = os.getenv("VCLONE_MODEL", provider.get("model", ""))
    poll_interval = os.getenv("VCLONE_POLL_INTERVAL", clone["poll_interval"])
    welcome = clone.get("welcome_message", "")
    mode = provider.get("mode", "stability")

    invalid = []
    if mode not in CLONE_MODES:
        invalid.append(f"provider.mode must be one of {', '.join(CLONE_MODES)}")
    try:
        poll_interval = float(poll_interval)
    except (TypeError, ValueError):
        poll_interval = 0.0
    if poll_interval <= 0:
        invalid.append("clone.poll_interval must be a positive number of seconds")

    if invalid:
        print(f"Invalid config values: {'; '.join(invalid)}", file=sys.stderr)
        print(f"Edit {CONFIG_PATH} or delete it to regenerate.", file=sys.stderr)
        raise SystemExit(1)

    return VcloneConfig(
        provider=ProviderConfig(
            name=os.getenv("VCLONE_PROVIDER", provider["name"]),
            model=model or None,
            language=os.getenv("VCLONE_LANGUAGE", provider.get("language", "en")),
            mode=mode,
            enhance=provider.get("enhance", True),
        ),
        output=OutputConfig(
            container=output.get("container", "wav"),
            sample_rate=int(output.get("sample_rate", 44100)),
            encoding=output.get("encoding", "pcm_s16le"),
        ),
        clone=CloneConfig(
            poll_interval=poll_interval,
            min_audio_bytes=int(clone.get("min_audio_bytes", 5120)),
            max_text_length=int(clone.get("max_text_length", 500)),
            welcome_message=welcome or None,
        ),
        capture=CaptureConfig(
            sample_rate=int(capture.get("sample_rate", 44100)),
            channels=int(capture.get("channels", 1)),
            seconds=float(capture.get("seconds", 30)),
        ),
    )


def load_config() -> VcloneConfig:
    """Load configuration from config file with env var overrides.

    On first run, generates the config file and exits so the user
    can review it before proceeding.

    Returns:
        Loaded and validated VcloneConfig.

    Raises:
        SystemExit: If config is missing (after generating) or invalid.
    """
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    if not CONFIG_PATH.exists():
        path = generate_config()
        print(
            f"No config found. Generated {path}. Review it and run again.",
            file=sys.stderr,
        )
        raise SystemExit(1)

    with open(CONFIG_PATH, "rb") as f:
        data = tomllib.load(f)

    _cached_config = parse_config(data)
    return _cached_config


def default_config() -> VcloneConfig:
    """Return the built-in defaults, ignoring any config file."""
    return parse_config(tomllib.loads(DEFAULT_CONFIG))
