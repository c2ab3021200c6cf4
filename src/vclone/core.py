"""Core functionality for vclone - wires providers, storage and sessions."""

import logging
from typing import TYPE_CHECKING

from .clone.session import Notifier, StateListener, VoiceCloneSession
from .config import VcloneConfig
from .providers import ProviderRegistry
from .providers.base import VoiceCloneProvider
from .storage.models import CloneRecord, Identity, SpeechRecord
from .storage.store import VoiceStore
from .tts.client import VoiceCloneClient
from .tts.generator import SpeechGenerator
from .tts.models import OutputFormat, SynthesisSettings

if TYPE_CHECKING:
    from .audio.player import AudioPlayer

logger = logging.getLogger(__name__)


def build_provider(name: str) -> VoiceCloneProvider:
    """Instantiate a provider by registry name.

    Raises:
        KeyError: If provider not found
        UnauthorizedError: If the provider's API key is not configured
    """
    provider_class = ProviderRegistry.get(name)
    return provider_class()


def build_session(
    config: VcloneConfig,
    provider: VoiceCloneProvider,
    store: VoiceStore | None = None,
    player: "AudioPlayer | None" = None,
    notifier: Notifier | None = None,
    on_state_change: StateListener | None = None,
) -> VoiceCloneSession:
    """Create a lifecycle session configured from a VcloneConfig."""
    client = VoiceCloneClient(
        provider,
        min_audio_bytes=config.clone.min_audio_bytes,
        mode=config.provider.mode,
        language=config.provider.language,
        enhance=config.provider.enhance,
    )
    generator = SpeechGenerator(
        provider,
        SynthesisSettings(
            model_id=config.provider.model,
            language=config.provider.language,
            output_format=OutputFormat(
                container=config.output.container,
                sample_rate=config.output.sample_rate,
                encoding=config.output.encoding,
            ),
        ),
        max_text_length=config.clone.max_text_length,
    )
    logger.debug(
        f"Session using provider={provider.name}, poll_interval={config.clone.poll_interval}s"
    )
    return VoiceCloneSession(
        client,
        generator,
        store=store,
        player=player,
        poll_interval=config.clone.poll_interval,
        welcome_message=config.clone.welcome_message,
        notifier=notifier,
        on_state_change=on_state_change,
    )


def find_clone(store: VoiceStore, identity: Identity, ref: str) -> CloneRecord | None:
    """Find one of a user's clones by record ID, voice ID or name.

    Names match case-insensitively; the newest clone wins on duplicates.
    """
    clones = store.list_clones(identity.id)
    for clone in clones:
        if ref in (clone.id, clone.voice_id):
            return clone
    for clone in clones:
        if clone.name.lower() == ref.lower():
            return clone
    return None


def list_history(
    store: VoiceStore, identity: Identity
) -> list[tuple[CloneRecord, list[SpeechRecord]]]:
    """Return a user's clones with their speeches, newest first."""
    return [
        (clone, store.list_speeches(clone.id))
        for clone in store.list_clones(identity.id)
    ]
