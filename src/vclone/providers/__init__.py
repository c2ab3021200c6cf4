"""Provider abstraction for voice-cloning services.

This module provides a registry pattern for managing voice-cloning
providers, allowing runtime selection of different remote backends.
"""

from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from .base import VoiceCloneProvider

from .cartesia import CartesiaProvider
from .elevenlabs import ElevenLabsProvider

__all__ = ["ProviderRegistry"]


class ProviderRegistry:
    """Registry for managing voice-cloning providers.

    This class maintains a registry of available providers,
    allowing registration and retrieval by name.
    """

    _providers: ClassVar[dict[str, type["VoiceCloneProvider"]]] = {}

    @classmethod
    def register(cls, name: str, provider_class: type["VoiceCloneProvider"]) -> None:
        """Register a voice-cloning provider.

        Args:
            name: Name to register the provider under
            provider_class: Provider class that implements VoiceCloneProvider
        """
        cls._providers[name] = provider_class

    @classmethod
    def get(cls, name: str) -> type["VoiceCloneProvider"]:
        """Get a provider class by name.

        Args:
            name: Name of the provider to retrieve

        Returns:
            Provider class

        Raises:
            KeyError: If provider name not found
        """
        if name not in cls._providers:
            available = ", ".join(cls._providers.keys()) if cls._providers else "none"
            raise KeyError(
                f"Provider '{name}' not found. Available providers: {available}"
            )
        return cls._providers[name]

    @classmethod
    def available(cls) -> list[str]:
        """Return registered provider names in registration order."""
        return list(cls._providers)


# Register providers
ProviderRegistry.register("cartesia", CartesiaProvider)
ProviderRegistry.register("elevenlabs", ElevenLabsProvider)
