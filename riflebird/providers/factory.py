"""Provider factory helpers."""

from riflebird.config.settings import Settings
from riflebird.providers.base import BaseProvider


def create_provider(settings: Settings) -> BaseProvider:
    """Instantiate the configured provider implementation."""
    provider_name = (settings.llm_provider or "openai").lower()
    if provider_name == "ollama":
        from riflebird.providers.ollama import OllamaProvider

        return OllamaProvider(settings)

    from riflebird.providers.openai_provider import OpenAIProvider

    return OpenAIProvider(settings)
