import logging
from typing import Any, Dict, List, Optional, Sequence

from ollama import AsyncClient, ResponseError

from riflebird.agent.structs import ChatReply, Message
from riflebird.config.settings import Settings
from riflebird.exceptions.provider import (
    ProviderAuthenticationError,
    ProviderConnectionError,
    ProviderError,
    ProviderRateLimitError,
    ProviderResponseError,
)
from riflebird.providers.base import BaseProvider
from riflebird.utils.retry import retry_on_transient_errors

logger = logging.getLogger("OllamaProvider")


class OllamaProvider(BaseProvider):
    """
    Adapter for Ollama (Local & Cloud).
    Requests JSON-formatted output so replies decode as actions.
    """

    name = "ollama"

    def __init__(self, settings: Settings, client: Optional[AsyncClient] = None):
        self.host = settings.ollama_host
        self.api_key = settings.ollama_api_key
        self.default_model = settings.ai_model
        self.default_temperature = settings.ai_temperature

        if client is None:
            headers = {}
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"
            client = AsyncClient(host=self.host, headers=headers)
        self.client = client
        self._complete = retry_on_transient_errors(settings.provider_max_retries)(
            self._complete_once
        )

    async def create_chat_completion(
        self,
        messages: Sequence[Message],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> ChatReply:
        options: Dict[str, Any] = {}
        effective_temperature = (
            temperature if temperature is not None else self.default_temperature
        )
        if effective_temperature is not None:
            options["temperature"] = effective_temperature

        model_name = model or self.default_model
        logger.debug("Ollama request: model=%s messages=%d", model_name, len(messages))

        return await self._complete(
            model_name, self._serialize_messages(messages), options
        )

    async def _complete_once(
        self, model_name: str, payload: List[Dict[str, Any]], options: Dict[str, Any]
    ) -> ChatReply:
        try:
            response = await self.client.chat(
                model=model_name,
                messages=payload,
                format="json",
                options=options or None,
                stream=False,
            )
        except ResponseError as e:
            raise _map_response_error(e, model_name) from e
        except ConnectionError as e:
            raise ProviderConnectionError(
                f"Could not reach Ollama at {self.host}: {e}",
                provider_name=self.name,
                model_name=model_name,
                original_error=e,
            ) from e

        message = getattr(response, "message", None)
        if message is None:
            raise ProviderResponseError(
                "Ollama returned no message",
                provider_name=self.name,
                model_name=model_name,
            )

        return ChatReply(
            content=message.content,
            model=getattr(response, "model", None) or model_name,
            usage={
                "prompt_eval_count": getattr(response, "prompt_eval_count", None),
                "eval_count": getattr(response, "eval_count", None),
            },
        )

    @staticmethod
    def _serialize_messages(messages: Sequence[Message]) -> List[Dict[str, Any]]:
        return [{"role": m.role, "content": m.content} for m in messages]


def _map_response_error(error: ResponseError, model_name: str) -> ProviderError:
    status = getattr(error, "status_code", None)
    common = {"provider_name": "ollama", "model_name": model_name, "original_error": error}
    if status == 429:
        return ProviderRateLimitError(f"Ollama rate limit exceeded: {error}", **common)
    if status in (401, 403):
        return ProviderAuthenticationError(
            f"Ollama authentication failed: {error}", status_code=status, **common
        )
    return ProviderError(f"Ollama request failed: {error}", **common)
