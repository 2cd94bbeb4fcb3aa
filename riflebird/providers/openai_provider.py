import logging
from typing import Any, Dict, List, Optional, Sequence

import openai
from openai import AsyncOpenAI

from riflebird.agent.structs import ChatReply, Message
from riflebird.config.settings import Settings
from riflebird.exceptions.config import ConfigError
from riflebird.exceptions.provider import (
    ProviderAuthenticationError,
    ProviderConnectionError,
    ProviderError,
    ProviderRateLimitError,
    ProviderResponseError,
)
from riflebird.providers.base import BaseProvider
from riflebird.utils.retry import retry_on_transient_errors

logger = logging.getLogger("OpenAIProvider")


class OpenAIProvider(BaseProvider):
    """
    Adapter for OpenAI and any OpenAI-compatible chat-completions endpoint.
    """

    name = "openai"

    def __init__(self, settings: Settings, client: Optional[AsyncOpenAI] = None):
        self.default_model = settings.ai_model
        self.default_temperature = settings.ai_temperature

        if client is None:
            if not settings.openai_api_key:
                raise ConfigError(
                    "OPENAI_API_KEY is required when LLM_PROVIDER=openai.",
                    field_name="openai_api_key",
                )
            client = AsyncOpenAI(
                api_key=settings.openai_api_key, base_url=settings.openai_base_url
            )
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
        request_payload: Dict[str, Any] = {
            "model": model or self.default_model,
            "messages": self._serialize_messages(messages),
        }
        effective_temperature = (
            temperature if temperature is not None else self.default_temperature
        )
        if effective_temperature is not None:
            request_payload["temperature"] = effective_temperature

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "OpenAI request: model=%s messages=%d",
                request_payload["model"],
                len(request_payload["messages"]),
            )

        return await self._complete(request_payload)

    async def _complete_once(self, request_payload: Dict[str, Any]) -> ChatReply:
        model_name = request_payload["model"]
        try:
            response = await self.client.chat.completions.create(**request_payload)
        except openai.RateLimitError as e:
            retry_after = _retry_after_seconds(e)
            raise ProviderRateLimitError(
                f"OpenAI rate limit exceeded: {e}",
                retry_after=retry_after,
                provider_name=self.name,
                model_name=model_name,
                original_error=e,
            ) from e
        except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
            raise ProviderAuthenticationError(
                f"OpenAI authentication failed: {e}",
                status_code=e.status_code,
                provider_name=self.name,
                model_name=model_name,
                original_error=e,
            ) from e
        except openai.APIConnectionError as e:
            # Also covers APITimeoutError
            raise ProviderConnectionError(
                f"Could not reach OpenAI endpoint: {e}",
                provider_name=self.name,
                model_name=model_name,
                original_error=e,
            ) from e
        except openai.APIError as e:
            raise ProviderError(
                f"OpenAI request failed: {e}",
                provider_name=self.name,
                model_name=model_name,
                original_error=e,
            ) from e

        choices = getattr(response, "choices", None) or []
        if not choices:
            raise ProviderResponseError(
                "AI did not return any choices",
                provider_name=self.name,
                model_name=model_name,
            )

        usage = getattr(response, "usage", None)
        usage_data = usage.model_dump() if hasattr(usage, "model_dump") else {}
        return ChatReply(
            content=choices[0].message.content,
            model=getattr(response, "model", model_name),
            usage=usage_data,
        )

    @staticmethod
    def _serialize_messages(messages: Sequence[Message]) -> List[Dict[str, Any]]:
        return [{"role": m.role, "content": m.content} for m in messages]


def _retry_after_seconds(error: Any) -> Optional[int]:
    response = getattr(error, "response", None)
    headers = getattr(response, "headers", None) or {}
    value = headers.get("retry-after") if hasattr(headers, "get") else None
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None
