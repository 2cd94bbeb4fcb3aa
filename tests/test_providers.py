# Test suite for the OpenAI and Ollama provider adapters

from types import SimpleNamespace

import httpx
import openai
import pytest
from ollama import ResponseError

from riflebird.agent.structs import Message
from riflebird.config.settings import Settings
from riflebird.exceptions.config import ConfigError
from riflebird.exceptions.provider import (
    ProviderAuthenticationError,
    ProviderConnectionError,
    ProviderError,
    ProviderRateLimitError,
    ProviderResponseError,
)
from riflebird.providers.factory import create_provider
from riflebird.providers.ollama import OllamaProvider
from riflebird.providers.openai_provider import OpenAIProvider

MESSAGES = (
    Message(role="system", content="write a test"),
    Message(role="assistant", content='{"action": "request_files", "files": ["a.ts"]}'),
    Message(role="user", content="Here are the requested files:\n"),
)


class FakeOpenAIClient:
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    async def _create(self, **kwargs):
        self.requests.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeOllamaClient:
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests = []

    async def chat(self, **kwargs):
        self.requests.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def openai_response(content, model="gpt-4o-mini"):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        model=model,
        usage=None,
    )


def http_response(status):
    return httpx.Response(status, request=httpx.Request("POST", "https://api.test/v1/chat"))


@pytest.fixture
def settings(temp_dir):
    return Settings(
        _env_file=None,
        project_root=temp_dir,
        openai_api_key="sk-test",
        provider_max_retries=2,
    )


class TestFactory:
    def test_openai_by_default(self, settings):
        assert isinstance(create_provider(settings), OpenAIProvider)

    def test_ollama(self, temp_dir):
        settings = Settings(_env_file=None, project_root=temp_dir, llm_provider="ollama")
        assert isinstance(create_provider(settings), OllamaProvider)


class TestOpenAIProvider:
    @pytest.mark.asyncio
    async def test_completion(self, settings):
        client = FakeOpenAIClient(openai_response('{"action": "generate_test", "code": "x"}'))
        provider = OpenAIProvider(settings, client=client)

        reply = await provider.create_chat_completion(MESSAGES, temperature=0.5)

        assert reply.content == '{"action": "generate_test", "code": "x"}'
        request = client.requests[0]
        assert request["model"] == "gpt-4o-mini"
        assert request["temperature"] == 0.5
        assert [m["role"] for m in request["messages"]] == ["system", "assistant", "user"]

    @pytest.mark.asyncio
    async def test_no_choices(self, settings):
        client = FakeOpenAIClient(SimpleNamespace(choices=[], model="m", usage=None))
        provider = OpenAIProvider(settings, client=client)

        with pytest.raises(ProviderResponseError, match="did not return any choices"):
            await provider.create_chat_completion(MESSAGES)

    @pytest.mark.asyncio
    async def test_authentication_error_is_not_retried(self, settings):
        error = openai.AuthenticationError("bad key", response=http_response(401), body=None)
        client = FakeOpenAIClient(error, openai_response("unused"))
        provider = OpenAIProvider(settings, client=client)

        with pytest.raises(ProviderAuthenticationError) as exc_info:
            await provider.create_chat_completion(MESSAGES)

        assert exc_info.value.details["status_code"] == 401
        assert len(client.requests) == 1

    @pytest.mark.asyncio
    async def test_rate_limit_is_retried(self, settings):
        error = openai.RateLimitError("slow down", response=http_response(429), body=None)
        client = FakeOpenAIClient(error, openai_response("ok"))
        provider = OpenAIProvider(settings, client=client)

        reply = await provider.create_chat_completion(MESSAGES)

        assert reply.content == "ok"
        assert len(client.requests) == 2

    @pytest.mark.asyncio
    async def test_rate_limit_exhausted(self, settings):
        errors = [
            openai.RateLimitError("slow down", response=http_response(429), body=None)
            for _ in range(2)
        ]
        provider = OpenAIProvider(settings, client=FakeOpenAIClient(*errors))

        with pytest.raises(ProviderRateLimitError):
            await provider.create_chat_completion(MESSAGES)

    def test_requires_api_key(self, temp_dir, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        settings = Settings(_env_file=None, project_root=temp_dir)
        with pytest.raises(ConfigError, match="OPENAI_API_KEY") as exc_info:
            create_provider(settings)
        assert exc_info.value.field_name == "openai_api_key"


class TestOllamaProvider:
    @pytest.mark.asyncio
    async def test_completion_requests_json(self, settings):
        response = SimpleNamespace(
            message=SimpleNamespace(content='{"action": "generate_test", "code": "x"}'),
            model="llama3",
            prompt_eval_count=10,
            eval_count=5,
        )
        client = FakeOllamaClient(response)
        provider = OllamaProvider(settings, client=client)

        reply = await provider.create_chat_completion(MESSAGES, model="llama3")

        assert reply.model == "llama3"
        assert reply.usage["eval_count"] == 5
        request = client.requests[0]
        assert request["format"] == "json"
        assert request["stream"] is False
        assert request["options"] == {"temperature": 0.2}

    @pytest.mark.asyncio
    async def test_missing_message(self, settings):
        provider = OllamaProvider(settings, client=FakeOllamaClient(SimpleNamespace(message=None)))

        with pytest.raises(ProviderResponseError):
            await provider.create_chat_completion(MESSAGES)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status, expected",
        [
            (401, ProviderAuthenticationError),
            (403, ProviderAuthenticationError),
            (404, ProviderError),
        ],
    )
    async def test_response_error_mapping(self, settings, status, expected):
        client = FakeOllamaClient(ResponseError("model not found", status))
        provider = OllamaProvider(settings, client=client)

        with pytest.raises(expected):
            await provider.create_chat_completion(MESSAGES)
        assert len(client.requests) == 1

    @pytest.mark.asyncio
    async def test_connection_error_is_retried(self, settings):
        response = SimpleNamespace(message=SimpleNamespace(content="{}"), model="m")
        client = FakeOllamaClient(ConnectionError("refused"), response)
        provider = OllamaProvider(settings, client=client)

        reply = await provider.create_chat_completion(MESSAGES)

        assert reply.content == "{}"
        assert len(client.requests) == 2

    @pytest.mark.asyncio
    async def test_connection_error_exhausted(self, settings):
        client = FakeOllamaClient(ConnectionError("refused"), ConnectionError("refused"))
        provider = OllamaProvider(settings, client=client)

        with pytest.raises(ProviderConnectionError):
            await provider.create_chat_completion(MESSAGES)
