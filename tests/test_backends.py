from __future__ import annotations

import anthropic
import httpx
import openai
import pytest

from fakes import FakeAnthropicClient, FakeOpenAIClient
from rewriteforge.backends.anthropic_backend import AnthropicBackend
from rewriteforge.backends.base import build_prompt, map_upstream_error
from rewriteforge.backends.localmoc_backend import LocalMockBackend
from rewriteforge.backends.openai_backend import OpenAIBackend
from rewriteforge.core.exceptions import ConfigurationError, UpstreamError, UpstreamErrorKind
from rewriteforge.services.cache_service import ObservableCache
from rewriteforge.services.metrics_service import MetricsStore

REQUEST = httpx.Request("POST", "https://api.example.test/v1/messages")


def _status_error(sdk, cls_name: str, status: int, message: str):
    response = httpx.Response(status, request=REQUEST)
    return getattr(sdk, cls_name)(message, response=response, body=None)


@pytest.mark.anyio
async def test_local_backend_formats_with_style_marker():
    backend = LocalMockBackend()

    assert await backend.resolve("Hello world", "pirate") == "[*pirate*] Hello world"
    assert await backend.resolve("Hello world", "formal") == "[*formal*] Hello world"


@pytest.mark.anyio
async def test_repeated_resolve_is_identical_and_cached():
    store = MetricsStore()
    backend = LocalMockBackend(ObservableCache("localmoc", store))

    first = await backend.resolve("Hello world", "haiku")
    second = await backend.resolve("Hello world", "haiku")

    assert first == second
    metrics = store.get_metrics("localmoc")
    assert (metrics.hits, metrics.misses) == (1, 1)


@pytest.mark.anyio
async def test_local_backend_does_not_stream():
    backend = LocalMockBackend()
    assert backend.supports_streaming is False

    with pytest.raises(NotImplementedError):
        async for _ in backend.stream_resolve("Hello", "formal"):
            pass


@pytest.mark.anyio
async def test_openai_without_key_is_a_configuration_error_before_cache_access():
    store = MetricsStore()
    backend = OpenAIBackend(ObservableCache("openai", store))

    with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
        await backend.resolve("Hello", "formal")
    assert store.get_metrics() == {}


@pytest.mark.anyio
async def test_anthropic_without_key_is_a_configuration_error():
    backend = AnthropicBackend()

    with pytest.raises(ConfigurationError, match="ANTHROPIC_API_KEY"):
        await backend.resolve("Hello", "formal")
    with pytest.raises(ConfigurationError):
        async for _ in backend.stream_resolve("Hello", "formal"):
            pass


@pytest.mark.anyio
async def test_openai_resolve_sends_prompt_and_strips_reply():
    client = FakeOpenAIClient(reply="  Arr, hello world  ")
    backend = OpenAIBackend(client=client, model="gpt-test", max_tokens=64)

    assert await backend.resolve("Hello world", "pirate") == "Arr, hello world"
    assert await backend.resolve("Hello world", "pirate") == "Arr, hello world"

    assert len(client.calls) == 1
    assert client.calls[0] == {
        "model": "gpt-test",
        "messages": [{"role": "user", "content": build_prompt("Hello world", "pirate")}],
        "max_tokens": 64,
    }


@pytest.mark.anyio
async def test_openai_empty_reply_falls_back_to_placeholder():
    backend = OpenAIBackend(client=FakeOpenAIClient(reply=None))

    assert await backend.resolve("Hello", "formal") == "No response from OpenAI."


@pytest.mark.anyio
async def test_openai_stream_skips_empty_deltas():
    backend = OpenAIBackend(client=FakeOpenAIClient(deltas=["Arr", None, "", " matey"]))

    deltas = [delta async for delta in backend.stream_resolve("Hello", "pirate")]

    assert deltas == ["Arr", " matey"]


@pytest.mark.anyio
async def test_anthropic_resolve_uses_first_text_block():
    client = FakeAnthropicClient(reply=" Good morrow ")
    backend = AnthropicBackend(client=client)

    assert await backend.resolve("Hello", "formal") == "Good morrow"
    assert client.calls[0]["messages"][0]["content"] == "[*formal*] Hello"


@pytest.mark.anyio
async def test_anthropic_stream_relays_text_deltas():
    backend = AnthropicBackend(client=FakeAnthropicClient(deltas=["Good ", "", "morrow"]))

    deltas = [delta async for delta in backend.stream_resolve("Hello", "formal")]

    assert deltas == ["Good ", "morrow"]


@pytest.mark.anyio
@pytest.mark.parametrize(
    "error, kind",
    [
        (openai.APIConnectionError(request=REQUEST), UpstreamErrorKind.NETWORK),
        (openai.APITimeoutError(request=REQUEST), UpstreamErrorKind.NETWORK),
        (_status_error(openai, "AuthenticationError", 401, "bad key"), UpstreamErrorKind.AUTH),
        (_status_error(openai, "RateLimitError", 429, "slow down"), UpstreamErrorKind.RATE_LIMIT),
        (_status_error(openai, "InternalServerError", 500, "boom"), UpstreamErrorKind.SERVER_ERROR),
        (_status_error(openai, "BadRequestError", 400, "bad request"), UpstreamErrorKind.OTHER),
    ],
)
async def test_openai_failures_are_classified(error, kind):
    backend = OpenAIBackend(client=FakeOpenAIClient(error=error))

    with pytest.raises(UpstreamError) as excinfo:
        await backend.resolve("Hello", "formal")

    assert excinfo.value.kind == kind
    assert excinfo.value.provider == "openai"
    assert backend.cache.size == 0


@pytest.mark.anyio
@pytest.mark.parametrize(
    "error, kind",
    [
        (anthropic.APIConnectionError(request=REQUEST), UpstreamErrorKind.NETWORK),
        (_status_error(anthropic, "AuthenticationError", 401, "bad key"), UpstreamErrorKind.AUTH),
        (_status_error(anthropic, "RateLimitError", 429, "slow down"), UpstreamErrorKind.RATE_LIMIT),
        (_status_error(anthropic, "InternalServerError", 500, "boom"), UpstreamErrorKind.SERVER_ERROR),
        (_status_error(anthropic, "NotFoundError", 404, "no such model"), UpstreamErrorKind.OTHER),
    ],
)
async def test_anthropic_failures_are_classified(error, kind):
    backend = AnthropicBackend(client=FakeAnthropicClient(error=error))

    with pytest.raises(UpstreamError) as excinfo:
        await backend.resolve("Hello", "formal")
    assert excinfo.value.kind == kind

    with pytest.raises(UpstreamError) as excinfo:
        async for _ in backend.stream_resolve("Hello", "formal"):
            pass
    assert excinfo.value.kind == kind


def test_error_messages_are_human_readable():
    network = map_upstream_error(openai, openai.APIConnectionError(request=REQUEST), "openai", "OpenAI", "OPENAI_API_KEY")
    other = map_upstream_error(
        openai, _status_error(openai, "BadRequestError", 400, "bad request"), "openai", "OpenAI", "OPENAI_API_KEY"
    )
    limited = map_upstream_error(
        anthropic, _status_error(anthropic, "RateLimitError", 429, "x"), "anthropic", "Anthropic", "ANTHROPIC_API_KEY"
    )

    assert network.message.startswith("Network error: Unable to connect to OpenAI API")
    assert other.message == "OpenAI API error: bad request"
    assert limited.status_code == 429
    assert network.status_code == 502


@pytest.mark.anyio
async def test_aclose_closes_injected_clients():
    client = FakeOpenAIClient()
    backend = OpenAIBackend(client=client)

    await backend.aclose()

    assert client.closed is True


@pytest.mark.anyio
async def test_whitespace_replies_fall_back_to_placeholder():
    openai_backend = OpenAIBackend(client=FakeOpenAIClient(reply="   "))
    anthropic_backend = AnthropicBackend(client=FakeAnthropicClient(reply="  "))

    assert await openai_backend.resolve("Hello", "formal") == "No response from OpenAI."
    assert await anthropic_backend.resolve("Hello", "formal") == "No text response from Claude."
