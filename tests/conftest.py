"""Shared fixtures: settings, fake provider clients and an in-process app."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from fakes import FakeAnthropicClient, FakeOpenAIClient
from rewriteforge.core.config import Settings
from rewriteforge.main import create_app
from rewriteforge.services.metrics_service import MetricsStore
from rewriteforge.services.rewrite_service import RewriteService


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        openai_api_key=None,
        anthropic_api_key=None,
        worker_poll_interval_ms=10,
        stream_default_delay_ms=0,
        stream_mock_delay_ms=0,
        cached_replay_delay_ms=0,
        mock_warmup_ms=0,
    )


@pytest.fixture
def metrics_store() -> MetricsStore:
    return MetricsStore(max_logs=50)


@pytest.fixture
def openai_client() -> FakeOpenAIClient:
    return FakeOpenAIClient()


@pytest.fixture
def anthropic_client() -> FakeAnthropicClient:
    return FakeAnthropicClient()


@pytest.fixture
def rewrite_service(settings, metrics_store, openai_client, anthropic_client) -> RewriteService:
    return RewriteService.from_settings(
        settings, metrics_store, openai_client=openai_client, anthropic_client=anthropic_client
    )


@pytest.fixture
def app(settings, openai_client, anthropic_client):
    return create_app(settings, openai_client=openai_client, anthropic_client=anthropic_client)


@pytest.fixture
async def async_client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    await app.state.services.jobs.stop()


@pytest.fixture
async def unconfigured_client(settings):
    bare_app = create_app(settings)
    async with AsyncClient(transport=ASGITransport(app=bare_app), base_url="http://test") as client:
        yield client
    await bare_app.state.services.jobs.stop()
