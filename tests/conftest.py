"""Pytest configuration and fixtures."""

import asyncio
import json
import random
import time
from typing import AsyncIterator, Callable, List, Optional

import httpx
import pytest
import pytest_asyncio

from agent_gateway.config import GatewaySettings, get_settings
from agent_gateway.orchestrator import AgentGateway
from agent_gateway.store import MemorySettingsStore

OPENAI_KEY = "sk-proj-" + "a" * 40
ANTHROPIC_KEY = "sk-ant-api03-" + "b" * 40

GATEWAY_ENV_VARS = (
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "OPENAI_ORGANIZATION",
    "OPENAI_ORG_ID",
    "OPENAI_PROJECT_ID",
    "OPENAI_BASE_URL",
    "ANTHROPIC_BASE_URL",
    "ANTHROPIC_AUTH_TOKEN",
    "DEFAULT_PROVIDER",
    "DEFAULT_OFFLINE_MODE",
    "MIN_REQUEST_INTERVAL",
    "SETTINGS_FILE",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep real keys and overrides from the shell out of the tests."""
    for name in GATEWAY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def make_config(**overrides) -> GatewaySettings:
    """Settings with delays shrunk so queue tests finish quickly."""
    values = dict(
        min_request_interval=0.05,
        next_tick_delay=0.001,
        batch_item_delay=0.0,
        offline_response_delay=0.0,
        cooldown_probe_interval=0.01,
        max_retries=0,
        retry_delays=[0.0],
    )
    values.update(overrides)
    return GatewaySettings(_env_file=None, **values)


@pytest.fixture
def openai_key() -> str:
    return OPENAI_KEY


@pytest.fixture
def anthropic_key() -> str:
    return ANTHROPIC_KEY


@pytest.fixture
def config_factory() -> Callable[..., GatewaySettings]:
    return make_config


@pytest.fixture
def fast_config() -> GatewaySettings:
    return make_config()


@pytest.fixture
def online_config() -> GatewaySettings:
    return make_config(default_offline_mode=False, openai_api_key=OPENAI_KEY)


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(1234)


class FakeClock:
    """Monotonic clock the test moves by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Async sleep replacement that records requested delays and only yields."""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        await asyncio.sleep(0)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


class ProviderStub:
    """httpx MockTransport handler answering like an OpenAI-compatible API."""

    def __init__(self, responder: Optional[Callable[[str, httpx.Request], httpx.Response]] = None):
        self.requests: List[httpx.Request] = []
        self.prompts: List[str] = []
        self.started_at: List[float] = []
        self.responder = responder or (lambda prompt, request: self.reply(f"echo: {prompt}"))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.started_at.append(time.monotonic())
        body = json.loads(request.content)
        messages = body.get("messages") or [{"content": ""}]
        prompt = messages[0]["content"]
        self.prompts.append(prompt)
        return self.responder(prompt, request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))

    @staticmethod
    def reply(text: str) -> httpx.Response:
        return httpx.Response(
            200, json={"choices": [{"message": {"role": "assistant", "content": text}}]}
        )

    @staticmethod
    def error(status: int, message: str = "boom", headers=None) -> httpx.Response:
        return httpx.Response(status, json={"error": {"message": message}}, headers=headers)


@pytest.fixture
def stub_factory() -> Callable[..., ProviderStub]:
    return ProviderStub


@pytest.fixture
def provider_stub() -> ProviderStub:
    return ProviderStub()


@pytest.fixture
def clock_factory() -> Callable[..., FakeClock]:
    return FakeClock


@pytest_asyncio.fixture
async def offline_gateway(fast_config, seeded_rng) -> AsyncIterator[AgentGateway]:
    gateway = AgentGateway(fast_config, store=MemorySettingsStore(), rng=seeded_rng)
    yield gateway
    await gateway.aclose()


@pytest_asyncio.fixture
async def online_gateway(online_config, provider_stub, seeded_rng) -> AsyncIterator[AgentGateway]:
    client = provider_stub.client()
    gateway = AgentGateway(
        online_config, store=MemorySettingsStore(), http_client=client, rng=seeded_rng
    )
    yield gateway
    await gateway.aclose()
    await client.aclose()
