"""
Gateway facade.

``AgentGateway`` wires settings, the failure tracker, the offline responder,
the provider transport and the request scheduler together and exposes the
operations callers use: submitting prompts, reading status and changing
settings.
"""

import asyncio
import random
import time
from collections.abc import Awaitable, Callable
from typing import Dict, List, Optional

import httpx

from agent_gateway.config import GatewaySettings, get_settings
from agent_gateway.offline import OfflineResponder, Responder
from agent_gateway.providers import DEFAULT_REGISTRY, BaseProvider, ProviderRegistry
from agent_gateway.schemas import CallStats, QueueStatus
from agent_gateway.store import MemorySettingsStore, SettingsStore
from agent_gateway.telemetry import get_logger

from .scheduler import RequestScheduler
from .state import SettingsState
from .tracker import FailureTracker
from .transport import Transport

logger = get_logger(__name__)


class AgentGateway:
    """
    Process-wide entry point for provider calls.

    Example:
        async with AgentGateway() as gateway:
            answer = await gateway.ask("Write a haiku about queues")
    """

    def __init__(
        self,
        config: Optional[GatewaySettings] = None,
        *,
        store: Optional[SettingsStore] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        offline_responder: Optional[Responder] = None,
        rng: Optional[random.Random] = None,
        registry: Optional[ProviderRegistry] = None,
        providers: Optional[Dict[str, BaseProvider]] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config or get_settings()
        self.store = store if store is not None else MemorySettingsStore()
        self.registry = registry or DEFAULT_REGISTRY

        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(timeout=self.config.request_timeout)

        self.state = SettingsState.load(
            self.config,
            self.registry,
            persisted=self.store.load(),
            on_change=self._persist,
        )
        self.tracker = FailureTracker(
            self.state, threshold=self.config.max_failed_calls_before_fallback
        )
        self.offline = offline_responder or OfflineResponder(rng=rng)
        self.transport = Transport(
            self.state,
            self.tracker,
            self.offline,
            self.config,
            self.client,
            providers=providers,
            sleep=sleep,
            clock=clock,
        )
        self.scheduler = RequestScheduler(
            self.state,
            self.tracker,
            self.transport,
            self.offline,
            self.config,
            clock=clock,
            sleep=sleep,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    # Requests

    def submit(self, prompt: str) -> "asyncio.Future[str]":
        """Queue a prompt. The future resolves with the answer or a formatted error."""
        return self.scheduler.submit(prompt)

    async def ask(self, prompt: str) -> str:
        return await self.submit(prompt)

    def pending(self) -> List[str]:
        return self.scheduler.pending()

    # Status

    def get_status(self) -> QueueStatus:
        return self.scheduler.status()

    def get_call_stats(self) -> CallStats:
        return self.tracker.snapshot()

    def reset_call_stats(self) -> None:
        self.tracker.reset_stats()

    def reset_status(self) -> bool:
        """Clear rate-limit state and resolve everything still queued with a reset notice."""
        return self.scheduler.reset()

    # Scheduling controls

    def pause(self) -> None:
        self.scheduler.pause()

    def resume(self) -> None:
        self.scheduler.resume()

    def set_batch_mode(self, enabled: bool) -> None:
        self.state.set_batch_mode(enabled)

    # Settings

    def set_api_key(self, provider_id: str, api_key: Optional[str]) -> bool:
        if not self.state.set_api_key(provider_id, api_key):
            return False
        self.tracker.reset_consecutive()
        self.scheduler.kick()
        return True

    def set_provider(self, provider_id: str) -> bool:
        """Switch provider; the queue is reset so nothing runs against the old selection."""
        if not self.state.set_provider(provider_id):
            return False
        self.scheduler.reset()
        return True

    def set_model(self, model_id: str) -> bool:
        return self.state.set_model(model_id)

    def set_organization_id(self, organization_id: Optional[str]) -> bool:
        return self.state.set_organization_id(organization_id)

    def set_offline_mode(self, enabled: bool) -> bool:
        result = self.state.set_offline_mode(enabled)
        if not enabled:
            self.tracker.reset_consecutive()
        self.scheduler.kick()
        return result

    @property
    def offline_mode(self) -> bool:
        return self.state.offline_mode

    async def aclose(self) -> None:
        await self.scheduler.aclose()
        if self._owns_client and not self.client.is_closed:
            await self.client.aclose()
        logger.debug("gateway_closed")

    def _persist(self, state: SettingsState) -> None:
        self.store.save(state.to_persisted())
