"""
Provider transport: one logical call, with key validation, outcome
classification and bounded retry of rate limits.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Dict, Optional

import httpx

from agent_gateway.config import GatewaySettings
from agent_gateway.exceptions import (
    MalformedKeyError,
    RateLimitedError,
    TransportError,
    UnauthorizedError,
    UnknownProviderError,
    looks_rate_limited,
)
from agent_gateway.offline import Responder
from agent_gateway.providers import AnthropicProvider, BaseProvider, OpenAIProvider
from agent_gateway.providers.keys import detect_api_key_type
from agent_gateway.telemetry import get_logger

from .retry_handler import RetryHandler
from .state import SettingsState
from .tracker import FailureTracker

logger = get_logger(__name__)


def default_providers(
    config: GatewaySettings, client: Optional[httpx.AsyncClient] = None
) -> Dict[str, BaseProvider]:
    return {
        "openai": OpenAIProvider(
            config.openai_base_url,
            timeout=config.request_timeout,
            http_client=client,
        ),
        "anthropic": AnthropicProvider(
            config.anthropic_base_url,
            timeout=config.request_timeout,
            http_client=client,
            version=config.anthropic_version,
            max_tokens=config.anthropic_max_tokens,
        ),
    }


class Transport:
    """Executes provider calls for the currently selected provider and model."""

    def __init__(
        self,
        state: SettingsState,
        tracker: FailureTracker,
        offline: Responder,
        config: GatewaySettings,
        client: Optional[httpx.AsyncClient] = None,
        providers: Optional[Dict[str, BaseProvider]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.state = state
        self.tracker = tracker
        self.offline = offline
        self.config = config
        self.providers = providers if providers is not None else default_providers(config, client)
        self.clock = clock
        self.retry = RetryHandler(
            max_retries=config.max_retries,
            delays=config.retry_delays,
            retry_on=RateLimitedError,
            sleep=sleep,
        )

    async def execute(self, prompt: str) -> str:
        """
        Send ``prompt`` to the current provider.

        Returns:
            The completion text, or an offline answer if this call tipped the
            gateway into offline mode.

        Raises:
            MalformedKeyError: Key missing or of the wrong shape (no request sent)
            UnauthorizedError: Provider answered 401/403
            RateLimitedError: Rate limit persisted through every retry
            TransportError: Any other failure
            UnknownProviderError: No adapter for the current provider
        """
        provider_id = self.state.provider_id
        provider = self.providers.get(provider_id)
        if provider is None:
            raise UnknownProviderError(provider_id)

        api_key = self.state.api_key(provider_id)
        key_info = detect_api_key_type(provider_id, api_key)
        if not key_info.valid:
            logger.error("invalid_api_key_format", provider=provider_id, reason=key_info.message)
            self.state.mark_key_invalid(key_info.message)
            # Counted as a failed call with no request sent; the key error is raised
            # even when it trips the offline fallback.
            if self.tracker.record_failure():
                logger.warning("offline_fallback_after_invalid_key", provider=provider_id)
            raise MalformedKeyError(key_info.message, provider=provider_id)

        try:
            return await self.retry.execute(
                self._attempt,
                prompt,
                provider,
                api_key,
                self.state.model_id,
                self.state.organization_id,
            )
        except RateLimitedError as e:
            self.state.enter_cooldown(self.clock(), self.config.cooldown_period)
            raise RateLimitedError(
                "Rate limit exceeded. Maximum retries reached. Please try again later.",
                provider=provider_id,
            ) from e

    async def _attempt(
        self,
        prompt: str,
        provider: BaseProvider,
        api_key: str,
        model_id: str,
        organization_id: Optional[str],
    ) -> str:
        """One request against the provider, model and organization captured when the call began."""
        if self.state.offline_mode:
            logger.info("offline_during_call", provider=provider.provider_id)
            return self.offline.respond(prompt)

        try:
            text = await provider.complete(
                prompt,
                model=model_id,
                api_key=api_key,
                organization_id=organization_id,
            )
        except RateLimitedError as e:
            logger.warning("provider_rate_limited", provider=provider.provider_id, retry_after=e.retry_after)
            self.state.record_rate_limit_hit()
            if self.tracker.record_rate_limited():
                return self.offline.respond(prompt)
            raise
        except UnauthorizedError as e:
            logger.error("provider_auth_failed", provider=provider.provider_id, status=e.status_code)
            self.state.mark_key_invalid("Invalid API key or insufficient permissions")
            if self.tracker.record_failure():
                return self.offline.respond(prompt)
            raise
        except TransportError as e:
            if e.status_code is None:
                return self._handle_call_error(prompt, provider, e)
            logger.error("provider_request_failed", provider=provider.provider_id, status=e.status_code)
            self.state.last_error = e.message
            if self.tracker.record_failure():
                return self.offline.respond(prompt)
            raise

        logger.info("provider_response", provider=provider.provider_id, length=len(text))
        self.state.mark_key_valid()
        self.tracker.record_success()
        return text

    def _handle_call_error(self, prompt: str, provider: BaseProvider, error: TransportError) -> str:
        """Network and parse failures; rate limits are recognised by message text only."""
        message = error.message
        logger.error("provider_call_error", provider=provider.provider_id, error=message)
        self.state.last_error = message
        if self.tracker.record_failure():
            return self.offline.respond(prompt)
        if looks_rate_limited(message):
            raise RateLimitedError(message, provider=provider.provider_id) from error
        raise TransportError(f"API Error: {message}", provider=provider.provider_id) from error
