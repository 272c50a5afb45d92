"""
Base provider abstract class and helpers shared by the SDK-backed adapters.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from agent_gateway.exceptions import (
    GatewayError,
    RateLimitedError,
    TransportError,
    UnauthorizedError,
)
from agent_gateway.telemetry import get_logger

logger = get_logger(__name__)


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Retry-After in whole seconds; anything else is ignored."""
    if not value:
        return None
    try:
        seconds = int(value.strip())
    except ValueError:
        return None
    return float(seconds) if seconds > 0 else None


def error_detail(body: Any) -> str:
    """Pull the provider's error message out of an SDK error body, if any."""
    if isinstance(body, str):
        return body
    if isinstance(body, dict):
        inner = body.get("error", body)
        if isinstance(inner, dict):
            return str(inner.get("message") or "")
        if isinstance(inner, str):
            return inner
    return ""


def field(obj: Any, name: str) -> Any:
    """Attribute or key lookup on a loosely shaped SDK response object."""
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


class BaseProvider(ABC):
    """Abstract base class for provider adapters."""

    provider_id: str = ""
    empty_response: str = "[No response from provider]"

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the provider.

        Args:
            base_url: Base URL of the provider API, without trailing slash
            timeout: Request timeout in seconds
            http_client: Shared HTTP client handed to the vendor SDK
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http_client = http_client
        self._clients: dict = {}

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        model: str,
        api_key: str,
        organization_id: Optional[str] = None,
    ) -> str:
        """
        Send a single-turn user prompt and return the completion text.

        Args:
            prompt: User prompt text
            model: Model identifier
            api_key: Provider API key
            organization_id: Optional organization id, where the provider supports one

        Returns:
            str: Completion text, or a placeholder for an unexpected response shape

        Raises:
            RateLimitedError: HTTP 429
            UnauthorizedError: HTTP 401/403
            TransportError: Any other HTTP status (with ``status_code``), or a
                network/parse failure (without)
        """
        pass

    @abstractmethod
    def parse_response(self, response: Any) -> str:
        """
        Extract the completion text from a successful response.

        Unexpected shapes yield a placeholder string instead of raising.
        """
        pass

    def status_error(self, status_code: int, response: httpx.Response, body: Any) -> GatewayError:
        """Translate an HTTP error status into a gateway exception."""
        detail = error_detail(body)
        if status_code == 429:
            return RateLimitedError(
                detail or "Rate limit exceeded",
                provider=self.provider_id,
                retry_after=parse_retry_after(response.headers.get("retry-after")),
            )
        if status_code in (401, 403):
            return UnauthorizedError(
                "Authentication failed: "
                + (detail or "Please check that your API key is correct and has the necessary permissions."),
                status_code=status_code,
                provider=self.provider_id,
            )
        return TransportError(
            detail or f"HTTP {status_code}: {response.reason_phrase}",
            status_code=status_code,
            provider=self.provider_id,
        )

    def call_error(self, error: Exception) -> TransportError:
        """Translate a network, timeout or parse failure into a gateway exception."""
        message = str(error) or type(error).__name__
        cause = error.__cause__
        if cause is not None and str(cause) and str(cause) not in message:
            message = f"{message} ({cause})"
        return TransportError(message, provider=self.provider_id)

    def _log_request(self, model: str, organization_id: Optional[str]) -> None:
        logger.info(
            "provider_request",
            provider=self.provider_id,
            model=model,
            base_url=self.base_url,
            has_organization=organization_id is not None,
        )
