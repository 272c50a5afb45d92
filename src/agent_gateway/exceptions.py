"""Custom exceptions for the agent gateway."""

from typing import Any, Dict, Optional

RATE_LIMIT_MARKERS = ("rate limit", "429")


class GatewayError(Exception):
    """Base exception for the agent gateway."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        status_code: Optional[int] = None,
        provider: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "GATEWAY_ERROR"
        self.status_code = status_code
        self.provider = provider
        self.details = details or {}
        if provider:
            self.details["provider"] = provider


class MalformedKeyError(GatewayError):
    """API key does not have the shape the provider expects."""

    def __init__(self, message: str = "Invalid API key format.", **kwargs):
        super().__init__(message, error_code="MALFORMED_KEY", **kwargs)


class UnauthorizedError(GatewayError):
    """Provider rejected the key (HTTP 401/403)."""

    def __init__(self, message: str = "Authentication failed", status_code: int = 401, **kwargs):
        super().__init__(message, error_code="UNAUTHORIZED", status_code=status_code, **kwargs)


class RateLimitedError(GatewayError):
    """Provider rate limit hit (HTTP 429 or a rate-limit looking error message)."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: Optional[float] = None,
        **kwargs,
    ):
        super().__init__(message, error_code="RATE_LIMITED", status_code=429, **kwargs)
        self.retry_after = retry_after


class TransportError(GatewayError):
    """Network, parse or non-success HTTP failure."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, error_code="TRANSPORT_ERROR", **kwargs)


class UnknownProviderError(GatewayError):
    """Provider id is not in the catalog."""

    def __init__(self, provider: str):
        super().__init__(f"Unknown provider: {provider}", error_code="UNKNOWN_PROVIDER", provider=provider)


class UnknownModelError(GatewayError):
    """Model id is not in the current provider's catalog."""

    def __init__(self, model: str, provider: str):
        super().__init__(
            f"Invalid model: {model} for provider {provider}",
            error_code="UNKNOWN_MODEL",
            provider=provider,
            details={"model": model},
        )


def looks_rate_limited(message: str) -> bool:
    """Substring heuristic for rate limits reported only through error text."""
    lowered = message.lower()
    return any(marker in lowered for marker in RATE_LIMIT_MARKERS)


def format_failure(error: BaseException, cooldown_seconds: float) -> str:
    """Render a failure as the text handed back to the submitter."""
    if isinstance(error, RateLimitedError) or looks_rate_limited(str(error)):
        return (
            f"[ERROR] API rate limit reached. Wait {int(cooldown_seconds)}s "
            "and try again. (HTTP 429)"
        )
    if isinstance(error, UnauthorizedError):
        return (
            "[ERROR] Invalid API key or insufficient permissions. "
            "Check your API key and try again."
        )
    message = error.message if isinstance(error, GatewayError) else str(error)
    return f"[ERROR] {message}"


__all__ = [
    "GatewayError",
    "MalformedKeyError",
    "UnauthorizedError",
    "RateLimitedError",
    "TransportError",
    "UnknownProviderError",
    "UnknownModelError",
    "looks_rate_limited",
    "format_failure",
]
