"""
Anthropic messages adapter built on the official SDK.
"""

from typing import Any, Optional

import httpx
from anthropic import APIError, APIStatusError, AsyncAnthropic

from .base import BaseProvider, field


class AnthropicProvider(BaseProvider):
    """Anthropic provider implementation."""

    provider_id = "anthropic"
    empty_response = "[No response from Claude]"
    unexpected_response = "[Claude answered in an unexpected format]"

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        http_client: Optional[httpx.AsyncClient] = None,
        version: str = "2023-06-01",
        max_tokens: int = 1024,
    ) -> None:
        """
        Initialize Anthropic provider.

        Args:
            base_url: Anthropic API base URL (without the /v1 suffix)
            timeout: Request timeout in seconds
            http_client: Shared HTTP client handed to the SDK
            version: Value of the anthropic-version header
            max_tokens: Maximum tokens requested per completion (Anthropic requires it)
        """
        super().__init__(base_url, timeout=timeout, http_client=http_client)
        self.version = version
        self.max_tokens = max_tokens

    def client_for(self, api_key: str) -> AsyncAnthropic:
        if api_key not in self._clients:
            self._clients[api_key] = AsyncAnthropic(
                api_key=api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,  # Retries are handled by the transport
                http_client=self.http_client,
                default_headers={"anthropic-version": self.version},
            )
        return self._clients[api_key]

    async def complete(
        self,
        prompt: str,
        model: str,
        api_key: str,
        organization_id: Optional[str] = None,
    ) -> str:
        # Organization ids are an OpenAI concept; ignored here.
        self._log_request(model, None)
        client = self.client_for(api_key)
        try:
            response = await client.messages.create(
                model=model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except APIStatusError as e:
            raise self.status_error(e.status_code, e.response, e.body) from e
        except (APIError, ValueError) as e:
            raise self.call_error(e) from e
        return self.parse_response(response)

    def parse_response(self, response: Any) -> str:
        content = field(response, "content")
        if not content:
            return self.unexpected_response
        first = content[0]
        if field(first, "type") != "text":
            return self.unexpected_response
        return field(first, "text") or self.empty_response
