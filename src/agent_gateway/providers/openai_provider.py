"""
OpenAI chat completions adapter built on the official SDK.
"""

from typing import Any, Optional

from openai import APIError, APIStatusError, AsyncOpenAI

from .base import BaseProvider, field


class OpenAIProvider(BaseProvider):
    """OpenAI provider implementation."""

    provider_id = "openai"
    empty_response = "[No response from OpenAI]"

    def client_for(self, api_key: str, organization_id: Optional[str] = None) -> AsyncOpenAI:
        key = (api_key, organization_id)
        if key not in self._clients:
            self._clients[key] = AsyncOpenAI(
                api_key=api_key,
                organization=organization_id,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,  # Retries are handled by the transport
                http_client=self.http_client,
            )
        return self._clients[key]

    async def complete(
        self,
        prompt: str,
        model: str,
        api_key: str,
        organization_id: Optional[str] = None,
    ) -> str:
        self._log_request(model, organization_id)
        client = self.client_for(api_key, organization_id)
        try:
            response = await client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
            )
        except APIStatusError as e:
            raise self.status_error(e.status_code, e.response, e.body) from e
        except (APIError, ValueError) as e:
            raise self.call_error(e) from e
        return self.parse_response(response)

    def parse_response(self, response: Any) -> str:
        choices = field(response, "choices")
        if not choices:
            return self.empty_response
        content = field(field(choices[0], "message"), "content")
        return content or self.empty_response
