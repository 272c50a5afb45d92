"""
Static provider catalog.

Maps provider ids to display names, their selectable models and the model
picked when the provider becomes active.
"""

from typing import Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from agent_gateway.exceptions import UnknownModelError, UnknownProviderError
from agent_gateway.schemas import ModelInfo


class ProviderInfo(BaseModel):
    """Catalog entry for a provider."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Provider id")
    name: str = Field(..., description="Display name")
    models: Dict[str, ModelInfo] = Field(..., description="Model id to model info")
    default_model: str = Field(..., description="Model selected when switching to this provider")


CATALOG: Dict[str, ProviderInfo] = {
    "openai": ProviderInfo(
        id="openai",
        name="OpenAI",
        models={
            "gpt-4": ModelInfo(name="GPT-4", description="Most capable, lower rate limits"),
            "gpt-3.5-turbo": ModelInfo(name="GPT-3.5 Turbo", description="Faster with higher rate limits"),
            "gpt-4o": ModelInfo(name="GPT-4o", description="Newest model, fast and capable"),
        },
        default_model="gpt-3.5-turbo",
    ),
    "anthropic": ProviderInfo(
        id="anthropic",
        name="Anthropic (Claude)",
        models={
            "claude-3-opus-20240229": ModelInfo(
                name="Claude 3 Opus", description="Most powerful, for complex tasks"
            ),
            "claude-3-sonnet-20240229": ModelInfo(
                name="Claude 3 Sonnet", description="Balance of intelligence and speed"
            ),
            "claude-3-haiku-20240307": ModelInfo(
                name="Claude 3 Haiku", description="Fastest and most compact model"
            ),
        },
        default_model="claude-3-haiku-20240307",
    ),
}


class ProviderRegistry:
    """Read-only lookups over a provider catalog."""

    def __init__(self, catalog: Optional[Mapping[str, ProviderInfo]] = None):
        self._catalog = dict(catalog if catalog is not None else CATALOG)

    def provider_exists(self, provider_id: str) -> bool:
        return provider_id in self._catalog

    def model_exists(self, provider_id: str, model_id: str) -> bool:
        provider = self._catalog.get(provider_id)
        return provider is not None and model_id in provider.models

    def default_model(self, provider_id: str) -> str:
        return self.require_provider(provider_id).default_model

    def require_provider(self, provider_id: str) -> ProviderInfo:
        try:
            return self._catalog[provider_id]
        except KeyError:
            raise UnknownProviderError(provider_id) from None

    def require_model(self, provider_id: str, model_id: str) -> ModelInfo:
        models = self.require_provider(provider_id).models
        if model_id not in models:
            raise UnknownModelError(model_id, provider_id)
        return models[model_id]

    def get(self, provider_id: str) -> Optional[ProviderInfo]:
        return self._catalog.get(provider_id)

    def models(self, provider_id: str) -> Dict[str, ModelInfo]:
        return dict(self.require_provider(provider_id).models)

    def provider_ids(self) -> list:
        return list(self._catalog)

    def __iter__(self):
        return iter(self._catalog.values())

    def __len__(self) -> int:
        return len(self._catalog)


DEFAULT_REGISTRY = ProviderRegistry()
