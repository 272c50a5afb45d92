from .anthropic_provider import AnthropicProvider
from .base import BaseProvider, parse_retry_after
from .keys import KeyInfo, detect_api_key_type
from .openai_provider import OpenAIProvider
from .registry import CATALOG, DEFAULT_REGISTRY, ProviderInfo, ProviderRegistry

__all__ = [
    "AnthropicProvider",
    "BaseProvider",
    "CATALOG",
    "DEFAULT_REGISTRY",
    "KeyInfo",
    "OpenAIProvider",
    "ProviderInfo",
    "ProviderRegistry",
    "detect_api_key_type",
    "parse_retry_after",
]
