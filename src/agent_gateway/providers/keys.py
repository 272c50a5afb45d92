"""Provider-specific API key shape heuristics."""

from typing import Optional, Tuple

from pydantic import BaseModel, Field


class KeyInfo(BaseModel):
    """Result of checking an API key's shape."""

    valid: bool = Field(..., description="Whether the key looks usable for the provider")
    type: str = Field(default="unknown", description="Detected key type")
    message: str = Field(..., description="Human readable explanation")


# provider id -> ordered (prefix, key type, rejected prefixes) rules; first match wins
KEY_PATTERNS: dict = {
    "openai": (
        ("sk-proj-", "openai-project", ()),
        ("sk-", "openai-standard", ("sk-ant-",)),
    ),
    "anthropic": (
        ("sk-ant-api03-", "anthropic", ()),
    ),
}

KEY_TYPE_MESSAGES = {
    "openai-project": "Using OpenAI project-based API key",
    "openai-standard": "Using OpenAI standard API key",
    "anthropic": "Using Anthropic API key",
}


def _match(rules: Tuple, api_key: str) -> Optional[str]:
    for prefix, key_type, rejected in rules:
        if api_key.startswith(prefix) and not api_key.startswith(rejected):
            return key_type
    return None


def detect_api_key_type(provider_id: str, api_key: Optional[str]) -> KeyInfo:
    """Classify a raw key for the given provider by its prefix."""
    if not api_key:
        return KeyInfo(valid=False, message="No API key provided")

    rules = KEY_PATTERNS.get(provider_id)
    if rules is None:
        return KeyInfo(valid=False, message=f"Unknown provider: {provider_id}")

    key_type = _match(rules, api_key.strip())
    if key_type is None:
        return KeyInfo(valid=False, message="Invalid API key format.")

    return KeyInfo(valid=True, type=key_type, message=KEY_TYPE_MESSAGES[key_type])
