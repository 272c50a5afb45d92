"""
Mutable gateway settings plus the rate-limit state that hangs off them.

All mutation goes through the setters below; each successful change notifies
the optional change listener so the settings can be persisted.
"""

from typing import Callable, Dict, Optional

from pydantic import SecretStr

from agent_gateway.config import GatewaySettings
from agent_gateway.exceptions import UnknownModelError
from agent_gateway.providers.keys import detect_api_key_type
from agent_gateway.providers.registry import ProviderRegistry
from agent_gateway.schemas import ApiKeyStatus
from agent_gateway.store import PersistedSettings
from agent_gateway.telemetry import get_logger

logger = get_logger(__name__)


class SettingsState:
    """Current provider/model selection, keys, mode flags and limiter status."""

    def __init__(
        self,
        registry: ProviderRegistry,
        provider_id: str,
        model_id: Optional[str] = None,
        *,
        offline_mode: bool = True,
        batch_mode: bool = False,
        api_keys: Optional[Dict[str, str]] = None,
        organization_id: Optional[str] = None,
        on_change: Optional[Callable[["SettingsState"], None]] = None,
    ):
        provider = registry.require_provider(provider_id)
        if model_id is None or not registry.model_exists(provider_id, model_id):
            model_id = provider.default_model

        self.registry = registry
        self.provider_id = provider_id
        self.model_id = model_id
        self.offline_mode = offline_mode
        self.batch_mode = batch_mode
        self.paused = False
        self.organization_id = organization_id or None
        # Explicitly cleared; persisted as "" so the environment default stays off.
        self.organization_cleared = organization_id == ""
        self._api_keys: Dict[str, SecretStr] = {
            pid: SecretStr(key) for pid, key in (api_keys or {}).items() if key
        }

        self.api_key_status = ApiKeyStatus.UNKNOWN
        self.last_error: Optional[str] = None
        self.rate_limit_hit = False
        self.cooldown_until: Optional[float] = None

        if not offline_mode and self.has_api_key():
            self.api_key_status = ApiKeyStatus.VALID

        self._on_change = on_change

    @classmethod
    def load(
        cls,
        config: GatewaySettings,
        registry: ProviderRegistry,
        persisted: Optional[PersistedSettings] = None,
        on_change: Optional[Callable[["SettingsState"], None]] = None,
    ) -> "SettingsState":
        """Merge persisted settings over configured defaults."""
        persisted = persisted or PersistedSettings()

        provider_id = config.default_provider
        if persisted.provider and registry.provider_exists(persisted.provider):
            provider_id = persisted.provider
        elif not registry.provider_exists(provider_id):
            provider_id = registry.provider_ids()[0]

        api_keys = dict(config.initial_api_keys)
        api_keys.update({pid: key for pid, key in persisted.api_keys.items() if key})

        state = cls(
            registry,
            provider_id,
            persisted.model,
            offline_mode=(
                persisted.offline_mode
                if persisted.offline_mode is not None
                else config.default_offline_mode
            ),
            batch_mode=bool(persisted.batch_mode),
            api_keys=api_keys,
            organization_id=(
                persisted.organization_id
                if persisted.organization_id is not None
                else config.openai_organization
            ),
            on_change=on_change,
        )
        logger.info(
            "settings_initialized",
            provider=state.provider_id,
            model=state.model_id,
            offline_mode=state.offline_mode,
            batch_mode=state.batch_mode,
            keys=sorted(state._api_keys),
            has_organization=state.organization_id is not None,
        )
        return state

    # Keys

    def api_key(self, provider_id: Optional[str] = None) -> Optional[str]:
        secret = self._api_keys.get(provider_id or self.provider_id)
        return secret.get_secret_value() if secret else None

    def has_api_key(self, provider_id: Optional[str] = None) -> bool:
        return (provider_id or self.provider_id) in self._api_keys

    # Setters

    def set_provider(self, provider_id: str) -> bool:
        if not self.registry.provider_exists(provider_id):
            logger.error("invalid_provider", provider=provider_id)
            return False
        self.provider_id = provider_id
        self.model_id = self.registry.default_model(provider_id)
        self.clear_rate_limit()
        logger.info("provider_set", provider=provider_id, model=self.model_id)
        self._changed()
        return True

    def set_model(self, model_id: str) -> bool:
        try:
            self.registry.require_model(self.provider_id, model_id)
        except UnknownModelError as e:
            logger.error("invalid_model", error=e.message)
            return False
        self.model_id = model_id
        if self.rate_limit_hit:
            self.clear_rate_limit()
            logger.info("rate_limit_cleared", reason="model_change")
        logger.info("model_set", model=model_id, provider=self.provider_id)
        self._changed()
        return True

    def set_api_key(self, provider_id: str, raw_key: Optional[str]) -> bool:
        """Store a key that passes the format check; going online as a side effect."""
        if not self.registry.provider_exists(provider_id):
            logger.error("unknown_provider", provider=provider_id)
            return False

        key_info = detect_api_key_type(provider_id, raw_key)
        if not key_info.valid:
            logger.error("invalid_api_key_format", provider=provider_id, reason=key_info.message)
            self.api_key_status = ApiKeyStatus.INVALID
            return False

        self._api_keys[provider_id] = SecretStr(raw_key.strip())
        self.offline_mode = False
        self.api_key_status = ApiKeyStatus.VALID
        logger.info("api_key_updated", provider=provider_id, key_type=key_info.type)
        self._changed()
        return True

    def set_organization_id(self, organization_id: Optional[str]) -> bool:
        if not organization_id or not organization_id.strip():
            self.organization_id = None
            self.organization_cleared = True
            logger.info("organization_cleared")
        else:
            self.organization_id = organization_id.strip()
            self.organization_cleared = False
            logger.info("organization_set", organization=self.organization_id)
        self._changed()
        return True

    def set_offline_mode(self, enabled: bool) -> bool:
        self.offline_mode = enabled
        if enabled:
            self.cooldown_until = None
            self.rate_limit_hit = False
            logger.info("offline_mode_enabled")
        else:
            if self.has_api_key():
                # Assume valid until a provider says otherwise
                self.api_key_status = ApiKeyStatus.VALID
            else:
                logger.warning("online_without_api_key", provider=self.provider_id)
                self.api_key_status = ApiKeyStatus.INVALID
            logger.info("offline_mode_disabled")
        self._changed()
        return enabled

    def set_batch_mode(self, enabled: bool) -> None:
        self.batch_mode = enabled
        logger.info("batch_mode_set", enabled=enabled)
        self._changed()

    def pause(self) -> None:
        self.paused = True
        logger.info("requests_paused")

    def resume(self) -> None:
        self.paused = False
        logger.info("requests_resumed")

    # Limiter status

    def record_rate_limit_hit(self) -> None:
        self.rate_limit_hit = True
        self.api_key_status = ApiKeyStatus.RATE_LIMITED
        self.last_error = "Rate limit exceeded"

    def enter_cooldown(self, now: float, period: float) -> None:
        """Open (or extend) the cooldown window; it never moves backwards."""
        until = now + period
        if self.cooldown_until is None or until > self.cooldown_until:
            self.cooldown_until = until
        self.record_rate_limit_hit()
        logger.warning("cooldown_entered", seconds=period)

    def cooldown_remaining(self, now: float) -> float:
        """Seconds of cooldown left; an expired window is cleared on the way."""
        if self.cooldown_until is None:
            return 0.0
        remaining = self.cooldown_until - now
        if remaining <= 0:
            self.cooldown_until = None
            self.rate_limit_hit = False
            logger.info("cooldown_expired")
            return 0.0
        return remaining

    def clear_rate_limit(self) -> None:
        self.cooldown_until = None
        if self.rate_limit_hit:
            self.rate_limit_hit = False
            self.api_key_status = ApiKeyStatus.VALID

    def mark_key_valid(self) -> None:
        self.api_key_status = ApiKeyStatus.VALID
        self.rate_limit_hit = False

    def mark_key_invalid(self, message: str) -> None:
        self.api_key_status = ApiKeyStatus.INVALID
        self.last_error = message

    def reset_limits(self) -> None:
        self.cooldown_until = None
        self.rate_limit_hit = False
        self.last_error = None
        self.api_key_status = ApiKeyStatus.UNKNOWN

    # Persistence

    def to_persisted(self) -> PersistedSettings:
        return PersistedSettings(
            provider=self.provider_id,
            model=self.model_id,
            api_keys={pid: secret.get_secret_value() for pid, secret in self._api_keys.items()},
            organization_id="" if self.organization_cleared else self.organization_id,
            offline_mode=self.offline_mode,
            batch_mode=self.batch_mode,
        )

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self)
