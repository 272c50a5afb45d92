"""
Persistence seam for gateway settings.

The gateway loads settings once at start-up and saves them after every
change. Stores only move `PersistedSettings` in and out; how and where is up
to the implementation.
"""

from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from pydantic import BaseModel, Field, ValidationError

from agent_gateway.telemetry import get_logger

logger = get_logger(__name__)


class PersistedSettings(BaseModel):
    """Settings that survive a restart. Missing fields fall back to config defaults."""

    provider: Optional[str] = Field(default=None, description="Provider id")
    model: Optional[str] = Field(default=None, description="Model id")
    api_keys: Dict[str, str] = Field(default_factory=dict, description="Provider id to API key")
    organization_id: Optional[str] = Field(default=None, description="OpenAI organization id")
    offline_mode: Optional[bool] = Field(default=None, description="Offline mode flag")
    batch_mode: Optional[bool] = Field(default=None, description="Batch mode flag")


class SettingsStore(Protocol):
    def load(self) -> Optional[PersistedSettings]:
        ...

    def save(self, settings: PersistedSettings) -> None:
        ...


class MemorySettingsStore:
    """Keeps settings in memory; the default when nothing else is configured."""

    def __init__(self, initial: Optional[PersistedSettings] = None):
        self.settings = initial

    def load(self) -> Optional[PersistedSettings]:
        return self.settings.model_copy(deep=True) if self.settings else None

    def save(self, settings: PersistedSettings) -> None:
        self.settings = settings.model_copy(deep=True)


class JsonFileSettingsStore:
    """Stores settings as a JSON document readable only by the owner."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def load(self) -> Optional[PersistedSettings]:
        if not self.path.exists():
            return None
        try:
            return PersistedSettings.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            logger.warning("settings_file_invalid", path=str(self.path), error=str(e))
            return None

    def save(self, settings: PersistedSettings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(settings.model_dump_json(indent=2), encoding="utf-8")
        self.path.chmod(0o600)
