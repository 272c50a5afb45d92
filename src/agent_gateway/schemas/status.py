"""Status snapshot models consumed by dashboards and agent views."""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApiKeyStatus(str, Enum):
    """What the gateway currently believes about the active provider key."""

    UNKNOWN = "unknown"
    VALID = "valid"
    INVALID = "invalid"
    RATE_LIMITED = "rate_limited"


class CallStats(BaseModel):
    """Provider call counters since the last reset."""

    total: int = Field(default=0, description="Recorded provider attempts")
    successful: int = Field(default=0, description="Successful attempts")
    failed: int = Field(default=0, description="Failed attempts other than rate limits")
    rate_limited: int = Field(default=0, description="Attempts rejected with a rate limit")
    last_reset: datetime = Field(default_factory=utcnow, description="When the counters were last reset")


class ModelInfo(BaseModel):
    """Catalog entry for a single model."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Display name")
    description: str = Field(..., description="Short description")


class QueueStatus(BaseModel):
    """Read-only snapshot of the request queue and gateway settings."""

    queue_length: int = Field(..., description="Entries waiting in the queue")
    total_queued: int = Field(..., description="Submitted entries whose continuation has not fired yet")
    currently_processing: bool = Field(..., description="Whether a tick is running")
    estimated_time_remaining: int = Field(..., description="Estimated wait in milliseconds")
    last_error: Optional[str] = Field(default=None, description="Last error message")
    rate_limit_hit: bool = Field(default=False, description="Whether a rate limit is in effect")
    cooldown_remaining: int = Field(default=0, description="Cooldown left in milliseconds")
    api_key_status: ApiKeyStatus = Field(default=ApiKeyStatus.UNKNOWN)
    call_stats: CallStats = Field(default_factory=CallStats)
    current_provider: str = Field(..., description="Active provider id")
    current_model: str = Field(..., description="Active model id")
    offline_mode: bool = Field(..., description="Whether requests are answered offline")
    batch_mode: bool = Field(..., description="Whether batch processing is enabled")
    paused: bool = Field(..., description="Whether processing is paused")
    available_models: Dict[str, ModelInfo] = Field(default_factory=dict)
