"""Call statistics and the consecutive-failure counter behind offline fallback."""

from agent_gateway.schemas import CallStats
from agent_gateway.telemetry import get_logger

from .state import SettingsState

logger = get_logger(__name__)


class FailureTracker:
    """Counts provider call outcomes and forces offline mode after repeated failures."""

    def __init__(self, state: SettingsState, threshold: int = 3):
        """Initialize failure tracker.

        Args:
            state: Settings whose offline flag is flipped on fallback
            threshold: Rate-limited calls, or consecutive failures, before falling back
        """
        self.state = state
        self.threshold = threshold
        self.stats = CallStats()
        self.consecutive_failures = 0
        self.fallback_count = 0

    def record_success(self) -> None:
        self.stats.total += 1
        self.stats.successful += 1
        self.consecutive_failures = 0

    def record_failure(self) -> bool:
        """Record a failed call. Returns True if this call triggered the offline fallback."""
        self.stats.total += 1
        self.stats.failed += 1
        self.consecutive_failures += 1
        return self._check_fallback()

    def record_rate_limited(self) -> bool:
        """Record a rate-limited call. Returns True if this call triggered the offline fallback."""
        self.stats.total += 1
        self.stats.rate_limited += 1
        self.consecutive_failures += 1
        return self._check_fallback()

    def record_recovery(self) -> None:
        """A request completed; the failure streak is over."""
        self.consecutive_failures = 0

    def reset_consecutive(self) -> None:
        self.consecutive_failures = 0

    def reset_stats(self) -> None:
        self.stats = CallStats()
        logger.info("call_stats_reset")

    def snapshot(self) -> CallStats:
        return self.stats.model_copy()

    def _check_fallback(self) -> bool:
        if self.state.offline_mode:
            return False
        if self.stats.rate_limited < self.threshold and self.consecutive_failures < self.threshold:
            return False

        logger.warning(
            "offline_fallback",
            threshold=self.threshold,
            consecutive_failures=self.consecutive_failures,
            rate_limited=self.stats.rate_limited,
        )
        self.fallback_count += 1
        self.state.set_offline_mode(True)
        return True
