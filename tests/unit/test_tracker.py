"""Unit tests for call statistics and automatic offline fallback."""

import pytest

from agent_gateway.orchestrator import FailureTracker, SettingsState
from agent_gateway.providers import DEFAULT_REGISTRY


@pytest.fixture
def online_state(openai_key):
    return SettingsState(
        DEFAULT_REGISTRY, "openai", offline_mode=False, api_keys={"openai": openai_key}
    )


class TestFailureTracker:
    """Test suite for the failure tracker."""

    def test_success_counts(self, online_state):
        tracker = FailureTracker(online_state)
        tracker.record_success()
        tracker.record_success()

        stats = tracker.snapshot()
        assert stats.total == 2
        assert stats.successful == 2
        assert stats.failed == 0

    def test_consecutive_failures_trigger_fallback_once(self, online_state):
        """Test the third consecutive failure forces offline mode."""
        tracker = FailureTracker(online_state, threshold=3)

        assert tracker.record_failure() is False
        assert tracker.record_failure() is False
        assert tracker.record_failure() is True

        assert online_state.offline_mode is True
        assert tracker.fallback_count == 1

        # Already offline: no second fallback
        assert tracker.record_failure() is False
        assert tracker.fallback_count == 1

    def test_success_breaks_the_streak(self, online_state):
        tracker = FailureTracker(online_state, threshold=3)
        tracker.record_failure()
        tracker.record_failure()
        tracker.record_success()
        tracker.record_failure()

        assert online_state.offline_mode is False
        assert tracker.consecutive_failures == 1

    def test_rate_limited_total_triggers_fallback(self, online_state):
        """Test rate-limited calls count towards fallback even across recoveries."""
        tracker = FailureTracker(online_state, threshold=3)

        tracker.record_rate_limited()
        tracker.record_recovery()
        tracker.record_rate_limited()
        tracker.record_recovery()
        assert tracker.record_rate_limited() is True

        stats = tracker.snapshot()
        assert stats.rate_limited == 3
        assert stats.total == 3
        assert online_state.offline_mode is True

    def test_no_fallback_while_offline(self, online_state):
        online_state.set_offline_mode(True)
        tracker = FailureTracker(online_state, threshold=1)

        assert tracker.record_failure() is False
        assert tracker.fallback_count == 0

    def test_reset_stats(self, online_state):
        tracker = FailureTracker(online_state)
        tracker.record_failure()
        before = tracker.snapshot().last_reset

        tracker.reset_stats()

        stats = tracker.snapshot()
        assert stats.total == 0
        assert stats.failed == 0
        assert stats.last_reset >= before

    def test_snapshot_is_a_copy(self, online_state):
        tracker = FailureTracker(online_state)
        snapshot = tracker.snapshot()
        tracker.record_success()
        assert snapshot.total == 0
