"""Retry handler with table-driven backoff."""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import Type, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
)
from tenacity.wait import wait_base

from agent_gateway.exceptions import RateLimitedError
from agent_gateway.telemetry import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


class wait_backoff_table(wait_base):
    """Wait the table entry for the attempt that just failed.

    A ``retry_after`` hint on the failing exception takes precedence; attempts
    beyond the table reuse its last entry.
    """

    def __init__(self, delays: Sequence[float]):
        self.delays = list(delays)

    def __call__(self, retry_state: RetryCallState) -> float:
        outcome = retry_state.outcome
        if outcome is not None and outcome.failed:
            retry_after = getattr(outcome.exception(), "retry_after", None)
            if retry_after:
                return float(retry_after)
        index = min(retry_state.attempt_number - 1, len(self.delays) - 1)
        return self.delays[index]


class RetryHandler:
    """Bounded retry of rate-limited calls with fixed per-attempt delays."""

    def __init__(
        self,
        max_retries: int = 4,
        delays: Sequence[float] = (3.0, 7.0, 15.0, 30.0),
        retry_on: Type[BaseException] = RateLimitedError,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize retry handler."""
        self.max_retries = max_retries
        self.delays = list(delays)
        self.retry_on = retry_on
        self.sleep = sleep

    async def execute(
        self,
        func: Callable[..., Awaitable[T]],
        *args,
        **kwargs,
    ) -> T:
        """Run ``func``, retrying on ``retry_on`` until the retry budget is spent.

        The last exception is re-raised once attempts run out; any other
        exception propagates straight away.
        """
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_backoff_table(self.delays),
            retry=retry_if_exception_type(self.retry_on),
            sleep=self.sleep,
            before_sleep=self._log_retry,
            reraise=True,
        ):
            with attempt:
                return await func(*args, **kwargs)

        # This should never be reached
        raise RuntimeError("Retry loop completed without returning")

    def _log_retry(self, retry_state: RetryCallState) -> None:
        wait = retry_state.next_action.sleep if retry_state.next_action else None
        logger.warning(
            "retrying_after_rate_limit",
            attempt=retry_state.attempt_number,
            max_attempts=self.max_retries + 1,
            wait_seconds=wait,
        )
