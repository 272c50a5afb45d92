"""
Request queue and scheduler.

Submissions are queued FIFO and drained by cooperative ticks running on the
event loop. A tick waits out the minimum spacing since the previous request,
then handles either the head entry or a small batch. Ticks never overlap;
the only suspension points are the spacing wait, the inter-item batch delay,
transport backoff and the cooldown probe timer.
"""

import asyncio
import time
import uuid
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Deque, List, Optional, Set

from agent_gateway.config import GatewaySettings
from agent_gateway.exceptions import (
    GatewayError,
    RateLimitedError,
    format_failure,
    looks_rate_limited,
)
from agent_gateway.offline import Responder
from agent_gateway.schemas import QueueStatus
from agent_gateway.telemetry import RequestContext, get_logger

from .state import SettingsState
from .tracker import FailureTracker
from .transport import Transport

logger = get_logger(__name__)

RESET_MESSAGE = "[SYSTEM] API status reset. Please submit your request again."
SHUTDOWN_MESSAGE = "[SYSTEM] Gateway shut down before this request was handled."


@dataclass
class QueueEntry:
    """A submitted prompt waiting for its answer."""

    prompt: str
    future: "asyncio.Future[str]"
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))


class RequestScheduler:
    """Single-consumer request queue honouring one global rate budget."""

    def __init__(
        self,
        state: SettingsState,
        tracker: FailureTracker,
        transport: Transport,
        offline: Responder,
        config: GatewaySettings,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.state = state
        self.tracker = tracker
        self.transport = transport
        self.offline = offline
        self.config = config
        self.clock = clock
        self.sleep = sleep

        self._queue: Deque[QueueEntry] = deque()
        self._processing = False
        self._last_request_time: Optional[float] = None
        self._total_queued = 0
        self._estimated_wait = 0.0
        self._timer: Optional[asyncio.TimerHandle] = None
        self._tasks: Set["asyncio.Task[None]"] = set()

    # Submission

    def submit(self, prompt: str) -> "asyncio.Future[str]":
        """Queue ``prompt``; the returned future always resolves to display text."""
        loop = asyncio.get_running_loop()
        entry = QueueEntry(prompt=prompt, future=loop.create_future())
        self._queue.append(entry)
        self._total_queued += 1
        self._estimated_wait = len(self._queue) * self.config.min_request_interval

        if self.state.paused:
            logger.info("request_queued_while_paused", request_id=entry.request_id)
            return entry.future

        remaining = self.state.cooldown_remaining(self.clock())
        if remaining > 0:
            logger.info(
                "request_queued_during_cooldown",
                request_id=entry.request_id,
                cooldown_remaining=round(remaining, 1),
            )
            self._schedule_tick(min(self.config.cooldown_probe_interval, remaining))
        else:
            self._kick()
        return entry.future

    def pending(self) -> List[str]:
        """Prompts still waiting, in the order they will be handled."""
        return [entry.prompt for entry in self._queue]

    # Control

    def pause(self) -> None:
        self.state.pause()

    def resume(self) -> None:
        self.state.resume()
        if self._queue:
            self._kick()

    def reset(self) -> bool:
        """Clear limiter state and resolve every pending entry with the reset message."""
        self.state.reset_limits()
        self.tracker.reset_consecutive()

        drained = 0
        while self._queue:
            self._resolve(self._queue.popleft(), RESET_MESSAGE)
            drained += 1
        self._total_queued = 0
        self._estimated_wait = 0.0

        if self.state.paused:
            self.resume()
        logger.info("api_status_reset", drained=drained)
        return True

    def kick(self) -> None:
        """Start a tick if there is anything to do."""
        if self._queue and not self.state.paused:
            self._kick()

    def status(self) -> QueueStatus:
        cooldown = self.state.cooldown_remaining(self.clock())
        return QueueStatus(
            queue_length=len(self._queue),
            total_queued=self._total_queued,
            currently_processing=self._processing,
            estimated_time_remaining=int(self._estimated_wait * 1000),
            last_error=self.state.last_error,
            rate_limit_hit=self.state.rate_limit_hit,
            cooldown_remaining=int(cooldown * 1000),
            api_key_status=self.state.api_key_status,
            call_stats=self.tracker.snapshot(),
            current_provider=self.state.provider_id,
            current_model=self.state.model_id,
            offline_mode=self.state.offline_mode,
            batch_mode=self.state.batch_mode,
            paused=self.state.paused,
            available_models=self.state.registry.models(self.state.provider_id),
        )

    async def aclose(self) -> None:
        """Cancel the pending timer and any running tick, then settle what is still queued."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

        drained = 0
        while self._queue:
            self._resolve(self._queue.popleft(), SHUTDOWN_MESSAGE)
            drained += 1
        self._estimated_wait = 0.0
        if drained:
            logger.info("scheduler_closed", drained=drained)

    # Tick machinery

    def _kick(self) -> None:
        task = asyncio.get_running_loop().create_task(self._tick())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _schedule_tick(self, delay: float) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + delay
        if self._timer is not None:
            if self._timer.when() <= deadline:
                return
            self._timer.cancel()
        self._timer = loop.call_later(delay, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        self._kick()

    async def _tick(self) -> None:
        if self._processing or not self._queue or self.state.paused:
            return

        remaining = self.state.cooldown_remaining(self.clock())
        if remaining > 0:
            logger.info("cooldown_active", seconds_remaining=round(remaining, 1))
            self._schedule_tick(min(self.config.cooldown_probe_interval, remaining))
            return

        self._processing = True
        next_delay = self.config.next_tick_delay
        dispatched = False
        try:
            wait = self._spacing_wait()
            if wait > 0:
                self._estimated_wait = wait
                logger.debug("spacing_wait", seconds=round(wait, 3))
                await self.sleep(wait)
                if not self._queue or self.state.paused:
                    return

            dispatched = True
            if self.state.batch_mode and len(self._queue) > 1:
                next_delay = self.config.min_request_interval
                await self._process_batch()
            else:
                await self._process_single()
        finally:
            if dispatched:
                self._last_request_time = self.clock()
            self._processing = False
            self._estimated_wait = len(self._queue) * self.config.min_request_interval

        if self._queue:
            self._schedule_tick(next_delay)

    def _spacing_wait(self) -> float:
        if self._last_request_time is None:
            return 0.0
        elapsed = self.clock() - self._last_request_time
        return max(0.0, self.config.min_request_interval - elapsed)

    async def _process_single(self) -> None:
        entry = self._queue.popleft()
        try:
            await self._run(entry)
        except asyncio.CancelledError:
            self._queue.appendleft(entry)
            raise

    async def _process_batch(self) -> None:
        size = min(self.config.batch_size, len(self._queue))
        batch = [self._queue.popleft() for _ in range(size)]
        logger.info("batch_started", size=size)

        # Index of the first entry not yet resolved.
        unhandled = 0
        try:
            for index, entry in enumerate(batch):
                was_online = not self.state.offline_mode
                rate_limited = not await self._run(entry)
                unhandled = index + 1
                fell_back = was_online and self.state.offline_mode

                if rate_limited or fell_back:
                    tail = batch[unhandled:]
                    self._queue.extendleft(reversed(tail))
                    logger.warning(
                        "batch_aborted",
                        failed_index=index,
                        requeued=len(tail),
                        reason="rate_limit" if rate_limited else "offline_fallback",
                    )
                    break

                if unhandled < len(batch):
                    await self.sleep(self.config.batch_item_delay)
        except asyncio.CancelledError:
            self._queue.extendleft(reversed(batch[unhandled:]))
            raise

    async def _run(self, entry: QueueEntry) -> bool:
        """Handle one entry. Returns False only when it ended in a rate limit."""
        with RequestContext(entry.request_id):
            logger.info("processing_request", prompt=entry.prompt[:50])
            try:
                result = await self._execute(entry.prompt)
            except GatewayError as e:
                rate_limited = isinstance(e, RateLimitedError) or looks_rate_limited(str(e))
                if rate_limited:
                    self.state.enter_cooldown(self.clock(), self.config.cooldown_period)
                self.state.last_error = str(e)
                logger.error("request_failed", error=str(e), error_type=type(e).__name__)
                self._resolve(entry, format_failure(e, self.config.cooldown_period))
                return not rate_limited
            except Exception as e:
                self.state.last_error = str(e)
                logger.error("request_crashed", error=str(e), exc_info=True)
                self._resolve(entry, format_failure(e, self.config.cooldown_period))
                return True

            self._resolve(entry, result)
            if self.state.rate_limit_hit:
                self.state.clear_rate_limit()
            self.tracker.record_recovery()
            return True

    async def _execute(self, prompt: str) -> str:
        if self.state.offline_mode:
            if self.config.offline_response_delay:
                await self.sleep(self.config.offline_response_delay)
            return self.offline.respond(prompt)
        return await self.transport.execute(prompt)

    def _resolve(self, entry: QueueEntry, text: str) -> None:
        self._total_queued = max(0, self._total_queued - 1)
        if not entry.future.done():
            entry.future.set_result(text)
