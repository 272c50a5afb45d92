"""Unit tests for the request queue and scheduler."""

import asyncio

import pytest
import pytest_asyncio

from agent_gateway.orchestrator import RESET_MESSAGE, SHUTDOWN_MESSAGE, AgentGateway
from agent_gateway.schemas import ApiKeyStatus
from agent_gateway.store import MemorySettingsStore


@pytest_asyncio.fixture
async def gateway_factory(config_factory, seeded_rng, openai_key):
    """Builds online gateways around provider stubs and closes them afterwards."""
    created = []

    def build(stub, clock=None, **config_overrides):
        config_overrides.setdefault("default_offline_mode", False)
        config_overrides.setdefault("openai_api_key", openai_key)
        client = stub.client()
        kwargs = {"clock": clock} if clock is not None else {}
        gateway = AgentGateway(
            config_factory(**config_overrides),
            store=MemorySettingsStore(),
            http_client=client,
            rng=seeded_rng,
            **kwargs,
        )
        created.append((gateway, client))
        return gateway

    yield build

    for gateway, client in created:
        await gateway.aclose()
        await client.aclose()


async def settle(*futures, timeout=2.0):
    return await asyncio.wait_for(asyncio.gather(*futures), timeout)


class TestOrdering:
    """FIFO delivery and submission behaviour."""

    @pytest.mark.asyncio
    async def test_submit_returns_immediately(self, offline_gateway):
        future = offline_gateway.submit("hello")

        assert not future.done()
        assert offline_gateway.get_status().total_queued == 1
        await settle(future)

    @pytest.mark.asyncio
    async def test_fifo_completion_order(self, offline_gateway):
        order = []
        futures = []
        for index in range(5):
            future = offline_gateway.submit(f"prompt {index}")
            future.add_done_callback(lambda _, i=index: order.append(i))
            futures.append(future)

        answers = await settle(*futures)

        assert order == [0, 1, 2, 3, 4]
        assert all(answer.startswith("[OFFLINE MODE") for answer in answers)
        status = offline_gateway.get_status()
        assert status.queue_length == 0
        assert status.total_queued == 0

    @pytest.mark.asyncio
    async def test_provider_sees_prompts_in_order(self, gateway_factory, provider_stub):
        gateway = gateway_factory(provider_stub)

        answers = await settle(*(gateway.submit(f"p{i}") for i in range(1, 4)))

        assert provider_stub.prompts == ["p1", "p2", "p3"]
        assert answers == ["echo: p1", "echo: p2", "echo: p3"]


class TestSpacing:
    """Minimum interval between provider calls."""

    @pytest.mark.asyncio
    async def test_calls_are_spaced(self, gateway_factory, provider_stub):
        gateway = gateway_factory(provider_stub, min_request_interval=0.05)

        await settle(*(gateway.submit(f"p{i}") for i in range(3)))

        starts = provider_stub.started_at
        assert len(starts) == 3
        for earlier, later in zip(starts, starts[1:]):
            assert later - earlier >= 0.05 - 1e-3

    @pytest.mark.asyncio
    async def test_estimated_wait_while_paused(self, offline_gateway):
        offline_gateway.pause()
        for index in range(3):
            offline_gateway.submit(f"p{index}")

        status = offline_gateway.get_status()
        assert status.paused is True
        assert status.queue_length == 3
        assert status.estimated_time_remaining == 150


class TestCooldown:
    """Cooldown blocks provider calls until it expires."""

    @pytest.mark.asyncio
    async def test_queue_waits_out_cooldown(self, gateway_factory, provider_stub, fake_clock):
        gateway = gateway_factory(provider_stub, clock=fake_clock, cooldown_period=60)
        gateway.state.enter_cooldown(fake_clock(), 60)

        future = gateway.submit("p1")
        await asyncio.sleep(0.05)

        assert not future.done()
        assert provider_stub.requests == []
        status = gateway.get_status()
        assert status.cooldown_remaining == 60000
        assert status.rate_limit_hit is True
        assert status.queue_length == 1

        fake_clock.advance(61)

        assert await settle(future) == ["echo: p1"]
        assert gateway.get_status().cooldown_remaining == 0

    @pytest.mark.asyncio
    async def test_rate_limited_request_enters_cooldown(self, gateway_factory, stub_factory, fake_clock):
        stub = stub_factory(lambda prompt, request: stub.error(429, "Too many requests"))
        gateway = gateway_factory(stub, clock=fake_clock, max_failed_calls_before_fallback=10)

        first = gateway.submit("p1")
        (answer,) = await settle(first)
        second = gateway.submit("p2")
        await asyncio.sleep(0.05)

        assert answer == "[ERROR] API rate limit reached. Wait 60s and try again. (HTTP 429)"
        assert not second.done()
        assert len(stub.requests) == 1
        status = gateway.get_status()
        assert status.api_key_status == ApiKeyStatus.RATE_LIMITED
        assert status.cooldown_remaining == 60000


class TestFallback:
    """Automatic switch to offline mode after repeated failures."""

    @pytest.mark.asyncio
    async def test_third_failure_switches_offline(self, gateway_factory, stub_factory):
        stub = stub_factory(lambda prompt, request: stub.error(500, "boom"))
        gateway = gateway_factory(stub, max_failed_calls_before_fallback=3)

        answers = await settle(*(gateway.submit(f"p{i}") for i in range(4)))

        assert answers[0] == "[ERROR] boom"
        assert answers[1] == "[ERROR] boom"
        assert answers[2].startswith("[OFFLINE MODE")
        assert answers[3].startswith("[OFFLINE MODE")
        assert len(stub.requests) == 3
        assert gateway.offline_mode is True
        assert gateway.tracker.fallback_count == 1
        assert gateway.get_call_stats().failed == 3

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_text(self, fast_config):
        class BrokenResponder:
            def respond(self, prompt):
                raise RuntimeError("kaput")

        gateway = AgentGateway(fast_config, store=MemorySettingsStore(), offline_responder=BrokenResponder())
        try:
            assert await settle(gateway.submit("hi")) == ["[ERROR] kaput"]
            assert gateway.get_status().last_error == "kaput"
        finally:
            await gateway.aclose()


class TestControls:
    """Pause, resume and reset."""

    @pytest.mark.asyncio
    async def test_pause_and_resume(self, offline_gateway):
        offline_gateway.pause()
        future = offline_gateway.submit("held")
        await asyncio.sleep(0.02)

        assert not future.done()
        assert offline_gateway.pending() == ["held"]

        offline_gateway.resume()
        (answer,) = await settle(future)
        assert answer.startswith("[OFFLINE MODE")
        assert offline_gateway.pending() == []

    @pytest.mark.asyncio
    async def test_reset_resolves_everything_pending(self, offline_gateway):
        """Test reset completes queued requests with the reset notice instead of failing them."""
        offline_gateway.pause()
        futures = [offline_gateway.submit(f"p{i}") for i in range(3)]

        assert offline_gateway.reset_status() is True

        assert all(future.done() for future in futures)
        assert [future.result() for future in futures] == [RESET_MESSAGE] * 3
        status = offline_gateway.get_status()
        assert status.queue_length == 0
        assert status.total_queued == 0
        assert status.paused is False
        assert status.api_key_status == ApiKeyStatus.UNKNOWN

    @pytest.mark.asyncio
    async def test_reset_clears_cooldown(self, gateway_factory, provider_stub, fake_clock):
        gateway = gateway_factory(provider_stub, clock=fake_clock)
        gateway.state.enter_cooldown(fake_clock(), 60)

        gateway.reset_status()

        assert gateway.get_status().cooldown_remaining == 0
        assert await settle(gateway.submit("after")) == ["echo: after"]


class TestBatch:
    """Batch processing."""

    @pytest.mark.asyncio
    async def test_batch_processes_in_order(self, gateway_factory, provider_stub):
        gateway = gateway_factory(provider_stub, batch_size=3)
        gateway.set_batch_mode(True)
        gateway.pause()
        futures = [gateway.submit(f"p{i}") for i in range(1, 6)]
        gateway.resume()

        answers = await settle(*futures)

        assert provider_stub.prompts == ["p1", "p2", "p3", "p4", "p5"]
        assert answers == [f"echo: p{i}" for i in range(1, 6)]

    @pytest.mark.asyncio
    async def test_rate_limit_mid_batch_requeues_tail(self, gateway_factory, stub_factory, fake_clock):
        """Test a rate limit on p2 puts p3 back in front of p4 and stops the batch."""

        def respond(prompt, request):
            if prompt == "p2":
                return stub.error(429, "Too many requests")
            return stub.reply(f"echo: {prompt}")

        stub = stub_factory(respond)
        gateway = gateway_factory(
            stub, clock=fake_clock, batch_size=3, max_failed_calls_before_fallback=10
        )
        gateway.set_batch_mode(True)
        gateway.pause()
        f1, f2, f3, f4 = (gateway.submit(f"p{i}") for i in range(1, 5))
        gateway.resume()

        first, second = await settle(f1, f2)

        assert first == "echo: p1"
        assert "API rate limit reached" in second
        assert stub.prompts == ["p1", "p2"]
        assert gateway.pending() == ["p3", "p4"]
        assert gateway.get_status().cooldown_remaining > 0

        await asyncio.sleep(0.05)
        assert stub.prompts == ["p1", "p2"]

        fake_clock.advance(61)
        assert await settle(f3, f4) == ["echo: p3", "echo: p4"]
        assert stub.prompts == ["p1", "p2", "p3", "p4"]


class TestShutdown:
    """Closing the gateway with work still queued."""

    @pytest.mark.asyncio
    async def test_close_settles_queued_requests(self, offline_gateway):
        offline_gateway.pause()
        futures = [offline_gateway.submit(f"p{i}") for i in range(2)]

        await offline_gateway.aclose()

        assert [future.result() for future in futures] == [SHUTDOWN_MESSAGE] * 2
        assert offline_gateway.get_status().total_queued == 0

    @pytest.mark.asyncio
    async def test_close_mid_batch_settles_every_request(self, config_factory, seeded_rng):
        """Test entries popped into a running batch are not lost when it is cancelled."""
        stalled = asyncio.Event()

        async def stalling_sleep(seconds):
            stalled.set()
            await asyncio.Event().wait()

        gateway = AgentGateway(
            config_factory(batch_size=3, offline_response_delay=1.0),
            store=MemorySettingsStore(),
            rng=seeded_rng,
            sleep=stalling_sleep,
        )
        gateway.set_batch_mode(True)
        gateway.pause()
        futures = [gateway.submit(f"p{i}") for i in range(4)]
        gateway.resume()
        await asyncio.wait_for(stalled.wait(), 1.0)

        await gateway.aclose()

        assert all(future.done() for future in futures)
        assert [future.result() for future in futures] == [SHUTDOWN_MESSAGE] * 4
        assert gateway.pending() == []
