"""Tests for the event tracking facade."""

import asyncio
import concurrent.futures
import random

import pytest

import usage_analytics
from usage_analytics.telemetry.events import TrackingEvent
from usage_analytics.tracker import AnalyticsContext, get_default_context, set_default_context
from usage_analytics.transport import NullTransport


class TestTrack:
    def test_track_is_deferred(self, context, transport):
        context.track("file-opened", {"extension": "py"})

        assert transport.calls == [("file-opened", {"extension": "py"}, False)]

    def test_values_default_to_empty(self, context, transport):
        context.track("startup")

        assert transport.calls == [("startup", {}, False)]

    def test_payload_is_copied(self, context, transport):
        values = {"a": "1"}
        context.track("evt", values)
        values["a"] = "2"

        assert transport.calls[0][1] == {"a": "1"}

    def test_transport_return_value_ignored(self, context, transport):
        transport.immediate_result = "ignored"
        assert context.track("evt") is None

    def test_failing_transport_is_not_raised(self, context, caplog):
        class Broken:
            def track(self, event_name, payload, immediate=False):
                raise OSError("pipe closed")

        context.transport = Broken()
        context.track("evt")

        assert context.track_timing("op", lambda: 42) == 42
        assert "pipe closed" in caplog.text


class TestTrackImmediate:
    @pytest.mark.asyncio
    async def test_resolves_when_transport_returns_nothing(self, context, transport):
        await context.track_immediate("shutdown", {"reason": "quit"})

        assert transport.calls == [("shutdown", {"reason": "quit"}, True)]

    @pytest.mark.asyncio
    async def test_awaits_transport(self, context, transport):
        done = []

        async def deliver():
            await asyncio.sleep(0)
            done.append(True)

        transport.immediate_result = deliver()
        await context.track_immediate("shutdown")

        assert done == [True]

    @pytest.mark.asyncio
    async def test_transport_failure_propagates(self, context, transport):
        async def deliver():
            raise ConnectionError("backend down")

        transport.immediate_result = deliver()

        with pytest.raises(ConnectionError, match="backend down"):
            await context.track_immediate("shutdown")

    @pytest.mark.asyncio
    async def test_transport_called_before_await(self, context, transport):
        pending = context.track_immediate("shutdown")

        assert transport.calls == [("shutdown", {}, True)]
        await pending

    def test_without_loop_returns_completed_future(self, context, transport):
        future = context.track_immediate("shutdown", {"reason": "quit"})

        assert isinstance(future, concurrent.futures.Future)
        assert future.result(timeout=0) is None
        assert transport.calls == [("shutdown", {"reason": "quit"}, True)]

    def test_without_loop_async_delivery_fails_future(self, context, transport):
        async def deliver():
            return None

        transport.immediate_result = deliver()
        future = context.track_immediate("shutdown")

        assert isinstance(future.exception(timeout=0), RuntimeError)

    @pytest.mark.asyncio
    async def test_raising_transport_fails_on_await_only(self, context):
        class Broken:
            def track(self, event_name, payload, immediate=False):
                raise ConnectionError("no route")

        context.transport = Broken()
        pending = context.track_immediate("shutdown")

        with pytest.raises(ConnectionError):
            await pending


class TestTrackEvent:
    def test_descriptor(self, context, transport):
        context.track_event(TrackingEvent(type="click", data={"button": "save"}))

        assert transport.calls == [("click", {"button": "save"}, False)]

    def test_mapping_descriptor(self, context, transport):
        context.track_event({"type": "click", "data": {"button": "open"}})
        context.track_event({"type": "hover"})

        assert transport.calls == [
            ("click", {"button": "open"}, False),
            ("hover", {}, False),
        ]


class TestTrackSampled:
    def test_rate_at_most_one_always_tracks(self, context, transport):
        context.rng = lambda: 0.999999
        for rate in (1, 0.5, 0, -3):
            assert context.track_sampled("evt", rate)

        assert len(transport.calls) == 4

    def test_draw_compared_against_rate(self, context, transport):
        context.rng = lambda: 0.25
        assert context.track_sampled("kept", 4)  # 0.25 * 4 == 1
        context.rng = lambda: 0.26
        assert not context.track_sampled("dropped", 4)

        assert [c[0] for c in transport.calls] == ["kept"]

    @pytest.mark.parametrize("rate", [2, 5, 10])
    def test_frequency_approximates_inverse_rate(self, transport, rate):
        context = AnalyticsContext(transport=transport, rng=random.Random(1234).random)
        trials = 20000

        for _ in range(trials):
            context.track_sampled("sampled", rate, {"k": "v"})

        frequency = len(transport.calls) / trials
        assert frequency == pytest.approx(1 / rate, abs=0.02)
        assert all(call == ("sampled", {"k": "v"}, False) for call in transport.calls)


class TestDefaultContext:
    def test_default_is_noop(self):
        context = get_default_context()

        assert isinstance(context.transport, NullTransport)
        assert not usage_analytics.is_track_supported()
        usage_analytics.track("ignored")

    def test_module_functions_use_installed_context(self, context, transport):
        set_default_context(context)

        usage_analytics.track("a", {"x": "1"})
        usage_analytics.track_event({"type": "b", "data": None})
        assert usage_analytics.track_timing("c", lambda: 7) == 7

        assert [c[0] for c in transport.calls] == ["a", "b", "performance"]
        assert usage_analytics.is_track_supported()

    @pytest.mark.asyncio
    async def test_module_track_immediate(self, context, transport):
        set_default_context(context)

        await usage_analytics.track_immediate("now")

        assert transport.calls == [("now", {}, True)]
