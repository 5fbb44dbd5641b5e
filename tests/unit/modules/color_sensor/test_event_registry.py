"""Unit tests for match-handler dispatch."""

import asyncio
import logging

import pytest

from rvr_color.modules.ColorSensor.color_core import (
    Color,
    ColorSensorController,
    CompletionToken,
    EventRegistry,
    HandlerLoopError,
    HandlerRecord,
)

REGION = {
    "r": {"value": 245, "tolerance": 10},
    "g": {"value": 57, "tolerance": 10},
    "b": {"value": 97, "tolerance": 10},
}

MATCH = (255, 57, 97)
MISS = (10, 20, 30)


def poll(controller, times):
    for _ in range(times):
        controller.get_color()


class TestCompletionToken:
    """The done callable."""

    def test_clears_running_flag_once(self):
        record = HandlerRecord(lambda *args: None, is_running=True)
        token = CompletionToken(record)

        token()
        assert not record.is_running
        assert token.called

        record.is_running = True
        token()
        assert record.is_running


class TestDispatch:
    """Handlers fire on a change of the stable color into a spec."""

    def test_fires_once_for_constant_match(self, constant_controller):
        controller = constant_controller(MATCH)
        spec = controller.new_spec(REGION)
        calls = []
        spec.when_matches(lambda done, color, s: (calls.append(color), done()))

        poll(controller, 5)

        assert calls == [Color(*MATCH)]

    def test_does_not_fire_without_match(self, constant_controller):
        controller = constant_controller(MISS)
        spec = controller.new_spec(REGION)
        calls = []
        spec.when_matches(lambda done, color, s: calls.append(color))

        poll(controller, 5)

        assert calls == []

    def test_handler_receives_spec(self, constant_controller):
        controller = constant_controller(MATCH)
        spec = controller.new_spec(REGION)
        received = []
        spec.when_matches(lambda done, color, s: received.append(s))

        controller.get_color()

        assert received == [spec]

    def test_unfinished_handler_is_not_reentered(self, sequence_source):
        controller = ColorSensorController(sequence_source([MISS, MATCH, MISS, MATCH]))
        spec = controller.new_spec(REGION)
        calls = []
        spec.when_matches(lambda done, color, s: calls.append(color))

        poll(controller, 4)

        assert len(calls) == 1
        assert controller.registry.running_count(spec) == 1

    def test_finished_handler_fires_again(self, sequence_source):
        controller = ColorSensorController(sequence_source([MISS, MATCH, MISS, MATCH]))
        spec = controller.new_spec(REGION)
        calls = []

        def handler(done, color, s):
            calls.append(color)
            done()

        spec.when_matches(handler)
        poll(controller, 4)

        assert len(calls) == 2
        assert controller.registry.running_count(spec) == 0

    def test_handlers_run_in_registration_order(self, constant_controller):
        controller = constant_controller(MATCH)
        spec = controller.new_spec(REGION)
        order = []
        spec.when_matches(lambda done, color, s: order.append("first"))
        spec.when_matches(lambda done, color, s: order.append("second"))

        controller.get_color()

        assert order == ["first", "second"]

    def test_non_callable_clears_handlers(self, constant_controller):
        controller = constant_controller(MATCH)
        spec = controller.new_spec(REGION)
        calls = []
        spec.when_matches(lambda done, color, s: calls.append(color))
        spec.when_matches(None)

        controller.get_color()

        assert calls == []
        assert spec not in controller.registry

    def test_equal_regions_keep_separate_handlers(self, constant_controller):
        controller = constant_controller(MATCH)
        first = controller.new_spec(REGION)
        second = controller.new_spec(REGION)
        calls = []
        first.when_matches(lambda done, color, s: calls.append(s.spec_id))
        second.when_matches(lambda done, color, s: calls.append(s.spec_id))
        first.when_matches(None)

        controller.get_color()

        assert calls == [second.spec_id]

    def test_raising_handler_is_logged(self, constant_controller, caplog):
        controller = constant_controller(MATCH)
        spec = controller.new_spec(REGION)
        after = []

        def broken(done, color, s):
            raise ValueError("boom")

        spec.when_matches(broken)
        spec.when_matches(lambda done, color, s: (after.append(color), done()))

        with caplog.at_level(logging.ERROR):
            controller.get_color()

        assert after == [Color(*MATCH)]
        assert "raised" in caplog.text
        assert controller.registry.running_count(spec) == 1


class TestRegistryDirect:
    """EventRegistry without a controller."""

    def test_dispatch_counts_invocations(self, constant_controller):
        controller = constant_controller(MISS)
        registry = EventRegistry()
        spec = controller.new_spec(REGION)
        registry.register(spec, lambda done, color, s: done())
        registry.register(spec, lambda done, color, s: done())

        assert registry.dispatch(Color(*MATCH)) == 2
        assert registry.dispatch(Color(*MISS)) == 0
        assert registry.handler_count(spec) == 2

    def test_deregister_unknown_spec(self, constant_controller):
        spec = constant_controller(MISS).new_spec(REGION)
        assert EventRegistry().deregister(spec) is False

    def test_async_handler_without_loop(self, constant_controller):
        controller = constant_controller(MISS)
        registry = EventRegistry()
        spec = controller.new_spec(REGION)

        async def handler(done, color, s):
            done()

        registry.register(spec, handler)

        with pytest.raises(RuntimeError):
            registry.dispatch(Color(*MATCH))
        assert registry.running_count(spec) == 0


    def test_unscheduled_async_handler_does_not_block_others(self, constant_controller):
        controller = constant_controller(MATCH)
        first = controller.new_spec(REGION)
        second = controller.new_spec(REGION)
        calls = []

        async def needs_loop(done, color, s):
            done()

        first.when_matches(needs_loop)
        first.when_matches(lambda done, color, s: calls.append("first"))
        second.when_matches(lambda done, color, s: calls.append("second"))

        with pytest.raises(HandlerLoopError):
            controller.get_color()

        assert calls == ["first", "second"]
        assert controller.stable_color == Color(*MATCH)
        assert controller.registry.running_count(first) == 1


class TestAsyncHandlers:
    """Coroutine handlers are scheduled on the running loop."""

    @pytest.mark.asyncio
    async def test_async_handler_runs_and_completes(self, constant_controller):
        controller = constant_controller(MATCH)
        spec = controller.new_spec(REGION)
        seen = asyncio.Event()

        async def handler(done, color, s):
            await asyncio.sleep(0)
            seen.set()
            done()

        spec.when_matches(handler)
        controller.get_color()
        assert controller.registry.running_count(spec) == 1

        await asyncio.wait_for(seen.wait(), timeout=1.0)
        await asyncio.sleep(0)

        assert controller.registry.running_count(spec) == 0
        await controller.aclose()

    @pytest.mark.asyncio
    async def test_aclose_cancels_unfinished_handlers(self, constant_controller):
        controller = constant_controller(MATCH)
        spec = controller.new_spec(REGION)
        started = asyncio.Event()

        async def handler(done, color, s):
            started.set()
            await asyncio.sleep(10)

        spec.when_matches(handler)
        controller.get_color()
        await asyncio.wait_for(started.wait(), timeout=1.0)
        tasks = controller.registry.pending_tasks
        assert len(tasks) == 1

        await controller.aclose()
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        assert all(task.cancelled() for task in tasks)
        assert not controller.registry.pending_tasks
