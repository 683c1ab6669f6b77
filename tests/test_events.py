"""
Tests for progress events and cancellation tokens.
"""

import asyncio

import pytest

from longvideo.core.exceptions import GenerationCancelledError
from longvideo.workflow.events import CancellationToken, EventDispatcher, EventType


class TestEventDispatcher:
    def test_delivers_to_listeners_in_order(self):
        received = []
        dispatcher = EventDispatcher([lambda e: received.append(("a", e.event_type))])
        dispatcher.add_listener(lambda e: received.append(("b", e.event_type)))

        event = dispatcher.emit(EventType.BATCH_STARTED, batch=1)

        assert received == [("a", EventType.BATCH_STARTED), ("b", EventType.BATCH_STARTED)]
        assert event.payload == {"batch": 1}

    def test_failing_listener_does_not_break_others(self):
        received = []

        def broken(event):
            raise RuntimeError("listener bug")

        dispatcher = EventDispatcher([broken, received.append])
        dispatcher.emit(EventType.STEP_UPDATED, step="planning")
        assert len(received) == 1

    def test_remove_listener(self):
        received = []
        dispatcher = EventDispatcher([received.append])
        dispatcher.remove_listener(received.append)
        dispatcher.remove_listener(received.append)
        dispatcher.emit(EventType.ORCHESTRATION_STARTED)
        assert received == []


class TestCancellationToken:
    @pytest.mark.asyncio
    async def test_run_returns_result(self):
        token = CancellationToken()

        async def work():
            return 42

        assert await token.run(work()) == 42

    @pytest.mark.asyncio
    async def test_cancel_aborts_running_work(self):
        token = CancellationToken(name="scene_0")
        started = asyncio.Event()
        aborted = []

        async def work():
            started.set()
            try:
                await asyncio.sleep(30)
            except asyncio.CancelledError:
                aborted.append(True)
                raise

        task = asyncio.ensure_future(token.run(work()))
        await started.wait()
        token.cancel("user request")

        with pytest.raises(GenerationCancelledError) as excinfo:
            await task
        assert excinfo.value.message == "user request"
        assert aborted == [True]

    @pytest.mark.asyncio
    async def test_already_cancelled_token(self):
        token = CancellationToken()
        token.cancel()

        async def work():
            return "never"

        with pytest.raises(GenerationCancelledError):
            await token.run(work())

    def test_parent_cancel_propagates_to_children(self):
        parent = CancellationToken(name="run")
        first = parent.child("scene_0")
        second = parent.child("scene_1")
        assert parent.child("scene_0") is first

        parent.cancel("stop")

        assert first.cancelled and second.cancelled
        assert first.reason == "stop"
        assert parent.child("scene_2").cancelled

    def test_cancel_child_only(self):
        parent = CancellationToken()
        first = parent.child("scene_0")
        second = parent.child("scene_1")

        assert parent.cancel_child("scene_1")
        assert not parent.cancel_child("scene_9")
        assert second.cancelled and not first.cancelled and not parent.cancelled

    def test_release_forgets_child(self):
        parent = CancellationToken()
        parent.child("scene_0")
        parent.release("scene_0")
        assert not parent.cancel_child("scene_0")

    def test_raise_if_cancelled(self):
        token = CancellationToken(name="scene_4")
        token.raise_if_cancelled()
        token.cancel()
        with pytest.raises(GenerationCancelledError):
            token.raise_if_cancelled()
