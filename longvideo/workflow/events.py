"""
Progress Events & Cancellation
==============================

Typed progress events delivered to explicitly registered listeners, and the
cooperative cancellation token threaded through every generation job.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any, Callable, Awaitable, TypeVar

from ..core.exceptions import GenerationCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EventType(Enum):
    """Kinds of progress events emitted during a run."""

    ORCHESTRATION_STARTED = "orchestration-started"
    BATCH_STARTED = "batch-started"
    STEP_UPDATED = "step-updated"
    RENDER_PLAN_READY = "render-plan-ready"
    ORCHESTRATION_COMPLETED = "orchestration-completed"
    ORCHESTRATION_FAILED = "orchestration-failed"
    GENERATION_CANCELLED = "generation-cancelled"


@dataclass(frozen=True)
class ProgressEvent:
    """A single progress notification."""

    event_type: EventType
    payload: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)


EventListener = Callable[[ProgressEvent], None]


class EventDispatcher:
    """
    Fan-out of progress events to listener callables.

    A listener that raises is logged and skipped; observers never break the
    pipeline they observe.
    """

    def __init__(self, listeners: Optional[List[EventListener]] = None):
        self._listeners: List[EventListener] = list(listeners or [])

    def add_listener(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: EventListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, event_type: EventType, **payload: Any) -> ProgressEvent:
        event = ProgressEvent(event_type=event_type, payload=payload)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Event listener failed on {event_type.value}: {e}")
        return event


class CancellationToken:
    """
    Cooperative cancellation handle for one run.

    Jobs get named child tokens via :meth:`child`; cancelling the parent
    cancels every child, while :meth:`cancel_child` aborts a single job.

    Usage:
        token = CancellationToken()
        job_token = token.child("scene_3")
        media = await job_token.run(backend.fetch(...))
    """

    def __init__(self, name: Optional[str] = None):
        self.name = name
        self.reason: Optional[str] = None
        self._event = asyncio.Event()
        self._children: Dict[str, "CancellationToken"] = {}

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "Generation cancelled") -> None:
        """Cancel this token and all of its children."""
        if not self.cancelled:
            self.reason = reason
            self._event.set()
            logger.info(f"Cancellation requested{f' for {self.name}' if self.name else ''}: {reason}")
        for child in list(self._children.values()):
            child.cancel(reason)

    def child(self, name: str) -> "CancellationToken":
        """Create (or return) the child token for one job."""
        token = self._children.get(name)
        if token is None:
            token = CancellationToken(name=name)
            self._children[name] = token
        if self.cancelled:
            token.cancel(self.reason or "Generation cancelled")
        return token

    def cancel_child(self, name: str, reason: str = "Job cancelled") -> bool:
        """Cancel a single job; returns False when no such job is in flight."""
        token = self._children.get(name)
        if token is None:
            return False
        token.cancel(reason)
        return True

    def release(self, name: str) -> None:
        """Forget a finished job's token."""
        self._children.pop(name, None)

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise GenerationCancelledError(self.reason or "Generation cancelled", scene_id=self.name)

    async def wait(self) -> None:
        await self._event.wait()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """
        Await ``awaitable`` unless the token is cancelled first.

        On cancellation the underlying task is cancelled (aborting any
        in-flight HTTP request) and GenerationCancelledError is raised.
        """
        task = asyncio.ensure_future(awaitable)
        if self.cancelled:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            self.raise_if_cancelled()

        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            waiter.cancel()
            raise

        if task.done():
            waiter.cancel()
            await asyncio.gather(waiter, return_exceptions=True)
            return task.result()

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        raise GenerationCancelledError(self.reason or "Generation cancelled", scene_id=self.name)
