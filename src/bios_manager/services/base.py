from __future__ import annotations

import time
from enum import StrEnum
from typing import Awaitable, Callable, Generic, TypeVar

from bios_manager.errors import BiosManagerError
from bios_manager.utils import get_logger


logger = get_logger(__name__)

EventT = TypeVar("EventT")
ResultT = TypeVar("ResultT")

Listener = Callable[[EventT], None]


class MutationStatus(StrEnum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class EventHook(Generic[EventT]):
    """Fans service events out to whichever front end is listening."""

    def __init__(self) -> None:
        self._listeners: list[Listener[EventT]] = []

    def subscribe(self, listener: Listener[EventT]) -> Callable[[], None]:
        """Register ``listener``; the returned callable detaches it again."""
        self._listeners.append(listener)
        return lambda: self._discard(listener)

    def emit(self, event: EventT) -> None:
        for listener in tuple(self._listeners):
            try:
                listener(event)
            except Exception:  # noqa: BLE001 - a broken listener must not abort a write
                logger.exception("Event listener failed", event=type(event).__name__)

    def _discard(self, listener: Listener[EventT]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)


async def run_tracked_mutation(
    *,
    name: str,
    emitter: EventHook[EventT],
    event_builder: Callable[[MutationStatus, Exception | None], EventT],
    operation: Callable[[], Awaitable[ResultT]],
) -> ResultT:
    """Run a write, publishing its lifecycle and logging outcome and duration."""

    started = time.monotonic()
    emitter.emit(event_builder(MutationStatus.PENDING, None))
    try:
        result = await operation()
    except Exception as exc:
        elapsed_ms = round((time.monotonic() - started) * 1000)
        category = exc.category.value if isinstance(exc, BiosManagerError) else None
        logger.warning(
            "Mutation failed",
            mutation=name,
            category=category,
            elapsed_ms=elapsed_ms,
        )
        emitter.emit(event_builder(MutationStatus.FAILED, exc))
        raise
    logger.info(
        "Mutation completed",
        mutation=name,
        elapsed_ms=round((time.monotonic() - started) * 1000),
    )
    emitter.emit(event_builder(MutationStatus.SUCCEEDED, None))
    return result


__all__ = [
    "EventHook",
    "Listener",
    "MutationStatus",
    "run_tracked_mutation",
]
