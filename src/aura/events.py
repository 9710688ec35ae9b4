"""Event bus: the Bus class and the set of event names E.

Coroutine handlers are scheduled on the running loop by pyee, so emitting
never blocks the emitter. Handler failures are routed to the "error" event and
logged there.
"""

from __future__ import annotations
from pyee.asyncio import AsyncIOEventEmitter
from typing import Awaitable, Callable

from aura.logger import logger

AsyncHandler = Callable[..., Awaitable[None]]


# Event names live here
class E:
    CHAT_MESSAGE = "chat.message"
    REMINDER_CREATED = "reminder.created"
    REMINDER_DELIVERED = "reminder.delivered"
    SUGGESTION_SURFACED = "suggestion.surfaced"


class Bus(AsyncIOEventEmitter):
    def __init__(self) -> None:
        super().__init__()
        super().on("error", self._log_handler_error)

    @staticmethod
    def _log_handler_error(exc: Exception) -> None:
        logger.opt(exception=exc).error(f"Event handler failed: {exc}")

    def on(self, event: str) -> Callable[[AsyncHandler], AsyncHandler]:
        """Decorator registering an event handler"""
        def decorator(handler: AsyncHandler) -> AsyncHandler:
            logger.debug(f"Registering event handler: {event} -> {handler.__name__}")
            super(Bus, self).on(event, handler)
            return handler

        return decorator


bus = Bus()

__all__ = ["bus", "E", "Bus"]
