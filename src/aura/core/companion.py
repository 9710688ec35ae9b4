"""Companion session

One session per subject. It owns the two repeating loops of the engine:

1. the reminder poll loop (`ReminderPoller`), which delivers due reminders in
   chat and retires them in the store;
2. the suggestion check loop, which reads the environmental context, asks
   `should_proactively_suggest` whether it is worth looking, and surfaces at
   most one suggestion per cooldown window.

Without an owner both loops stay disarmed. Chat output goes through the event
bus by default, where `save_chat_message` persists it to the transcript.
"""

from __future__ import annotations

import asyncio
import inspect
from datetime import datetime, timedelta
from typing import Callable, Protocol

from aura.core.composer import AppendChatMessage, DeliveryComposer
from aura.core.intent import detect_reminder_intent, resolve_due_at
from aura.core.suggestions import (
    DEFAULT_COOLDOWN,
    generate_suggestions,
    select_next,
    should_proactively_suggest,
)
from aura.datamodel import *
from aura.events import bus, E
from aura.logger import logger
from aura.metrics import runtime_metrics
from aura.utils import format_relative, now_utc, to_user_local
from aura.world.reminder import DEFAULT_DUE_WINDOW, DEFAULT_POLL_INTERVAL, ReminderPoller
import aura.storage.message as message_storage
import aura.storage.reminder as reminder_storage

__all__ = [
    "CompanionSession",
    "ContextProvider",
    "bus_chat_appender",
    "configure_session",
    "require_session",
]


class ContextProvider(Protocol):
    async def fetch_environmental_context(self) -> EnvironmentalContext: ...


def bus_chat_appender(owner_id: str | None) -> AppendChatMessage:
    """Chat collaborator that publishes on the bus and returns immediately"""
    def append(content: str, sender: Sender) -> None:
        bus.emit(E.CHAT_MESSAGE, ChatMessage(owner_id=owner_id, content=content, sender=sender))
    return append


class CompanionSession:
    def __init__(
        self,
        owner_id: str | None,
        *,
        store=reminder_storage,
        append_chat_message: AppendChatMessage | None = None,
        context_provider: ContextProvider | None = None,
        user_timezone: str = "UTC",
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL,
        due_window: timedelta = DEFAULT_DUE_WINDOW,
        suggestion_check_seconds: float = 300.0,
        suggestion_cooldown: timedelta = DEFAULT_COOLDOWN,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self.owner_id = owner_id
        self.store = store
        self.context_provider = context_provider
        self.user_timezone = user_timezone
        self.suggestion_check_seconds = suggestion_check_seconds
        self.suggestion_cooldown = suggestion_cooldown
        self._clock = clock
        self._custom_append = append_chat_message

        self.composer = DeliveryComposer(append_chat_message or bus_chat_appender(owner_id))
        self.poller = ReminderPoller(
            owner_id,
            store,
            self.composer,
            interval_seconds=poll_interval_seconds,
            window=due_window,
            clock=clock,
        )
        self.suggestion_state = SuggestionState()
        self.last_suggestion: SuggestionCandidate | None = None
        self._suggestion_task: asyncio.Task[None] | None = None
        self._wanted = False

    # ----------------- lifecycle ----------------

    @property
    def running(self) -> bool:
        return self.poller.running

    def now(self) -> datetime:
        return self._clock()

    def start(self) -> None:
        self._wanted = True
        if self.owner_id is None:
            logger.info("Companion session inert: no owner identity")
            return
        self.poller.start()
        if self.context_provider is not None and (self._suggestion_task is None or self._suggestion_task.done()):
            self._suggestion_task = asyncio.create_task(
                self._suggestion_loop(), name=f"suggestion-check-{self.owner_id}"
            )
        logger.info(f"Companion session started: owner_id={self.owner_id}")

    async def stop(self) -> None:
        self._wanted = False
        await self._disarm()
        logger.info(f"Companion session stopped: owner_id={self.owner_id}")

    async def _disarm(self) -> None:
        await self.poller.stop()
        task = self._suggestion_task
        self._suggestion_task = None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def set_owner(self, owner_id: str | None) -> None:
        """Switch the subject. Losing the identity disarms both loops; a started
        session re-arms them as soon as an identity is available again."""
        if owner_id == self.owner_id:
            return
        await self._disarm()
        logger.info(f"Owner identity changed: {self.owner_id} -> {owner_id}")
        self.owner_id = owner_id
        self.poller.owner_id = owner_id
        self.suggestion_state = SuggestionState()
        self.last_suggestion = None
        if self._custom_append is None:
            self.composer = DeliveryComposer(bus_chat_appender(owner_id))
            self.poller.composer = self.composer
        if self._wanted:
            self.start()

    async def run_loop(self, shutdown_event: asyncio.Event) -> None:
        self.start()
        try:
            await shutdown_event.wait()
        finally:
            await self.stop()

    def get_status(self) -> dict[str, object]:
        return {
            "owner_id": self.owner_id,
            "poller": self.poller.get_status(),
            "suggestions": {
                "running": self._suggestion_task is not None and not self._suggestion_task.done(),
                "history": list(self.suggestion_state.history),
                "last_fired_at": (
                    self.suggestion_state.last_fired_at.isoformat()
                    if self.suggestion_state.last_fired_at is not None
                    else None
                ),
                "last_suggestion_id": self.last_suggestion.id if self.last_suggestion else None,
            },
        }

    # ----------------- reminders ----------------

    async def schedule_reminder(self, text: str, due_at: datetime) -> ReminderRecord:
        """Store a new reminder and confirm it in chat"""
        if self.owner_id is None:
            raise RuntimeError("Cannot schedule a reminder without an owner identity")
        record = await self.store.create_reminder(self.owner_id, text, due_at)
        runtime_metrics.record_reminder_created()
        bus.emit(E.REMINDER_CREATED, record)

        now = self._clock()
        time_text = format_relative(
            to_user_local(now, self.user_timezone),
            to_user_local(record.due_at, self.user_timezone),
        )
        await self.composer.confirm_reminder(text, time_text)
        logger.info(f"Reminder scheduled: reminder_id={record.reminder_id}, due {time_text}")
        return record

    async def handle_user_message(self, text: str) -> ReminderRecord | None:
        """Record a user message; schedule a reminder when it asks for one"""
        if not text.strip():
            return None
        append = self._custom_append or bus_chat_appender(self.owner_id)
        result = append(text, Sender.USER)
        if inspect.isawaitable(result):
            await result

        intent = detect_reminder_intent(text)
        if not intent.is_reminder:
            return None
        due_at = resolve_due_at(intent.time_text, self._clock(), self.user_timezone)
        if due_at is None:
            logger.debug(f"Reminder intent without a usable time: time_text={intent.time_text!r}")
            return None
        return await self.schedule_reminder(intent.title, due_at)

    # ----------------- suggestions ----------------

    async def _fetch_context(self) -> EnvironmentalContext:
        if self.context_provider is None:
            return EnvironmentalContext(available=False)
        try:
            return await self.context_provider.fetch_environmental_context()
        except Exception as e:
            logger.warning(f"Environmental context unavailable: {e}")
            return EnvironmentalContext(available=False)

    async def trigger_suggestion(self, context: EnvironmentalContext | None = None) -> SuggestionCandidate | None:
        """Surface the next suggestion for the context, if cooldown and history allow it"""
        if self.owner_id is None:
            return None
        if context is None:
            context = await self._fetch_context()
        candidates = generate_suggestions(context)
        picked = select_next(self.suggestion_state, candidates, self._clock(), self.suggestion_cooldown)
        if picked is None:
            return None

        self.last_suggestion = picked
        await self.composer.say(picked.message)
        runtime_metrics.record_suggestion_surfaced()
        bus.emit(E.SUGGESTION_SURFACED, picked)
        logger.info(f"Suggestion surfaced: id={picked.id}, priority={picked.priority.value}")
        return picked

    async def check_proactive_suggestion(self) -> SuggestionCandidate | None:
        context = await self._fetch_context()
        if not should_proactively_suggest(context):
            return None
        return await self.trigger_suggestion(context)

    def dismiss_suggestion(self) -> None:
        self.last_suggestion = None

    async def _suggestion_loop(self) -> None:
        while True:
            try:
                await self.check_proactive_suggestion()
            except Exception as e:
                logger.warning(f"Suggestion check failed: {e}")
            await asyncio.sleep(self.suggestion_check_seconds)


@bus.on(E.CHAT_MESSAGE)
async def save_chat_message(msg: ChatMessage) -> None:
    await message_storage.create_message(msg.owner_id, msg.sender, msg.content)


_session: CompanionSession | None = None


def configure_session(session: CompanionSession) -> None:
    global _session
    _session = session


def require_session() -> CompanionSession:
    if _session is None:
        raise RuntimeError("Companion session is not configured, call configure_session() first")
    return _session
