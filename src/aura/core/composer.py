"""Delivery composer

Turns reminder events into one assistant chat message each. Phrasing is a
uniform pick from a fixed pool; the chat collaborator is fire-and-forget, the
composed text is returned only for logging and tests.
"""

from __future__ import annotations

import inspect
import random
from typing import Any, Awaitable, Callable, Union

from aura.datamodel import Sender
from aura.logger import logger
from aura.metrics import runtime_metrics

__all__ = ["DeliveryComposer", "AppendChatMessage", "FIRING_TEMPLATES", "CONFIRMATION_TEMPLATES"]

AppendChatMessage = Callable[[str, Sender], Union[Awaitable[Any], Any]]

FIRING_TEMPLATES = (
    "Hey 🙂 you asked me to remind you: {text}",
    "Reminder time! {text}",
    "Just a gentle nudge: {text} ✨",
    "Time for: {text}! You got this 💪",
)

CONFIRMATION_TEMPLATES = (
    "Got it 🙂 I'll remind you {time_text}.",
    "Sure! I'll remind you {time_text}: \"{title}\"",
    "Reminder set! I'll ping you {time_text} 💫",
    "Done! \"{title}\", {time_text}",
)


class DeliveryComposer:
    def __init__(self, append_chat_message: AppendChatMessage, rng: random.Random | None = None) -> None:
        self._append = append_chat_message
        self._rng = rng or random.Random()

    async def fire_reminder(self, text: str) -> str:
        message = self._rng.choice(FIRING_TEMPLATES).format(text=text)
        await self._emit(message)
        return message

    async def confirm_reminder(self, title: str, time_text: str) -> str:
        message = self._rng.choice(CONFIRMATION_TEMPLATES).format(title=title, time_text=time_text)
        await self._emit(message)
        return message

    async def say(self, message: str) -> str:
        """Append a free-form assistant message, e.g. a surfaced suggestion"""
        await self._emit(message)
        return message

    async def _emit(self, message: str) -> None:
        result = self._append(message, Sender.AURA)
        if inspect.isawaitable(result):
            await result
        runtime_metrics.record_msg_out()
        logger.trace(f"Assistant message appended: {message!r}")
