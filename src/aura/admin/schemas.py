from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, Field, model_validator


@dataclass
class RuntimeControl:
    shutdown_event: asyncio.Event
    started_at: float


class CreateReminderRequest(BaseModel):
    text: str = Field(min_length=1, max_length=500)
    due_at: datetime | None = None
    time_text: str | None = Field(default=None, description="e.g. 'in 10 minutes', 'at 7pm', 'tomorrow'")

    @model_validator(mode="after")
    def _needs_a_time(self) -> "CreateReminderRequest":
        if self.due_at is None and not (self.time_text or "").strip():
            raise ValueError("either due_at or time_text is required")
        return self


class ChatMessageRequest(BaseModel):
    text: str = Field(min_length=1, max_length=2000)
