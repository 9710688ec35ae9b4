"""
Simple in-process runtime counters for reminder delivery and suggestions, exposed through the admin API.
"""

from __future__ import annotations

import time
from dataclasses import dataclass


@dataclass
class RuntimeMetrics:
    poll_tick_count: int = 0
    fetch_error_count: int = 0
    reminder_delivered_count: int = 0
    mark_inactive_failure_count: int = 0
    reminder_created_count: int = 0
    suggestion_surfaced_count: int = 0
    msg_out_count: int = 0
    last_poll_at: float | None = None

    def record_poll_tick(self) -> None:
        self.poll_tick_count += 1
        self.last_poll_at = time.time()

    def record_fetch_error(self) -> None:
        self.fetch_error_count += 1

    def record_reminder_delivered(self) -> None:
        self.reminder_delivered_count += 1

    def record_mark_inactive_failure(self) -> None:
        self.mark_inactive_failure_count += 1

    def record_reminder_created(self) -> None:
        self.reminder_created_count += 1

    def record_suggestion_surfaced(self) -> None:
        self.suggestion_surfaced_count += 1

    def record_msg_out(self) -> None:
        self.msg_out_count += 1

    def snapshot(self) -> dict:
        return {
            "poll_tick_count": self.poll_tick_count,
            "fetch_error_count": self.fetch_error_count,
            "reminder_delivered_count": self.reminder_delivered_count,
            "mark_inactive_failure_count": self.mark_inactive_failure_count,
            "reminder_created_count": self.reminder_created_count,
            "suggestion_surfaced_count": self.suggestion_surfaced_count,
            "msg_out_count": self.msg_out_count,
            "last_poll_at_epoch": self.last_poll_at,
            "last_poll_at_utc": (
                time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(self.last_poll_at))
                if self.last_poll_at is not None
                else None
            ),
        }


runtime_metrics = RuntimeMetrics()


__all__ = ["RuntimeMetrics", "runtime_metrics"]
