"""
Due-reminder poller.

Every tick asks the store for the owner's active reminders due within the
lookback window [now - window, now]. Anything older than the window is
treated as missed and never delivered. Ticks are started on a wall-clock
period and may overlap with a slow previous tick; the delivered-id set is
filled before the message goes out, which keeps delivery at most once per
process even when two ticks see the same record before its store update lands.
Once the poller is stopped, a tick in flight delivers nothing further from its
batch.
"""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timedelta
from typing import Callable, Protocol

from aura.core.composer import DeliveryComposer
from aura.datamodel import ReminderRecord
from aura.events import bus, E
from aura.logger import logger
from aura.metrics import runtime_metrics
from aura.utils import now_utc

__all__ = ["ReminderStore", "ReminderPoller", "DEFAULT_POLL_INTERVAL", "DEFAULT_DUE_WINDOW"]

DEFAULT_POLL_INTERVAL = 30.0
DEFAULT_DUE_WINDOW = timedelta(minutes=5)


class ReminderStore(Protocol):
    async def fetch_due_reminders(
        self, owner_id: str, window_start: datetime, window_end: datetime
    ) -> list[ReminderRecord]: ...

    async def mark_inactive(self, reminder_id: str) -> bool: ...


class ReminderPoller:
    def __init__(
        self,
        owner_id: str | None,
        store: ReminderStore,
        composer: DeliveryComposer,
        *,
        interval_seconds: float = DEFAULT_POLL_INTERVAL,
        window: timedelta = DEFAULT_DUE_WINDOW,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self.owner_id = owner_id
        self.store = store
        self.composer = composer
        self.interval_seconds = interval_seconds
        self.window = window
        self._clock = clock

        self.delivered: set[str] = set()
        self._loop_task: asyncio.Task[None] | None = None
        self._tick_tasks: set[asyncio.Task[int]] = set()
        self._generation = 0
        self._last_tick_at_epoch: float | None = None

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    def get_status(self) -> dict[str, object]:
        return {
            "running": self.running,
            "owner_id": self.owner_id,
            "interval_seconds": self.interval_seconds,
            "window_seconds": self.window.total_seconds(),
            "delivered_count": len(self.delivered),
            "in_flight_ticks": len(self._tick_tasks),
            "last_tick_at_epoch": self._last_tick_at_epoch,
        }

    def start(self) -> bool:
        """Arm the timer. Does nothing without an owner."""
        if self.owner_id is None:
            logger.info("Reminder poller not started: no owner identity")
            return False
        if self.running:
            return True
        self._generation += 1
        self._loop_task = asyncio.create_task(self._run(), name=f"reminder-poller-{self.owner_id}")
        logger.info(f"Reminder poller started: owner_id={self.owner_id}, interval={self.interval_seconds}s")
        return True

    async def stop(self) -> None:
        """Disarm the timer. In-flight ticks finish but their results are dropped."""
        self._generation += 1
        task = self._loop_task
        self._loop_task = None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info(f"Reminder poller stopped: owner_id={self.owner_id}")

    async def _run(self) -> None:
        # first tick right away, then on a fixed wall-clock period
        while True:
            tick = asyncio.create_task(self.tick())
            self._tick_tasks.add(tick)
            tick.add_done_callback(self._tick_tasks.discard)
            await asyncio.sleep(self.interval_seconds)

    async def tick(self) -> int:
        """Run one poll cycle, returns the number of reminders delivered"""
        owner_id = self.owner_id
        if owner_id is None:
            return 0

        generation = self._generation
        now = self._clock()
        self._last_tick_at_epoch = time.time()
        runtime_metrics.record_poll_tick()

        try:
            records = await self.store.fetch_due_reminders(owner_id, now - self.window, now)
        except Exception as e:
            runtime_metrics.record_fetch_error()
            logger.warning(f"Fetching due reminders failed, skipping this tick: owner_id={owner_id}, error={e}")
            return 0

        delivered = 0
        for index, record in enumerate(records):
            if generation != self._generation:
                logger.debug(f"Poller stopped, dropping {len(records) - index} fetched reminder(s)")
                break
            if record.reminder_id in self.delivered:
                continue
            # claim before any await so an overlapping tick skips it
            self.delivered.add(record.reminder_id)
            await self._deliver(record)
            delivered += 1

        if delivered:
            logger.info(f"Delivered {delivered} reminder(s): owner_id={owner_id}")
        return delivered

    async def _deliver(self, record: ReminderRecord) -> None:
        logger.info(f"Reminder due: reminder_id={record.reminder_id}, owner_id={record.owner_id}")
        try:
            await self.composer.fire_reminder(record.text)
        except Exception as e:
            # already claimed; the store write below still retires it
            logger.error(f"Delivering reminder failed: reminder_id={record.reminder_id}, error={e}")
        else:
            runtime_metrics.record_reminder_delivered()
            bus.emit(E.REMINDER_DELIVERED, record)

        try:
            updated = await self.store.mark_inactive(record.reminder_id)
        except Exception as e:
            updated = False
            logger.error(f"Marking reminder inactive raised: reminder_id={record.reminder_id}, error={e}")
        if not updated:
            runtime_metrics.record_mark_inactive_failure()
            logger.error(f"Reminder could not be marked inactive, not retrying: reminder_id={record.reminder_id}")
