from __future__ import annotations

import time
from datetime import timezone
from typing import Any

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import PlainTextResponse

import aura.storage.db_config as db_config
import aura.storage.message as message_storage
from aura.core.companion import CompanionSession
from aura.core.intent import resolve_due_at
from aura.datamodel import ReminderRecord, SuggestionCandidate
from aura.logger import logger
from aura.metrics import runtime_metrics

from .auth import require_admin_auth
from .schemas import ChatMessageRequest, CreateReminderRequest, RuntimeControl


def _reminder_payload(record: ReminderRecord) -> dict[str, Any]:
    return {
        "reminder_id": record.reminder_id,
        "owner_id": record.owner_id,
        "text": record.text,
        "due_at": record.due_at.isoformat(),
        "active": record.active,
    }


def _suggestion_payload(candidate: SuggestionCandidate | None) -> dict[str, Any] | None:
    if candidate is None:
        return None
    return {
        "id": candidate.id,
        "category": candidate.category.value,
        "priority": candidate.priority.value,
        "message": candidate.message,
        "icon": candidate.icon,
    }


def create_app(control: RuntimeControl, session: CompanionSession) -> FastAPI:
    app = FastAPI(title="Aura Admin API", version="1.0.0")

    def _require_owner() -> str:
        if session.owner_id is None:
            raise HTTPException(status_code=409, detail="No active owner identity")
        return session.owner_id

    def health_payload() -> dict[str, Any]:
        return {
            "status": "ok",
            "now_utc": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "uptime_seconds": max(0.0, time.time() - control.started_at),
            "db_connected": db_config.conn is not None,
            "shutdown_requested": control.shutdown_event.is_set(),
        }

    @app.get("/healthz", include_in_schema=False)
    async def healthz() -> PlainTextResponse:
        return PlainTextResponse("ok")

    @app.get("/api/v1/health")
    async def api_health() -> dict[str, Any]:
        return health_payload()

    @app.get("/api/v1/status", dependencies=[Depends(require_admin_auth)])
    async def get_status() -> dict[str, Any]:
        return {
            "session": session.get_status(),
            "metrics": runtime_metrics.snapshot(),
        }

    @app.get("/api/v1/reminders", dependencies=[Depends(require_admin_auth)])
    async def list_reminders() -> dict[str, Any]:
        owner_id = _require_owner()
        records = await session.store.get_active_reminders(owner_id)
        return {"items": [_reminder_payload(r) for r in records]}

    @app.post("/api/v1/reminders", status_code=201, dependencies=[Depends(require_admin_auth)])
    async def create_reminder(body: CreateReminderRequest) -> dict[str, Any]:
        _require_owner()
        due_at = body.due_at
        if due_at is None:
            due_at = resolve_due_at(body.time_text or "", session.now(), session.user_timezone)
            if due_at is None:
                raise HTTPException(status_code=422, detail=f"Unrecognised time: {body.time_text}")
        elif due_at.tzinfo is None:
            due_at = due_at.replace(tzinfo=timezone.utc)

        record = await session.schedule_reminder(body.text, due_at)
        logger.info(f"Reminder created via admin API: reminder_id={record.reminder_id}")
        return _reminder_payload(record)

    @app.post("/api/v1/messages", dependencies=[Depends(require_admin_auth)])
    async def post_message(body: ChatMessageRequest) -> dict[str, Any]:
        _require_owner()
        record = await session.handle_user_message(body.text)
        return {"reminder": _reminder_payload(record) if record else None}

    @app.get("/api/v1/messages", dependencies=[Depends(require_admin_auth)])
    async def get_messages(limit: int = 50) -> dict[str, Any]:
        owner_id = _require_owner()
        limit = max(1, min(limit, 200))
        return {"items": await message_storage.get_recent_messages(owner_id, limit=limit)}

    @app.post("/api/v1/suggestions/trigger", dependencies=[Depends(require_admin_auth)])
    async def trigger_suggestion() -> dict[str, Any]:
        _require_owner()
        picked = await session.trigger_suggestion()
        return {"suggestion": _suggestion_payload(picked)}

    return app
