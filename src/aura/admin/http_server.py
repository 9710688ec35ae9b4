from __future__ import annotations

import asyncio
import time

import uvicorn
from aura.config.settings import ADMIN_AUTH_TOKEN, ADMIN_HTTP_HOST, ADMIN_HTTP_PORT
from aura.core.companion import CompanionSession
from aura.logger import logger

from .app import create_app
from .schemas import RuntimeControl


def build_server(shutdown_event: asyncio.Event, session: CompanionSession) -> uvicorn.Server:
    control = RuntimeControl(shutdown_event=shutdown_event, started_at=time.time())
    config = uvicorn.Config(
        create_app(control, session),
        host=ADMIN_HTTP_HOST,
        port=ADMIN_HTTP_PORT,
        # keep the loguru routing installed by setup_logging
        log_config=None,
        access_log=False,
    )
    server = uvicorn.Server(config)
    # SIGINT/SIGTERM belong to main.py
    server.install_signal_handlers = lambda: None
    return server


async def main_loop(shutdown_event: asyncio.Event, session: CompanionSession) -> None:
    if not ADMIN_AUTH_TOKEN:
        logger.warning("ADMIN_AUTH_TOKEN is not set, protected admin endpoints will answer 503")

    server = build_server(shutdown_event, session)

    async def stop_on_shutdown() -> None:
        await shutdown_event.wait()
        server.should_exit = True

    watcher = asyncio.create_task(stop_on_shutdown(), name="admin-http-shutdown")
    logger.info(f"Admin HTTP server listening on http://{ADMIN_HTTP_HOST}:{ADMIN_HTTP_PORT}")
    try:
        await server.serve()
    finally:
        watcher.cancel()
        try:
            await watcher
        except asyncio.CancelledError:
            pass
        logger.info("Admin HTTP server stopped")
