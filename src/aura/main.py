from aura.logger import setup_logging, logger
from aura.config.settings import *
setup_logging(
    log_level=LOG_LEVEL,
    log_file=LOG_FILE,
    console_level="INFO",
)

import asyncio
import signal
from datetime import timedelta

from aura.admin.http_server import main_loop as admin_http_main
from aura.core.companion import CompanionSession, configure_session
from aura.world.weather import OpenMeteoContextProvider
import aura.storage.db_config as db_config
import aura.storage.reminder as reminder_storage

shutdown_event = asyncio.Event()

def signal_handler(sig, frame):
    """Handle SIGINT (Ctrl+C) / SIGTERM"""
    logger.info("Interrupt received, shutting components down...")
    shutdown_event.set()

def _create_context_provider() -> OpenMeteoContextProvider | None:
    if not ENABLE_WEATHER_SUGGESTIONS:
        logger.warning("Weather suggestions are disabled")
        return None
    if WEATHER_LATITUDE is None or WEATHER_LONGITUDE is None:
        return None
    return OpenMeteoContextProvider(
        WEATHER_LATITUDE,
        WEATHER_LONGITUDE,
        USER_TIMEZONE,
        cache_seconds=WEATHER_CACHE_SECONDS,
        timeout_seconds=WEATHER_TIMEOUT_SECONDS,
    )


async def main():
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    await db_config.init_db(DB_PATH)

    session = CompanionSession(
        OWNER_ID,
        store=reminder_storage,
        context_provider=_create_context_provider(),
        user_timezone=USER_TIMEZONE,
        poll_interval_seconds=POLL_INTERVAL_SECONDS,
        due_window=timedelta(minutes=DUE_WINDOW_MINUTES),
        suggestion_check_seconds=SUGGESTION_CHECK_SECONDS,
        suggestion_cooldown=timedelta(minutes=SUGGESTION_COOLDOWN_MINUTES),
    )
    configure_session(session)
    if OWNER_ID is None:
        logger.warning("AURA_OWNER_ID is not set, reminders and suggestions stay inactive")

    try:
        tasks = [session.run_loop(shutdown_event)]
        if ENABLE_ADMIN_HTTP:
            tasks.append(admin_http_main(shutdown_event, session))
        else:
            logger.warning("Admin HTTP server is disabled")

        await asyncio.gather(*tasks)
    finally:
        logger.info("Closing database connection...")
        await db_config.close_db()
        logger.info("Aura stopped")


def run() -> None:
    logger.info("Starting Aura...")
    asyncio.run(main())


if __name__ == "__main__":
    run()
