# peach/main.py

from __future__ import annotations

import asyncio
import sys
from functools import partial

import uvicorn

from peach.api.app import create_app
from peach.core.config import settings
from peach.core.logging import setup_logging, get_logger
from peach.services.room_manager import new_room_registry
from peach.services.session import handle_connection

# Configure logging first
setup_logging()
logger = get_logger(__name__)


async def serve() -> None:
    """
    Run the chat server and, when enabled, the admin API on one event loop.

    Each accepted connection gets its own task from ``asyncio.start_server``;
    the registry is the only state they share.
    """
    registry = new_room_registry()

    server = await asyncio.start_server(
        partial(handle_connection, registry=registry), settings.HOST, settings.PORT
    )
    logger.info("🚀 Peach is listening on %s:%s", settings.HOST, settings.PORT)

    tasks = [asyncio.ensure_future(server.serve_forever())]

    if settings.API_ENABLED:
        config = uvicorn.Config(
            create_app(registry),
            host=settings.API_HOST,
            port=settings.API_PORT,
            log_config=None,
        )
        tasks.append(asyncio.ensure_future(uvicorn.Server(config).serve()))
        logger.info("Admin API on http://%s:%s", settings.API_HOST, settings.API_PORT)

    # uvicorn handles SIGINT itself; when either side stops, stop both
    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        for task in done:
            task.result()
    finally:
        server.close()
        await server.wait_closed()


def run() -> None:
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        logger.info("Shutting down")
    except OSError as e:
        logger.critical("Cannot start server: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    run()

# ============================================================================
# END OF FILE
# ============================================================================
