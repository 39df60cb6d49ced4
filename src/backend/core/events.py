"""
Application lifecycle event handlers.

Startup prepares the attachment directory and opens the Cosmos DB client;
shutdown closes it.
"""

from pathlib import Path
from typing import Callable

import structlog
from fastapi import FastAPI

from core.config import settings
from db.cosmos_session import close_cosmos, get_cosmos_client
from repositories.provider import is_cosmos_enabled

logger = structlog.get_logger(__name__)


def create_start_app_handler(app: FastAPI) -> Callable:
    """Create startup event handler."""

    async def start_app() -> None:
        logger.info("app_starting", app_name=settings.APP_NAME, env=settings.APP_ENV)

        upload_dir = Path(settings.UPLOAD_DIR) / "complaints"
        upload_dir.mkdir(parents=True, exist_ok=True)

        if is_cosmos_enabled():
            try:
                await get_cosmos_client()
                logger.info("cosmos_client_ready", database=settings.AZURE_COSMOS_DATABASE)
            except Exception as e:
                # Requests retry the connection lazily
                logger.error("cosmos_client_init_failed", error=str(e))
        else:
            logger.warning("cosmos_not_configured")

        logger.info("app_started")

    return start_app


def create_stop_app_handler(app: FastAPI) -> Callable:
    """Create shutdown event handler."""

    async def stop_app() -> None:
        logger.info("app_stopping")
        await close_cosmos()
        logger.info("app_stopped")

    return stop_app
