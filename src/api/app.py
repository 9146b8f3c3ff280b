# src/api/app.py
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from src.autoscaler.driver import PollDriver
from src.log_handler.logging_config import get_logger
from .router import router

logger = get_logger(__name__)


def create_app(driver: Optional[PollDriver] = None) -> FastAPI:
    """Create the status API; its lifespan owns the poll driver."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if driver is not None:
            await driver.start()
        logger.info("Autoscaler startup complete")
        yield
        logger.info("Initiating graceful shutdown...")
        if driver is not None:
            await driver.stop()

    app = FastAPI(
        title="SQS Replica Autoscaler",
        description="Status of the queue-driven replica autoscaler",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.driver = driver
    app.include_router(router, prefix="/api/v1")
    return app
