# src/api/router.py
from fastapi import APIRouter, Depends, Request

from src.autoscaler.driver import PollDriver
from .exceptions import DriverUnavailableError
from .models import HealthResponse, StatusResponse

router = APIRouter()


def get_driver(request: Request) -> PollDriver:
    driver = getattr(request.app.state, "driver", None)
    if driver is None:
        raise DriverUnavailableError()
    return driver


@router.get("/health", response_model=HealthResponse)
async def health(driver: PollDriver = Depends(get_driver)):
    """
    Liveness of the autoscaler loop
    """
    stats = driver.get_stats()
    return HealthResponse(
        phase=stats["phase"],
        running=stats["running"],
        tick_count=stats["tick_count"],
    )


@router.get("/status", response_model=StatusResponse)
async def status(driver: PollDriver = Depends(get_driver)):
    """
    Scaler state, cooldowns and the outcome of the latest tick
    """
    return StatusResponse(**driver.get_stats())
