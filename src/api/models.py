# src/api/models.py
from typing import Any, Dict, Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str = "ok"
    phase: str
    running: bool
    tick_count: int


class ScalerStateResponse(BaseModel):
    smoothed_rate_per_replica: Optional[float] = None
    scale_up_cooldown_remaining: float
    scale_down_cooldown_remaining: float


class StatusResponse(BaseModel):
    phase: str
    running: bool
    tick_count: int
    policy: str
    state: ScalerStateResponse
    last_result: Optional[Dict[str, Any]] = None
