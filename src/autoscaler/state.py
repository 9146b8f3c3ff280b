# src/autoscaler/state.py
import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from .models import Decision, ScalingAction, ScalingConfig


@dataclass
class ScalerState:
    """In-process scaling memory.

    Cooldown timestamps are monotonic-clock seconds and start at process start,
    so the first scaling in either direction waits one full cooldown.
    ``smoothed_rate_per_replica`` is ``None`` until the first measurement.
    """

    last_scale_up_at: float = field(default_factory=time.monotonic)
    last_scale_down_at: float = field(default_factory=time.monotonic)
    smoothed_rate_per_replica: Optional[float] = None

    @classmethod
    def starting_at(cls, now: float) -> "ScalerState":
        return cls(last_scale_up_at=now, last_scale_down_at=now)

    def record_committed_decision(self, decision: Decision, now: float) -> None:
        if decision.action is ScalingAction.UP:
            self.last_scale_up_at = now
        elif decision.action is ScalingAction.DOWN:
            self.last_scale_down_at = now

    def cooldown_remaining(
        self, action: ScalingAction, config: ScalingConfig, now: float
    ) -> float:
        if action is ScalingAction.UP:
            ready_at = self.last_scale_up_at + config.scale_up_cooldown
        elif action is ScalingAction.DOWN:
            ready_at = self.last_scale_down_at + config.scale_down_cooldown
        else:
            return 0.0
        return max(0.0, ready_at - now)

    def with_rate(self, rate: Optional[float]) -> "ScalerState":
        return replace(self, smoothed_rate_per_replica=rate)

    def to_dict(self, config: ScalingConfig, now: float) -> Dict[str, Any]:
        return {
            "smoothed_rate_per_replica": self.smoothed_rate_per_replica,
            "scale_up_cooldown_remaining": self.cooldown_remaining(
                ScalingAction.UP, config, now
            ),
            "scale_down_cooldown_remaining": self.cooldown_remaining(
                ScalingAction.DOWN, config, now
            ),
        }
