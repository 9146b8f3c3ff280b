# src/autoscaler/models.py
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ScalingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    poll_interval: float = Field(default=5.0, gt=0)
    scale_up_cooldown: float = Field(default=10.0, ge=0)
    scale_down_cooldown: float = Field(default=30.0, ge=0)
    scale_up_threshold: int = Field(default=100, ge=0)  # visible messages that trigger scale up
    scale_down_threshold: int = Field(default=10, ge=0)  # visible messages that allow scale down
    acceptable_age: float = Field(default=150.0, gt=0)  # seconds
    min_replicas: int = Field(default=1, ge=0)
    max_replicas: int = Field(default=5, ge=1)
    max_adjustment_per_tick: Optional[int] = Field(default=None, ge=1)
    scale_down_empty_receives: Optional[float] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_bounds(self) -> "ScalingConfig":
        if self.max_replicas < self.min_replicas:
            raise ValueError(
                f"max_replicas ({self.max_replicas}) must be >= min_replicas ({self.min_replicas})"
            )
        return self

    @property
    def uses_exponential_steps(self) -> bool:
        return self.max_adjustment_per_tick is not None


class MetricSnapshot(BaseModel):
    """Queue and workload signals gathered during a single tick."""

    model_config = ConfigDict(frozen=True)

    oldest_message_age_seconds: float
    messages_deleted: float
    messages_sent: float
    empty_receives: float = 0.0
    visible_messages: int = Field(ge=0)
    current_replicas: int = Field(ge=0)


class ScalingAction(str, Enum):
    NONE = "none"
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class Decision:
    action: ScalingAction
    by: int
    current: int
    target: int
    reason: str = ""
    # direction a trigger asked for when a cooldown or replica limit blocked it
    suppressed: Optional[ScalingAction] = None

    @property
    def is_no_op(self) -> bool:
        return self.action is ScalingAction.NONE

    @classmethod
    def no_op(
        cls, current: int, reason: str, suppressed: Optional[ScalingAction] = None
    ) -> "Decision":
        return cls(ScalingAction.NONE, 0, current, current, reason, suppressed)

    @classmethod
    def scale_up(cls, current: int, by: int, reason: str) -> "Decision":
        return cls(ScalingAction.UP, by, current, current + by, reason)

    @classmethod
    def scale_down(cls, current: int, by: int, reason: str) -> "Decision":
        return cls(ScalingAction.DOWN, by, current, current - by, reason)

    def to_dict(self) -> dict:
        return {
            "action": self.action.value,
            "by": self.by,
            "current": self.current,
            "target": self.target,
            "reason": self.reason,
            "suppressed": self.suppressed.value if self.suppressed else None,
        }
