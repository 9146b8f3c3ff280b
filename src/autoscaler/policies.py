# src/autoscaler/policies.py
import math
from abc import ABC, abstractmethod
from typing import Optional

from .models import MetricSnapshot, ScalingConfig


class ScalingMagnitudePolicy(ABC):
    """Sizes a scaling step once a trigger has fired.

    Both methods return at least 1. Bounding the step to the replica range is
    the engine's job, not the policy's.
    """

    name = "base"

    @abstractmethod
    def scale_up_by(
        self,
        snapshot: MetricSnapshot,
        adjusted_incoming: float,
        rate: Optional[float],
        config: ScalingConfig,
    ) -> int:
        pass

    @abstractmethod
    def scale_down_by(
        self,
        snapshot: MetricSnapshot,
        adjusted_incoming: float,
        rate: Optional[float],
        config: ScalingConfig,
    ) -> int:
        pass


class RateProportionalPolicy(ScalingMagnitudePolicy):
    """Adds or removes as many replicas as the per-replica rate says are needed."""

    name = "rate-proportional"

    def scale_up_by(self, snapshot, adjusted_incoming, rate, config) -> int:
        if not rate or rate <= 0:
            return 1
        shortfall = adjusted_incoming - snapshot.messages_deleted
        return max(1, math.ceil(shortfall / rate))

    def scale_down_by(self, snapshot, adjusted_incoming, rate, config) -> int:
        if not rate or rate <= 0:
            return 1
        surplus = rate * snapshot.current_replicas - adjusted_incoming
        return max(1, math.floor(surplus / rate))


class ExponentialStepPolicy(ScalingMagnitudePolicy):
    """Doubles the step for every further multiple of the threshold."""

    name = "exponential-step"

    def __init__(self, max_adjustment_per_tick: int):
        self.max_adjustment_per_tick = max_adjustment_per_tick

    def _step(self, exponent: int) -> int:
        # zero or negative exponents still move one replica
        if exponent <= 0:
            return 1
        if exponent >= self.max_adjustment_per_tick.bit_length():
            return self.max_adjustment_per_tick
        return min(2 ** exponent, self.max_adjustment_per_tick)

    def scale_up_by(self, snapshot, adjusted_incoming, rate, config) -> int:
        threshold = max(config.scale_up_threshold, 1)
        return self._step(snapshot.visible_messages // threshold - 1)

    def scale_down_by(self, snapshot, adjusted_incoming, rate, config) -> int:
        depth = max(snapshot.visible_messages, 1)
        return self._step(config.scale_down_threshold // depth - 1)


def policy_for(config: ScalingConfig) -> ScalingMagnitudePolicy:
    if config.max_adjustment_per_tick is not None:
        return ExponentialStepPolicy(config.max_adjustment_per_tick)
    return RateProportionalPolicy()
