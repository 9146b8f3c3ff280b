# src/autoscaler/engine.py
"""Scaling decision engine.

``decide`` turns one metric snapshot plus the current scaler state into a
scaling decision. It performs no I/O and never raises: every division is
guarded, and the returned state is a copy carrying the updated rate estimate.
"""
from typing import Optional, Tuple

from .models import Decision, MetricSnapshot, ScalingAction, ScalingConfig
from .policies import ScalingMagnitudePolicy, policy_for
from .state import ScalerState


def adjusted_incoming(snapshot: MetricSnapshot, config: ScalingConfig) -> float:
    """Arrival estimate, inflated by the standing backlog when messages are aging."""
    if snapshot.oldest_message_age_seconds > config.acceptable_age:
        per_minute = config.acceptable_age / 60.0
        return snapshot.messages_sent + snapshot.visible_messages / per_minute
    return snapshot.messages_sent


def observed_rate(snapshot: MetricSnapshot) -> float:
    # zero replicas counts as one so the division is always defined
    return snapshot.messages_deleted / max(snapshot.current_replicas, 1)


def ratchet(previous: Optional[float], observed: float) -> float:
    if previous is None or observed > previous:
        return observed
    return previous


def clamp_replicas(target: int, config: ScalingConfig) -> int:
    return max(config.min_replicas, min(config.max_replicas, target))


def _trigger(snapshot: MetricSnapshot, config: ScalingConfig) -> ScalingAction:
    if snapshot.visible_messages <= config.scale_down_threshold:
        gate = config.scale_down_empty_receives
        if gate is None or snapshot.empty_receives > gate:
            return ScalingAction.DOWN
        return ScalingAction.NONE
    if snapshot.visible_messages >= config.scale_up_threshold:
        return ScalingAction.UP
    return ScalingAction.NONE


def decide(
    snapshot: MetricSnapshot,
    state: ScalerState,
    config: ScalingConfig,
    now: float,
    policy: Optional[ScalingMagnitudePolicy] = None,
) -> Tuple[Decision, ScalerState]:
    policy = policy or policy_for(config)
    current = snapshot.current_replicas
    incoming = adjusted_incoming(snapshot, config)
    observed = observed_rate(snapshot)
    action = _trigger(snapshot, config)

    if action is ScalingAction.NONE:
        # steady state: the estimate follows the plain measurement
        settled = state.with_rate(observed)
        reason = f"{snapshot.visible_messages} visible messages within thresholds"
        return Decision.no_op(current, reason), settled

    rate = ratchet(state.smoothed_rate_per_replica, observed)
    updated = state.with_rate(rate)

    if action is ScalingAction.UP:
        by = policy.scale_up_by(snapshot, incoming, rate, config)
    else:
        by = policy.scale_down_by(snapshot, incoming, rate, config)

    remaining = state.cooldown_remaining(action, config, now)
    if remaining > 0:
        reason = f"waiting for cool down, skipping scale {action.value} ({remaining:.1f}s left)"
        return Decision.no_op(current, reason, suppressed=action), updated

    if action is ScalingAction.UP:
        target = clamp_replicas(current + by, config)
        moved = target - current
    else:
        target = clamp_replicas(current - by, config)
        moved = current - target

    if moved <= 0:
        reason = f"replica limit reached, skipping scale {action.value}"
        return Decision.no_op(current, reason, suppressed=action), updated

    reason = (
        f"{snapshot.visible_messages} visible messages, "
        f"incoming {incoming:.1f}/min, rate {rate:.1f}/replica ({policy.name})"
    )
    if action is ScalingAction.UP:
        return Decision.scale_up(current, moved, reason), updated
    return Decision.scale_down(current, moved, reason), updated
