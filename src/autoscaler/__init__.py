# src/autoscaler/__init__.py
from .models import ScalingConfig, MetricSnapshot, ScalingAction, Decision
from .state import ScalerState
from .policies import (
    ScalingMagnitudePolicy,
    RateProportionalPolicy,
    ExponentialStepPolicy,
    policy_for
)
from .engine import decide, clamp_replicas
from .collector import MetricSnapshotCollector
from .executor import ActionExecutor
from .driver import PollDriver, DriverPhase, TickResult
from .exceptions import (
    AutoscalerError,
    ConfigurationError,
    StartupError,
    CollectionError,
    MetricUnavailableError,
    QueueDepthError,
    ReplicaReadError,
    ReplicaWriteError
)

__all__ = [
    'ScalingConfig',
    'MetricSnapshot',
    'ScalingAction',
    'Decision',
    'ScalerState',
    'ScalingMagnitudePolicy',
    'RateProportionalPolicy',
    'ExponentialStepPolicy',
    'policy_for',
    'decide',
    'clamp_replicas',
    'MetricSnapshotCollector',
    'ActionExecutor',
    'PollDriver',
    'DriverPhase',
    'TickResult',
    'AutoscalerError',
    'ConfigurationError',
    'StartupError',
    'CollectionError',
    'MetricUnavailableError',
    'QueueDepthError',
    'ReplicaReadError',
    'ReplicaWriteError'
]

__version__ = '1.0.0'
