# src/autoscaler/exceptions.py


class AutoscalerError(Exception):
    """Base exception for autoscaler errors"""
    pass


class ConfigurationError(AutoscalerError):
    """Raised when the scaling configuration violates its invariants"""
    pass


class StartupError(AutoscalerError):
    """Raised when a collaborator cannot be initialised at startup"""
    pass


class CollectionError(AutoscalerError):
    """Raised when a tick cannot gather a complete metric snapshot"""
    pass


class MetricUnavailableError(CollectionError):
    """Raised when a queue metric has no datapoint or cannot be fetched"""
    pass


class QueueDepthError(CollectionError):
    """Raised when the visible message count cannot be fetched"""
    pass


class ReplicaReadError(CollectionError):
    """Raised when the current replica count cannot be read"""
    pass


class ReplicaWriteError(AutoscalerError):
    """Raised when the replica controller rejects a scale request"""
    pass
