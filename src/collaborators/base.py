# src/collaborators/base.py
from abc import ABC, abstractmethod


class MetricSource(ABC):
    """Aggregated queue metrics over a trailing window."""

    @abstractmethod
    def fetch(self, metric_name: str, statistic: str, window: int = 60) -> float:
        """Returns the most recent datapoint, raising MetricUnavailableError if none exists."""
        pass


class QueueDepthSource(ABC):
    @abstractmethod
    def approximate_visible_messages(self) -> int:
        pass


class ReplicaController(ABC):
    """Reads and sets the replica count of one workload."""

    @abstractmethod
    def current_replicas(self) -> int:
        pass

    @abstractmethod
    def set_replicas(self, target: int) -> int:
        """Applies ``target`` and returns the replica count actually set."""
        pass
