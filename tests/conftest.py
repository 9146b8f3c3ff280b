import time

import pytest

from src.autoscaler.exceptions import (
    MetricUnavailableError,
    QueueDepthError,
    ReplicaReadError,
    ReplicaWriteError,
)
from src.autoscaler.models import ScalingConfig
from src.collaborators.base import MetricSource, QueueDepthSource, ReplicaController


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeMetricSource(MetricSource):
    def __init__(self, fail_on=None, delay=0.0, **values):
        self.values = {
            "ApproximateAgeOfOldestMessage": 30.0,
            "NumberOfMessagesDeleted": 20.0,
            "NumberOfMessagesSent": 40.0,
            "NumberOfEmptyReceives": 0.0,
        }
        self.values.update(values)
        self.fail_on = fail_on
        self.delay = delay
        self.calls = []
        self.finished = 0

    def fetch(self, metric_name, statistic, window=60):
        self.calls.append((metric_name, statistic, window))
        try:
            if self.delay:
                time.sleep(self.delay)
            if metric_name == self.fail_on:
                raise MetricUnavailableError(f"No {metric_name} datapoints")
            return self.values[metric_name]
        finally:
            self.finished += 1


class FakeQueueDepthSource(QueueDepthSource):
    def __init__(self, visible=150, fail=False):
        self.visible = visible
        self.fail = fail

    def approximate_visible_messages(self):
        if self.fail:
            raise QueueDepthError("Failed to get SQS messages")
        return self.visible


class FakeReplicaController(ReplicaController):
    def __init__(self, replicas=2, fail_read=False, fail_write=False, delay=0.0):
        self.delay = delay
        self.replicas = replicas
        self.fail_read = fail_read
        self.fail_write = fail_write
        self.set_calls = []

    def current_replicas(self):
        if self.fail_read:
            raise ReplicaReadError("Failed to get deployment")
        return self.replicas

    def set_replicas(self, target):
        self.set_calls.append(target)
        if self.delay:
            time.sleep(self.delay)
        if self.fail_write:
            raise ReplicaWriteError("Failed to scale")
        self.replicas = target
        return target


@pytest.fixture
def config():
    return ScalingConfig(
        poll_interval=5,
        scale_up_cooldown=10,
        scale_down_cooldown=30,
        scale_up_threshold=100,
        scale_down_threshold=10,
        acceptable_age=150,
        min_replicas=1,
        max_replicas=10,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def metric_source():
    return FakeMetricSource()


@pytest.fixture
def queue_source():
    return FakeQueueDepthSource()


@pytest.fixture
def replica_controller():
    return FakeReplicaController()
