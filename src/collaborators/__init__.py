# src/collaborators/__init__.py
from .base import MetricSource, QueueDepthSource, ReplicaController
from .cloudwatch import CloudWatchMetricSource
from .sqs import SqsQueueDepthSource, queue_name_from_url
from .k8s import KubernetesReplicaController, load_kubernetes_api

__all__ = [
    'MetricSource',
    'QueueDepthSource',
    'ReplicaController',
    'CloudWatchMetricSource',
    'SqsQueueDepthSource',
    'queue_name_from_url',
    'KubernetesReplicaController',
    'load_kubernetes_api'
]
