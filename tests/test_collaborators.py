from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, ReadTimeoutError as BotoReadTimeoutError
from kubernetes.client.exceptions import ApiException
from kubernetes.config import ConfigException
from urllib3.exceptions import ReadTimeoutError

from src.autoscaler.exceptions import (
    MetricUnavailableError,
    QueueDepthError,
    ReplicaReadError,
    ReplicaWriteError,
    StartupError,
)
from src.collaborators.aws import aws_client
from src.collaborators.cloudwatch import CloudWatchMetricSource
from src.collaborators.k8s import KubernetesReplicaController, load_kubernetes_api
from src.collaborators.sqs import SqsQueueDepthSource, queue_name_from_url


def client_error(operation):
    return ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, operation)


def test_cloudwatch_returns_latest_datapoint():
    client = MagicMock()
    client.get_metric_statistics.return_value = {
        "Datapoints": [
            {"Timestamp": datetime(2024, 1, 1, 12, 1, tzinfo=timezone.utc), "Sum": 42.0},
            {"Timestamp": datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc), "Sum": 7.0},
        ]
    }
    source = CloudWatchMetricSource("jobs", client=client)

    assert source.fetch("NumberOfMessagesSent", "Sum") == 42.0

    kwargs = client.get_metric_statistics.call_args.kwargs
    assert kwargs["Namespace"] == "AWS/SQS"
    assert kwargs["MetricName"] == "NumberOfMessagesSent"
    assert kwargs["Dimensions"] == [{"Name": "QueueName", "Value": "jobs"}]
    assert kwargs["Statistics"] == ["Sum"]
    assert kwargs["Period"] == 60
    assert (kwargs["EndTime"] - kwargs["StartTime"]).total_seconds() == 60


def test_cloudwatch_no_datapoints_is_an_error():
    client = MagicMock()
    client.get_metric_statistics.return_value = {"Datapoints": []}
    source = CloudWatchMetricSource("jobs", client=client)

    with pytest.raises(MetricUnavailableError, match="No NumberOfMessagesDeleted datapoints"):
        source.fetch("NumberOfMessagesDeleted", "Sum")


def test_cloudwatch_client_error_is_wrapped():
    client = MagicMock()
    client.get_metric_statistics.side_effect = client_error("GetMetricStatistics")
    source = CloudWatchMetricSource("jobs", client=client)

    with pytest.raises(MetricUnavailableError):
        source.fetch("ApproximateAgeOfOldestMessage", "Maximum")


def test_cloudwatch_read_timeout_is_wrapped():
    client = MagicMock()
    client.get_metric_statistics.side_effect = BotoReadTimeoutError(
        endpoint_url="https://monitoring.eu-west-1.amazonaws.com"
    )
    source = CloudWatchMetricSource("jobs", client=client)

    with pytest.raises(MetricUnavailableError, match="Read timeout"):
        source.fetch("NumberOfMessagesSent", "Sum")


def test_aws_client_bounds_every_call():
    with patch("src.collaborators.aws.boto3.client") as boto_client:
        aws_client("sqs", "eu-west-1", timeout=3.0)

    args, kwargs = boto_client.call_args
    assert args == ("sqs",)
    assert kwargs["region_name"] == "eu-west-1"
    assert kwargs["config"].connect_timeout == 3.0
    assert kwargs["config"].read_timeout == 3.0


def test_sources_pass_timeout_to_client():
    with patch("src.collaborators.cloudwatch.aws_client") as cloudwatch_client, \
            patch("src.collaborators.sqs.aws_client") as sqs_client:
        CloudWatchMetricSource("jobs", "eu-west-1", timeout=4.0)
        SqsQueueDepthSource("https://sqs/123/jobs", "eu-west-1", timeout=4.0)

    cloudwatch_client.assert_called_once_with("cloudwatch", "eu-west-1", 4.0)
    sqs_client.assert_called_once_with("sqs", "eu-west-1", 4.0)


def test_sqs_visible_messages():
    client = MagicMock()
    client.get_queue_attributes.return_value = {
        "Attributes": {"ApproximateNumberOfMessages": "17"}
    }
    source = SqsQueueDepthSource("https://sqs.eu-west-1.amazonaws.com/123/jobs", client=client)

    assert source.approximate_visible_messages() == 17
    client.get_queue_attributes.assert_called_once_with(
        QueueUrl="https://sqs.eu-west-1.amazonaws.com/123/jobs",
        AttributeNames=["ApproximateNumberOfMessages"],
    )


def test_sqs_errors_are_wrapped():
    client = MagicMock()
    client.get_queue_attributes.side_effect = client_error("GetQueueAttributes")
    source = SqsQueueDepthSource("https://sqs/123/jobs", client=client)

    with pytest.raises(QueueDepthError):
        source.approximate_visible_messages()

    client.get_queue_attributes.side_effect = None
    client.get_queue_attributes.return_value = {"Attributes": {}}
    with pytest.raises(QueueDepthError):
        source.approximate_visible_messages()


def test_queue_name_from_url():
    assert queue_name_from_url("https://sqs.us-east-1.amazonaws.com/123456789012/jobs") == "jobs"
    assert queue_name_from_url("https://sqs.us-east-1.amazonaws.com/123456789012/jobs/") == "jobs"


def make_controller(api, **kwargs):
    return KubernetesReplicaController("worker", "jobs", api=api, **kwargs)


def test_current_replicas_reads_available():
    api = MagicMock()
    api.read_namespaced_deployment.return_value.status.available_replicas = 3

    assert make_controller(api).current_replicas() == 3
    api.read_namespaced_deployment.assert_called_once_with(
        "worker", "jobs", _request_timeout=10.0
    )


def test_current_replicas_none_available_is_zero():
    api = MagicMock()
    api.read_namespaced_deployment.return_value.status.available_replicas = None

    assert make_controller(api).current_replicas() == 0


def test_current_replicas_api_error():
    api = MagicMock()
    api.read_namespaced_deployment.side_effect = ApiException(status=404, reason="Not Found")

    with pytest.raises(ReplicaReadError, match="Not Found"):
        make_controller(api).current_replicas()


@pytest.mark.parametrize("requested,expected", [(3, 3), (99, 5), (0, 1), (-4, 1)])
def test_set_replicas_clamps(requested, expected):
    api = MagicMock()
    api.patch_namespaced_deployment.return_value.spec.replicas = expected
    controller = make_controller(api, min_replicas=1, max_replicas=5)

    assert controller.set_replicas(requested) == expected
    api.patch_namespaced_deployment.assert_called_once_with(
        "worker", "jobs", {"spec": {"replicas": expected}}, _request_timeout=10.0
    )


def test_set_replicas_api_error():
    api = MagicMock()
    api.patch_namespaced_deployment.side_effect = ApiException(status=409, reason="Conflict")

    with pytest.raises(ReplicaWriteError, match="Conflict"):
        make_controller(api).set_replicas(2)


def test_current_replicas_read_timeout():
    api = MagicMock()
    api.read_namespaced_deployment.side_effect = ReadTimeoutError(None, "/apis", "timed out")

    with pytest.raises(ReplicaReadError, match="timed out"):
        make_controller(api, request_timeout=2.0).current_replicas()
    assert api.read_namespaced_deployment.call_args.kwargs["_request_timeout"] == 2.0


def test_set_replicas_read_timeout():
    api = MagicMock()
    api.patch_namespaced_deployment.side_effect = ReadTimeoutError(None, "/apis", "timed out")

    with pytest.raises(ReplicaWriteError, match="timed out"):
        make_controller(api, request_timeout=2.0).set_replicas(2)
    assert api.patch_namespaced_deployment.call_args.kwargs["_request_timeout"] == 2.0


def test_load_kubernetes_api_falls_back_to_kubeconfig():
    with patch("src.collaborators.k8s.k8s_config.load_incluster_config",
               side_effect=ConfigException("not in cluster")), \
            patch("src.collaborators.k8s.k8s_config.load_kube_config") as load_kube_config, \
            patch("src.collaborators.k8s.client.AppsV1Api") as apps_api:
        api = load_kubernetes_api()

    load_kube_config.assert_called_once()
    assert api is apps_api.return_value


def test_load_kubernetes_api_fails_with_startup_error():
    with patch("src.collaborators.k8s.k8s_config.load_incluster_config",
               side_effect=ConfigException("not in cluster")), \
            patch("src.collaborators.k8s.k8s_config.load_kube_config",
                  side_effect=ConfigException("no kubeconfig")):
        with pytest.raises(StartupError):
            load_kubernetes_api()
