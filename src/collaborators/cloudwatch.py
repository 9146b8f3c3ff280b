# src/collaborators/cloudwatch.py
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError

from src.autoscaler.exceptions import MetricUnavailableError
from src.log_handler.logging_config import get_logger
from .aws import aws_client
from .base import MetricSource

logger = get_logger(__name__)

SQS_NAMESPACE = "AWS/SQS"


class CloudWatchMetricSource(MetricSource):
    """Reads SQS queue metrics from CloudWatch."""

    def __init__(
        self,
        queue_name: str,
        region: Optional[str] = None,
        client: Any = None,
        timeout: float = 10.0,
    ):
        self.queue_name = queue_name
        self.client = client or aws_client("cloudwatch", region, timeout)

    def fetch(self, metric_name: str, statistic: str, window: int = 60) -> float:
        end = datetime.now(timezone.utc)
        try:
            out = self.client.get_metric_statistics(
                Namespace=SQS_NAMESPACE,
                MetricName=metric_name,
                Dimensions=[{"Name": "QueueName", "Value": self.queue_name}],
                StartTime=end - timedelta(seconds=window),
                EndTime=end,
                Period=60,
                Statistics=[statistic],
            )
        except (BotoCoreError, ClientError) as e:
            raise MetricUnavailableError(
                f"Failed to get {metric_name} for {self.queue_name} from CloudWatch: {str(e)}"
            ) from e

        datapoints = out.get("Datapoints", [])
        if not datapoints:
            raise MetricUnavailableError(
                f"No {metric_name} datapoints for {self.queue_name}"
            )

        latest = max(datapoints, key=lambda point: point["Timestamp"])
        value = float(latest[statistic])
        logger.debug(f"{metric_name} ({statistic}) for {self.queue_name}: {value}")
        return value
