# src/autoscaler/collector.py
import asyncio
from typing import Any, Callable

from pydantic import ValidationError

from src.collaborators.base import MetricSource, QueueDepthSource, ReplicaController
from src.log_handler.logging_config import get_logger
from .exceptions import CollectionError
from .models import MetricSnapshot

logger = get_logger(__name__)

# snapshot field -> (CloudWatch metric, statistic)
QUEUE_METRICS = (
    ("oldest_message_age_seconds", "ApproximateAgeOfOldestMessage", "Maximum"),
    ("messages_deleted", "NumberOfMessagesDeleted", "Sum"),
    ("messages_sent", "NumberOfMessagesSent", "Sum"),
    ("empty_receives", "NumberOfEmptyReceives", "Sum"),
)


class MetricSnapshotCollector:
    """Gathers every signal the decision engine needs, or nothing at all.

    Each call runs to completion in a worker thread. Collaborators carry
    their own client timeouts, so a hung fetch surfaces as an error from
    the call itself rather than as a thread left running behind the tick.
    """

    def __init__(
        self,
        metric_source: MetricSource,
        queue_source: QueueDepthSource,
        replica_controller: ReplicaController,
        window: int = 60,
    ):
        self.metric_source = metric_source
        self.queue_source = queue_source
        self.replica_controller = replica_controller
        self.window = window

    async def _call(self, description: str, func: Callable[..., Any], *args: Any) -> Any:
        try:
            return await asyncio.to_thread(func, *args)
        except CollectionError:
            raise
        except Exception as e:
            raise CollectionError(f"Failed to get {description}: {str(e)}") from e

    async def collect(self) -> MetricSnapshot:
        values = {}
        for field_name, metric_name, statistic in QUEUE_METRICS:
            values[field_name] = await self._call(
                metric_name, self.metric_source.fetch, metric_name, statistic, self.window
            )

        values["visible_messages"] = await self._call(
            "visible messages", self.queue_source.approximate_visible_messages
        )
        values["current_replicas"] = await self._call(
            "available replicas", self.replica_controller.current_replicas
        )

        try:
            snapshot = MetricSnapshot(**values)
        except ValidationError as e:
            raise CollectionError(f"Invalid metric snapshot {values}: {str(e)}") from e
        logger.debug(f"Collected snapshot: {snapshot}")
        return snapshot
