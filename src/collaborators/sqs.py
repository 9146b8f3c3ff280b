# src/collaborators/sqs.py
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError

from src.autoscaler.exceptions import QueueDepthError
from .aws import aws_client
from .base import QueueDepthSource


def queue_name_from_url(queue_url: str) -> str:
    """https://sqs.<region>.amazonaws.com/<account>/<name> -> <name>"""
    return queue_url.rstrip("/").split("/")[-1]


class SqsQueueDepthSource(QueueDepthSource):
    def __init__(
        self,
        queue_url: str,
        region: Optional[str] = None,
        client: Any = None,
        timeout: float = 10.0,
    ):
        self.queue_url = queue_url
        self.client = client or aws_client("sqs", region, timeout)

    def approximate_visible_messages(self) -> int:
        try:
            out = self.client.get_queue_attributes(
                QueueUrl=self.queue_url,
                AttributeNames=["ApproximateNumberOfMessages"],
            )
            return int(out["Attributes"]["ApproximateNumberOfMessages"])
        except (BotoCoreError, ClientError) as e:
            raise QueueDepthError(f"Failed to get SQS messages: {str(e)}") from e
        except (KeyError, TypeError, ValueError) as e:
            raise QueueDepthError(
                f"Unexpected SQS attributes response for {self.queue_url}: {str(e)}"
            ) from e
