# src/collaborators/aws.py
from typing import Any, Optional

import boto3
from botocore.config import Config


def aws_client(service: str, region: Optional[str] = None, timeout: float = 10.0) -> Any:
    """boto3 client whose calls give up on their own after ``timeout`` seconds."""
    config = Config(
        connect_timeout=timeout,
        read_timeout=timeout,
        retries={"max_attempts": 2, "mode": "standard"},
    )
    return boto3.client(service, region_name=region or None, config=config)
