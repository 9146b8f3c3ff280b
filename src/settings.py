# src/settings.py
import argparse
import os
import re
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError

from src.autoscaler.exceptions import ConfigurationError
from src.autoscaler.models import ScalingConfig
from src.collaborators.sqs import queue_name_from_url

_DURATION = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0, None: 1.0}


def parse_duration(value: str) -> float:
    """'30' / '30s' / '2m' / '1h' / '500ms' -> seconds"""
    match = _DURATION.match(str(value))
    if not match:
        raise argparse.ArgumentTypeError(f"invalid duration: {value!r}")
    amount, unit = match.groups()
    return float(amount) * _UNIT_SECONDS[unit]


class AutoscalerSettings(BaseModel):
    sqs_queue_url: str = Field(min_length=1)
    sqs_queue_name: str = Field(min_length=1)
    aws_region: Optional[str] = None
    kubernetes_deployment: str = Field(min_length=1)
    kubernetes_namespace: str = "default"
    fetch_timeout: float = Field(default=10.0, gt=0)
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    log_level: str = "INFO"
    log_file: Optional[str] = None
    scaling: ScalingConfig = Field(default_factory=ScalingConfig)


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(name, default)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqs-replica-autoscaler",
        description="Scale a Kubernetes deployment with the backlog of an SQS queue",
    )
    parser.add_argument("--poll-period", type=parse_duration,
                        default=_env("POLL_PERIOD", "5s"),
                        help="Interval between scaling checks")
    parser.add_argument("--scale-up-cool-down", type=parse_duration,
                        default=_env("SCALE_UP_COOL_DOWN", "10s"),
                        help="Cool down period after a scale up")
    parser.add_argument("--scale-down-cool-down", type=parse_duration,
                        default=_env("SCALE_DOWN_COOL_DOWN", "30s"),
                        help="Cool down period after a scale down")
    parser.add_argument("--scale-up-messages", type=int,
                        default=_env("SCALE_UP_MESSAGES", "100"),
                        help="Visible messages at or above which to scale up")
    parser.add_argument("--scale-down-messages", type=int,
                        default=_env("SCALE_DOWN_MESSAGES", "10"),
                        help="Visible messages at or below which to scale down")
    parser.add_argument("--acceptable-age", type=float,
                        default=_env("ACCEPTABLE_AGE", "150"),
                        help="Seconds a message may wait before the backlog counts as growing")
    parser.add_argument("--max-pods", type=int, default=_env("MAX_PODS", "5"),
                        help="Max replicas the autoscaler may set")
    parser.add_argument("--min-pods", type=int, default=_env("MIN_PODS", "1"),
                        help="Min replicas the autoscaler may set")
    parser.add_argument("--max-adjustment", type=int, default=_env("MAX_ADJUSTMENT"),
                        help="Cap per tick; enables exponential step sizing")
    parser.add_argument("--scale-down-empty", type=float, default=_env("SCALE_DOWN_EMPTY"),
                        help="Empty receives per minute required before scaling down")
    parser.add_argument("--aws-region", default=_env("AWS_REGION"),
                        help="AWS region of the queue")
    parser.add_argument("--sqs-queue-url", default=_env("SQS_QUEUE_URL"),
                        help="The SQS queue URL. Required")
    parser.add_argument("--kubernetes-deployment", default=_env("KUBERNETES_DEPLOYMENT"),
                        help="Deployment to scale. Required")
    parser.add_argument("--kubernetes-namespace", default=_env("KUBERNETES_NAMESPACE", "default"),
                        help="Namespace of the deployment")
    parser.add_argument("--fetch-timeout", type=parse_duration,
                        default=_env("FETCH_TIMEOUT", "10s"),
                        help="Timeout for each metric, queue or replica call")
    parser.add_argument("--host", default=_env("HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=_env("PORT", "8000"))
    parser.add_argument("--log-level", default=_env("LOG_LEVEL", "INFO"))
    parser.add_argument("--log-file", default=_env("LOG_FILE"))
    return parser


def parse_settings(argv: Optional[List[str]] = None) -> AutoscalerSettings:
    """Reads flags (falling back to environment variables) into validated settings."""
    args = build_parser().parse_args(argv)

    if not args.sqs_queue_url:
        raise ConfigurationError("--sqs-queue-url is required")
    if not args.kubernetes_deployment:
        raise ConfigurationError("--kubernetes-deployment is required")

    try:
        scaling = ScalingConfig(
            poll_interval=args.poll_period,
            scale_up_cooldown=args.scale_up_cool_down,
            scale_down_cooldown=args.scale_down_cool_down,
            scale_up_threshold=args.scale_up_messages,
            scale_down_threshold=args.scale_down_messages,
            acceptable_age=args.acceptable_age,
            min_replicas=args.min_pods,
            max_replicas=args.max_pods,
            max_adjustment_per_tick=args.max_adjustment,
            scale_down_empty_receives=args.scale_down_empty,
        )
        return AutoscalerSettings(
            sqs_queue_url=args.sqs_queue_url,
            sqs_queue_name=queue_name_from_url(args.sqs_queue_url),
            aws_region=args.aws_region,
            kubernetes_deployment=args.kubernetes_deployment,
            kubernetes_namespace=args.kubernetes_namespace,
            fetch_timeout=args.fetch_timeout,
            host=args.host,
            port=args.port,
            log_level=args.log_level,
            log_file=args.log_file,
            scaling=scaling,
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {str(e)}") from e
