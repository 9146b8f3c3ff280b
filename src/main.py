import sys
from typing import List, Optional

import uvicorn

from src.api import create_app
from src.autoscaler import (
    ActionExecutor,
    AutoscalerError,
    MetricSnapshotCollector,
    PollDriver,
)
from src.collaborators import (
    CloudWatchMetricSource,
    KubernetesReplicaController,
    SqsQueueDepthSource,
)
from src.log_handler.logging_config import setup_logging, get_logger, shutdown_logging
from src.settings import AutoscalerSettings, parse_settings

logger = get_logger(__name__)


def build_driver(settings: AutoscalerSettings) -> PollDriver:
    """Wires the AWS and Kubernetes collaborators into a poll driver.

    Raises StartupError when the Kubernetes client cannot be configured.
    """
    scaling = settings.scaling
    replica_controller = KubernetesReplicaController(
        deployment=settings.kubernetes_deployment,
        namespace=settings.kubernetes_namespace,
        min_replicas=scaling.min_replicas,
        max_replicas=scaling.max_replicas,
        request_timeout=settings.fetch_timeout,
    )
    collector = MetricSnapshotCollector(
        metric_source=CloudWatchMetricSource(
            settings.sqs_queue_name, settings.aws_region, timeout=settings.fetch_timeout
        ),
        queue_source=SqsQueueDepthSource(
            settings.sqs_queue_url, settings.aws_region, timeout=settings.fetch_timeout
        ),
        replica_controller=replica_controller,
    )
    executor = ActionExecutor(replica_controller)
    return PollDriver(scaling, collector, executor)


def run_app(argv: Optional[List[str]] = None) -> int:
    """Runs the autoscaler until the process is stopped; returns the exit status."""
    try:
        settings = parse_settings(argv)
    except AutoscalerError as e:
        setup_logging()
        logger.error(f"Configuration error: {str(e)}")
        shutdown_logging()
        return 1

    setup_logging(
        log_level=settings.log_level,
        log_file=settings.log_file,
        module_levels={"uvicorn.access": "WARNING"},
    )
    try:
        driver = build_driver(settings)
        logger.info(
            f"Starting autoscaler for {settings.kubernetes_namespace}/"
            f"{settings.kubernetes_deployment} on queue {settings.sqs_queue_name}"
        )

        config = uvicorn.Config(
            app=create_app(driver),
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower(),
            timeout_graceful_shutdown=30,
        )
        uvicorn.Server(config).run()
        return 0
    except AutoscalerError as e:
        logger.error(f"Failed to start autoscaler: {str(e)}")
        return 1
    finally:
        shutdown_logging()


if __name__ == "__main__":
    sys.exit(run_app())
