# src/autoscaler/executor.py
import asyncio
import time
from typing import Callable

from src.collaborators.base import ReplicaController
from src.log_handler.logging_config import get_logger
from .models import Decision
from .state import ScalerState

logger = get_logger(__name__)


class ActionExecutor:
    """Applies scaling decisions and advances cooldowns only on success.

    The write is awaited to completion; the replica controller bounds it
    with its own request timeout, so a write is never abandoned mid-flight.
    """

    def __init__(
        self,
        replica_controller: ReplicaController,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.replica_controller = replica_controller
        self.clock = clock

    async def execute(self, decision: Decision, state: ScalerState) -> bool:
        if decision.is_no_op:
            return False

        try:
            replicas = await asyncio.to_thread(
                self.replica_controller.set_replicas, decision.target
            )
        except Exception as e:
            logger.error(f"Failed scaling {decision.action.value}: {str(e)}")
            return False

        state.record_committed_decision(decision, self.clock())
        logger.info(
            f"Scaled {decision.action.value}: {decision.current} -> {replicas} "
            f"(reason: {decision.reason})"
        )
        return True
