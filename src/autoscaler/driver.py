# src/autoscaler/driver.py
import asyncio
import contextlib
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional

from src.log_handler.logging_config import get_logger
from .collector import MetricSnapshotCollector
from .engine import decide
from .exceptions import CollectionError
from .executor import ActionExecutor
from .models import Decision, MetricSnapshot, ScalingConfig
from .policies import policy_for
from .state import ScalerState

logger = get_logger(__name__)


class DriverPhase(str, Enum):
    WAITING = "waiting"
    EVALUATING = "evaluating"


@dataclass
class TickResult:
    snapshot: Optional[MetricSnapshot] = None
    decision: Optional[Decision] = None
    applied: bool = False
    aborted: bool = False
    error: Optional[str] = None
    finished_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "snapshot": self.snapshot.model_dump() if self.snapshot else None,
            "decision": self.decision.to_dict() if self.decision else None,
            "applied": self.applied,
            "aborted": self.aborted,
            "error": self.error,
            "finished_at": self.finished_at.isoformat(),
        }


class PollDriver:
    """Runs one tick per poll interval: collect, decide, execute.

    Ticks run strictly one after another on a single task. A slow tick
    delays the next one; missed ticks are never queued up.
    """

    def __init__(
        self,
        config: ScalingConfig,
        collector: MetricSnapshotCollector,
        executor: ActionExecutor,
        state: Optional[ScalerState] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self.collector = collector
        self.executor = executor
        self.clock = clock
        self.state = state or ScalerState.starting_at(clock())
        self.policy = policy_for(config)
        self.phase = DriverPhase.WAITING
        self.tick_count = 0
        self.last_result: Optional[TickResult] = None
        self.running = False
        self._task: Optional[asyncio.Task] = None
        logger.info(f"PollDriver initialized with {self.policy.name} scaling")

    async def run_tick(self) -> TickResult:
        """Runs one full tick and records its outcome."""
        self.phase = DriverPhase.EVALUATING
        try:
            result = await self._evaluate()
        finally:
            self.phase = DriverPhase.WAITING

        self.tick_count += 1
        self.last_result = result
        return result

    async def _evaluate(self) -> TickResult:
        try:
            snapshot = await self.collector.collect()
        except CollectionError as e:
            logger.error(f"Aborting tick: {str(e)}")
            return TickResult(aborted=True, error=str(e))

        decision, updated = decide(
            snapshot, self.state, self.config, self.clock(), self.policy
        )
        self.state.smoothed_rate_per_replica = updated.smoothed_rate_per_replica

        if decision.is_no_op:
            if decision.suppressed:
                logger.info(decision.reason.capitalize())
            else:
                logger.debug(f"No scaling: {decision.reason}")
            return TickResult(snapshot=snapshot, decision=decision)

        logger.info(
            f"Scaling {decision.action.value} by {decision.by}: "
            f"{decision.current} -> {decision.target} replicas"
        )
        applied = await self.executor.execute(decision, self.state)
        return TickResult(snapshot=snapshot, decision=decision, applied=applied)

    async def start(self) -> None:
        if self.running:
            logger.warning("PollDriver already running")
            return
        self.running = True
        self._task = asyncio.create_task(self._poll_loop())
        logger.info(f"PollDriver started, polling every {self.config.poll_interval}s")

    async def _poll_loop(self) -> None:
        while self.running:
            self.phase = DriverPhase.WAITING
            await asyncio.sleep(self.config.poll_interval)
            try:
                await self.run_tick()
            except Exception as e:
                logger.error(f"Error in poll loop: {str(e)}")

    async def stop(self) -> None:
        logger.info("Stopping PollDriver")
        self.running = False
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        logger.info("PollDriver stopped")

    def get_stats(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "running": self.running,
            "tick_count": self.tick_count,
            "policy": self.policy.name,
            "state": self.state.to_dict(self.config, self.clock()),
            "last_result": self.last_result.to_dict() if self.last_result else None,
        }
