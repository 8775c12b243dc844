"""Complex-task orchestration: one executor pass plus bounded reevaluation."""

from __future__ import annotations

from taskpilot.logging import get_logger
from taskpilot.task_executor import STOP_SENTINEL, TaskExecutor

log = get_logger(__name__)

MAX_REEVALUATIONS = 3


class TaskOrchestrator:
    """Handles messages classified as complex tasks."""

    def __init__(
        self,
        executor: TaskExecutor | None = None,
        max_reevaluations: int = MAX_REEVALUATIONS,
        stop_on_sentinel: bool = False,
    ):
        """Initialize the orchestrator.

        Args:
            executor: Executor used for every pass
            max_reevaluations: Number of chained passes after the initial one
            stop_on_sentinel: End reevaluation once a pass returns the stop
                sentinel. Off by default, so a stop result still gets every
                reevaluation pass.
        """
        if max_reevaluations < 0:
            raise ValueError("max_reevaluations must be >= 0")
        self.executor = executor or TaskExecutor()
        self.max_reevaluations = max_reevaluations
        self.stop_on_sentinel = stop_on_sentinel

    def run_task(self, input: str, user_id: str) -> str:
        """Run the initial pass, then always reevaluate its result."""
        log.info("Handling task", user_id=user_id)
        result = self.executor.execute_once(input, user_id)
        return result + "\n" + self.reevaluate(result, user_id)

    def reevaluate(self, seed: str, user_id: str) -> str:
        """Feed each pass's output into the next, decorated with its iteration number.

        Every output is followed by a newline in the returned text.
        """
        log.info("Reevaluating task", user_id=user_id, iterations=self.max_reevaluations)
        parts: list[str] = []
        current = seed

        for i in range(1, self.max_reevaluations + 1):
            log.debug("Reevaluation iteration", iteration=i)
            output = self.executor.execute_once(f"{current} iteration {i}", user_id)
            parts.append(output + "\n")
            if self.stop_on_sentinel and output == STOP_SENTINEL:
                log.debug("Stop sentinel reached", iteration=i)
                break
            current = output

        return "".join(parts)
