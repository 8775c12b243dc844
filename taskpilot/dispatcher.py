"""Routes inbound messages to task orchestration or a direct reply."""

from __future__ import annotations

from abc import ABC, abstractmethod

from taskpilot.exceptions import InvalidArgumentError, RemoteServiceError
from taskpilot.logging import get_logger
from taskpilot.task_orchestrator import TaskOrchestrator

log = get_logger(__name__)

COMPLEX_TASK_INDICATOR = "complex"


class DirectResponder(ABC):
    """Produces a reply without task orchestration, usually via a remote model."""

    @abstractmethod
    async def respond(self, input: str) -> str:
        """Return the reply for ``input`` or raise ``RemoteServiceError``."""
        pass


class MessageDispatcher:
    """Classifies each message and runs exactly one of the two handlers."""

    def __init__(
        self,
        orchestrator: TaskOrchestrator,
        responder: DirectResponder,
        complex_indicator: str = COMPLEX_TASK_INDICATOR,
    ):
        self.orchestrator = orchestrator
        self.responder = responder
        self.complex_indicator = complex_indicator

    def requires_complex_task(self, input: str) -> bool:
        # TODO: replace the keyword check with a real complexity classifier.
        log.debug("Checking task complexity", input=input)
        return self.complex_indicator in input

    async def handle(self, input: str | None, user_id: str | None) -> str:
        """Process one message.

        Raises:
            InvalidArgumentError: ``input`` or ``user_id`` is None
            RemoteServiceError: the direct responder failed (propagated as is)
        """
        if input is None or user_id is None:
            log.warning("Input or user id is missing")
            raise InvalidArgumentError("Input and user id cannot be None")

        log.info("Processing message", user_id=user_id, input=input)

        if self.requires_complex_task(input):
            log.info("Delegating to task orchestrator")
            return self.orchestrator.run_task(input, user_id)

        log.info("Handling directly")
        try:
            return await self.responder.respond(input)
        except RemoteServiceError as e:
            log.error("Error processing message", error=str(e))
            raise
