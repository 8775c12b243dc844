"""Single-pass task execution driven by an ordered rule table."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from taskpilot.logging import get_logger
from taskpilot.memory import MemoryStore, StaticMemoryStore

log = get_logger(__name__)

STOP_SENTINEL = "No further tasks to handle."


class TaskKind(str, Enum):
    """Kind of work selected for one executor pass."""

    MEMORY = "memory"
    ACTION = "action"
    STOP = "stop"
    OTHER = "other"


@dataclass(frozen=True)
class TaskRule:
    """Maps a trigger substring to the handler that produces the result.

    A rule without a trigger matches every input and must come last.
    """

    kind: TaskKind
    trigger: str | None
    handler: Callable[[str, str], str]

    def matches(self, input: str) -> bool:
        return self.trigger is None or self.trigger in input


class TaskExecutor:
    """Runs one unit of task work.

    Rules are checked in table order and the first match wins, so an input
    mentioning both "memory" and "stop" is treated as a memory lookup.
    """

    def __init__(self, memory_store: MemoryStore | None = None):
        self.memory_store = memory_store or StaticMemoryStore()
        self.rules: tuple[TaskRule, ...] = (
            TaskRule(TaskKind.MEMORY, "memory", self._handle_memory_task),
            TaskRule(TaskKind.ACTION, "action", self._perform_action),
            TaskRule(TaskKind.STOP, "stop", self._handle_stop),
            TaskRule(TaskKind.OTHER, None, self._handle_other),
        )

    def select_rule(self, input: str) -> TaskRule:
        for rule in self.rules:
            if rule.matches(input):
                return rule
        # Unreachable while the table ends with a catch-all rule.
        return self.rules[-1]

    def classify(self, input: str) -> TaskKind:
        """Return the kind of work ``execute_once`` would perform for ``input``."""
        return self.select_rule(input).kind

    def execute_once(self, input: str, user_id: str) -> str:
        """Handle a single task iteration without triggering reevaluation."""
        rule = self.select_rule(input)
        log.info("Handling task iteration", user_id=user_id, kind=rule.kind.value)
        return rule.handler(input, user_id)

    def _handle_memory_task(self, input: str, user_id: str) -> str:
        log.info("Handling memory task", user_id=user_id)
        if "private" in input:
            return self.memory_store.retrieve_private_memory(user_id, input)
        return self.memory_store.retrieve_public_memory(input)

    def _perform_action(self, input: str, user_id: str) -> str:
        # Placeholder: nothing is executed yet.
        log.info("Performing action", action=input)
        return f"Performed action: {input}"

    def _handle_stop(self, input: str, user_id: str) -> str:
        return STOP_SENTINEL

    def _handle_other(self, input: str, user_id: str) -> str:
        return f"Handled other task for input: {input}"
