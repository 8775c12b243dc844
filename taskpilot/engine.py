"""Core engine wiring for TaskPilot."""

from __future__ import annotations

from taskpilot.config import Config
from taskpilot.dispatcher import DirectResponder, MessageDispatcher
from taskpilot.llm import create_provider
from taskpilot.llm.client import ChatClient
from taskpilot.memory import MemoryStore, StaticMemoryStore
from taskpilot.task_executor import TaskExecutor
from taskpilot.task_orchestrator import TaskOrchestrator


class CoreEngine:
    """Entry point the transport calls for every inbound message."""

    def __init__(self, dispatcher: MessageDispatcher):
        self.dispatcher = dispatcher

    async def process_message(self, input: str | None, user_id: str | None) -> str:
        return await self.dispatcher.handle(input, user_id)

    @property
    def responder(self) -> DirectResponder:
        return self.dispatcher.responder


def build_responder(config: Config) -> ChatClient:
    """Create the remote chat client described by ``config.model``."""
    model_cfg = config.model
    provider = create_provider(
        provider=model_cfg.provider,
        model=model_cfg.model,
        api_key=model_cfg.api_key or None,
        base_url=model_cfg.base_url or None,
        temperature=model_cfg.temperature,
        max_tokens=model_cfg.max_tokens,
        timeout=model_cfg.timeout,
    )
    return ChatClient(provider, system_prompt=model_cfg.system_prompt, max_tokens=model_cfg.max_tokens)


def build_engine(
    config: Config,
    responder: DirectResponder | None = None,
    memory_store: MemoryStore | None = None,
) -> CoreEngine:
    """Assemble the dispatch pipeline from configuration."""
    executor = TaskExecutor(memory_store or StaticMemoryStore())
    orchestrator = TaskOrchestrator(
        executor,
        max_reevaluations=config.tasks.max_reevaluations,
        stop_on_sentinel=config.tasks.stop_on_sentinel,
    )
    dispatcher = MessageDispatcher(
        orchestrator,
        responder or build_responder(config),
        complex_indicator=config.tasks.complex_indicator,
    )
    return CoreEngine(dispatcher)
