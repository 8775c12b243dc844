"""Scoped memory lookups for task handling."""

from __future__ import annotations

from abc import ABC, abstractmethod

from taskpilot.logging import get_logger

log = get_logger(__name__)


class MemoryStore(ABC):
    """Public/private text lookup used by the task executor."""

    @abstractmethod
    def retrieve_public_memory(self, input: str) -> str:
        pass

    @abstractmethod
    def retrieve_private_memory(self, user_id: str, input: str) -> str:
        pass


class StaticMemoryStore(MemoryStore):
    """Memory store that formats the lookup key instead of reading storage."""

    def retrieve_public_memory(self, input: str) -> str:
        log.info("Retrieving public memory", input=input)
        return f"Public memory for: {input}"

    def retrieve_private_memory(self, user_id: str, input: str) -> str:
        log.info("Retrieving private memory", user_id=user_id)
        return f"Private memory for user {user_id}: {input}"
