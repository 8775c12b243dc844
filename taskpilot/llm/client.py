"""Conversation-keeping chat client used as the direct responder."""

from __future__ import annotations

from taskpilot.config import DEFAULT_SYSTEM_PROMPT
from taskpilot.dispatcher import DirectResponder
from taskpilot.exceptions import RemoteServiceError
from taskpilot.llm import LLMProvider, Message
from taskpilot.logging import get_logger

log = get_logger(__name__)


class ChatClient(DirectResponder):
    """Keeps conversation history and sends it to the provider on each turn."""

    def __init__(
        self,
        provider: LLMProvider,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        max_tokens: int | None = None,
    ):
        self.provider = provider
        self.system_prompt = system_prompt
        self.max_tokens = max_tokens
        self._messages: list[Message] = [Message(role="system", content=system_prompt)]

    async def respond(self, input: str) -> str:
        """Send ``input`` with the running history and return the assistant reply."""
        user_message = Message(role="user", content=input)
        self._messages.append(user_message)
        try:
            response = await self.provider.complete(list(self._messages), max_tokens=self.max_tokens)
        except Exception as e:
            self._messages.pop()
            log.error("Remote completion failed", error=str(e))
            raise RemoteServiceError(f"Error during remote completion request: {e}", cause=e) from e

        self._messages.append(Message(role="assistant", content=response.content))
        log.debug("Remote completion received", model=response.model, usage=response.usage)
        return response.content

    def reset_conversation(self) -> None:
        """Reset history to the system message."""
        self._messages = [Message(role="system", content=self.system_prompt)]

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    async def close(self) -> None:
        await self.provider.close()
