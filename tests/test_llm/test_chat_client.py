import pytest

from taskpilot.exceptions import LLMError, RemoteServiceError
from taskpilot.llm import LLMProvider, LLMResponse, Message
from taskpilot.llm.client import ChatClient


class DummyProvider(LLMProvider):
    def __init__(self, reply: str = "Meow!", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.received: list[list[Message]] = []
        self.closed = False

    async def complete(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        self.received.append(messages)
        if self.error is not None:
            raise self.error
        return LLMResponse(content=self.reply)

    async def close(self) -> None:
        self.closed = True


@pytest.mark.asyncio
async def test_respond_records_conversation():
    client = ChatClient(DummyProvider(), system_prompt="Test system message.")

    reply = await client.respond("Hello")

    assert reply == "Meow!"
    assert [(m.role, m.content) for m in client.messages] == [
        ("system", "Test system message."),
        ("user", "Hello"),
        ("assistant", "Meow!"),
    ]


@pytest.mark.asyncio
async def test_respond_sends_full_history():
    provider = DummyProvider()
    client = ChatClient(provider)

    await client.respond("one")
    await client.respond("two")

    assert [m.content for m in provider.received[1]][1:] == ["one", "Meow!", "two"]


@pytest.mark.asyncio
async def test_provider_failure_becomes_remote_service_error():
    cause = LLMError("No response received from OpenAI service.")
    client = ChatClient(DummyProvider(error=cause))

    with pytest.raises(RemoteServiceError) as exc_info:
        await client.respond("Hello")

    assert exc_info.value.cause is cause
    assert exc_info.value.__cause__ is cause
    assert [m.role for m in client.messages] == ["system"]


@pytest.mark.asyncio
async def test_reset_conversation_keeps_only_system_message():
    client = ChatClient(DummyProvider(), system_prompt="Test system message.")
    await client.respond("Hello")

    client.reset_conversation()

    assert len(client.messages) == 1
    assert client.messages[0].role == "system"
    assert client.messages[0].content == "Test system message."


def test_messages_returns_a_copy():
    client = ChatClient(DummyProvider())
    client.messages.append(Message(role="user", content="sneaky"))
    assert len(client.messages) == 1


@pytest.mark.asyncio
async def test_close_closes_provider():
    provider = DummyProvider()
    client = ChatClient(provider)
    await client.close()
    assert provider.closed
