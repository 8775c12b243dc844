import pytest

from taskpilot.config import Config
from taskpilot.dispatcher import DirectResponder
from taskpilot.engine import build_engine, build_responder
from taskpilot.llm import OllamaProvider, OpenAIProvider
from taskpilot.llm.client import ChatClient
from taskpilot.memory import MemoryStore


class FakeResponder(DirectResponder):
    def __init__(self):
        self.calls: list[str] = []

    async def respond(self, input: str) -> str:
        self.calls.append(input)
        return f"echo: {input}"


class UpperMemoryStore(MemoryStore):
    def retrieve_public_memory(self, input: str) -> str:
        return input.upper()

    def retrieve_private_memory(self, user_id: str, input: str) -> str:
        return f"{user_id}:{input.upper()}"


@pytest.mark.asyncio
async def test_engine_end_to_end_private_memory_scenario():
    responder = FakeResponder()
    engine = build_engine(Config(), responder=responder)
    text = "do a complex task with memory private lookup"

    result = await engine.process_message(text, "u1")

    lines = result.split("\n")
    assert len(lines) == 5 and lines[-1] == ""
    assert lines[0] == f"Private memory for user u1: {text}"
    assert lines[1] == f"Private memory for user u1: {lines[0]} iteration 1"
    assert lines[3].endswith(" iteration 3")
    assert responder.calls == []


@pytest.mark.asyncio
async def test_engine_simple_greeting_uses_responder():
    responder = FakeResponder()
    engine = build_engine(Config(), responder=responder)

    assert await engine.process_message("simple greeting", "u1") == "echo: simple greeting"
    assert responder.calls == ["simple greeting"]


@pytest.mark.asyncio
async def test_engine_uses_configured_tasks_settings():
    cfg = Config()
    cfg.tasks.max_reevaluations = 1
    cfg.tasks.stop_on_sentinel = True
    cfg.tasks.complex_indicator = "deep"
    engine = build_engine(cfg, responder=FakeResponder(), memory_store=UpperMemoryStore())

    result = await engine.process_message("deep memory", "u1")

    assert result == "DEEP MEMORY\nHandled other task for input: DEEP MEMORY iteration 1\n"


def test_build_responder_uses_model_config():
    cfg = Config()
    cfg.model.api_key = "sk-test"
    cfg.model.system_prompt = "Be brief."

    responder = build_responder(cfg)

    assert isinstance(responder, ChatClient)
    assert isinstance(responder.provider, OpenAIProvider)
    assert responder.provider.api_key == "sk-test"
    assert responder.provider.model == "gpt-4o-mini"
    assert responder.messages[0].content == "Be brief."


def test_build_responder_supports_ollama():
    cfg = Config()
    cfg.model.provider = "ollama"
    cfg.model.model = "llama3.2"

    responder = build_responder(cfg)

    assert isinstance(responder.provider, OllamaProvider)
    assert responder.provider.base_url == "http://127.0.0.1:11434"
