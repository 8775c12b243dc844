import importlib
import io

import pytest
from rich.console import Console

from taskpilot.cli import ConsoleAdapter
from taskpilot.config import Config
from taskpilot.dispatcher import DirectResponder
from taskpilot.engine import build_engine
from taskpilot.exceptions import RemoteServiceError
from taskpilot.main import _build_cli, run_interactive, run_turn


class ScriptedResponder(DirectResponder):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[str] = []

    async def respond(self, input: str) -> str:
        self.calls.append(input)
        if self.fail:
            raise RemoteServiceError("Error during remote completion request: down")
        return f"meow {input}"


def _adapter(cfg: Config, stdin_text: str) -> tuple[ConsoleAdapter, io.StringIO]:
    out = io.StringIO()
    console = Console(file=out, force_terminal=False, color_system=None, width=400)
    return ConsoleAdapter(cfg, stdin=io.StringIO(stdin_text), console=console), out


@pytest.mark.asyncio
async def test_loop_routes_messages_and_stops_on_exit():
    cfg = Config()
    responder = ScriptedResponder()
    engine = build_engine(cfg, responder=responder)
    adapter, out = _adapter(cfg, "hello\n\ncomplex stop\nexit\nnever read\n")

    await run_interactive(engine, adapter, cfg)

    text = out.getvalue()
    assert responder.calls == ["hello"]
    assert "Bot: meow hello" in text
    assert "Bot: No further tasks to handle." in text
    assert "never read" not in text


@pytest.mark.asyncio
async def test_loop_ends_on_end_of_input():
    cfg = Config()
    responder = ScriptedResponder()
    engine = build_engine(cfg, responder=responder)
    adapter, _ = _adapter(cfg, "hi\n")

    await run_interactive(engine, adapter, cfg)

    assert responder.calls == ["hi"]


@pytest.mark.asyncio
async def test_remote_failure_is_reported_and_loop_continues():
    cfg = Config()
    responder = ScriptedResponder(fail=True)
    engine = build_engine(cfg, responder=responder)
    adapter, out = _adapter(cfg, "hello\nagain\n/exit\n")

    await run_interactive(engine, adapter, cfg)

    text = out.getvalue()
    assert responder.calls == ["hello", "again"]
    assert text.count("Error: Error during remote completion request: down") == 2
    assert "Bot:" not in text


@pytest.mark.asyncio
async def test_run_turn_reports_missing_user_without_partial_output():
    cfg = Config()
    engine = build_engine(cfg, responder=ScriptedResponder())
    adapter, out = _adapter(cfg, "")

    printed = await run_turn(engine, adapter, "complex task", None)

    assert printed is False
    assert out.getvalue().startswith("Error: ")
    assert "Bot:" not in out.getvalue()


@pytest.mark.asyncio
async def test_loop_uses_configured_user_id():
    cfg = Config()
    cfg.user.id = "u9"
    engine = build_engine(cfg, responder=ScriptedResponder())
    adapter, out = _adapter(cfg, "complex memory private\n")

    await run_interactive(engine, adapter, cfg)

    assert "Bot: Private memory for user u9: complex memory private" in out.getvalue()


def test_cli_exposes_run_and_version_commands():
    from typer.testing import CliRunner

    result = CliRunner().invoke(_build_cli(), ["version"])

    assert result.exit_code == 0
    assert "TaskPilot v" in result.output


@pytest.mark.asyncio
async def test_unrecognised_slash_message_reaches_task_handling():
    cfg = Config()
    responder = ScriptedResponder()
    engine = build_engine(cfg, responder=responder)
    adapter, out = _adapter(cfg, "/tmp is complex\n/etc/hosts\n")

    await run_interactive(engine, adapter, cfg)

    text = out.getvalue()
    assert responder.calls == ["/etc/hosts"]
    assert "Bot: meow /etc/hosts" in text
    assert "Bot: Handled other task for input: /tmp is complex" in text


def test_verbose_flag_forces_debug_over_saved_level(monkeypatch, tmp_path):
    import taskpilot.config as config_module
    main_module = importlib.import_module("taskpilot.main")

    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "_config", None)
    path = tmp_path / "config.yaml"
    saved = Config()
    saved.model.api_key = "sk-1"
    saved.logging.level = "WARNING"
    saved.save(path)

    seen = {}

    async def fake_interactive(engine, adapter, cfg=None):
        seen["engine"] = engine

    monkeypatch.setattr(main_module, "configure_logging", lambda level, format: seen.update(level=level))
    monkeypatch.setattr(main_module, "ensure_required_values", lambda cfg, path, console=None: cfg)
    monkeypatch.setattr(main_module, "build_engine", lambda cfg: "engine")
    monkeypatch.setattr(main_module, "run_interactive", fake_interactive)

    main_module.main(config=str(path), verbose=True)

    assert seen["level"] == "DEBUG"
    assert seen["engine"] == "engine"
