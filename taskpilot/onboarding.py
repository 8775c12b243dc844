"""Prompting for configuration values TaskPilot cannot run without."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from rich.console import Console
from rich.prompt import Prompt

from taskpilot.config import Config
from taskpilot.logging import get_logger

log = get_logger(__name__)

AskFn = Callable[[str], str]

_SECRET_KEYS = {"model.api_key"}

_KEY_LABELS = {
    "model.api_key": "API key for the remote model provider",
}


def _rich_ask(key: str) -> str:
    label = _KEY_LABELS.get(key, key)
    return Prompt.ask(f"Please enter the value for '{label}'", password=key in _SECRET_KEYS, default="")


def prompt_for_valid_input(key: str, ask: AskFn | None = None) -> str:
    """Ask for ``key`` until a non-blank answer arrives; return it stripped."""
    ask = ask or _rich_ask
    while True:
        value = ask(key)
        if value is not None and value.strip():
            return value.strip()
        log.warning("Value cannot be empty, asking again", key=key)


def ensure_required_values(
    cfg: Config,
    path: Path | str,
    ask: AskFn | None = None,
    console: Console | None = None,
) -> Config:
    """Fill missing required keys by prompting, then write the config file.

    The file is created when absent so that later runs find it.
    """
    config_path = Path(path).expanduser()
    if not config_path.exists():
        log.info("Configuration file does not exist, creating it", path=str(config_path))
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.touch()

    missing = cfg.missing_required_keys()
    if not missing:
        return cfg

    log.warning("Required configuration keys are missing", keys=missing)
    if console is not None:
        console.print(f"[yellow]Missing configuration values: {', '.join(missing)}[/yellow]")
    for key in missing:
        cfg.set_value(key, prompt_for_valid_input(key, ask))

    log.info("Writing configuration", path=str(config_path))
    cfg.save(config_path)
    return cfg
