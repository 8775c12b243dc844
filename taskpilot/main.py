"""Main entry point for TaskPilot."""

import asyncio
import sys
from pathlib import Path

from taskpilot.cli import ConsoleAdapter
from taskpilot.config import Config, get_config, set_config
from taskpilot.engine import CoreEngine, build_engine
from taskpilot.exceptions import ConfigurationError, InvalidArgumentError, RemoteServiceError
from taskpilot.llm.client import ChatClient
from taskpilot.logging import configure_logging, log
from taskpilot.onboarding import ensure_required_values


def main(
    config: str = "",
    model: str = "",
    provider: str = "",
    user: str = "",
    verbose: bool = False,
) -> None:
    """Start a TaskPilot interactive session."""
    # Load configuration
    config_path = Path(config).expanduser() if config else Config.resolve_default_config_path()
    try:
        cfg = Config.from_yaml(config_path)
    except ConfigurationError as e:
        print(f"Failed to load config: {e}", file=sys.stderr)
        sys.exit(1)

    # Apply CLI overrides
    if model:
        cfg.model.model = model
    if provider:
        cfg.model.provider = provider
    if user:
        cfg.user.id = user
    if verbose:
        cfg.logging.level = "DEBUG"

    set_config(cfg)
    configure_logging(cfg.logging.level, cfg.logging.format)

    adapter = ConsoleAdapter(cfg)
    try:
        cfg = ensure_required_values(cfg, config_path, console=adapter.console)
        engine = build_engine(cfg)
    except (KeyboardInterrupt, EOFError):
        log.info("Setup cancelled")
        sys.exit(0)
    except Exception as e:
        log.error("Failed to start", error=str(e))
        sys.exit(1)

    try:
        asyncio.run(run_interactive(engine, adapter, cfg))
    except KeyboardInterrupt:
        log.info("Shutting down...")
        sys.exit(0)
    except Exception as e:
        log.error("Fatal error", error=str(e))
        sys.exit(1)


async def run_turn(engine: CoreEngine, adapter: ConsoleAdapter, user_input: str, user_id: str) -> bool:
    """Process one message and print the reply or the failure.

    Returns True when a reply was printed.
    """
    try:
        response = await engine.process_message(user_input, user_id)
    except (InvalidArgumentError, RemoteServiceError) as e:
        adapter.print_error(str(e))
        return False
    adapter.send_message(response)
    return True


async def run_interactive(engine: CoreEngine, adapter: ConsoleAdapter, cfg: Config | None = None) -> None:
    """Run the interactive console loop until exit or end of input."""
    cfg = cfg or get_config()
    adapter.print_welcome()
    try:
        while True:
            try:
                user_input = await asyncio.to_thread(adapter.receive_message)
            except (KeyboardInterrupt, EOFError):
                log.info("Input closed")
                break

            result = adapter.handle_special_command(user_input)
            if result is None:
                continue
            if result == "EXIT":
                break
            if result == "RESET":
                responder = engine.responder
                if isinstance(responder, ChatClient):
                    responder.reset_conversation()
                adapter.console.print("Conversation reset.")
                continue
            if result == "CONFIG":
                adapter.print_config(cfg)
                continue

            # Skip empty input
            if not user_input.strip():
                continue

            await run_turn(engine, adapter, user_input, cfg.user.id)
    finally:
        responder = engine.responder
        if isinstance(responder, ChatClient):
            await responder.close()


def version() -> None:
    """Show version information."""
    from taskpilot import __version__
    print(f"TaskPilot v{__version__}")


def _build_cli():
    import typer

    app = typer.Typer(help="TaskPilot - a console chat agent with task handling")

    @app.command()
    def run(
        config: str = typer.Option("", "-c", "--config", help="Path to config file"),
        model: str = typer.Option("", "-m", "--model", help="Override model"),
        provider: str = typer.Option("", "-p", "--provider", help="Override provider"),
        user: str = typer.Option("", "-u", "--user", help="Override user id"),
        verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
    ) -> None:
        main(config, model, provider, user, verbose)

    @app.command("version")
    def ver() -> None:
        version()

    return app


def cli() -> None:
    """Command-line entry point."""
    _build_cli()()


if __name__ == "__main__":
    cli()
