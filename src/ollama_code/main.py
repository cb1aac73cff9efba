from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
import yaml
from rich.console import Console
from typer.core import TyperGroup

from .app_context import AppContext
from .config.models import Scope
from .config.store import ConfigError, ConfigStore
from .events.store import EventStore
from .logging_utils import setup_logging
from .repl import handle_line, run_repl


class DefaultChatGroup(TyperGroup):
    """Routes anything that is not a known subcommand to `chat`, so `ollama-code "query"` works."""

    default_command = "chat"

    def parse_args(self, ctx: typer.Context, args: list[str]) -> list[str]:
        if not args or (args[0] not in self.commands and args[0] != "--help"):
            args = [self.default_command, *args]
        return super().parse_args(ctx, args)


app = typer.Typer(
    cls=DefaultChatGroup,
    add_completion=False,
    help="ollama-code: a coding assistant backed by a local Ollama server.",
)
config_app = typer.Typer(add_completion=False, help="Manage configuration.")
app.add_typer(config_app, name="config")

console = Console()


def _resolve_cwd(cwd: Path | None) -> Path:
    cwd = Path(str(cwd or Path.cwd())).expanduser()
    if not cwd.is_absolute():
        cwd = Path.cwd() / cwd
    cwd = cwd.resolve()
    if not cwd.is_dir():
        raise typer.BadParameter(f"--cwd must be an existing directory, got: {cwd}")
    return cwd


def _open_config(cwd: Path) -> ConfigStore:
    try:
        store = ConfigStore.open(cwd)
        store.list()
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {e}", highlight=False)
        raise typer.Exit(code=1)
    return store


def _scope(global_: bool) -> Scope:
    return "global" if global_ else "project"


def parse_config_value(raw: str) -> Any:
    """`true`, `42` and `[a, b]` become typed values; anything unparsable stays a string."""
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw
    return raw if value is None and raw.strip() not in {"null", "~"} else value


@app.command()
def chat(
    query: list[str] = typer.Argument(None, help="Optional initial query to start with."),
    print_only: bool = typer.Option(False, "--print", "-p", help="Print response and exit (non-interactive mode)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging."),
    model: str = typer.Option(None, "--model", "-m", help="Ollama model (default: ollama_model from config)."),
    base_url: str = typer.Option(None, "--base-url", help="Ollama server URL (default: ollama_base_url from config)."),
    yes: bool = typer.Option(False, "--yes", help="Auto-approve tools that require confirmation (shell/edit/write/git)."),
    cwd: Path = typer.Option(None, "--cwd", help="Working directory (project root). Defaults to current directory."),
):
    """Start the interactive assistant, optionally with an initial query."""
    cwd = _resolve_cwd(cwd)
    config = _open_config(cwd)
    setup_logging(verbose=verbose or bool(config.get("verbose")))

    text = " ".join(query or []).strip()
    if print_only and not text:
        raise typer.BadParameter("--print needs a query")

    ctx = AppContext.from_env(
        cwd=cwd,
        console=console,
        model=model,
        base_url=base_url,
        auto_approve=yes,
        config=config,
        events=EventStore.open(),
    )
    if print_only:
        handle_line(ctx, text)
        return
    run_repl(ctx, initial_query=text or None)


@config_app.command("get")
def config_get(
    key: str = typer.Argument(..., help="Configuration key."),
    global_: bool = typer.Option(False, "--global", "-g", help="Use global configuration."),
    cwd: Path = typer.Option(None, "--cwd", help="Project directory. Defaults to current directory."),
):
    """Get a configuration value."""
    store = _open_config(_resolve_cwd(cwd))
    value = store.get(key, "global" if global_ else None)
    console.print(f"{key}: {json.dumps(value, ensure_ascii=False)}", highlight=False)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Configuration key."),
    value: str = typer.Argument(..., help="Value, parsed as YAML (true, 42, [a, b], ...)."),
    global_: bool = typer.Option(False, "--global", "-g", help="Use global configuration."),
    cwd: Path = typer.Option(None, "--cwd", help="Project directory. Defaults to current directory."),
):
    """Set a configuration value."""
    store = _open_config(_resolve_cwd(cwd))
    parsed = parse_config_value(value)
    try:
        store.set(key, parsed, _scope(global_))
    except (ConfigError, OSError) as e:
        console.print(f"[red]Cannot save configuration:[/red] {e}", highlight=False)
        raise typer.Exit(code=1)
    console.print(
        f"Set {key} to {json.dumps(parsed, ensure_ascii=False)} in {_scope(global_)} config",
        highlight=False,
    )


@config_app.command("list")
def config_list(
    global_: bool = typer.Option(False, "--global", "-g", help="List global configuration."),
    cwd: Path = typer.Option(None, "--cwd", help="Project directory. Defaults to current directory."),
):
    """List all configuration values (merged unless --global)."""
    store = _open_config(_resolve_cwd(cwd))
    console.print_json(json.dumps(store.list("global" if global_ else None), ensure_ascii=False))


@app.command()
def update():
    """Update to the latest version."""
    console.print("To update Ollama Code, run: [bold]pip install --upgrade ollama-code[/bold]")


if __name__ == "__main__":
    app()
