from __future__ import annotations

import logging
from typing import Callable

from rich.markup import escape
from rich.table import Table

from .app_context import AppContext
from .errors import NetworkError
from .prompts import INIT_SYSTEM_PROMPT, INIT_USER_PROMPT, PROJECT_GUIDE_NAME

logger = logging.getLogger(__name__)

HELP_ROWS = [
    ("/help", "Show this help message"),
    ("/clear", "Clear conversation history and session permissions"),
    ("/compact", "Compact conversation to save context space"),
    ("/cost", "Show token usage statistics"),
    ("/init", f"Initialize project with a {PROJECT_GUIDE_NAME} guide"),
    ("/models", "List available Ollama models"),
    ("/exit", "Exit Ollama Code"),
]


def _human_size(n: int | float | None) -> str:
    if not n:
        return "-"
    size = float(n)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


def _help(ctx: AppContext, args: list[str]) -> bool:
    table = Table.grid(padding=(0, 2))
    for cmd, desc in HELP_ROWS:
        table.add_row(f"[blue]{cmd}[/blue]", desc)
    ctx.console.print("\n[bold]Available commands:[/bold]")
    ctx.console.print(table)
    return False


def _clear(ctx: AppContext, args: list[str]) -> bool:
    ctx.conversation.clear()
    ctx.memory.clear()
    ctx.console.print("[green]Conversation history cleared[/green]")
    return False


def _compact(ctx: AppContext, args: list[str]) -> bool:
    removed = ctx.conversation.compact(ctx.policy.keep_messages)
    logger.debug("Compacted conversation, removed %d messages", removed)
    ctx.console.print("[green]Conversation compacted[/green]")
    return False


def _cost(ctx: AppContext, args: list[str]) -> bool:
    inp = ctx.conversation.estimated_tokens("user")
    out = ctx.conversation.estimated_tokens("assistant")
    ctx.console.print("\n[bold]Estimated token usage:[/bold]")
    ctx.console.print(f"Input tokens: ~{inp}\nOutput tokens: ~{out}\nTotal tokens: ~{inp + out}\n")
    return False


def _init(ctx: AppContext, args: list[str]) -> bool:
    ctx.console.print(f"[blue]Initializing project with {PROJECT_GUIDE_NAME}...[/blue]")
    messages = [
        {"role": "system", "content": INIT_SYSTEM_PROMPT},
        {"role": "user", "content": INIT_USER_PROMPT},
    ]
    try:
        with ctx.console.status("Generating project guide..."):
            guide = ctx.client.chat_completion(messages)
    except NetworkError as e:
        ctx.console.print(f"[red]Failed to generate guide: {escape(str(e))}[/red]")
        return False
    target = ctx.cwd / PROJECT_GUIDE_NAME
    try:
        target.write_text(guide, encoding="utf-8")
    except OSError as e:
        ctx.console.print(f"[red]Failed to write {PROJECT_GUIDE_NAME}: {escape(str(e))}[/red]")
        return False
    ctx.console.print(f"[green]Generated {PROJECT_GUIDE_NAME} guide[/green]")
    return False


def _models(ctx: AppContext, args: list[str]) -> bool:
    try:
        with ctx.console.status("Fetching available models..."):
            models = ctx.client.list_models()
    except NetworkError as e:
        ctx.console.print(f"[red]Failed to fetch models: {escape(str(e))}[/red]")
        ctx.console.print(f"[red]Make sure Ollama is running on {escape(ctx.client.base_url)}[/red]")
        return False
    if not models:
        ctx.console.print("[yellow]No models found. Make sure Ollama is running.[/yellow]")
        ctx.console.print("[dim]You can download models with: ollama pull codellama[/dim]")
        return False
    table = Table(title="Available models")
    table.add_column("name", style="blue")
    table.add_column("size", justify="right")
    table.add_column("modified", style="dim")
    for m in models:
        name = str(m.get("name", ""))
        mark = " *" if name == ctx.client.model else ""
        table.add_row(name + mark, _human_size(m.get("size")), str(m.get("modified_at", ""))[:19])
    ctx.console.print(table)
    return False


def _exit(ctx: AppContext, args: list[str]) -> bool:
    return True


COMMANDS: dict[str, Callable[[AppContext, list[str]], bool]] = {
    "help": _help,
    "clear": _clear,
    "compact": _compact,
    "cost": _cost,
    "init": _init,
    "models": _models,
    "exit": _exit,
}


def handle_slash_command(ctx: AppContext, line: str) -> bool:
    """Run a `/command`; True means the REPL should end."""
    parts = line.strip()[1:].split()
    if not parts:
        ctx.console.print("[dim]Type /help to see available commands[/dim]")
        return False
    name, args = parts[0].lower(), parts[1:]
    handler = COMMANDS.get(name)
    if handler is None:
        ctx.console.print(f"[yellow]Unknown command: {escape(name)}[/yellow]")
        ctx.console.print("[dim]Type /help to see available commands[/dim]")
        return False
    return handler(ctx, args)
