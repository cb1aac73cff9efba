from __future__ import annotations

from rich.align import Align
from rich.panel import Panel
from rich.table import Table

from .app_context import AppContext
from .runner import process_query
from .slash_commands import handle_slash_command

PROMPT = "[bold blue]>[/bold blue] "


def print_welcome(ctx: AppContext) -> None:
    table = Table.grid(padding=(0, 2))
    table.add_row("[bold green]cwd[/bold green]", f"[bright_cyan]{ctx.cwd}[/bright_cyan]")
    table.add_row("[bold green]model[/bold green]", f"[bright_cyan]{ctx.client.model}[/bright_cyan]")
    table.add_row("[bold green]server[/bold green]", f"[bright_cyan]{ctx.client.base_url}[/bright_cyan]")
    if ctx.events:
        table.add_row("[bold green]session[/bold green]", f"[bright_cyan]{ctx.events.session_id}[/bright_cyan]")
    table.add_row("", "[dim]Type your questions or commands, or use /help to see available commands[/dim]")
    table.add_row("", "[dim]Press Ctrl+C to exit[/dim]")
    ctx.console.print(
        Align.center(
            Panel(
                table,
                title="[bold magenta]Ollama Code[/bold magenta]",
                border_style="bright_blue",
            )
        )
    )


def print_goodbye(ctx: AppContext) -> None:
    conv = ctx.conversation
    ctx.console.print("\n[blue]Goodbye! Thanks for using Ollama Code.[/blue]\n")
    ctx.console.print(
        "[dim]Session stats:\n"
        f"- Messages: {conv.exchanges()} exchanges\n"
        f"- Input tokens (estimate): {conv.estimated_tokens('user')}\n"
        f"- Output tokens (estimate): {conv.estimated_tokens('assistant')}[/dim]\n"
    )


def handle_line(ctx: AppContext, line: str) -> bool:
    """Dispatch one line of input; True means the session should end."""
    line = line.strip()
    if not line:
        return False
    if line.startswith("/"):
        return handle_slash_command(ctx, line)
    process_query(ctx, line)
    return False


def run_repl(ctx: AppContext, initial_query: str | None = None) -> None:
    print_welcome(ctx)
    if initial_query and handle_line(ctx, initial_query):
        print_goodbye(ctx)
        return
    while True:
        try:
            line = ctx.console.input(PROMPT)
        except (EOFError, KeyboardInterrupt):
            break
        if handle_line(ctx, line):
            break
    print_goodbye(ctx)
