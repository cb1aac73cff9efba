from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any

from rich.markdown import Markdown
from rich.markup import escape

from .app_context import AppContext
from .compaction.policy import truncate_middle
from .errors import NetworkError, PermissionDeniedError, ToolError
from .prompts import build_system_prompt
from .tools.directives import ToolCallDirective, parse_tool_calls

logger = logging.getLogger(__name__)

CODE_THEMES = {"dark": "monokai", "light": "default"}


@dataclass
class StepBudget:
    """Model exchanges left for one user query, follow-ups included."""
    limit: int
    used: int = 0
    notified: bool = False

    @property
    def exhausted(self) -> bool:
        return self.used >= self.limit


def format_result(result: Any) -> str:
    if isinstance(result, str):
        return result
    return json.dumps(result, ensure_ascii=False, indent=2, default=str)


def tool_result_message(name: str, result: str) -> str:
    return f"Tool result for {name}:\n```\n{result}\n```"


def tool_failure_message(name: str, message: str) -> str:
    return f"Tool {name} failed with error: {message}"


def execute_directive(ctx: AppContext, directive: ToolCallDirective) -> str:
    """Gate and run one directive; the returned text is what the model sees next."""
    name = directive.name
    args = directive.arguments
    if ctx.events:
        ctx.events.append("tool.call", {"tool": name, "args": args})

    t0 = time.perf_counter()
    try:
        tool = ctx.tools.lookup(name)
        ctx.permissions.require(tool.spec, args)
        with ctx.console.status(f"Executing tool: {name}"):
            result = tool.execute(ctx.tool_context(), args)
    except PermissionDeniedError as e:
        if ctx.events:
            ctx.events.append("tool.denied", {"tool": name})
        return tool_failure_message(name, str(e))
    except ToolError as e:
        logger.debug("Tool %s failed: %s", name, e)
        ctx.console.print(f"[red]Tool {name} failed:[/red] {escape(str(e))}", highlight=False)
        if ctx.events:
            ctx.events.append("tool.error", {"tool": name, "error": str(e)[:2000]})
        return tool_failure_message(name, str(e))
    elapsed_ms = int((time.perf_counter() - t0) * 1000)

    text = format_result(result)
    if ctx.events:
        ctx.events.append(
            "tool.result",
            {
                "tool": name,
                "elapsed_ms": elapsed_ms,
                "content_len": len(text),
                "content_preview": text[:4000],
            },
        )
    text = truncate_middle(text, ctx.policy.max_tool_result_chars)
    ctx.console.print(f"[green]Tool {name} executed[/green]")
    return tool_result_message(name, text)


def _exchange(ctx: AppContext, budget: StepBudget) -> None:
    if budget.exhausted:
        if not budget.notified:
            budget.notified = True
            ctx.console.print(
                f"[yellow]Stopped after {budget.limit} model exchanges for this query. "
                "Send another message to continue.[/yellow]"
            )
        return
    budget.used += 1

    messages = ctx.conversation.to_payload(build_system_prompt(ctx.tools, ctx.cwd))
    if ctx.events:
        ctx.events.append(
            "llm.request",
            {
                "step": budget.used,
                "model": ctx.client.model,
                "messages_count": len(messages),
                "prompt_chars": sum(len(m["content"]) for m in messages),
            },
        )

    latest = ""
    t0 = time.perf_counter()
    with ctx.console.status("Thinking...") as status:
        def _on_progress(snapshot: str) -> None:
            nonlocal latest
            latest = snapshot
            status.update(f"Receiving response... ({len(snapshot)} chars)")

        try:
            reply = ctx.client.chat_completion(messages, on_progress=_on_progress)
        except NetworkError as e:
            if ctx.events:
                ctx.events.append("llm.error", {"step": budget.used, "error": str(e)[:2000]})
            ctx.console.print(f"\n[red]Error: {escape(str(e))}[/red]\n", highlight=False)
            return
    llm_elapsed_ms = int((time.perf_counter() - t0) * 1000)
    reply = reply or latest

    if ctx.events:
        ctx.events.append(
            "llm.response",
            {"step": budget.used, "elapsed_ms": llm_elapsed_ms, "text": reply[:4000]},
        )

    ctx.conversation.add("assistant", reply)
    ctx.console.print()
    ctx.console.print(Markdown(reply, code_theme=CODE_THEMES.get(ctx.config.get("theme"), "monokai")))
    ctx.console.print()

    for directive in parse_tool_calls(reply):
        if budget.exhausted:
            _exchange(ctx, budget)
            return
        outcome = execute_directive(ctx, directive)
        ctx.conversation.add("user", outcome)
        ctx.console.print("[dim]Tool result received. Continuing conversation...[/dim]")
        _exchange(ctx, budget)


def process_query(ctx: AppContext, query: str) -> None:
    """Send one user query and follow every tool directive in the replies, depth-first."""
    if not query.strip():
        return
    ctx.conversation.add("user", query)
    _exchange(ctx, StepBudget(limit=ctx.policy.max_steps))
