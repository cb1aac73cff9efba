from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt

from ..config.store import ConfigStore
from ..errors import PermissionDeniedError
from ..util.wildcard import wildcard_match
from .base import ToolSpec
from .directives import tool_signature

RememberScope = Literal["session", "project", "none"]

ALLOWED_TOOLS_KEY = "allowed_tools"

RISK_NOTES = {
    "shell": ("red", "CAUTION: Shell commands can modify your system"),
    "edit": ("yellow", "NOTE: This will modify an existing file"),
    "write": ("yellow", "NOTE: This will create or overwrite a file"),
    "git": ("yellow", "NOTE: This will modify your Git repository"),
    None: ("yellow", "NOTE: This tool requires permission"),
}

logger = logging.getLogger(__name__)


@dataclass
class PermissionDecision:
    granted: bool
    remember: RememberScope = "none"


@dataclass
class PermissionMemory:
    """Signatures granted for the lifetime of this process."""

    session: set[str] = field(default_factory=set)

    def remember(self, signature: str) -> None:
        self.session.add(signature)

    def knows(self, signature: str) -> bool:
        return signature in self.session

    def clear(self) -> None:
        self.session.clear()


def pattern_allows(pattern: str, signature: str) -> bool:
    """A stored allow-list entry matches literally, or via `*` wildcards."""
    if "*" not in pattern:
        return pattern == signature
    return wildcard_match(pattern, signature)


def describe_request(spec: ToolSpec, args: dict[str, Any]) -> str:
    """One-line, human-readable summary of what the tool is about to do."""
    if spec.risk == "shell":
        return f"Allow executing shell command: [cyan]{escape(str(args.get('command', '')))}[/cyan]"
    if spec.risk == "edit":
        return f"Allow editing file: [cyan]{escape(str(args.get('path', '')))}[/cyan]"
    if spec.risk == "write":
        return f"Allow writing to file: [cyan]{escape(str(args.get('path', '')))}[/cyan]"
    if spec.risk == "git":
        params = args.get("params")
        extra = f" [dim]{escape(json.dumps(params, ensure_ascii=False))}[/dim]" if params else ""
        return f"Allow Git operation: [cyan]{escape(str(args.get('operation', '')))}[/cyan]{extra}"
    preview = json.dumps(args, ensure_ascii=False, indent=2)
    return f"Allow {spec.name} with args: [dim]{escape(preview)}[/dim]"


class Prompter(Protocol):
    def ask(self, spec: ToolSpec, args: dict[str, Any]) -> PermissionDecision: ...


class ConsolePrompter:
    def __init__(self, console: Console):
        self.console = console

    def ask(self, spec: ToolSpec, args: dict[str, Any]) -> PermissionDecision:
        color, note = RISK_NOTES.get(spec.risk, RISK_NOTES[None])
        self.console.print("\n[bold]Permission Request:[/bold]")
        self.console.print(describe_request(spec, args))
        self.console.print(f"[{color}]{note}[/{color}]\n")

        granted = Confirm.ask("Grant permission?", default=False, console=self.console)
        if not granted:
            self.console.print("[red]Permission denied[/red]")
            return PermissionDecision(granted=False)
        remember = Prompt.ask(
            "Remember this decision? (session = this session only, project = save to project config)",
            choices=["session", "project", "none"],
            default="none",
            console=self.console,
        )
        confirmations = {
            "session": "Permission granted for this session",
            "project": "Permission saved to project config",
        }
        self.console.print(f"[green]{confirmations.get(remember, 'Permission granted once')}[/green]")
        return PermissionDecision(granted=True, remember=remember)  # type: ignore[arg-type]


class PermissionGate:
    def __init__(
        self,
        config: ConfigStore,
        memory: PermissionMemory,
        prompter: Prompter,
        auto_approve: bool = False,
    ):
        self.config = config
        self.memory = memory
        self.prompter = prompter
        self.auto_approve = auto_approve

    def _persisted_allows(self, signature: str) -> bool:
        patterns = self.config.get(ALLOWED_TOOLS_KEY) or []
        return any(isinstance(p, str) and pattern_allows(p, signature) for p in patterns)

    def authorize(self, spec: ToolSpec, args: dict[str, Any]) -> bool:
        signature = tool_signature(spec.name, args)
        if not spec.requires_permission:
            return True
        if self.memory.knows(signature):
            logger.debug("Session memory allows %s", signature)
            return True
        if self._persisted_allows(signature):
            logger.debug("Project allow-list allows %s", signature)
            return True
        if self.auto_approve:
            logger.debug("Auto-approved %s", signature)
            return True

        decision = self.prompter.ask(spec, args)
        if not decision.granted:
            logger.info("Permission denied for %s", spec.name)
            return False
        if decision.remember == "session":
            self.memory.remember(signature)
        elif decision.remember == "project":
            self.config.append_to_list(ALLOWED_TOOLS_KEY, signature, scope="project")
        logger.info("Permission granted for %s (remember=%s)", spec.name, decision.remember)
        return True

    def require(self, spec: ToolSpec, args: dict[str, Any]) -> None:
        if not self.authorize(spec, args):
            raise PermissionDeniedError(f"Permission denied for {spec.name}")
