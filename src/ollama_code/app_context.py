from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console

from .compaction.policy import CompactionPolicy
from .config.store import ConfigStore
from .events.store import EventStore
from .llm.ollama import OllamaClient
from .session.models import Conversation
from .tools.base import ToolContext
from .tools.builtin import build_builtin_registry
from .tools.permissions import ConsolePrompter, PermissionGate, PermissionMemory, Prompter
from .tools.registry import ToolRegistry
from .util.fs import IgnoreRuleset

@dataclass
class AppContext:
    cwd: Path
    console: Console
    client: OllamaClient
    tools: ToolRegistry
    config: ConfigStore
    memory: PermissionMemory
    permissions: PermissionGate
    conversation: Conversation = field(default_factory=Conversation)
    policy: CompactionPolicy = field(default_factory=CompactionPolicy)
    events: EventStore | None = None

    def tool_context(self) -> ToolContext:
        # rebuilt per call so ignore_patterns edits apply immediately
        patterns = self.config.get("ignore_patterns") or []
        return ToolContext(cwd=self.cwd, ignore=IgnoreRuleset.from_config(patterns))

    @staticmethod
    def from_env(
        cwd: Path,
        console: Console,
        model: str | None = None,
        base_url: str | None = None,
        auto_approve: bool = False,
        config: ConfigStore | None = None,
        prompter: Prompter | None = None,
        events: EventStore | None = None,
    ) -> "AppContext":
        config = config or ConfigStore.open(cwd)
        client = OllamaClient(
            base_url=base_url or config.get("ollama_base_url"),
            model=model or config.get("ollama_model"),
            max_tokens=config.get("max_tokens"),
        )
        memory = PermissionMemory()
        permissions = PermissionGate(
            config=config,
            memory=memory,
            prompter=prompter or ConsolePrompter(console),
            auto_approve=auto_approve,
        )
        return AppContext(
            cwd=cwd,
            console=console,
            client=client,
            tools=build_builtin_registry(),
            config=config,
            memory=memory,
            permissions=permissions,
            events=events,
        )
