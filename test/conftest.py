from __future__ import annotations

import io
from pathlib import Path
import pytest
from rich.console import Console

from ollama_code.app_context import AppContext
from ollama_code.compaction.policy import CompactionPolicy
from ollama_code.config.models import DEFAULT_CONFIG
from ollama_code.config.store import ConfigStore
from ollama_code.tools.base import ToolContext
from ollama_code.tools.builtin import build_builtin_registry
from ollama_code.tools.permissions import PermissionGate, PermissionMemory
from ollama_code.util.fs import IgnoreRuleset

from fakes import FakeClient, FakePrompter


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    d = tmp_path / "work"
    d.mkdir()
    return d


@pytest.fixture
def tool_ctx(workdir: Path) -> ToolContext:
    return ToolContext(cwd=workdir, ignore=IgnoreRuleset.from_config(DEFAULT_CONFIG["ignore_patterns"]))


@pytest.fixture
def config_store(tmp_path: Path, workdir: Path) -> ConfigStore:
    return ConfigStore(
        global_path=tmp_path / "config" / "config.json",
        project_path=workdir / ".ollama-code.json",
    )


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), force_terminal=False, width=120, color_system=None)


@pytest.fixture
def make_app(workdir: Path, config_store: ConfigStore, console: Console):
    def _make(client: FakeClient, prompter: FakePrompter | None = None, *, auto_approve: bool = False,
              policy: CompactionPolicy | None = None) -> AppContext:
        memory = PermissionMemory()
        gate = PermissionGate(
            config=config_store,
            memory=memory,
            prompter=prompter or FakePrompter(),
            auto_approve=auto_approve,
        )
        return AppContext(
            cwd=workdir,
            console=console,
            client=client,  # type: ignore[arg-type]
            tools=build_builtin_registry(),
            config=config_store,
            memory=memory,
            permissions=gate,
            policy=policy or CompactionPolicy(),
        )
    return _make
