from __future__ import annotations

import json
from pathlib import Path

from .tools.registry import ToolRegistry
from .util.fs import read_text

PROJECT_GUIDE_NAME = "OLLAMA_CODE.md"

DIRECTIVE_FORMAT = """When you need to perform actions, use JSON function calling with this format:
```json
{"name": "toolName", "arguments": {"arg1": "value1", "arg2": "value2"}}
```
Emit one block per action. Paths are relative to the working directory.
After each tool runs you will receive its result (or error) as the next message."""

INIT_SYSTEM_PROMPT = "You are an expert in code analysis. Create a detailed markdown guide for this project."
INIT_USER_PROMPT = (
    "Analyze the current project directory and create a OLLAMA_CODE.md guide that explains "
    "the project structure, main components, and provides guidance for contributors."
)


def load_project_guide(cwd: Path) -> str | None:
    p = cwd / PROJECT_GUIDE_NAME
    if not p.is_file():
        return None
    text = read_text(p).strip()
    return text or None


def _render_tools(tools: ToolRegistry) -> str:
    lines = []
    for spec in tools.list_specs():
        props = (spec.parameters or {}).get("properties") or {}
        required = set((spec.parameters or {}).get("required") or [])
        args = []
        for key, schema in props.items():
            typ = schema.get("type", "any")
            mark = "" if key in required else "?"
            args.append(f"{key}{mark}: {typ}")
        lines.append(f"- {spec.name}: {spec.description} ({', '.join(args) or 'no arguments'})")
        for key, schema in props.items():
            desc = schema.get("description")
            if desc:
                lines.append(f"    {key}: {desc}")
            if "enum" in schema:
                lines.append(f"    {key} one of: {json.dumps(schema['enum'])}")
    return "\n".join(lines)


def build_system_prompt(tools: ToolRegistry, cwd: Path) -> str:
    parts = [
        "You are Ollama Code, a helpful AI coding assistant.",
        "You have access to the following tools:",
        _render_tools(tools),
        "",
        DIRECTIVE_FORMAT,
        "",
        f"The user is currently in the directory: {cwd}",
    ]
    guide = load_project_guide(cwd)
    if guide:
        parts += ["", f"Project guide ({PROJECT_GUIDE_NAME}):", guide]
    parts += ["", "Respond in markdown format. Be concise and helpful."]
    return "\n".join(parts)
