from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Protocol

from ..errors import MissingArgumentsError
from ..util.fs import IgnoreRuleset

Risk = Literal["shell", "edit", "write", "git"]

@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    parameters: dict[str, Any]   # JSONSchema, rendered into the system prompt
    requires_permission: bool = False
    risk: Risk | None = None

class Tool(Protocol):
    spec: ToolSpec
    def execute(self, ctx: "ToolContext", args: dict[str, Any]) -> Any: ...

@dataclass
class ToolContext:
    cwd: Path
    ignore: IgnoreRuleset = field(default_factory=IgnoreRuleset)


def require_arg(args: dict[str, Any], key: str, kind: type = str) -> Any:
    value = args.get(key)
    if value is None or (kind is str and value == ""):
        raise MissingArgumentsError(f"Missing required argument: {key}")
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise MissingArgumentsError(f"Argument {key} must be of type {kind.__name__}")
    return value


def flag(args: dict[str, Any], key: str, default: bool = False) -> bool:
    value = args.get(key, default)
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return bool(value)
