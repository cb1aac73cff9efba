from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from ..base import ToolSpec, ToolContext, require_arg
from ...errors import ExecutionFailedError, NotFoundError
from ...util.fs import resolve_path, relative_posix, read_text

@dataclass
class ReadFileTool:
    spec: ToolSpec = ToolSpec(
        name="FileReadTool",
        description="Reads the contents of files",
        parameters={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "File path relative to the working directory."},
            },
            "required": ["path"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> str:
        path = require_arg(args, "path")
        p = resolve_path(ctx.cwd, path)
        ctx.ignore.check(relative_posix(ctx.cwd, p))
        if not p.is_file():
            raise NotFoundError(f"File not found: {path}")
        try:
            return read_text(p)
        except OSError as e:
            raise ExecutionFailedError(f"Failed to read file: {e}") from e
