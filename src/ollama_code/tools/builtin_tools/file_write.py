from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from ..base import ToolSpec, ToolContext, flag, require_arg
from ...errors import ExecutionFailedError, MissingArgumentsError
from ...util.fs import resolve_path, relative_posix

@dataclass
class WriteFileTool:
    spec: ToolSpec = ToolSpec(
        name="FileWriteTool",
        description="Creates or overwrites files",
        requires_permission=True,
        risk="write",
        parameters={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "File path relative to the working directory."},
                "content": {"type": "string", "description": "Text to write."},
                "append": {"type": "boolean", "default": False, "description": "Append instead of overwriting."},
            },
            "required": ["path", "content"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> str:
        path = require_arg(args, "path")
        content = args.get("content")
        if not isinstance(content, str):
            raise MissingArgumentsError("Missing required argument: content")
        p = resolve_path(ctx.cwd, path)
        ctx.ignore.check(relative_posix(ctx.cwd, p))
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            if flag(args, "append"):
                with p.open("a", encoding="utf-8") as f:
                    f.write(content)
                return f"Content appended to {path}"
            p.write_text(content, encoding="utf-8")
        except (OSError, UnicodeError) as e:
            raise ExecutionFailedError(f"Failed to write file: {e}") from e
        return f"File {path} created successfully"
