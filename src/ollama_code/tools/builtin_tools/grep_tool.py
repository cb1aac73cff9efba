from __future__ import annotations
from dataclasses import dataclass
from typing import Any
import re

from ..base import ToolSpec, ToolContext, flag, require_arg
from ...errors import ExecutionFailedError, MissingArgumentsError, ToolError
from .file_read import ReadFileTool
from .glob_tool import find_paths

DEFAULT_GLOB = "**/*.{py,js,jsx,ts,tsx,md,txt,json}"

@dataclass
class GrepTool:
    spec: ToolSpec = ToolSpec(
        name="GrepTool",
        description="Searches file contents for patterns",
        parameters={
            "type": "object",
            "properties": {
                "pattern": {"type": "string", "description": "Text to find (regex if regex=true)."},
                "glob": {"type": "string", "default": DEFAULT_GLOB, "description": "Which files to search."},
                "caseSensitive": {"type": "boolean", "default": False},
                "regex": {"type": "boolean", "default": False},
            },
            "required": ["pattern"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> list[dict[str, Any]]:
        pattern = require_arg(args, "pattern")
        glob = args.get("glob") or DEFAULT_GLOB
        if not isinstance(glob, str):
            raise MissingArgumentsError("Argument glob must be of type str")
        case_sensitive = flag(args, "caseSensitive")

        rx = None
        if flag(args, "regex"):
            try:
                rx = re.compile(pattern, 0 if case_sensitive else re.IGNORECASE)
            except re.error as e:
                raise ExecutionFailedError(f"Invalid regex: {e}") from e
        needle = pattern if case_sensitive else pattern.lower()

        reader = ReadFileTool()
        results: list[dict[str, Any]] = []
        for rel in find_paths(ctx.cwd, glob, ignore=ctx.ignore):
            try:
                text = reader.execute(ctx, {"path": rel})
            except ToolError:
                # unreadable or ignored candidates are skipped
                continue
            for i, line in enumerate(text.split("\n"), start=1):
                if rx is not None:
                    hit = rx.search(line) is not None
                else:
                    hit = needle in (line if case_sensitive else line.lower())
                if hit:
                    results.append({"file": rel, "line": i, "content": line.strip()})
        return results
