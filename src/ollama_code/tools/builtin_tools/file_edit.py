from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from ..base import ToolSpec, ToolContext, require_arg
from ...errors import (
    ContentNotFoundError,
    ExecutionFailedError,
    InvalidRangeError,
    MissingArgumentsError,
    NotFoundError,
)
from ...util.fs import resolve_path, read_text

@dataclass
class EditFileTool:
    # ignore_patterns do not apply to edits
    spec: ToolSpec = ToolSpec(
        name="FileEditTool",
        description="Edits existing files",
        requires_permission=True,
        risk="edit",
        parameters={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "File path relative to the working directory."},
                "oldContent": {"type": "string", "description": "Exact text to replace (first occurrence)."},
                "newContent": {"type": "string", "description": "Replacement text."},
                "startLine": {"type": "integer", "description": "0-based first line to replace (inclusive)."},
                "endLine": {"type": "integer", "description": "0-based last line to replace (inclusive)."},
            },
            "required": ["path"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> str:
        path = require_arg(args, "path")
        line_mode = args.get("startLine") is not None or args.get("endLine") is not None
        content_mode = bool(args.get("oldContent"))
        if line_mode == content_mode:
            raise MissingArgumentsError(
                "Either oldContent/newContent pair or startLine/endLine pair is required"
            )
        new_content = args.get("newContent")
        if new_content is not None and not isinstance(new_content, str):
            raise MissingArgumentsError("Argument newContent must be of type str")

        p = resolve_path(ctx.cwd, path)
        if not p.is_file():
            raise NotFoundError(f"File not found: {path}")
        try:
            text = read_text(p)
        except OSError as e:
            raise ExecutionFailedError(f"Failed to edit file: {e}") from e

        if line_mode:
            start = require_arg(args, "startLine", int)
            end = require_arg(args, "endLine", int)
            lines = text.split("\n")
            if start < 0 or end < start or end >= len(lines):
                raise InvalidRangeError(
                    f"Invalid line range {start}-{end} for file with {len(lines)} lines"
                )
            replacement = new_content.split("\n") if new_content else []
            text = "\n".join(lines[:start] + replacement + lines[end + 1 :])
        else:
            old_content = require_arg(args, "oldContent")
            if new_content is None:
                raise MissingArgumentsError("Missing required argument: newContent")
            if old_content not in text:
                raise ContentNotFoundError(f"Old content not found in {path}")
            text = text.replace(old_content, new_content, 1)

        try:
            p.write_text(text, encoding="utf-8")
        except (OSError, UnicodeError) as e:
            raise ExecutionFailedError(f"Failed to edit file: {e}") from e
        return f"File {path} updated successfully"
