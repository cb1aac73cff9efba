from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..base import ToolSpec, ToolContext, flag
from ...errors import ExecutionFailedError, NotFoundError
from ...util.fs import IgnoreRuleset, is_hidden, relative_posix, resolve_path

@dataclass
class ListDirTool:
    spec: ToolSpec = ToolSpec(
        name="LSTool",
        description="Lists directory contents",
        parameters={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "Directory path relative to the working directory. Default '.'"},
                "recursive": {"type": "boolean", "default": False, "description": "List the whole subtree."},
                "showHidden": {"type": "boolean", "default": False, "description": "Include dot-files."},
            },
            "required": [],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> list[dict[str, Any]]:
        path = args.get("path") or "."
        p = resolve_path(ctx.cwd, str(path))
        rel = relative_posix(ctx.cwd, p)
        ctx.ignore.check(rel)
        if not p.exists():
            raise NotFoundError(f"Directory not found: {path}")
        if not p.is_dir():
            raise NotFoundError(f"Not a directory: {path}")
        try:
            return _list(ctx.cwd.resolve(), p, flag(args, "showHidden"), flag(args, "recursive"), ctx.ignore)
        except OSError as e:
            raise ExecutionFailedError(f"Failed to list directory: {e}") from e


def _list(cwd: Path, directory: Path, show_hidden: bool, recursive: bool, ignore: IgnoreRuleset) -> list[dict[str, Any]]:
    entries: list[dict[str, Any]] = []
    with os.scandir(directory) as it:
        children = sorted(it, key=lambda e: e.name)
    for child in children:
        if not show_hidden and is_hidden(child.name):
            continue
        rel = Path(child.path).relative_to(cwd).as_posix()
        if ignore.match(rel) is not None:
            continue
        is_dir = child.is_dir()
        entries.append({
            "name": child.name,
            "path": rel,
            "type": "directory" if is_dir else "file",
            "isDirectory": is_dir,
        })
        if recursive and is_dir and not child.is_symlink():
            entries.extend(_list(cwd, Path(child.path), show_hidden, recursive, ignore))
    return entries
