from __future__ import annotations
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..base import ToolSpec, ToolContext, flag, require_arg
from ...errors import ExecutionFailedError
from ...util.fs import IgnoreRuleset, is_hidden
from ...util.wildcard import compile_glob

@dataclass
class GlobTool:
    spec: ToolSpec = ToolSpec(
        name="GlobTool",
        description="Finds files matching patterns",
        parameters={
            "type": "object",
            "properties": {
                "pattern": {"type": "string", "description": "Glob pattern, e.g. 'src/**/*.py' or '**/*.{md,txt}'."},
                "includeHidden": {"type": "boolean", "default": False},
                "onlyDirectories": {"type": "boolean", "default": False},
            },
            "required": ["pattern"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> list[str]:
        pattern = require_arg(args, "pattern")
        return find_paths(
            ctx.cwd,
            pattern,
            ignore=ctx.ignore,
            include_hidden=flag(args, "includeHidden"),
            only_directories=flag(args, "onlyDirectories"),
        )


def find_paths(
    cwd: Path,
    pattern: str,
    *,
    ignore: IgnoreRuleset,
    include_hidden: bool = False,
    only_directories: bool = False,
) -> list[str]:
    """Working-directory-relative POSIX paths matching pattern, sorted."""
    try:
        rx = compile_glob(pattern)
    except re.error as e:
        raise ExecutionFailedError(f"Invalid glob pattern {pattern!r}: {e}") from None
    root = cwd.resolve()
    out: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        base = Path(dirpath).relative_to(root).as_posix()
        prefix = "" if base == "." else base + "/"
        kept: list[str] = []
        for d in sorted(dirnames):
            rel = prefix + d
            if not include_hidden and is_hidden(d):
                continue
            if ignore.match(rel) is not None:
                continue
            kept.append(d)
            if only_directories and rx.match(rel):
                out.append(rel)
        # prune in place so os.walk skips hidden and ignored subtrees
        dirnames[:] = kept
        if only_directories:
            continue
        for f in filenames:
            rel = prefix + f
            if not include_hidden and is_hidden(f):
                continue
            if ignore.match(rel) is not None:
                continue
            if rx.match(rel):
                out.append(rel)
    return sorted(out)
