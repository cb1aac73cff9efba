from __future__ import annotations
from dataclasses import dataclass
from typing import Any
import subprocess

from ..base import ToolSpec, ToolContext, flag, require_arg
from ...errors import (
    ExecutionFailedError,
    MissingArgumentsError,
    NotARepositoryError,
    UnsupportedOperationError,
)
from ...util.fs import resolve_path, relative_posix
from ...util.subprocess import run_cmd

GIT_TIMEOUT = 120
OPERATIONS = ("status", "log", "add", "commit", "push", "pull", "branch", "diff", "blame")
_FIELD_SEP = "\x1f"


def _git(ctx: ToolContext, *argv: str) -> str:
    try:
        res = run_cmd(["git", *argv], cwd=str(ctx.cwd), timeout=GIT_TIMEOUT)
    except subprocess.TimeoutExpired:
        raise ExecutionFailedError(f"Git operation failed: git {argv[0]} timed out") from None
    except (OSError, ValueError) as e:
        raise ExecutionFailedError(f"Git operation failed: {e}") from e
    if res.returncode != 0:
        raise ExecutionFailedError(f"Git operation failed: {(res.stderr or res.stdout).strip()}")
    return res.stdout


def _is_repo(ctx: ToolContext) -> bool:
    try:
        res = run_cmd(["git", "rev-parse", "--is-inside-work-tree"], cwd=str(ctx.cwd), timeout=GIT_TIMEOUT)
    except (OSError, subprocess.TimeoutExpired):
        return False
    return res.returncode == 0 and res.stdout.strip() == "true"


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


def _contained(ctx: ToolContext, paths: list[str]) -> list[str]:
    return [relative_posix(ctx.cwd, resolve_path(ctx.cwd, p)) for p in paths]


@dataclass
class GitTool:
    spec: ToolSpec = ToolSpec(
        name="GitTool",
        description="Performs Git operations",
        requires_permission=True,
        risk="git",
        parameters={
            "type": "object",
            "properties": {
                "operation": {"type": "string", "enum": list(OPERATIONS)},
                "params": {
                    "type": "object",
                    "description": (
                        "log: maxCount; add: files|all; commit: message; push/pull: remote, branch, options; "
                        "branch: create|checkout; diff: from, to, files; blame: file"
                    ),
                },
            },
            "required": ["operation"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> Any:
        operation = require_arg(args, "operation").lower()
        params = args.get("params") or {}
        if not isinstance(params, dict):
            raise MissingArgumentsError("Argument params must be an object")
        if not _is_repo(ctx):
            raise NotARepositoryError("Not a git repository")

        handler = getattr(self, f"_op_{operation}", None) if operation in OPERATIONS else None
        if handler is None:
            raise UnsupportedOperationError(f"Unsupported git operation: {args['operation']}")
        return handler(ctx, params)

    def _op_status(self, ctx: ToolContext, params: dict[str, Any]) -> str:
        return _git(ctx, "status", "--short", "--branch")

    def _op_log(self, ctx: ToolContext, params: dict[str, Any]) -> list[dict[str, str]]:
        try:
            max_count = int(params.get("maxCount") or 10)
        except (TypeError, ValueError, OverflowError):
            raise MissingArgumentsError(f"maxCount must be a number, got: {params.get('maxCount')!r}") from None
        fmt = _FIELD_SEP.join(["%H", "%an", "%aI", "%s"])
        out = _git(ctx, "log", f"--max-count={max_count}", f"--pretty=format:{fmt}")
        entries = []
        for line in out.splitlines():
            if not line.strip():
                continue
            commit, author, date, message = (line.split(_FIELD_SEP) + ["", "", "", ""])[:4]
            entries.append({"hash": commit, "author": author, "date": date, "message": message})
        return entries

    def _op_add(self, ctx: ToolContext, params: dict[str, Any]) -> str:
        if flag(params, "all"):
            _git(ctx, "add", ".")
        else:
            files = _as_list(params.get("files"))
            if not files:
                raise MissingArgumentsError("Files parameter is required for add operation")
            _git(ctx, "add", "--", *_contained(ctx, files))
        return self._op_status(ctx, params)

    def _op_commit(self, ctx: ToolContext, params: dict[str, Any]) -> str:
        message = params.get("message")
        if not message:
            raise MissingArgumentsError("Commit message is required")
        return _git(ctx, "commit", "-m", str(message))

    def _op_push(self, ctx: ToolContext, params: dict[str, Any]) -> str:
        remote = params.get("remote") or "origin"
        branch = params.get("branch") or "main"
        return _git(ctx, "push", *_as_list(params.get("options")), str(remote), str(branch))

    def _op_pull(self, ctx: ToolContext, params: dict[str, Any]) -> str:
        remote = params.get("remote") or "origin"
        branch = params.get("branch") or "main"
        return _git(ctx, "pull", *_as_list(params.get("options")), str(remote), str(branch))

    def _op_branch(self, ctx: ToolContext, params: dict[str, Any]) -> Any:
        if params.get("create"):
            _git(ctx, "checkout", "-b", str(params["create"]))
            return f"Created and switched to branch {params['create']}"
        if params.get("checkout"):
            _git(ctx, "checkout", str(params["checkout"]))
            return f"Switched to branch {params['checkout']}"
        names = _git(ctx, "branch", "--list", "--format=%(refname:short)").split()
        current = _git(ctx, "branch", "--show-current").strip()
        return {"current": current, "all": names}

    def _op_diff(self, ctx: ToolContext, params: dict[str, Any]) -> str:
        argv = ["diff", str(params.get("from") or "HEAD")]
        if params.get("to"):
            argv.append(str(params["to"]))
        files = _as_list(params.get("files"))
        if files:
            argv += ["--", *_contained(ctx, files)]
        return _git(ctx, *argv)

    def _op_blame(self, ctx: ToolContext, params: dict[str, Any]) -> str:
        file = params.get("file")
        if not file:
            raise MissingArgumentsError("File parameter is required for blame operation")
        return _git(ctx, "blame", "--", *_contained(ctx, [str(file)]))
