from __future__ import annotations
from dataclasses import dataclass
from typing import Any
import logging
import re
import subprocess

from ..base import ToolSpec, ToolContext, require_arg
from ...errors import BlockedCommandError, ExecutionFailedError, MissingArgumentsError
from ...util.fs import resolve_path
from ...util.subprocess import run_cmd

DEFAULT_TIMEOUT_MS = 30000

# Matched as plain substrings anywhere in the command.
BLOCKED_SUBSTRINGS = (
    "rm -rf /", "rm -rf *", "rm -rf ~",
    ">>", ">", "|", ";", "&&", "||", "&",
)
# Matched as whole words so that e.g. "sync" does not trip "nc".
BLOCKED_PROGRAMS = ("wget", "curl", "nc", "ncat", "netcat")

_BLOCKED_PROGRAM_RX = re.compile(r"\b(?:" + "|".join(BLOCKED_PROGRAMS) + r")\b")
_RECURSIVE_RM = re.compile(r"^rm\s+(-r|-rf|--recursive|--force|-f)")
_RECURSIVE_RM_WITH_PATH = re.compile(r"^rm\s+(-r|-rf|--recursive|--force|-f).*/")
_FETCH_TO_SHELL = re.compile(r"^(curl|wget)\b.*\|\s*(bash|sh)\b")

logger = logging.getLogger(__name__)


def blocked_reason(command: str) -> str | None:
    """Why command is refused, or None. A blocklist, not a sandbox."""
    for blocked in BLOCKED_SUBSTRINGS:
        if blocked in command:
            return f"contains '{blocked}'"
    m = _BLOCKED_PROGRAM_RX.search(command)
    if m:
        return f"uses network tool '{m.group(0)}'"
    if _RECURSIVE_RM.match(command) and _RECURSIVE_RM_WITH_PATH.match(command):
        return "recursive or forced delete of a path"
    if _FETCH_TO_SHELL.match(command):
        return "pipes downloaded content into a shell"
    return None


@dataclass
class BashTool:
    spec: ToolSpec = ToolSpec(
        name="BashTool",
        description="Executes shell commands",
        requires_permission=True,
        risk="shell",
        parameters={
            "type": "object",
            "properties": {
                "command": {"type": "string", "description": "Single shell command; pipes, redirects and chaining are refused."},
                "cwd": {"type": "string", "description": "Directory to run in, relative to the working directory."},
                "timeout": {"type": "integer", "default": DEFAULT_TIMEOUT_MS, "description": "Timeout in milliseconds."},
            },
            "required": ["command"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> str:
        command = require_arg(args, "command").strip()
        if not command:
            raise MissingArgumentsError("Command is required")
        reason = blocked_reason(command)
        if reason is not None:
            raise BlockedCommandError(f"Command blocked for security reasons: {reason}")

        cwd = resolve_path(ctx.cwd, args["cwd"]) if args.get("cwd") else ctx.cwd.resolve()
        timeout_ms = args.get("timeout")
        if timeout_ms is None:
            timeout_ms = DEFAULT_TIMEOUT_MS
        if not isinstance(timeout_ms, (int, float)) or isinstance(timeout_ms, bool) or timeout_ms <= 0:
            raise MissingArgumentsError("Argument timeout must be a positive number of milliseconds")

        logger.debug("Running %r in %s (timeout %sms)", command, cwd, timeout_ms)
        try:
            res = run_cmd(command, cwd=str(cwd), timeout=timeout_ms / 1000, shell=True)
        except subprocess.TimeoutExpired:
            raise ExecutionFailedError(f"Command execution failed: timed out after {timeout_ms} ms") from None
        except (OSError, ValueError) as e:
            raise ExecutionFailedError(f"Command execution failed: {e}") from e

        if res.returncode != 0:
            detail = (res.stderr or res.stdout).strip()
            raise ExecutionFailedError(
                f"Command execution failed: exit code {res.returncode}" + (f"\n{detail}" if detail else "")
            )
        if res.stderr:
            return f"Command executed with warnings:\n{res.stderr}\nOutput:\n{res.stdout}"
        return res.stdout
