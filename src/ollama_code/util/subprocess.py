from __future__ import annotations
import subprocess
from dataclasses import dataclass
from typing import Sequence, Optional

@dataclass
class CmdResult:
    returncode: int
    stdout: str
    stderr: str

def run_cmd(cmd: str | Sequence[str], cwd: str, timeout: Optional[float] = 120, *, shell: bool = False) -> CmdResult:
    """Run a command capturing both streams.

    Raises subprocess.TimeoutExpired (the child is killed first) and OSError
    when the program cannot be spawned; callers translate those.
    """
    p = subprocess.run(
        cmd if shell else list(cmd),
        cwd=cwd,
        text=True,
        capture_output=True,
        timeout=timeout,
        shell=shell,
        errors="replace",
    )
    return CmdResult(p.returncode, p.stdout, p.stderr)
