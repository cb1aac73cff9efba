from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Iterable

from ..errors import IgnoredPathError, MissingArgumentsError, PathEscapeError
from .wildcard import wildcard_match


def resolve_path(cwd: Path, path_str: str) -> Path:
    if not isinstance(path_str, str):
        raise MissingArgumentsError(f"Path must be a string, got: {path_str!r}")
    cwd = cwd.resolve()
    try:
        p = Path(path_str).expanduser()
        if not p.is_absolute():
            p = cwd / p
        p = p.resolve()
    except (ValueError, RuntimeError, OSError) as e:
        raise PathEscapeError(f"Invalid path {path_str!r}: {e}") from None
    try:
        p.relative_to(cwd)
    except ValueError:
        raise PathEscapeError(f"Path is outside the working directory: {path_str}") from None
    return p


def relative_posix(cwd: Path, path: Path) -> str:
    """Working-directory-relative POSIX path; "." for the directory itself."""
    return path.resolve().relative_to(cwd.resolve()).as_posix()


def read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


def is_hidden(name: str) -> bool:
    return name.startswith(".")


@dataclass(frozen=True)
class IgnoreRuleset:
    """Glob-like exclusions from the `ignore_patterns` config key.

    Plain patterns match a run of whole path segments ("node_modules" hides
    "node_modules" and "web/node_modules/x" but not "node_modules_old").
    Patterns with `*` match the relative path, or one of its ancestors, as a
    whole.
    """

    patterns: tuple[str, ...] = field(default_factory=tuple)

    @staticmethod
    def from_config(patterns: Iterable[str] | None) -> "IgnoreRuleset":
        return IgnoreRuleset(tuple(p for p in (patterns or []) if isinstance(p, str) and p.strip()))

    def match(self, rel_path: str) -> str | None:
        """Return the first pattern matching rel_path, or None."""
        rel = rel_path.strip("/")
        if not rel or rel == ".":
            return None
        parts = PurePosixPath(rel).parts
        prefixes = ["/".join(parts[: i + 1]) for i in range(len(parts))]
        for pattern in self.patterns:
            pat = pattern.strip().strip("/")
            if pat.startswith("./"):
                pat = pat[2:]
            if "*" in pat:
                if any(wildcard_match(pat, prefix) for prefix in prefixes):
                    return pattern
                continue
            seg = PurePosixPath(pat).parts
            width = len(seg)
            if any(tuple(parts[i : i + width]) == seg for i in range(len(parts) - width + 1)):
                return pattern
        return None

    def check(self, rel_path: str) -> None:
        pattern = self.match(rel_path)
        if pattern is not None:
            raise IgnoredPathError(f"Path matches ignore pattern: {pattern}")
