"""Extraction of tool-call directives from free-form model output.

The model is asked to emit `{"name": ..., "arguments": {...}}` either in a
fenced code block or inline. Its output is uncontrolled, so anything that
does not parse is skipped without complaint.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterator

from ..util.jsonscan import object_spans

logger = logging.getLogger(__name__)

_CODE_BLOCK = re.compile(r"```(?:json)?[ \t]*\r?\n(.*?)\r?\n[ \t]*```", re.DOTALL | re.IGNORECASE)


def canonical_arguments(arguments: dict[str, Any]) -> str:
    return json.dumps(arguments, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def tool_signature(name: str, arguments: dict[str, Any]) -> str:
    """Permission-memory key; identical calls always serialize identically."""
    return f"{name}({canonical_arguments(arguments)})"


@dataclass(frozen=True)
class ToolCallDirective:
    name: str
    arguments: dict[str, Any] = field(default_factory=dict, hash=False)

    @property
    def signature(self) -> str:
        return tool_signature(self.name, self.arguments)


def _to_directive(raw: str) -> ToolCallDirective | None:
    try:
        obj = json.loads(raw)
    except ValueError:
        logger.debug("Ignoring non-JSON candidate: %.120s", raw)
        return None
    if not isinstance(obj, dict):
        return None
    name = obj.get("name")
    arguments = obj.get("arguments")
    if not isinstance(name, str) or not name or not isinstance(arguments, dict):
        return None
    return ToolCallDirective(name=name, arguments=arguments)


def _from_code_blocks(text: str) -> Iterator[tuple[int, ToolCallDirective]]:
    for m in _CODE_BLOCK.finditer(text):
        directive = _to_directive(m.group(1).strip())
        if directive is not None:
            yield m.start(), directive


def _from_inline(text: str) -> Iterator[tuple[int, ToolCallDirective]]:
    covered = 0
    for start, end in object_spans(text):
        # objects nested in an accepted directive belong to it
        if start < covered:
            continue
        chunk = text[start:end]
        if '"name"' in chunk and '"arguments"' in chunk:
            directive = _to_directive(chunk)
            if directive is not None:
                yield start, directive
                covered = end


def parse_tool_calls(text: str) -> list[ToolCallDirective]:
    """Return directives in order of first appearance, without duplicates."""
    if not text:
        return []
    found = sorted(
        [*_from_code_blocks(text), *_from_inline(text)],
        key=lambda item: item[0],
    )
    seen: set[tuple[str, str]] = set()
    out: list[ToolCallDirective] = []
    for _, directive in found:
        key = (directive.name, canonical_arguments(directive.arguments))
        if key in seen:
            continue
        seen.add(key)
        out.append(directive)
    return out
