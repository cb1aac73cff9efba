from __future__ import annotations
from types import MappingProxyType
from typing import Iterable, Mapping

from ..errors import UnknownToolError
from .base import Tool, ToolSpec

class ToolRegistry:
    """Name-keyed, read-only catalogue of tools, fixed at construction."""

    def __init__(self, tools: Iterable[Tool]):
        items: dict[str, Tool] = {}
        for tool in tools:
            name = tool.spec.name
            if name in items:
                raise ValueError(f"Tool already registered: {name}")
            items[name] = tool
        self._tools: Mapping[str, Tool] = MappingProxyType(items)

    def lookup(self, name: str) -> Tool:
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(f"Unknown tool: {name}")
        return tool

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def descriptions(self) -> dict[str, str]:
        return {name: t.spec.description for name, t in self._tools.items()}

    def list_specs(self) -> list[ToolSpec]:
        return [t.spec for t in self._tools.values()]
