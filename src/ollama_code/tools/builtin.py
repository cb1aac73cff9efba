from __future__ import annotations

from .registry import ToolRegistry

from .builtin_tools.file_read import ReadFileTool
from .builtin_tools.file_edit import EditFileTool
from .builtin_tools.file_write import WriteFileTool
from .builtin_tools.listdir import ListDirTool
from .builtin_tools.grep_tool import GrepTool
from .builtin_tools.glob_tool import GlobTool
from .builtin_tools.bash_tool import BashTool
from .builtin_tools.git_tool import GitTool

def build_builtin_registry() -> ToolRegistry:
    return ToolRegistry([
        ReadFileTool(),
        EditFileTool(),
        WriteFileTool(),
        ListDirTool(),
        GrepTool(),
        GlobTool(),
        BashTool(),
        GitTool(),
    ])
