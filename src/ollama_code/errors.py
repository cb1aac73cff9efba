from __future__ import annotations


class ToolError(RuntimeError):
    """Base class for failures of a single tool invocation.

    These never end the session: the conversation loop turns them into a
    "tool failed" message the model can react to.
    """


class UnknownToolError(ToolError):
    pass


class PermissionDeniedError(ToolError):
    pass


class PathEscapeError(ToolError):
    pass


class IgnoredPathError(ToolError):
    pass


class NotFoundError(ToolError):
    pass


class ContentNotFoundError(ToolError):
    pass


class InvalidRangeError(ToolError):
    pass


class MissingArgumentsError(ToolError):
    pass


class BlockedCommandError(ToolError):
    pass


class ExecutionFailedError(ToolError):
    pass


class NotARepositoryError(ToolError):
    pass


class UnsupportedOperationError(ToolError):
    pass


class NetworkError(RuntimeError):
    """The Ollama server could not be reached or answered with an error."""
