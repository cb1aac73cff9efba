from __future__ import annotations

from dataclasses import dataclass

TRUNCATION_MARKER = "\n\n... (truncated) ...\n\n"


@dataclass(frozen=True)
class CompactionPolicy:
    """Knobs for keeping the prompt within a reasonable size."""

    # Messages kept by /compact.
    keep_messages: int = 10

    # Max characters for a single tool result folded back into the conversation.
    max_tool_result_chars: int = 12000

    # Model exchanges allowed for one user query, follow-ups included.
    max_steps: int = 25


def truncate_middle(text: str, limit: int) -> str:
    """Keep the head and tail of text so that it fits in roughly `limit` characters."""
    if limit <= 0 or len(text) <= limit:
        return text
    half = limit // 2
    return text[:half] + TRUNCATION_MARKER + text[-half:]
