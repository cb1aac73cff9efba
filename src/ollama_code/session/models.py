from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Literal

Role = Literal["system", "user", "assistant"]

@dataclass
class Message:
    role: Role
    content: str

    def to_ollama(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.content}

@dataclass
class Conversation:
    """Ordered chat history for one REPL session. The system prompt is not stored here."""
    messages: list[Message] = field(default_factory=list)

    def append(self, message: Message) -> None:
        self.messages.append(message)

    def add(self, role: Role, content: str) -> Message:
        m = Message(role=role, content=content)
        self.messages.append(m)
        return m

    def clear(self) -> None:
        self.messages.clear()

    def compact(self, keep: int = 10) -> int:
        """Drop all but the last `keep` messages; returns how many were removed."""
        if keep <= 0:
            removed = len(self.messages)
            self.messages.clear()
            return removed
        removed = max(0, len(self.messages) - keep)
        if removed:
            del self.messages[:removed]
        return removed

    def estimated_tokens(self, role: Role | None = None) -> int:
        # rough: ~4 characters per token, rounded up per message
        return sum(-(-len(m.content) // 4) for m in self.messages if role is None or m.role == role)

    def exchanges(self) -> int:
        return sum(1 for m in self.messages if m.role == "assistant")

    def to_payload(self, system_prompt: str | None = None) -> list[dict[str, Any]]:
        out: list[dict[str, Any]] = []
        if system_prompt:
            out.append({"role": "system", "content": system_prompt})
        out.extend(m.to_ollama() for m in self.messages)
        return out

    def __len__(self) -> int:
        return len(self.messages)
