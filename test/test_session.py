from __future__ import annotations

import json

from ollama_code.compaction.policy import TRUNCATION_MARKER, truncate_middle
from ollama_code.events.store import EventStore
from ollama_code.session.models import Conversation


class TestConversation:

    def test_payload_puts_system_prompt_first(self):
        conv = Conversation()
        conv.add("user", "hi")
        conv.add("assistant", "hello")
        assert conv.to_payload("SYS") == [
            {"role": "system", "content": "SYS"},
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
        ]

    def test_compact(self):
        conv = Conversation()
        for i in range(4):
            conv.add("user", str(i))
        assert conv.compact(10) == 0
        assert conv.compact(2) == 2
        assert [m.content for m in conv.messages] == ["2", "3"]
        assert conv.compact(0) == 2 and len(conv) == 0

    def test_token_estimate_rounds_up(self):
        conv = Conversation()
        conv.add("user", "abcde")
        conv.add("assistant", "")
        assert conv.estimated_tokens() == 2
        assert conv.estimated_tokens("assistant") == 0
        assert conv.exchanges() == 1


class TestTruncateMiddle:

    def test_short_text_untouched(self):
        assert truncate_middle("abc", 10) == "abc"

    def test_keeps_head_and_tail(self):
        out = truncate_middle("H" * 50 + "T" * 50, 20)
        assert out == "H" * 10 + TRUNCATION_MARKER + "T" * 10


class TestEventStore:

    def test_appends_json_lines(self, tmp_path):
        store = EventStore.open("abc", directory=tmp_path)
        store.append("tool.call", {"tool": "LSTool", "args": {}})
        store.append("tool.result", {"tool": "LSTool", "elapsed_ms": 3})
        lines = [json.loads(l) for l in store.path.read_text(encoding="utf-8").splitlines()]
        assert store.path.name == "abc.jsonl"
        assert [l["type"] for l in lines] == ["tool.call", "tool.result"]
        assert lines[1]["data"]["elapsed_ms"] == 3

    def test_generated_session_ids_are_unique(self, tmp_path):
        assert EventStore.open(directory=tmp_path).session_id != EventStore.open(directory=tmp_path).session_id
