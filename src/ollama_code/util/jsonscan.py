from __future__ import annotations

import codecs
import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

NORMAL = "normal"
IN_STRING = "in_string"
ESCAPED = "escaped"


class BraceScanner:
    """Brace-depth tracker that ignores braces inside JSON strings.

    States: normal, in-string, escaped. Quotes only open a string while inside
    an object, so stray quotes in surrounding prose do not derail the scan.
    """

    def __init__(self) -> None:
        self.state = NORMAL
        self.depth = 0

    def reset(self) -> None:
        self.state = NORMAL
        self.depth = 0

    def step(self, ch: str) -> bool:
        """Consume one character; True when a top-level object just closed."""
        if self.state == ESCAPED:
            self.state = IN_STRING
            return False
        if self.state == IN_STRING:
            if ch == "\\":
                self.state = ESCAPED
            elif ch == '"':
                self.state = NORMAL
            return False
        if ch == '"':
            if self.depth > 0:
                self.state = IN_STRING
        elif ch == "{":
            self.depth += 1
        elif ch == "}" and self.depth > 0:
            self.depth -= 1
            return self.depth == 0
        return False


def object_spans(text: str) -> list[tuple[int, int]]:
    """(start, end) of every balanced `{...}` in text, nested ones included, sorted by start.

    One pass: unclosed braces stay on the stack and never force a rescan.
    """
    scanner = BraceScanner()
    opened: list[int] = []
    spans: list[tuple[int, int]] = []
    for i, ch in enumerate(text):
        depth = scanner.depth
        scanner.step(ch)
        if scanner.depth > depth:
            opened.append(i)
        elif scanner.depth < depth:
            spans.append((opened.pop(), i + 1))
    spans.sort()
    return spans


class JsonStreamDecoder:
    """Incremental decoder for a byte stream of concatenated JSON objects.

    Objects may span or share chunk boundaries (including split UTF-8
    sequences); each balanced object is parsed on its own and invalid ones
    are dropped.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._scanner = BraceScanner()
        self._pending = ""
        self._start: int | None = None

    def feed(self, data: bytes | str) -> list[Any]:
        text = self._decoder.decode(data) if isinstance(data, bytes) else data
        out: list[Any] = []
        offset = len(self._pending)
        self._pending += text
        for i in range(offset, len(self._pending)):
            ch = self._pending[i]
            if self._scanner.depth == 0 and ch == "{":
                self._start = i
            if self._scanner.step(ch) and self._start is not None:
                raw = self._pending[self._start : i + 1]
                self._start = None
                try:
                    out.append(json.loads(raw))
                except json.JSONDecodeError:
                    logger.debug("Skipping malformed stream object: %.200s", raw)
        if self._start is None:
            self._pending = ""
        else:
            self._pending = self._pending[self._start :]
            self._start = 0
        return out

    def close(self) -> list[Any]:
        """Flush the byte decoder; a dangling partial object is discarded."""
        out = self.feed(self._decoder.decode(b"", final=True))
        if self._pending:
            logger.debug("Discarding incomplete stream object: %.200s", self._pending)
        self._pending = ""
        self._start = None
        self._scanner.reset()
        return out
