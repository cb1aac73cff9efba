from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Callable

from ..errors import NetworkError
from ..util.jsonscan import JsonStreamDecoder

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]

_READ_CHUNK = 8192


@dataclass
class OllamaClient:
    """
    Minimal client for the Ollama HTTP API (/api/chat, /api/tags, /api/embeddings).
    Chat replies are plain text; tool use is negotiated in the text itself.
    """
    base_url: str
    model: str
    timeout: float = 300.0
    temperature: float = 0.2
    max_tokens: int | None = None

    def _url(self, path: str) -> str:
        return self.base_url.rstrip("/") + path

    def _open(self, path: str, payload: dict[str, Any] | None = None):
        if payload is None:
            req = urllib.request.Request(self._url(path), method="GET")
        else:
            data = json.dumps(payload).encode("utf-8")
            req = urllib.request.Request(
                self._url(path),
                data=data,
                headers={"Content-Type": "application/json"},
                method="POST",
            )
        try:
            return urllib.request.urlopen(req, timeout=self.timeout)
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace") if hasattr(e, "read") else ""
            raise NetworkError(f"Ollama API error {e.code}: {e.reason}" + (f"\n{body}" if body else "")) from e
        except urllib.error.URLError as e:
            raise NetworkError(f"Cannot reach Ollama at {self.base_url}: {e.reason}") from e
        except OSError as e:
            raise NetworkError(f"Cannot reach Ollama at {self.base_url}: {e}") from e

    def _get_json(self, path: str, payload: dict[str, Any] | None = None) -> dict[str, Any]:
        with self._open(path, payload) as resp:
            raw = resp.read().decode("utf-8", errors="replace")
        try:
            obj = json.loads(raw)
        except json.JSONDecodeError as e:
            raise NetworkError(f"Invalid JSON from Ollama: {e}") from e
        if isinstance(obj, dict) and obj.get("error"):
            raise NetworkError(f"Ollama API error: {obj['error']}")
        return obj

    def chat_completion(
        self,
        messages: list[dict[str, Any]],
        on_progress: ProgressCallback | None = None,
    ) -> str:
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "stream": on_progress is not None,
            "options": {"temperature": self.temperature},
        }
        if self.max_tokens:
            payload["options"]["num_predict"] = int(self.max_tokens)
        logger.debug("POST /api/chat model=%s messages=%d stream=%s", self.model, len(messages), payload["stream"])

        if on_progress is None:
            obj = self._get_json("/api/chat", payload)
            return str((obj.get("message") or {}).get("content") or "")

        # --- Streaming mode ---
        # Ollama streams newline-delimited objects of the form
        #   {"message": {"role": "assistant", "content": "<delta>"}, "done": false}
        # ending with an object carrying "done": true.
        decoder = JsonStreamDecoder()
        parts: list[str] = []

        def _handle(obj: Any) -> bool:
            if not isinstance(obj, dict):
                return False
            if obj.get("error"):
                raise NetworkError(f"Ollama API error: {obj['error']}")
            delta = (obj.get("message") or {}).get("content")
            if delta:
                parts.append(str(delta))
                on_progress("".join(parts))
            return bool(obj.get("done"))

        with self._open("/api/chat", payload) as resp:
            done = False
            while not done:
                try:
                    chunk = resp.read1(_READ_CHUNK)
                except OSError as e:
                    raise NetworkError(f"Connection to Ollama lost: {e}") from e
                if not chunk:
                    break
                for obj in decoder.feed(chunk):
                    if _handle(obj):
                        done = True
                        break
            if not done:
                for obj in decoder.close():
                    _handle(obj)
        return "".join(parts)

    def list_models(self) -> list[dict[str, Any]]:
        obj = self._get_json("/api/tags")
        return list(obj.get("models") or [])

    def generate_embeddings(self, text: str) -> list[float]:
        obj = self._get_json("/api/embeddings", {"model": self.model, "prompt": text})
        return [float(x) for x in (obj.get("embedding") or [])]
