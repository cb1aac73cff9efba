from __future__ import annotations

import io
import json
import urllib.error
from unittest import mock

import pytest

from ollama_code.errors import NetworkError
from ollama_code.llm.ollama import OllamaClient


class FakeResponse:
    def __init__(self, chunks):
        self._chunks = list(chunks)

    def read1(self, n=-1):
        return self._chunks.pop(0) if self._chunks else b""

    def read(self):
        data = b"".join(self._chunks)
        self._chunks = []
        return data

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def ndjson(*objs):
    return b"".join(json.dumps(o, ensure_ascii=False).encode("utf-8") + b"\n" for o in objs)


@pytest.fixture
def client():
    return OllamaClient(base_url="http://ollama.test:11434/", model="codellama")


@pytest.fixture
def urlopen():
    with mock.patch("urllib.request.urlopen") as m:
        yield m


class TestChatCompletion:

    def test_non_streaming(self, client, urlopen):
        urlopen.return_value = FakeResponse([json.dumps({"message": {"role": "assistant", "content": "hi"}, "done": True}).encode()])
        assert client.chat_completion([{"role": "user", "content": "x"}]) == "hi"
        req = urlopen.call_args.args[0]
        assert req.full_url == "http://ollama.test:11434/api/chat"
        body = json.loads(req.data)
        assert body["model"] == "codellama" and body["stream"] is False

    def test_streaming_reassembles_split_chunks(self, client, urlopen):
        payload = ndjson(
            {"message": {"content": "Hel"}, "done": False},
            {"message": {"content": "lo wörld"}, "done": False},
            {"message": {"content": ""}, "done": True},
        )
        # split inside a JSON object and inside the two-byte "ö"
        cut1 = payload.index(b"lo w") + 2
        cut2 = payload.index("ö".encode()) + 1
        urlopen.return_value = FakeResponse([payload[:cut1], payload[cut1:cut2], payload[cut2:]])
        snapshots = []
        assert client.chat_completion([], on_progress=snapshots.append) == "Hello wörld"
        assert snapshots == ["Hel", "Hello wörld"]
        assert json.loads(urlopen.call_args.args[0].data)["stream"] is True

    def test_stream_error_object(self, client, urlopen):
        urlopen.return_value = FakeResponse([ndjson({"error": "model 'x' not found"})])
        with pytest.raises(NetworkError, match="not found"):
            client.chat_completion([], on_progress=lambda s: None)

    def test_http_error(self, client, urlopen):
        urlopen.side_effect = urllib.error.HTTPError(
            "http://ollama.test:11434/api/chat", 500, "Internal Server Error", {}, io.BytesIO(b"boom")
        )
        with pytest.raises(NetworkError, match="500"):
            client.chat_completion([])

    def test_connection_refused(self, client, urlopen):
        urlopen.side_effect = urllib.error.URLError(ConnectionRefusedError(111, "Connection refused"))
        with pytest.raises(NetworkError, match="Cannot reach Ollama"):
            client.chat_completion([])


class TestOtherEndpoints:

    def test_list_models(self, client, urlopen):
        urlopen.return_value = FakeResponse([json.dumps({"models": [{"name": "codellama:7b"}]}).encode()])
        assert client.list_models() == [{"name": "codellama:7b"}]
        assert urlopen.call_args.args[0].full_url.endswith("/api/tags")

    def test_embeddings(self, client, urlopen):
        urlopen.return_value = FakeResponse([json.dumps({"embedding": [0.5, 1, -2]}).encode()])
        assert client.generate_embeddings("hello") == [0.5, 1.0, -2.0]
        assert json.loads(urlopen.call_args.args[0].data) == {"model": "codellama", "prompt": "hello"}
