"""Tests for clausedraft.generator: mock and chat-completions backends."""
from __future__ import annotations

import urllib.error
import urllib.request
from typing import Any

import orjson
import pytest

from clausedraft.config import DraftingConfig
from clausedraft.errors import GenerationError
from clausedraft.generator import (
    GenerationRequest,
    GroqTextGenerator,
    MockTextGenerator,
    build_text_generator,
    parse_chat_completion,
)


def _completion(content: Any) -> bytes:
    return orjson.dumps({"choices": [{"message": {"role": "assistant", "content": content}}]})


class _FakeResponse:
    def __init__(self, body: bytes) -> None:
        self._body = body

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> _FakeResponse:
        return self

    def __exit__(self, *exc: object) -> None:
        return None


@pytest.fixture()
def groq() -> GroqTextGenerator:
    return GroqTextGenerator(
        api_key="test-key",
        model_name="llama3-70b-8192",
        api_url="https://example.test/v1/chat/completions",
        timeout=5.0,
    )


# ───────────────────── MockTextGenerator ─────────────────────────────


class TestMockTextGenerator:
    def test_default_returns_empty(self) -> None:
        assert MockTextGenerator().generate(system="s", prompt="p") == ""

    def test_responses_in_order_then_last_repeats(self) -> None:
        gen = MockTextGenerator(["one", "two"])
        assert gen.generate(system="s", prompt="p") == "one"
        assert gen.generate(system="s", prompt="p") == "two"
        assert gen.generate(system="s", prompt="p") == "two"

    def test_records_calls(self) -> None:
        gen = MockTextGenerator("{}")
        gen.generate(system="sys", prompt="hello", json_mode=True)
        assert gen.calls == [GenerationRequest(system="sys", prompt="hello", json_mode=True)]

    def test_error_wrapped(self) -> None:
        gen = MockTextGenerator(error=RuntimeError("boom"))
        with pytest.raises(GenerationError, match="boom"):
            gen.generate(system="s", prompt="p")
        assert len(gen.calls) == 1

    def test_version(self) -> None:
        assert MockTextGenerator(version="mock-v2").model_version() == "mock-v2"


# ───────────────────── parse_chat_completion ─────────────────────────


class TestParseChatCompletion:
    def test_extracts_content(self) -> None:
        assert parse_chat_completion(_completion("# Contract")) == "# Contract"

    def test_accepts_str(self) -> None:
        assert parse_chat_completion(_completion("x").decode()) == "x"

    def test_invalid_json(self) -> None:
        with pytest.raises(GenerationError):
            parse_chat_completion(b"not json")

    def test_no_choices(self) -> None:
        with pytest.raises(GenerationError):
            parse_chat_completion(b'{"choices": []}')

    def test_missing_message(self) -> None:
        with pytest.raises(GenerationError):
            parse_chat_completion(b'{"choices": [{}]}')

    def test_non_string_content(self) -> None:
        with pytest.raises(GenerationError, match="not a string"):
            parse_chat_completion(_completion(None))


# ───────────────────── GroqTextGenerator ─────────────────────────────


class TestGroqTextGenerator:
    def test_requires_api_key(self) -> None:
        with pytest.raises(ValueError, match="API key required"):
            GroqTextGenerator(api_key="", model_name="m", api_url="http://x", timeout=1.0)

    def test_request_shape(
        self, groq: GroqTextGenerator, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        seen: dict[str, Any] = {}

        def fake_urlopen(req: urllib.request.Request, timeout: float) -> _FakeResponse:
            seen["url"] = req.full_url
            seen["method"] = req.get_method()
            seen["auth"] = req.get_header("Authorization")
            seen["body"] = orjson.loads(req.data)  # type: ignore[arg-type]
            seen["timeout"] = timeout
            return _FakeResponse(_completion('{"analysis": []}'))

        monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)
        out = groq.generate(system="You are a lawyer.", prompt="Analyze", json_mode=True)

        assert out == '{"analysis": []}'
        assert seen["url"] == "https://example.test/v1/chat/completions"
        assert seen["method"] == "POST"
        assert seen["auth"] == "Bearer test-key"
        assert seen["timeout"] == 5.0
        body = seen["body"]
        assert body["model"] == "llama3-70b-8192"
        assert body["messages"] == [
            {"role": "system", "content": "You are a lawyer."},
            {"role": "user", "content": "Analyze"},
        ]
        assert body["response_format"] == {"type": "json_object"}

    def test_markdown_mode_has_no_response_format(
        self, groq: GroqTextGenerator, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        bodies: list[dict[str, Any]] = []

        def fake_urlopen(req: urllib.request.Request, timeout: float) -> _FakeResponse:
            bodies.append(orjson.loads(req.data))  # type: ignore[arg-type]
            return _FakeResponse(_completion("# Contract"))

        monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)
        assert groq.generate(system="s", prompt="p") == "# Contract"
        assert "response_format" not in bodies[0]

    def test_http_error(
        self, groq: GroqTextGenerator, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def fake_urlopen(req: urllib.request.Request, timeout: float) -> _FakeResponse:
            raise urllib.error.HTTPError(req.full_url, 429, "Too Many Requests", None, None)  # type: ignore[arg-type]

        monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)
        with pytest.raises(GenerationError, match="HTTP 429"):
            groq.generate(system="s", prompt="p")

    def test_unreachable(
        self, groq: GroqTextGenerator, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def fake_urlopen(req: urllib.request.Request, timeout: float) -> _FakeResponse:
            raise urllib.error.URLError("connection refused")

        monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)
        with pytest.raises(GenerationError, match="unreachable"):
            groq.generate(system="s", prompt="p")

    def test_timeout(
        self, groq: GroqTextGenerator, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def fake_urlopen(req: urllib.request.Request, timeout: float) -> _FakeResponse:
            raise TimeoutError("timed out")

        monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)
        with pytest.raises(GenerationError):
            groq.generate(system="s", prompt="p")

    def test_model_version(self, groq: GroqTextGenerator) -> None:
        assert groq.model_version() == "llama3-70b-8192"


# ───────────────────── build_text_generator ──────────────────────────


class TestBuildTextGenerator:
    def test_no_key_returns_none(self) -> None:
        assert build_text_generator(DraftingConfig()) is None

    def test_key_builds_groq(self) -> None:
        gen = build_text_generator(DraftingConfig(api_key="k", model="llama3-8b-8192"))
        assert isinstance(gen, GroqTextGenerator)
        assert gen.model_version() == "llama3-8b-8192"
