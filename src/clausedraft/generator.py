"""Text generation backends for the drafting operations.

Design:
- ``TextGenerator`` is the abstract interface: system + user prompt in,
  raw model text out (markdown or, with ``json_mode``, a JSON object).
- ``GroqTextGenerator`` talks to an OpenAI-compatible chat-completions
  endpoint (Groq by default).
- ``MockTextGenerator`` returns canned responses and records its calls.
- ``build_text_generator`` returns ``None`` when no API key is configured;
  callers then use the deterministic fallbacks in ``drafting``.
"""
from __future__ import annotations

import logging
import urllib.error
import urllib.request
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import orjson

from clausedraft.config import DraftingConfig
from clausedraft.errors import GenerationError
from clausedraft.io_utils import dumps_json, loads_json

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GenerationRequest:
    """One prompt sent to a generator."""

    system: str
    prompt: str
    json_mode: bool = False


# ---------------------------------------------------------------------------
# Interface
# ---------------------------------------------------------------------------

class TextGenerator(ABC):
    """Abstract interface for chat-style text generation."""

    @abstractmethod
    def generate(self, *, system: str, prompt: str, json_mode: bool = False) -> str:
        """Return the model's text for one system + user prompt.

        Parameters
        ----------
        system:
            System message setting the model's role.
        prompt:
            User message.
        json_mode:
            Ask the backend to constrain output to a JSON object.

        Raises
        ------
        GenerationError
            The backend could not produce a response.
        """

    @abstractmethod
    def model_version(self) -> str:
        """Return the model identifier (e.g., 'llama3-70b-8192')."""


# ---------------------------------------------------------------------------
# Mock backend (for tests and offline use)
# ---------------------------------------------------------------------------

class MockTextGenerator(TextGenerator):
    """Canned-response generator.

    Responses are returned in order; the last one repeats once the list is
    exhausted. Every request is appended to ``calls``.
    """

    def __init__(
        self,
        responses: list[str] | str = "",
        *,
        version: str = "mock-v1",
        error: Exception | None = None,
    ) -> None:
        self._responses = [responses] if isinstance(responses, str) else list(responses)
        self._version = version
        self._error = error
        self.calls: list[GenerationRequest] = []

    def generate(self, *, system: str, prompt: str, json_mode: bool = False) -> str:
        self.calls.append(GenerationRequest(system=system, prompt=prompt, json_mode=json_mode))
        if self._error is not None:
            raise GenerationError(str(self._error)) from self._error
        if not self._responses:
            return ""
        if len(self._responses) > 1:
            return self._responses.pop(0)
        return self._responses[0]

    def model_version(self) -> str:
        return self._version


# ---------------------------------------------------------------------------
# API-backed backend
# ---------------------------------------------------------------------------

class GroqTextGenerator(TextGenerator):
    """Generator backed by an OpenAI-compatible chat-completions API.

    Parameters
    ----------
    api_key:
        Bearer token for the API.
    model_name:
        Model identifier sent with every request.
    api_url:
        Chat-completions endpoint URL.
    timeout:
        Socket timeout in seconds for one request.
    """

    def __init__(
        self,
        *,
        api_key: str,
        model_name: str,
        api_url: str,
        timeout: float,
    ) -> None:
        if not api_key:
            raise ValueError("API key required: pass api_key= or set GROQ_API_KEY")
        self._api_key = api_key
        self._model_name = model_name
        self._api_url = api_url
        self._timeout = timeout

    def _payload(self, system: str, prompt: str, json_mode: bool) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": self._model_name,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
        }
        if json_mode:
            body["response_format"] = {"type": "json_object"}
        return body

    def generate(self, *, system: str, prompt: str, json_mode: bool = False) -> str:
        req = urllib.request.Request(
            self._api_url,
            data=dumps_json(self._payload(system, prompt, json_mode)),
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self._api_key}",
            },
            method="POST",
        )
        try:
            with urllib.request.urlopen(req, timeout=self._timeout) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as exc:
            raise GenerationError(f"{self._model_name}: HTTP {exc.code} from text generator") from exc
        except (urllib.error.URLError, TimeoutError) as exc:
            raise GenerationError(f"{self._model_name}: text generator unreachable ({exc})") from exc

        return parse_chat_completion(raw)

    def model_version(self) -> str:
        return self._model_name


def parse_chat_completion(raw: bytes | str) -> str:
    """Extract ``choices[0].message.content`` from a chat-completions body."""
    try:
        envelope = loads_json(raw)
        content = envelope["choices"][0]["message"]["content"]
    except (orjson.JSONDecodeError, KeyError, IndexError, TypeError) as exc:
        raise GenerationError(f"malformed chat-completions response: {exc}") from exc
    if not isinstance(content, str):
        raise GenerationError("chat-completions response content is not a string")
    return content


def build_text_generator(config: DraftingConfig) -> TextGenerator | None:
    """Return the configured backend, or ``None`` when no API key is set."""
    if not config.has_api_key:
        log.info("No GROQ_API_KEY configured; drafting operations use mock output")
        return None
    log.info("Text generator: %s via %s", config.model, config.api_url)
    return GroqTextGenerator(
        api_key=config.api_key,
        model_name=config.model,
        api_url=config.api_url,
        timeout=config.timeout_seconds,
    )
