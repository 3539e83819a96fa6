"""Runtime configuration read from environment variables."""
from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_MODEL = "llama3-70b-8192"
DEFAULT_API_URL = "https://api.groq.com/openai/v1/chat/completions"
DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_CORS_ORIGINS: tuple[str, ...] = (
    "http://localhost:3000",
    "http://localhost:3001",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:3001",
)


@dataclass(frozen=True, slots=True)
class DraftingConfig:
    """Settings for the text generator backend and the HTTP service.

    An empty ``api_key`` means no generator is configured and the drafting
    operations fall back to their deterministic mock output.
    """

    api_key: str = ""
    model: str = DEFAULT_MODEL
    api_url: str = DEFAULT_API_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    templates_path: Path | None = None
    cors_origins: tuple[str, ...] = field(default=DEFAULT_CORS_ORIGINS)

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> DraftingConfig:
        """Build a config from ``GROQ_API_KEY`` and ``CLAUSEDRAFT_*`` variables."""
        env = os.environ if environ is None else environ

        raw_timeout = env.get("CLAUSEDRAFT_TIMEOUT", "").strip()
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT_SECONDS
        except ValueError as exc:
            raise ValueError(f"CLAUSEDRAFT_TIMEOUT must be a number, got {raw_timeout!r}") from exc

        raw_templates = env.get("CLAUSEDRAFT_TEMPLATES", "").strip()
        raw_origins = env.get("CLAUSEDRAFT_CORS_ORIGINS", "").strip()
        origins = (
            tuple(o.strip() for o in raw_origins.split(",") if o.strip())
            if raw_origins
            else DEFAULT_CORS_ORIGINS
        )

        return cls(
            api_key=env.get("GROQ_API_KEY", "").strip(),
            model=env.get("CLAUSEDRAFT_MODEL", "").strip() or DEFAULT_MODEL,
            api_url=env.get("CLAUSEDRAFT_API_URL", "").strip() or DEFAULT_API_URL,
            timeout_seconds=timeout,
            templates_path=Path(raw_templates) if raw_templates else None,
            cors_origins=origins,
        )
