"""Pipeline tuning knobs.

Defaults suit an interactive editor. Every value can be overridden from the
environment (or a ``.env`` file) so hosts and the CLI share one source:

- ``KOSEI_DEBOUNCE_MS``: quiet period before a lint scan (500)
- ``KOSEI_LLM_DEBOUNCE_MS``: quiet period before the model pass (8000)
- ``KOSEI_VIEWPORT_BUFFER``: paragraphs scanned either side of the view (2)
- ``KOSEI_CACHE_SIZE``: entries per token/finding cache (200)
- ``KOSEI_FALLBACK_PARAGRAPHS``: paragraphs scanned when none are visible (5)
- ``KOSEI_VALIDATION_CONCURRENCY``: parallel validation requests (3)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineSettings:
    debounce_ms: int = 500
    llm_debounce_ms: int = 8_000
    viewport_buffer: int = 2
    cache_size: int = 200
    fallback_paragraphs: int = 5
    validation_concurrency: int = 3

    def __post_init__(self) -> None:
        if self.cache_size < 1:
            raise ValueError("cache_size must be at least 1")
        if self.validation_concurrency < 1:
            raise ValueError("validation_concurrency must be at least 1")
        for name in ("debounce_ms", "llm_debounce_ms", "viewport_buffer", "fallback_paragraphs"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")

    @classmethod
    def from_env(cls, dotenv_path: str | Path | None = None) -> "PipelineSettings":
        if dotenv_path is not None:
            load_dotenv(dotenv_path=Path(dotenv_path))
        else:
            load_dotenv()

        defaults = cls()
        return cls(
            debounce_ms=_read_int_env("KOSEI_DEBOUNCE_MS", default=defaults.debounce_ms),
            llm_debounce_ms=_read_int_env("KOSEI_LLM_DEBOUNCE_MS", default=defaults.llm_debounce_ms),
            viewport_buffer=_read_int_env("KOSEI_VIEWPORT_BUFFER", default=defaults.viewport_buffer),
            cache_size=_read_int_env("KOSEI_CACHE_SIZE", default=defaults.cache_size),
            fallback_paragraphs=_read_int_env(
                "KOSEI_FALLBACK_PARAGRAPHS", default=defaults.fallback_paragraphs
            ),
            validation_concurrency=_read_int_env(
                "KOSEI_VALIDATION_CONCURRENCY", default=defaults.validation_concurrency
            ),
        )


def _read_int_env(var_name: str, *, default: int) -> int:
    raw = os.environ.get(var_name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        LOGGER.warning("Ignoring %s=%r: not an integer", var_name, raw)
        return default
