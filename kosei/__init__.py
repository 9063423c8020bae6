"""kosei: incremental Japanese prose linting pipeline."""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = [
    "linting",
    "llm",
    "models",
    "nlp",
    "prompt",
    "scheduler",
    "utils",
    "validation",
]
