"""Utility modules shared across the pipeline."""

from __future__ import annotations

from .cancellation import CancellationToken, OperationCancelledError, run_cancellable
from .hashing import hash_string
from .lru_cache import BoundedCache, CacheStats

__all__ = [
    "BoundedCache",
    "CacheStats",
    "CancellationToken",
    "OperationCancelledError",
    "hash_string",
    "run_cancellable",
]
