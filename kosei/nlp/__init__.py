"""Tokenization and word statistics."""

from __future__ import annotations

from .analyzer import AnalyzerUnavailableError, FugashiAnalyzer, MorphologicalAnalyzer
from .frequency import (
    FrequencyOptions,
    WordEntry,
    WordFrequencyResult,
    analyze_word_frequency,
    count_word_frequency,
    merge_frequency_results,
)
from .tokenizer_service import TokenizationService

__all__ = [
    "AnalyzerUnavailableError",
    "FrequencyOptions",
    "FugashiAnalyzer",
    "MorphologicalAnalyzer",
    "TokenizationService",
    "WordEntry",
    "WordFrequencyResult",
    "analyze_word_frequency",
    "count_word_frequency",
    "merge_frequency_results",
]
