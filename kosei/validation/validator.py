"""Model-backed confirmation of individual findings.

Each finding is shown to the model with a short window of its paragraph and
the flagged text marked ``<<like this>>``. The model answers
``{"valid": true}`` or ``{"valid": false}``. Anything else keeps the
finding: a validator that cannot decide must not hide real issues.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Sequence

from ..linting.presets import RULE_NAMES_JA
from ..llm.json_utils import parse_json_response
from ..llm.provider import ModelClient
from ..models import Finding
from ..prompt.render_prompt import render_template
from ..utils import BoundedCache, CancellationToken, OperationCancelledError, hash_string

LOGGER = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 3
DEFAULT_CONTEXT_CHARS = 30
DEFAULT_MAX_TOKENS = 60
DEFAULT_CACHE_SIZE = 500


def outcome_key(finding: Finding, paragraph_text: str) -> str:
    """Cache key for a finding: paragraph fingerprint, rule and matched text."""

    matched = paragraph_text[finding.start : finding.end]
    return f"{hash_string(paragraph_text)}:{finding.rule_id}:{matched}"


def build_context(finding: Finding, paragraph_text: str, context_chars: int) -> str:
    before = paragraph_text[max(0, finding.start - context_chars) : finding.start]
    matched = paragraph_text[finding.start : finding.end]
    after = paragraph_text[finding.end : finding.end + context_chars]
    return f"...{before}<<{matched}>>{after}..."


def parse_validation_response(text: str) -> bool | None:
    """Return the model's verdict, or ``None`` when it cannot be read."""

    try:
        parsed = parse_json_response(text)
    except (ValueError, json.JSONDecodeError):
        return None
    if isinstance(parsed, list) and parsed:
        parsed = parsed[0]
    if isinstance(parsed, dict) and isinstance(parsed.get("valid"), bool):
        return parsed["valid"]
    return None


class FindingValidator:
    """Asks a model whether findings are genuine, caching each verdict."""

    def __init__(
        self,
        client: ModelClient,
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
        context_chars: int = DEFAULT_CONTEXT_CHARS,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        cache_size: int = DEFAULT_CACHE_SIZE,
        style: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.client = client
        self.concurrency = concurrency
        self.context_chars = context_chars
        self.max_tokens = max_tokens
        self.style = style
        self._outcomes: BoundedCache[str, bool] = BoundedCache(cache_size)
        # Findings kept because the model failed; asked again by the next pass
        self._unverified: BoundedCache[str, bool] = BoundedCache(cache_size, track_stats=False)
        self.logger = logger or LOGGER

    def cached_outcome(self, finding: Finding, paragraph_text: str) -> bool | None:
        key = outcome_key(finding, paragraph_text)
        outcome = self._outcomes.get(key)
        if outcome is None and self._unverified.has(key):
            return True
        return outcome

    def has_outcome(self, finding: Finding, paragraph_text: str) -> bool:
        return self._outcomes.has(outcome_key(finding, paragraph_text))

    def clear_cache(self) -> None:
        self._outcomes.clear()
        self._unverified.clear()

    def build_prompt(self, finding: Finding, paragraph_text: str) -> str:
        rule_name = RULE_NAMES_JA.get(finding.rule_id, (finding.rule_id, ""))[0]
        return render_template(
            "finding_validator.md",
            {
                "rule_name": rule_name,
                "message": finding.message_ja or finding.message,
                "context": build_context(finding, paragraph_text, self.context_chars),
                "style": self.style or "",
            },
        )

    async def validate_one(
        self,
        finding: Finding,
        paragraph_text: str,
        cancellation: CancellationToken | None = None,
    ) -> bool:
        """Return ``True`` to keep the finding.

        Raises:
            OperationCancelledError: if ``cancellation`` fires; nothing is cached.
        """

        key = outcome_key(finding, paragraph_text)
        cached = self._outcomes.get(key)
        if cached is not None:
            return cached

        prompt = self.build_prompt(finding, paragraph_text)
        self.logger.debug("[%s] Validation prompt:\n%s", finding.rule_id, prompt)
        try:
            result = await self.client.infer(
                prompt, cancellation=cancellation, max_tokens=self.max_tokens
            )
        except OperationCancelledError:
            raise
        except Exception as exc:
            self.logger.warning("Validation failed for %s: %s", finding.rule_id, exc)
            self._unverified.set(key, True)
            return True

        self.logger.debug("[%s] Validation response:\n%s", finding.rule_id, result.text)
        verdict = parse_validation_response(result.text)
        valid = True if verdict is None else verdict
        self._unverified.delete(key)
        self._outcomes.set(key, valid)
        return valid

    async def validate(
        self,
        items: Sequence[tuple[Finding, str]],
        cancellation: CancellationToken | None = None,
    ) -> list[bool]:
        """Validate ``(finding, paragraph_text)`` pairs, at most ``concurrency`` at a time.

        Results are returned in input order.

        Raises:
            OperationCancelledError: if ``cancellation`` fires before every
                pair has been checked.
        """

        if not items:
            return []
        semaphore = asyncio.Semaphore(self.concurrency)

        async def run(finding: Finding, paragraph_text: str) -> bool:
            async with semaphore:
                if cancellation is not None:
                    cancellation.raise_if_cancelled()
                return await self.validate_one(finding, paragraph_text, cancellation)

        tasks = [asyncio.ensure_future(run(finding, text)) for finding, text in items]
        try:
            return list(await asyncio.gather(*tasks))
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
