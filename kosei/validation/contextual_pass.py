"""The slow, model-backed pass that runs behind the fast lint scan.

After the scheduler commits a scan it hands the pass a snapshot of the
document. Once the document has been quiet for the debounce interval the
pass does two jobs:

1. asks the model to confirm or dismiss findings that have no verdict yet;
2. runs the contextual rules over the document's sentences.

Each job's results are cached per paragraph text and the ``on_update``
callback is invoked so the host can re-render. A new snapshot cancels the
pass in flight; only one pass ever runs at a time.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Mapping, Sequence

from ..linting.helpers import split_into_sentences
from ..linting.runner import RuleRunner
from ..llm.controller import ModelController
from ..llm.provider import ModelClient
from ..models import Finding, Paragraph, SentenceSpan, ValidationState
from ..utils import BoundedCache, CancellationToken, OperationCancelledError
from .validator import FindingValidator

LOGGER = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 8_000
DEFAULT_CACHE_SIZE = 200

UpdateCallback = Callable[[], None]


def build_document_sentences(
    paragraphs: Sequence[Paragraph],
) -> tuple[list[SentenceSpan], list[tuple[int, Paragraph]]]:
    """Split every paragraph into sentences on one shared text axis.

    Paragraph texts are laid end to end with a one-character separator, so
    sentence spans never straddle paragraphs. Returns the sentences and the
    ``(base, paragraph)`` pairs needed to map spans back.
    """

    sentences: list[SentenceSpan] = []
    bases: list[tuple[int, Paragraph]] = []
    base = 0
    for paragraph in paragraphs:
        bases.append((base, paragraph))
        for sentence in split_into_sentences(paragraph.text):
            sentences.append(
                SentenceSpan(sentence.text, base + sentence.start, base + sentence.end)
            )
        base += len(paragraph.text) + 1
    return sentences, bases


def group_by_paragraph(
    findings: Sequence[Finding], bases: Sequence[tuple[int, Paragraph]]
) -> dict[str, list[Finding]]:
    """Map shared-axis findings back to paragraph-relative spans, keyed by text."""

    grouped: dict[str, list[Finding]] = {paragraph.text: [] for _, paragraph in bases}
    for finding in findings:
        for base, paragraph in bases:
            if base <= finding.start and finding.end <= base + len(paragraph.text):
                grouped[paragraph.text].append(finding.shifted(-base))
                break
        else:
            LOGGER.debug("Dropping contextual finding outside any paragraph: %s", finding.rule_id)
    return grouped


class ContextualPass:
    """Debounced, cancellable validation and contextual-rule pass."""

    def __init__(
        self,
        runner: RuleRunner,
        client: ModelClient,
        *,
        validator: FindingValidator | None = None,
        controller: ModelController | None = None,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        cache_size: int = DEFAULT_CACHE_SIZE,
        on_update: UpdateCallback | None = None,
        enabled: bool = True,
        validation_enabled: bool = True,
        logger: logging.Logger | None = None,
    ) -> None:
        self.runner = runner
        self._client = client
        self.validator = validator if validator is not None else FindingValidator(client)
        self.controller = controller
        self.debounce_ms = debounce_ms
        self.on_update = on_update
        self.enabled = enabled
        self.validation_enabled = validation_enabled
        self._contextual: BoundedCache[str, list[Finding]] = BoundedCache(cache_size)
        self._task: asyncio.Task[None] | None = None
        self._token: CancellationToken | None = None
        self._model_unready = False
        self._pending_model: str | None = None
        self._disposed = False
        self.logger = logger or LOGGER

    # ------------------------------------------------------------------
    # State queried by the scheduler while rendering
    # ------------------------------------------------------------------

    @property
    def client(self) -> ModelClient:
        return self._client

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def is_available(self) -> bool:
        return self.enabled and not self._disposed and self._client.is_available()

    def is_validating(self) -> bool:
        """True while findings should be held back until the model has seen them."""

        return self.validation_enabled and not self._model_unready and self.is_available()

    def needs_validation(self, finding: Finding) -> bool:
        config = self.runner.get_config(finding.rule_id)
        return config is None or not config.skip_llm_validation

    def state_of(self, finding: Finding, paragraph_text: str) -> ValidationState:
        if not self.needs_validation(finding):
            return ValidationState.CONFIRMED
        outcome = self.validator.cached_outcome(finding, paragraph_text)
        if outcome is None:
            return ValidationState.PENDING
        return ValidationState.CONFIRMED if outcome else ValidationState.DISMISSED

    def contextual_findings(self, paragraph_text: str) -> list[Finding]:
        return list(self._contextual.get(paragraph_text) or [])

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def schedule(
        self,
        paragraphs: Sequence[Paragraph],
        findings_by_text: Mapping[str, Sequence[Finding]],
    ) -> None:
        """Start (or restart) the debounce for a new document snapshot."""

        if not self.is_available():
            return
        self.cancel()
        token = CancellationToken()
        self._token = token
        snapshot = list(paragraphs)
        findings = {text: list(items) for text, items in findings_by_text.items()}
        self._task = asyncio.ensure_future(self._debounced(snapshot, findings, token))

    def cancel(self) -> None:
        if self._token is not None:
            self._token.cancel()
            self._token = None
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait_idle(self) -> None:
        """Wait for the pass in flight, if any, to finish."""

        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    def set_client(self, client: ModelClient) -> None:
        """Switch model clients; verdicts from the previous model are dropped."""

        self.cancel()
        self._client = client
        self.validator.client = client
        self.clear_validation_cache()

    def set_model(self, model_id: str) -> None:
        """Select ``model_id``; it is loaded when the next pass starts."""

        self.cancel()
        self._pending_model = model_id
        self.clear_validation_cache()

    def clear_validation_cache(self) -> None:
        self.validator.clear_cache()
        self._model_unready = False

    def clear_contextual_cache(self) -> None:
        self._contextual.clear()

    def dispose(self) -> None:
        self.cancel()
        self._disposed = True
        self.on_update = None

    # ------------------------------------------------------------------
    # The pass itself
    # ------------------------------------------------------------------

    async def _debounced(
        self,
        paragraphs: list[Paragraph],
        findings_by_text: dict[str, list[Finding]],
        token: CancellationToken,
    ) -> None:
        await asyncio.sleep(self.debounce_ms / 1000)
        if token.cancelled:
            return
        try:
            await self._apply_pending_model()
            if self.controller is not None:
                await self.controller.request(
                    lambda: self._run(paragraphs, findings_by_text, token)
                )
            else:
                await self._run(paragraphs, findings_by_text, token)
        except OperationCancelledError:
            self.logger.debug("Contextual pass cancelled")
        except Exception:
            self.logger.exception("Contextual pass failed")

    async def _run(
        self,
        paragraphs: list[Paragraph],
        findings_by_text: dict[str, list[Finding]],
        token: CancellationToken,
    ) -> None:
        if not await self._model_ready():
            self.logger.info("Model %s not ready; showing findings unvalidated", self._client.name)
            self._model_unready = True
            self._notify()
            return

        if self.validation_enabled:
            await self._validate(findings_by_text, token)
            token.raise_if_cancelled()
            self._notify()

        if self.runner.has_contextual_rules():
            await self._run_contextual(paragraphs, token)
            token.raise_if_cancelled()
            self._notify()

    async def _apply_pending_model(self) -> None:
        model_id, self._pending_model = self._pending_model, None
        if model_id is None:
            return
        self.logger.info("Switching contextual model to %s", model_id)
        if self.controller is not None:
            await self.controller.switch_model(model_id)
        else:
            await self._client.load_model(model_id)

    async def _model_ready(self) -> bool:
        if not self._client.is_available():
            return False
        # The controller loads the model on demand
        if self.controller is not None:
            return True
        try:
            return await self._client.is_model_loaded()
        except Exception as exc:
            self.logger.warning("Could not query model state: %s", exc)
            return False

    async def _validate(
        self, findings_by_text: Mapping[str, Sequence[Finding]], token: CancellationToken
    ) -> None:
        pending = [
            (finding, text)
            for text, findings in findings_by_text.items()
            for finding in findings
            if self.needs_validation(finding) and not self.validator.has_outcome(finding, text)
        ]
        if not pending:
            return
        self.logger.debug("Validating %d findings", len(pending))
        await self.validator.validate(pending, token)

    async def _run_contextual(self, paragraphs: Sequence[Paragraph], token: CancellationToken) -> None:
        todo = [
            paragraph
            for paragraph in paragraphs
            if paragraph.text.strip() and not self._contextual.has(paragraph.text)
        ]
        if not todo:
            return
        sentences, bases = build_document_sentences(todo)
        findings = await self.runner.run_contextual(sentences, self._client, token)
        # run_contextual returns [] on cancellation; do not cache that
        token.raise_if_cancelled()
        for text, items in group_by_paragraph(findings, bases).items():
            self._contextual.set(text, items)

    def _notify(self) -> None:
        if self.on_update is None:
            return
        try:
            self.on_update()
        except Exception:
            self.logger.exception("Contextual pass update callback failed")
