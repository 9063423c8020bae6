"""Keeps lint annotations in step with a live document.

One :class:`LintScheduler` serves one document. The host reports changes
through :meth:`LintScheduler.notify`; the scheduler debounces them, lints
only the paragraphs that matter (visible ones, unless a full scan is due),
and hands back document-absolute annotations.

Every scheduled scan takes a new version number. A scan that finds the
version has moved on after any ``await`` drops its work, so only the newest
scan ever commits. Results are cached per paragraph *text*, so an edit only
costs the paragraphs it touched.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Iterable, Sequence

from ..config import PipelineSettings
from ..linting.modes import active_guidelines, get_correction_mode, resolve_rule_configs
from ..linting.runner import RuleRunner
from ..models import (
    ChangeReason,
    CorrectionConfig,
    DocumentParagraph,
    Finding,
    IgnoredFinding,
    Paragraph,
    RuleConfig,
    Token,
    ValidationState,
    Viewport,
)
from ..nlp.tokenizer_service import TokenizationService
from ..utils import BoundedCache, hash_string
from ..validation.contextual_pass import ContextualPass
from .annotations import Annotation, select_targets

LOGGER = logging.getLogger(__name__)

AnnotationsCallback = Callable[[list[Annotation]], None]
FindingsCallback = Callable[[list[Finding], bool], None]
ErrorCallback = Callable[[Exception], None]


def is_ignored(
    finding: Finding, matched_text: str, paragraph_text: str, ignored: Sequence[IgnoredFinding]
) -> bool:
    """True when an ignore record covers ``finding``.

    A record matches on rule id and exact text; a record with a context only
    applies to the paragraph whose fingerprint it holds.
    """

    if not ignored:
        return False
    fingerprint: str | None = None
    for record in ignored:
        if record.rule_id != finding.rule_id or record.text != matched_text:
            continue
        if record.context is None:
            return True
        if fingerprint is None:
            fingerprint = hash_string(paragraph_text)
        if record.context == fingerprint:
            return True
    return False


class LintScheduler:
    """Debounced, viewport-aware lint scheduling for one document."""

    def __init__(
        self,
        runner: RuleRunner,
        tokenizer: TokenizationService | None = None,
        *,
        settings: PipelineSettings | None = None,
        contextual: ContextualPass | None = None,
        on_annotations: AnnotationsCallback | None = None,
        on_findings: FindingsCallback | None = None,
        on_error: ErrorCallback | None = None,
        ignored: Iterable[IgnoredFinding] = (),
        logger: logging.Logger | None = None,
    ) -> None:
        self.runner = runner
        self.tokenizer = tokenizer
        self.settings = settings or PipelineSettings()
        self.contextual = contextual
        self.on_annotations = on_annotations
        self.on_findings = on_findings
        self.on_error = on_error
        self.logger = logger or LOGGER

        self._paragraphs: list[Paragraph] = []
        self._viewport: Viewport | None = None
        self._ignored: list[IgnoredFinding] = list(ignored)
        self._enabled = True
        self._disposed = False

        self._tokens: BoundedCache[str, list[Token]] = BoundedCache(self.settings.cache_size)
        self._findings: BoundedCache[str, list[Finding]] = BoundedCache(self.settings.cache_size)
        # Lexical-only results for paragraphs whose tokenization failed
        self._partial: BoundedCache[str, list[Finding]] = BoundedCache(self.settings.cache_size)
        # paragraph index -> (paragraph text, findings) from the last committed scan
        self._document_findings: dict[int, tuple[str, list[Finding]]] = {}

        self._version = 0
        self._committed_version = 0
        self._full_scan_pending = True
        self._error_reported = False
        self._debounce_task: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[Any]] = set()

        if contextual is not None:
            contextual.on_update = self.render

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def version(self) -> int:
        return self._version

    @property
    def committed_version(self) -> int:
        return self._committed_version

    @property
    def paragraphs(self) -> list[Paragraph]:
        return list(self._paragraphs)

    @property
    def viewport(self) -> Viewport | None:
        return self._viewport

    @property
    def ignored(self) -> list[IgnoredFinding]:
        return list(self._ignored)

    # ------------------------------------------------------------------
    # Inbound events
    # ------------------------------------------------------------------

    def notify(self, reason: ChangeReason | str, **payload: Any) -> None:
        """Report a change.

        Recognised payload keys: ``paragraphs`` and ``viewport`` (text and
        viewport changes), ``rule_configs``, ``guidelines``, ``correction``
        (mode changes), ``ignored`` and ``model_id`` or ``client``.
        """

        if self._disposed:
            return
        reason = ChangeReason(reason)
        self.logger.debug("notify(%s)", reason.value)

        if reason is ChangeReason.TEXT_EDIT:
            self._paragraphs = list(payload.get("paragraphs", self._paragraphs))
            if "viewport" in payload:
                self._viewport = payload["viewport"]
            self._schedule()

        elif reason is ChangeReason.VIEWPORT_CHANGE:
            self._viewport = payload.get("viewport", self._viewport)
            self._schedule()

        elif reason is ChangeReason.RULE_CONFIG_CHANGE:
            configs: dict[str, RuleConfig] = payload.get("rule_configs") or {}
            self.runner.apply_configs(configs)
            self._clear_finding_caches()
            self._full_scan_pending = True
            self._schedule()

        elif reason is ChangeReason.GUIDELINE_CHANGE:
            if "guidelines" in payload:
                self.runner.set_active_guidelines(payload["guidelines"])
            self._clear_finding_caches()
            if self.contextual is not None:
                self.contextual.clear_validation_cache()
            self._full_scan_pending = True
            self._schedule()

        elif reason in (ChangeReason.MANUAL_REFRESH, ChangeReason.MODE_CHANGE):
            correction = payload.get("correction")
            if correction is not None:
                self._apply_correction(correction)
            self._reset()
            if self._enabled:
                self._schedule()

        elif reason is ChangeReason.IGNORED_CORRECTION:
            self._ignored = list(payload.get("ignored", self._ignored))
            self.render()

        elif reason is ChangeReason.MODEL_CHANGE:
            if self.contextual is None:
                return
            if "client" in payload:
                self.contextual.set_client(payload["client"])
            if payload.get("model_id"):
                self.contextual.set_model(payload["model_id"])
            self.contextual.clear_validation_cache()
            self.render()
            self._schedule_contextual()

    def _apply_correction(self, correction: CorrectionConfig) -> None:
        self._enabled = correction.enabled
        configs = resolve_rule_configs(correction, self.runner.get_registered_rules())
        self.runner.apply_configs(configs)
        self.runner.set_active_guidelines(active_guidelines(correction))
        self._ignored = list(correction.ignored_corrections)
        if self.contextual is not None:
            self.contextual.validator.style = get_correction_mode(correction.mode).llm_prompt_style_ja
            self.contextual.validation_enabled = correction.llm.validation_enabled

    def _reset(self) -> None:
        """Drop every cache and clear the rendered annotations right away."""

        if self._debounce_task is not None:
            self._debounce_task.cancel()
            self._debounce_task = None
        self._version += 1
        self._tokens.clear()
        self._clear_finding_caches()
        if self.tokenizer is not None:
            self.tokenizer.clear_cache()
        if self.contextual is not None:
            self.contextual.cancel()
            self.contextual.clear_validation_cache()
        self._error_reported = False
        self._full_scan_pending = True
        self._emit([], [], False)

    def _clear_finding_caches(self) -> None:
        self._findings.clear()
        self._partial.clear()
        self._document_findings = {}
        if self.contextual is not None:
            self.contextual.clear_contextual_cache()

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def _schedule(self) -> None:
        if self._disposed or not self._enabled:
            return
        self._version += 1
        version = self._version
        if self._debounce_task is not None:
            self._debounce_task.cancel()
        self._debounce_task = self._track(asyncio.ensure_future(self._debounced(version)))

    async def _debounced(self, version: int) -> None:
        await asyncio.sleep(self.settings.debounce_ms / 1000)
        self._debounce_task = None
        await self._scan(version)

    def _track(self, task: asyncio.Task[Any]) -> asyncio.Task[Any]:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def run_scan(self, *, full: bool = False) -> bool:
        """Scan now, skipping the debounce. Returns ``True`` if the scan committed."""

        if self._disposed or not self._enabled:
            return False
        if full:
            self._full_scan_pending = True
        if self._debounce_task is not None:
            self._debounce_task.cancel()
            self._debounce_task = None
        self._version += 1
        return await self._scan(self._version)

    async def wait_idle(self, *, include_contextual: bool = False) -> None:
        """Wait until no scan is scheduled or running."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        if include_contextual and self.contextual is not None:
            await self.contextual.wait_idle()

    def dispose(self) -> None:
        self._disposed = True
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        self._debounce_task = None
        if self.contextual is not None:
            self.contextual.dispose()
        self._tokens.clear()
        self._clear_finding_caches()

    # ------------------------------------------------------------------
    # The scan
    # ------------------------------------------------------------------

    def _stale(self, version: int) -> bool:
        return self._disposed or version != self._version

    async def _scan(self, version: int) -> bool:
        full = self._full_scan_pending
        paragraphs = list(self._paragraphs)
        targets = select_targets(
            paragraphs,
            self._viewport,
            full=full,
            buffer=self.settings.viewport_buffer,
            fallback=self.settings.fallback_paragraphs,
        )
        use_tokens = self.tokenizer is not None and self.runner.has_morphological_rules()

        for paragraph in targets:
            if self._findings.has(paragraph.text):
                continue
            findings, complete = await self._lint_paragraph(paragraph.text, use_tokens)
            if self._stale(version):
                self.logger.debug("Scan %d superseded", version)
                return False
            if complete:
                self._findings.set(paragraph.text, findings)
                self._partial.delete(paragraph.text)
            else:
                self._partial.set(paragraph.text, findings)

        document_findings = await self._run_document_rules(paragraphs, use_tokens, version)
        if document_findings is None or self._stale(version):
            self.logger.debug("Scan %d superseded", version)
            return False

        self._document_findings = document_findings
        self._committed_version = version
        if full:
            self._full_scan_pending = False
        self.render()
        self._schedule_contextual()
        return True

    async def _tokens_for(self, text: str) -> list[Token] | None:
        cached = self._tokens.get(text)
        if cached is not None:
            return cached
        if self.tokenizer is None:
            return None
        try:
            tokens = await self.tokenizer.tokenize(text)
        except Exception as exc:
            self._report_error(exc)
            return None
        self._tokens.set(text, tokens)
        return tokens

    async def _lint_paragraph(self, text: str, use_tokens: bool) -> tuple[list[Finding], bool]:
        if not use_tokens:
            return self.runner.run_all(text), True
        tokens = await self._tokens_for(text)
        if tokens is None:
            return self.runner.run_all(text), False
        return self.runner.run_all_with_tokens(text, tokens), True

    async def _run_document_rules(
        self, paragraphs: Sequence[Paragraph], use_tokens: bool, version: int
    ) -> dict[int, tuple[str, list[Finding]]] | None:
        if not self.runner.has_document_rules():
            return {}
        texts = {paragraph.index: paragraph.text for paragraph in paragraphs}

        if use_tokens:
            rows: list[DocumentParagraph] = []
            tokens_ok = True
            for paragraph in paragraphs:
                tokens = await self._tokens_for(paragraph.text)
                if self._stale(version):
                    return None
                if tokens is None:
                    tokens_ok = False
                    tokens = []
                rows.append(DocumentParagraph(paragraph.index, paragraph.text, tokens))
            if tokens_ok:
                results = self.runner.run_document_with_tokens(rows)
            else:
                results = self.runner.run_document(rows)
        else:
            results = self.runner.run_document(
                [DocumentParagraph(p.index, p.text) for p in paragraphs]
            )

        return {
            item.paragraph_index: (texts[item.paragraph_index], item.findings)
            for item in results
            if item.paragraph_index in texts
        }

    def _report_error(self, exc: Exception) -> None:
        if self._error_reported:
            self.logger.debug("Tokenization still failing: %s", exc)
            return
        self._error_reported = True
        self.logger.error("Tokenization failed; morphological rules are disabled: %s", exc)
        if self.on_error is not None:
            self.on_error(exc)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _schedule_contextual(self) -> None:
        if self.contextual is None or not self.contextual.is_available():
            return
        findings_by_text: dict[str, list[Finding]] = {}
        for paragraph in self._paragraphs:
            findings_by_text[paragraph.text] = self._paragraph_findings(paragraph)
        self.contextual.schedule(self._paragraphs, findings_by_text)

    def _paragraph_findings(self, paragraph: Paragraph) -> list[Finding]:
        findings: list[Finding] = []
        if self._findings.has(paragraph.text):
            findings.extend(self._findings.get(paragraph.text) or [])
        else:
            findings.extend(self._partial.get(paragraph.text) or [])
        document = self._document_findings.get(paragraph.index)
        if document is not None and document[0] == paragraph.text:
            findings.extend(document[1])
        return findings

    def render(self) -> None:
        """Rebuild annotations from the caches and push them to the host.

        Only cached results for the *current* paragraph texts are used, so
        every emitted span refers to text that exists right now.
        """

        if self._disposed:
            return
        if not self._enabled:
            self._emit([], [], False)
            return

        contextual = self.contextual
        gating = contextual is not None and contextual.is_validating()
        annotations: list[Annotation] = []
        rendered: list[Finding] = []
        pending = False

        for paragraph in self._paragraphs:
            candidates: list[tuple[Finding, ValidationState | None]] = []
            for finding in self._paragraph_findings(paragraph):
                state: ValidationState | None = None
                if gating:
                    state = contextual.state_of(finding, paragraph.text)  # type: ignore[union-attr]
                    if state is ValidationState.PENDING:
                        pending = True
                        continue
                    if state is ValidationState.DISMISSED:
                        continue
                candidates.append((finding, state))
            if contextual is not None:
                candidates.extend((f, None) for f in contextual.contextual_findings(paragraph.text))

            candidates.sort(key=lambda item: item[0].start)
            for finding, state in candidates:
                matched = paragraph.text[finding.start : finding.end]
                if is_ignored(finding, matched, paragraph.text, self._ignored):
                    continue
                placed = finding.with_updates(
                    start=paragraph.to_document(finding.start),
                    end=paragraph.to_document(finding.end),
                    original_text=matched,
                    validation_state=state,
                )
                rendered.append(placed)
                annotations.append(Annotation.from_finding(placed))

        self._emit(annotations, rendered, pending)

    def _emit(self, annotations: list[Annotation], findings: list[Finding], pending: bool) -> None:
        if self.on_annotations is not None:
            try:
                self.on_annotations(annotations)
            except Exception:
                self.logger.exception("on_annotations callback failed")
        if self.on_findings is not None:
            try:
                self.on_findings(findings, pending)
            except Exception:
                self.logger.exception("on_findings callback failed")
