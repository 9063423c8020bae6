"""Rule registration, configuration and dispatch.

The runner owns one :class:`RuleConfig` per registered rule and hands each
rule only the input its variant needs. A failing rule is logged and
contributes nothing; the remaining rules still run.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Mapping, Sequence

from ..models import DocumentParagraph, Finding, ParagraphFindings, RuleConfig, SentenceSpan, Token
from ..utils import CancellationToken, OperationCancelledError
from .rule import DocumentRule, LexicalRule, MorphologicalRule, Rule, RuleKind

if TYPE_CHECKING:
    from ..llm.provider import ModelClient

LOGGER = logging.getLogger(__name__)


def _by_start(findings: list[Finding]) -> list[Finding]:
    # sorted() is stable, so findings at the same offset keep rule order
    return sorted(findings, key=lambda finding: finding.start)


class RuleRunner:
    def __init__(self, rules: Iterable[Rule] = (), *, logger: logging.Logger | None = None) -> None:
        self._rules: dict[str, Rule] = {}
        self._configs: dict[str, RuleConfig] = {}
        self._guideline_map: dict[str, list[str]] = {}
        self._active_guidelines: set[str] | None = None
        self._logger = logger or LOGGER
        for rule in rules:
            self.register_rule(rule)

    # ------------------------------------------------------------------
    # Registration and configuration
    # ------------------------------------------------------------------

    def register_rule(self, rule: Rule) -> None:
        """Register ``rule``; its default config is installed only if none exists yet."""

        self._rules[rule.id] = rule
        self._configs.setdefault(rule.id, rule.meta.default_config)

    def set_config(self, rule_id: str, config: RuleConfig) -> None:
        self._configs[rule_id] = config

    def get_config(self, rule_id: str) -> RuleConfig | None:
        return self._configs.get(rule_id)

    def apply_configs(self, configs: Mapping[str, RuleConfig]) -> None:
        for rule_id, config in configs.items():
            self.set_config(rule_id, config)

    def set_guideline_map(self, guideline_map: Mapping[str, Sequence[str]]) -> None:
        self._guideline_map = {rule_id: list(ids) for rule_id, ids in guideline_map.items()}

    def set_active_guidelines(self, guideline_ids: Iterable[str] | None) -> None:
        """``None`` lifts guideline scoping entirely."""

        self._active_guidelines = None if guideline_ids is None else set(guideline_ids)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_registered_rules(self) -> list[Rule]:
        return list(self._rules.values())

    def get_enabled_rules(self) -> list[Rule]:
        return [rule for rule in self._rules.values() if self._is_active(rule)]

    def has_morphological_rules(self) -> bool:
        return any(
            rule.kind is RuleKind.MORPHOLOGICAL
            or (isinstance(rule, DocumentRule) and rule.needs_tokens)
            for rule in self.get_enabled_rules()
        )

    def has_document_rules(self) -> bool:
        return any(rule.kind is RuleKind.DOCUMENT for rule in self.get_enabled_rules())

    def has_contextual_rules(self) -> bool:
        return any(rule.kind is RuleKind.CONTEXTUAL for rule in self.get_enabled_rules())

    def _is_active(self, rule: Rule) -> bool:
        config = self._configs.get(rule.id)
        if config is None or not config.enabled:
            return False
        if self._active_guidelines is None:
            return True
        mapped = self._guideline_map.get(rule.id)
        if not mapped:
            return True
        return any(guideline in self._active_guidelines for guideline in mapped)

    def _enabled_of(self, kind: RuleKind) -> list[Rule]:
        return [rule for rule in self.get_enabled_rules() if rule.kind is kind]

    # ------------------------------------------------------------------
    # Per-paragraph runs
    # ------------------------------------------------------------------

    def _run_lexical(self, rule: LexicalRule, text: str) -> list[Finding]:
        try:
            return list(rule.lint(text, self._configs[rule.id]))
        except Exception:
            self._logger.exception("Rule %s failed", rule.id)
            return []

    def _run_morphological(
        self, rule: MorphologicalRule, text: str, tokens: Sequence[Token]
    ) -> list[Finding]:
        try:
            return list(rule.lint(text, tokens, self._configs[rule.id]))
        except Exception:
            self._logger.exception("Rule %s failed", rule.id)
            return []

    def run_all(self, text: str) -> list[Finding]:
        """Run every enabled lexical rule over one paragraph."""

        findings: list[Finding] = []
        for rule in self._enabled_of(RuleKind.LEXICAL):
            findings.extend(self._run_lexical(rule, text))
        return _by_start(findings)

    def run(self, rule_id: str, text: str) -> list[Finding]:
        """Run a single lexical or morphological rule (without tokens)."""

        rule = self._rules.get(rule_id)
        if rule is None or not self._is_active(rule):
            return []
        if isinstance(rule, LexicalRule):
            return self._run_lexical(rule, text)
        if isinstance(rule, MorphologicalRule):
            return self._run_morphological(rule, text, ())
        return []

    def run_all_with_tokens(self, text: str, tokens: Sequence[Token]) -> list[Finding]:
        """Lexical plus morphological rules for one paragraph."""

        findings: list[Finding] = []
        for rule in self._enabled_of(RuleKind.LEXICAL):
            findings.extend(self._run_lexical(rule, text))
        for rule in self._enabled_of(RuleKind.MORPHOLOGICAL):
            findings.extend(self._run_morphological(rule, text, tokens))
        return _by_start(findings)

    # ------------------------------------------------------------------
    # Document runs
    # ------------------------------------------------------------------

    def _run_document_rules(
        self, paragraphs: Sequence[DocumentParagraph], *, with_tokens: bool
    ) -> list[ParagraphFindings]:
        grouped: dict[int, list[Finding]] = {}
        for rule in self._enabled_of(RuleKind.DOCUMENT):
            if rule.needs_tokens and not with_tokens:
                continue
            try:
                results = rule.lint(paragraphs, self._configs[rule.id])
            except Exception:
                self._logger.exception("Document rule %s failed", rule.id)
                continue
            for item in results:
                grouped.setdefault(item.paragraph_index, []).extend(item.findings)
        return [
            ParagraphFindings(paragraph_index=index, findings=_by_start(findings))
            for index, findings in sorted(grouped.items())
        ]

    def run_document(self, paragraphs: Sequence[DocumentParagraph]) -> list[ParagraphFindings]:
        """Document rules that work on raw text only."""

        return self._run_document_rules(paragraphs, with_tokens=False)

    def run_document_with_tokens(
        self, paragraphs: Sequence[DocumentParagraph]
    ) -> list[ParagraphFindings]:
        return self._run_document_rules(paragraphs, with_tokens=True)

    # ------------------------------------------------------------------
    # Contextual runs
    # ------------------------------------------------------------------

    async def run_contextual(
        self,
        sentences: Sequence[SentenceSpan],
        client: "ModelClient",
        cancellation: CancellationToken,
    ) -> list[Finding]:
        """Run model-backed rules in order; stops early once cancelled."""

        findings: list[Finding] = []
        for rule in self._enabled_of(RuleKind.CONTEXTUAL):
            if cancellation.cancelled:
                return []
            try:
                findings.extend(
                    await rule.lint(sentences, self._configs[rule.id], client, cancellation)
                )
            except OperationCancelledError:
                return []
            except Exception:
                self._logger.exception("Contextual rule %s failed", rule.id)
        return _by_start(findings)
