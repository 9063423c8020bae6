"""Command-line entrypoint for the kosei Japanese prose linter."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from bisect import bisect_right
from pathlib import Path
from typing import Sequence

from kosei.config import PipelineSettings
from kosei.linting import (
    PRESETS,
    RULE_CATEGORIES,
    RULE_GUIDELINE_MAP,
    RULE_NAMES_JA,
    RuleRunner,
    build_default_rules,
)
from kosei.llm.provider import LLMProviderConfigurationError, ModelClient
from kosei.models import ChangeReason, CorrectionConfig, CorrectionModeId, Finding, Paragraph
from kosei.nlp import FugashiAnalyzer, TokenizationService, analyze_word_frequency
from kosei.nlp.frequency import WordFrequencyResult, merge_frequency_results
from kosei.scheduler import LintScheduler
from kosei.validation import ContextualPass, FindingValidator

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Lint a Japanese text file. Each line is treated as one paragraph.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        help="UTF-8 text file to check.",
    )
    parser.add_argument(
        "--preset",
        default="standard",
        choices=list(PRESETS),
        help="Rule preset to start from (default: standard).",
    )
    parser.add_argument(
        "--mode",
        default=CorrectionModeId.NOVEL.value,
        choices=CorrectionModeId.all_values(),
        help="Correction mode describing the genre of the text (default: novel).",
    )
    parser.add_argument(
        "--list-rules",
        action="store_true",
        help="List all available rules and exit.",
    )
    parser.add_argument(
        "--frequency",
        type=int,
        nargs="?",
        const=20,
        default=None,
        metavar="N",
        help="Also print the N most frequent words (default N: 20).",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Confirm findings and run homophone detection with the configured LLM providers.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print findings as JSON instead of text.",
    )
    parser.add_argument(
        "--dictionary-dir",
        default=None,
        help="MeCab dictionary directory (defaults to the bundled IPAdic).",
    )
    parser.add_argument(
        "--dotenv",
        default=None,
        help="Path to a .env file with KOSEI_*, LLM_* and provider settings.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING).",
    )
    return parser


def print_rules() -> None:
    print("Available rules:")
    for _, label, rule_ids in RULE_CATEGORIES:
        print(f"\n[{label}]")
        for rule_id in rule_ids:
            name_ja, description_ja = RULE_NAMES_JA[rule_id]
            print(f" - {rule_id}: {name_ja} ({description_ja})")


def build_paragraphs(text: str) -> list[Paragraph]:
    """One paragraph per line; positions count the newline between lines."""

    paragraphs = []
    position = 0
    for index, line in enumerate(text.splitlines()):
        paragraphs.append(Paragraph(text=line, start=position, index=index))
        position += len(line) + 1
    return paragraphs


def locate(finding: Finding, paragraphs: Sequence[Paragraph]) -> tuple[int, int]:
    """1-based line and column of a finding's start."""

    starts = [paragraph.start for paragraph in paragraphs]
    index = max(0, bisect_right(starts, finding.start) - 1)
    return index + 1, finding.start - paragraphs[index].start + 1


def format_finding(finding: Finding, paragraphs: Sequence[Paragraph]) -> str:
    line, column = locate(finding, paragraphs)
    message = finding.message_ja or finding.message
    text = f"{line}:{column} {finding.severity.value} [{finding.rule_id}] {message}"
    if finding.fix is not None:
        text += f" -> {finding.fix.replacement}"
    return text


async def lint_paragraphs(
    paragraphs: list[Paragraph],
    correction: CorrectionConfig,
    *,
    settings: PipelineSettings,
    dictionary_dir: str | None,
    client: ModelClient | None = None,
) -> tuple[list[Finding], TokenizationService]:
    runner = RuleRunner(build_default_rules(include_contextual=client is not None))
    runner.set_guideline_map(RULE_GUIDELINE_MAP)
    tokenizer = TokenizationService(
        FugashiAnalyzer(), dictionary_dir=dictionary_dir, cache_size=settings.cache_size
    )

    contextual = None
    if client is not None:
        contextual = ContextualPass(
            runner,
            client,
            validator=FindingValidator(client, concurrency=settings.validation_concurrency),
            debounce_ms=0,
        )

    collected: list[Finding] = []

    def on_findings(findings: list[Finding], pending: bool) -> None:
        collected[:] = findings

    def on_error(exc: Exception) -> None:
        print(f"Warning: morphological analysis unavailable ({exc}); only text rules were run.")

    scheduler = LintScheduler(
        runner,
        tokenizer,
        settings=settings,
        contextual=contextual,
        on_findings=on_findings,
        on_error=on_error,
    )
    try:
        scheduler.notify(ChangeReason.MODE_CHANGE, correction=correction)
        scheduler.notify(ChangeReason.TEXT_EDIT, paragraphs=paragraphs)
        await scheduler.run_scan(full=True)
        await scheduler.wait_idle(include_contextual=True)
    finally:
        scheduler.dispose()
    return collected, tokenizer


async def word_frequency(
    tokenizer: TokenizationService, paragraphs: Sequence[Paragraph]
) -> WordFrequencyResult:
    results = []
    for paragraph in paragraphs:
        if paragraph.text.strip():
            results.append(await analyze_word_frequency(tokenizer, paragraph.text))
    return merge_frequency_results(results)


def run_cli(args: argparse.Namespace) -> int:
    if args.list_rules:
        print_rules()
        return 0

    if not args.input:
        print("An input file is required (or use --list-rules).")
        return 1

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"Input file not found: {input_path}")
        return 1

    if args.frequency is not None and args.frequency < 1:
        print("--frequency must be at least 1")
        return 1

    settings = PipelineSettings.from_env(args.dotenv)
    correction = CorrectionConfig(mode=CorrectionModeId(args.mode), preset=args.preset)
    paragraphs = build_paragraphs(input_path.read_text(encoding="utf-8"))

    client: ModelClient | None = None
    if args.validate:
        # Imported here so the provider SDKs load only when asked for
        from kosei.llm.provider_registry import create_llm_service

        try:
            client = create_llm_service(dotenv_path=args.dotenv)
        except (LLMProviderConfigurationError, ValueError) as exc:
            print(f"Cannot use --validate: {exc}")
            return 1

    findings, tokenizer = asyncio.run(
        lint_paragraphs(
            paragraphs,
            correction,
            settings=settings,
            dictionary_dir=args.dictionary_dir,
            client=client,
        )
    )

    if args.json:
        print(json.dumps([f.to_payload() for f in findings], ensure_ascii=False, indent=2))
    else:
        for finding in findings:
            print(format_finding(finding, paragraphs))
        print(f"\n{len(findings)} finding(s) in {len(paragraphs)} paragraph(s).")

    if args.frequency is not None:
        try:
            result = asyncio.run(word_frequency(tokenizer, paragraphs))
        except Exception as exc:
            print(f"Word frequency unavailable: {exc}")
            return 2
        print(f"\nTop {args.frequency} words ({result.unique_words} unique, {result.total_words} total):")
        for entry in result.words[: args.frequency]:
            print(f"  {entry.word}\t{entry.pos}\t{entry.count}")

    return 0


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return run_cli(args)


if __name__ == "__main__":
    raise SystemExit(main())
