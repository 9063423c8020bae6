"""Tests for prompt template rendering with pystache."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from kosei.prompt.render_prompt import (
    TEMPLATE_PARTIALS,
    _read_prompt,
    _strip_code_fences,
    render_template,
)


class TestStripCodeFences:
    """Tests for _strip_code_fences helper."""

    def test_strip_triple_backticks(self) -> None:
        text = "```\nHello world\n```"
        assert _strip_code_fences(text) == "Hello world"

    def test_strip_quad_backticks(self) -> None:
        text = "````\nHello world\n````"
        assert _strip_code_fences(text) == "Hello world"

    def test_strip_with_language_tag(self) -> None:
        """Test stripping fences with language tag (e.g. ```markdown)."""
        text = "```markdown\nHello world\n```"
        assert _strip_code_fences(text) == "Hello world"

    def test_no_fences(self) -> None:
        assert _strip_code_fences("Hello world") == "Hello world"

    def test_only_opening_fence(self) -> None:
        assert _strip_code_fences("```\nHello world") == "Hello world"

    def test_empty_string(self) -> None:
        assert _strip_code_fences("") == ""


class TestReadPrompt:
    def test_reads_existing_template(self) -> None:
        assert "{{> shared_rules}}" in _read_prompt("finding_validator.md")

    def test_missing_template_raises(self) -> None:
        with pytest.raises(FileNotFoundError, match="Prompt file not found"):
            _read_prompt("does_not_exist.md")

    def test_every_partial_exists(self) -> None:
        for template, partials in TEMPLATE_PARTIALS.items():
            _read_prompt(template)
            for partial in partials:
                _read_prompt(f"{partial}.md")


class TestRenderTemplate:
    def test_finding_validator_includes_partial_and_context(self) -> None:
        rendered = render_template(
            "finding_validator.md",
            {
                "rule_name": "重ね言葉",
                "message": "「頭痛が痛い」は重複表現です",
                "context": "...今日は<<頭痛が痛い>>ので...",
            },
        )

        assert rendered.startswith("/no_think")
        assert "あなたは日本語校正の専門家です。" in rendered
        assert "- ルール: 重ね言葉" in rendered
        # Values are not HTML-escaped
        assert "<<頭痛が痛い>>" in rendered
        assert "```" not in rendered

    def test_optional_style_section(self) -> None:
        without = render_template("finding_validator.md", {"rule_name": "r", "message": "m", "context": "c"})
        with_style = render_template(
            "finding_validator.md",
            {"rule_name": "r", "message": "m", "context": "c", "style": "小説の文体です。"},
        )

        assert "小説の文体です。" not in without
        assert "小説の文体です。" in with_style

    def test_homophone_lists_sentences(self) -> None:
        rendered = render_template(
            "homophone_detection.md",
            {"sentences": [{"index": 0, "text": "意思が固い"}, {"index": 1, "text": "異常です"}]},
        )

        assert "[0] 意思が固い" in rendered
        assert "[1] 異常です" in rendered

    def test_render_without_context(self) -> None:
        rendered = render_template("homophone_detection.md")

        assert "## テキスト" in rendered
        assert "{{" not in rendered
