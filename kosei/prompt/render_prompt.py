"""Render prompt templates in kosei/prompt/promptFiles using pystache.

Templates may pull in partials (``{{> shared_rules}}``). Partial files that
wrap their content in a ```markdown fence have the fence stripped so they
read well in an editor and still render cleanly.

Usage:
    python -m kosei.prompt.render_prompt [template_filename] [context.json]
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pystache

PROMPTS_DIR = Path(__file__).parent / "promptFiles"

# Map of template to required partials
TEMPLATE_PARTIALS: dict[str, list[str]] = {
    "finding_validator.md": ["shared_rules"],
    "homophone_detection.md": ["shared_rules"],
}


def _read_prompt(name: str) -> str:
    p = PROMPTS_DIR / name
    if not p.exists():
        raise FileNotFoundError(f"Prompt file not found: {p}")
    return p.read_text(encoding="utf-8")


def _strip_code_fences(s: str) -> str:
    """Strip a single leading and trailing code-fence block if present.

    Handles fences like ``` or ```` optionally followed by a language tag.
    """
    lines = s.splitlines()
    if not lines:
        return s
    first = lines[0].lstrip()
    last = lines[-1].lstrip()
    if first.startswith("```"):
        lines = lines[1:]
    if lines and last.startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()


def render_template(template_name: str, context: dict | None = None) -> str:
    """Render ``template_name`` with its partials.

    Values are inserted verbatim; prompts are plain text, not HTML.
    """

    template = _strip_code_fences(_read_prompt(template_name))

    partials = {}
    for partial_name in TEMPLATE_PARTIALS.get(template_name, []):
        partials[partial_name] = _strip_code_fences(_read_prompt(f"{partial_name}.md"))

    renderer = pystache.Renderer(partials=partials, escape=lambda u: u)
    return renderer.render(template, context or {}).strip()


def _load_context(path: str) -> dict:
    return json.loads(Path(path).read_text(encoding="utf-8"))


if __name__ == "__main__":
    tpl = sys.argv[1] if len(sys.argv) > 1 else "finding_validator.md"
    ctx = None
    if len(sys.argv) > 2:
        ctx = _load_context(sys.argv[2])
    print(render_template(tpl, ctx))
