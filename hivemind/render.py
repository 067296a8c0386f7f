"""Markdown rendering for worker answers.

Rendering happens in two phases. ``placeholder`` returns escaped text that is
safe to show immediately; ``render`` produces the real HTML once scoring and
unwrapping are done. Both always start from the raw worker text, never from
previously produced HTML.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from markdown_it import MarkdownIt

from hivemind.languages import LanguageClassifier
from hivemind.models import NormalizedContent
from hivemind.sanitize import escape_placeholder, strip_reasoning
from hivemind.unwrap import process_nested_markdown


def build_markdown(options: Dict[str, Any] | None = None) -> MarkdownIt:
    """GitHub-style markdown-it parser: tables, strikethrough, hard breaks, smart quotes.

    No heading ids are generated and no highlight callback is set; code
    highlighting is a separate pass over the inserted document.
    """
    opts = options or {}
    md = MarkdownIt(
        "commonmark",
        {
            "html": bool(opts.get("html", False)),
            "breaks": bool(opts.get("breaks", True)),
            "typographer": bool(opts.get("typographer", True)),
            "highlight": None,
        },
    ).enable("table").enable("strikethrough")
    if md.options.get("typographer"):
        md.enable(["replacements", "smartquotes"])
    return md


class MarkdownRenderer:
    def __init__(
        self,
        options: Dict[str, Any] | None = None,
        classifier: LanguageClassifier | None = None,
    ) -> None:
        self.md = build_markdown(options)
        self.classifier = classifier or LanguageClassifier()

    def clean(self, raw: Optional[str]) -> str:
        return process_nested_markdown(strip_reasoning(raw))

    def placeholder(self, raw: Optional[str]) -> str:
        return escape_placeholder(raw)

    def render(self, raw: Optional[str]) -> str:
        return self.md.render(self.clean(raw))

    def fence_languages(self, cleaned: str) -> List[str]:
        tags: List[str] = []
        for token in self.md.parse(cleaned):
            if token.type not in ("fence", "code_block"):
                continue
            info = (token.info or "").strip().split()
            tags.append(info[0].lower() if info else self.classifier.classify(token.content))
        return tags

    def normalize(self, raw: Optional[str]) -> NormalizedContent:
        cleaned = self.clean(raw)
        return NormalizedContent(
            cleaned_text=cleaned,
            rendered_html=self.md.render(cleaned),
            detected_language_tags=tuple(self.fence_languages(cleaned)),
        )
