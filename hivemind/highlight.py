"""Post-insertion syntax highlighting of rendered code blocks.

Once rendered HTML has been handed to the display layer, its code blocks are
not necessarily visible right away. ``RenderCompletionCoordinator`` polls the
document a bounded number of times, sleeping ``attempt * base_delay_ms``
between attempts, and highlights the first batch of unprocessed blocks it
sees. The loop is bounded by attempt count only.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional
import asyncio
import html
import logging
import re

from hivemind.config import Config
from hivemind.languages import NO_HIGHLIGHT, LanguageClassifier

logger = logging.getLogger(__name__)

CODE_BLOCK = re.compile(r"<pre><code(?P<attrs>[^>]*)>(?P<body>[\s\S]*?)</code></pre>")
LANGUAGE_CLASS = re.compile(r"\blanguage-(?P<lang>[\w+#.-]+)")
PROCESSED_ATTR = 'data-highlighted="yes"'

Highlighter = Callable[[str, str], str]


def escape_highlighter(code: str, language: str) -> str:
    """Plain-text highlighter: escaped code, tokenizing is left to the client."""
    return html.escape(code, quote=False)


@dataclass
class CodeElement:
    key: int
    code: str
    language: Optional[str] = None
    processed: bool = False


class HtmlDocument:
    """In-memory document holding inserted HTML fragments.

    Code blocks are ``<pre><code>`` elements as produced by the markdown
    renderer; a block counts as processed once it carries
    ``data-highlighted="yes"``.
    """

    def __init__(self, html_text: str = "") -> None:
        self._html = html_text

    @property
    def html(self) -> str:
        return self._html

    def insert(self, fragment: str) -> None:
        self._html += fragment

    def code_elements(self) -> List[CodeElement]:
        elements = []
        for key, match in enumerate(CODE_BLOCK.finditer(self._html)):
            attrs = match.group("attrs")
            lang_match = LANGUAGE_CLASS.search(attrs)
            elements.append(
                CodeElement(
                    key=key,
                    code=html.unescape(match.group("body")),
                    language=lang_match.group("lang") if lang_match else None,
                    processed=PROCESSED_ATTR in attrs,
                )
            )
        return elements

    def pending_code_elements(self) -> List[CodeElement]:
        return [element for element in self.code_elements() if not element.processed]

    def mark_processed(self, element: CodeElement, language: str, markup: Optional[str] = None) -> None:
        counter = -1

        def _replace(match: re.Match) -> str:
            nonlocal counter
            counter += 1
            if counter != element.key:
                return match.group(0)
            css = NO_HIGHLIGHT if language == NO_HIGHLIGHT else f"hljs language-{language}"
            body = markup if markup is not None else match.group("body")
            return f'<pre><code class="{css}" {PROCESSED_ATTR}>{body}</code></pre>'

        self._html = CODE_BLOCK.sub(_replace, self._html)
        element.language = language
        element.processed = True


@dataclass
class HighlightReport:
    attempts: int
    highlighted: int = 0
    skipped: int = 0
    failures: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return bool(self.highlighted or self.skipped or self.failures)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attempts": self.attempts,
            "highlighted": self.highlighted,
            "skipped": self.skipped,
            "failures": list(self.failures),
        }


class RenderCompletionCoordinator:
    def __init__(
        self,
        highlighter: Highlighter = escape_highlighter,
        classifier: LanguageClassifier | None = None,
        max_attempts: int = 5,
        base_delay_ms: int = 100,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.highlighter = highlighter
        self.classifier = classifier or LanguageClassifier()
        self.max_attempts = max(1, int(max_attempts))
        self.base_delay_ms = max(0, int(base_delay_ms))
        self.sleep = sleep

    @classmethod
    def from_config(cls, config: Config, **kwargs: Any) -> "RenderCompletionCoordinator":
        return cls(
            max_attempts=config.highlight_max_attempts,
            base_delay_ms=config.highlight_base_delay_ms,
            **kwargs,
        )

    def delay_schedule(self) -> List[float]:
        """Seconds waited before each attempt; the first attempt is immediate."""
        return [attempt * self.base_delay_ms / 1000.0 for attempt in range(self.max_attempts)]

    async def run(self, document: Any) -> HighlightReport:
        for attempt, delay in enumerate(self.delay_schedule(), start=1):
            if delay > 0:
                await self.sleep(delay)
            pending = document.pending_code_elements()
            if not pending:
                logger.debug("Highlight attempt %d/%d found no pending code blocks", attempt, self.max_attempts)
                continue
            return self._process(document, pending, attempt)
        logger.info("No new code blocks highlighted after %d attempts", self.max_attempts)
        return HighlightReport(attempts=self.max_attempts)

    def _process(self, document: Any, pending: List[CodeElement], attempt: int) -> HighlightReport:
        report = HighlightReport(attempts=attempt)
        for element in pending:
            language = element.language or self.classifier.classify(element.code)
            if language == NO_HIGHLIGHT:
                document.mark_processed(element, language)
                report.skipped += 1
                continue
            try:
                markup = self.highlighter(element.code, language)
            except Exception as exc:
                logger.warning("Highlighting failed for code block %d (%s)", element.key, language, exc_info=True)
                report.failures.append({"key": element.key, "language": language, "error": str(exc)})
                # Marked anyway so the block is not retried; it stays readable as plain text.
                document.mark_processed(element, language)
                continue
            document.mark_processed(element, language, markup)
            report.highlighted += 1
        logger.debug(
            "Highlight attempt %d: %d highlighted, %d skipped, %d failed",
            attempt,
            report.highlighted,
            report.skipped,
            len(report.failures),
        )
        return report
