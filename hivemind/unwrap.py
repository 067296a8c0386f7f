"""Removal of redundant ```markdown fences around worker answers.

Some workers wrap their whole answer, or the interesting middle of it, in a
fence labeled ``markdown``. Rendered as-is that content would show up as a
literal code block. The rules below are tried in order and the first match
wins; rewriting repeats until no rule matches, so every ``markdown`` fence
that fits a rule is resolved, outermost and earliest first.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional
import re

OPEN_FENCE_LINE = re.compile(r"^```markdown[ \t]*$", re.IGNORECASE | re.MULTILINE)

WHOLE_FENCE = re.compile(
    r"\A```markdown[ \t]*\n(?P<body>[\s\S]*?)\n?```\Z",
    re.IGNORECASE,
)

MIXED_FENCE = re.compile(
    r"\A(?:(?P<before>[\s\S]*?)\n[ \t]*\n)?"
    r"```markdown[ \t]*\n(?P<body>[\s\S]*?)\n```[ \t]*"
    r"(?:\n[ \t]*\n(?P<after>[\s\S]*))?\Z",
    re.IGNORECASE,
)


def _join_parts(*parts: Optional[str]) -> str:
    return "\n\n".join(part.strip() for part in parts if part and part.strip())


def _unwrap_whole(match: re.Match) -> Optional[str]:
    body = match.group("body")
    # Two sibling fences also span the whole text; leave those to the mixed rule.
    if OPEN_FENCE_LINE.search(body):
        return None
    return body.strip()


def _unwrap_mixed(match: re.Match) -> Optional[str]:
    return _join_parts(match.group("before"), match.group("body"), match.group("after"))


@dataclass(frozen=True)
class UnwrapRule:
    name: str
    pattern: re.Pattern
    build: Callable[[re.Match], Optional[str]]

    def apply(self, text: str) -> Optional[str]:
        match = self.pattern.match(text)
        if not match:
            return None
        return self.build(match)


UNWRAP_RULES: tuple[UnwrapRule, ...] = (
    UnwrapRule("whole", WHOLE_FENCE, _unwrap_whole),
    UnwrapRule("mixed", MIXED_FENCE, _unwrap_mixed),
)


def _apply_first(text: str, rules: tuple[UnwrapRule, ...]) -> Optional[str]:
    for rule in rules:
        result = rule.apply(text)
        if result is not None:
            return result
    return None


def process_nested_markdown(text: Optional[str], rules: tuple[UnwrapRule, ...] = UNWRAP_RULES) -> str:
    """Return ``text`` with redundant markdown fences removed, trimmed.

    Unrecognized input comes back unchanged apart from trimming. The result is
    a fixpoint of the rules, so applying this twice equals applying it once.
    """
    current = (text or "").strip()
    # Every accepted rewrite is strictly shorter, so the loop terminates.
    while True:
        rewritten = _apply_first(current, rules)
        if rewritten is None or len(rewritten) >= len(current):
            break
        current = rewritten
    return current
