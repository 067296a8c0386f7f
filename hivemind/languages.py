"""Heuristic language detection for untagged fenced code blocks.

Rules are evaluated top to bottom and the first hit wins, so rule order is the
tie-break. Shell prompts and CLI invocations are checked first because shell
snippets routinely contain words that are keywords elsewhere. Specific
languages come before the looser ones they resemble (C# and Java before
JavaScript, TypeScript before JavaScript, Rust before JavaScript's ``let``).
YAML is last: it is recognized only when every line has the YAML shape.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional
import re

NO_HIGHLIGHT = "nohighlight"

_SHELL_COMMANDS = (
    "sudo|npm|npx|yarn|pnpm|pip3?|pipx|poetry|apt(?:-get)?|brew|git|docker|docker-compose|"
    "kubectl|helm|curl|wget|cd|ls|mkdir|rm|cp|mv|chmod|chown|echo|cat|grep|ssh|"
    "export(?!\\s+(?:default|const|let|var|function|class|interface|type|async)\\b)|"
    "source|make|cargo|go(?=\\s+(?:run|build|get|mod|test|install)\\b)|python3? -m"
)


@dataclass(frozen=True)
class LanguageRule:
    language: str
    pattern: re.Pattern
    # When set, every line must match on its own instead of one search over the block.
    per_line: bool = False

    def matches(self, code: str) -> bool:
        if self.per_line:
            return all(self.pattern.fullmatch(line) for line in code.splitlines())
        return bool(self.pattern.search(code))


def _rule(language: str, pattern: str, flags: int = re.MULTILINE, per_line: bool = False) -> LanguageRule:
    return LanguageRule(language, re.compile(pattern, flags), per_line)


LANGUAGE_RULES: tuple[LanguageRule, ...] = (
    _rule("bash", r"^\s*(?:\$ |#!\s*/(?:usr/)?bin/(?:env\s+)?(?:ba|z)?sh\b)"),
    _rule("bash", rf"^\s*(?:{_SHELL_COMMANDS})\s+(?![=(:])[^\s=]"),
    _rule("json", r"\A\s*(?:\{\s*\"[^\"\n]*\"\s*:[\s\S]*\}|\[\s*(?:\{[\s\S]*\}|\"[\s\S]*\")\s*\])\s*\Z"),
    _rule("html", r"<!DOCTYPE\s+html|<(?:html|head|body|div|span|p|a|ul|ol|li|table|form|input|button|script|style|section|header|footer|nav)\b[^>]*>", re.IGNORECASE),
    _rule(
        "sql",
        r"^\s*(?:SELECT\b[\s\S]+?\bFROM\b|INSERT\s+INTO\b|UPDATE\s+\w+\s+SET\b|DELETE\s+FROM\b|"
        r"CREATE\s+(?:TABLE|INDEX|VIEW|DATABASE|SCHEMA)\b|ALTER\s+TABLE\b|DROP\s+(?:TABLE|INDEX|VIEW)\b|WITH\s+\w+\s+AS\s*\()",
        re.IGNORECASE | re.MULTILINE,
    ),
    _rule(
        "csharp",
        r"^\s*using\s+System\b|^\s*namespace\s+[\w.]+|\bConsole\.Write(?:Line)?\(|"
        r"\bpublic\s+(?:async\s+)?Task\b|\{\s*get;\s*set;\s*\}",
    ),
    _rule(
        "java",
        r"\bSystem\.out\.print(?:ln)?\(|\bpublic\s+static\s+void\s+main\b|^\s*import\s+java\.|"
        r"^\s*package\s+[\w.]+;|@Override\b|\bpublic\s+(?:final\s+|abstract\s+)?class\s+\w+",
    ),
    _rule(
        "go",
        r"^\s*package\s+\w+\s*$|^\s*func\s+(?:\(\w+\s+\*?\w+\)\s*)?\w+\s*\(|\bfmt\.\w+\(|^\s*\w+(?:\s*,\s*\w+)*\s*:=",
    ),
    _rule(
        "rust",
        r"^\s*(?:pub\s+)?fn\s+\w+|\blet\s+mut\b|\bprintln!\(|^\s*use\s+(?:std|crate)::|"
        r"^\s*impl\b|^\s*(?:pub\s+)?struct\s+\w+\s*\{|&mut\s+\w+",
    ),
    _rule(
        "typescript",
        r"^\s*(?:export\s+)?interface\s+\w+|^\s*(?:export\s+)?type\s+\w+\s*=|"
        r"\w\s*:\s*(?:string|number|boolean|any|unknown|void)(?:\[\])?\s*[;,)=]|\bimplements\s+\w+|"
        r"\bas\s+(?:string|number|const)\b",
    ),
    _rule(
        "javascript",
        r"\b(?:const|let|var)\s+\w+\s*=|\bfunction\s*\w*\s*\(|=>|\bconsole\.\w+\(|\brequire\(|"
        r"^\s*import\s+.*\s+from\s+['\"]|^\s*export\s+(?:default|const|function)\b|\bdocument\.\w+",
    ),
    _rule(
        "python",
        r"^\s*(?:async\s+)?def\s+\w+\s*\(|^\s*class\s+\w+\s*(?:\([^)]*\))?\s*:|^\s*import\s+[\w.]+\s*$|"
        r"^\s*from\s+[\w.]+\s+import\b|\bprint\(|^\s*if\s+__name__\s*==|^\s*elif\b|\bself\.\w+",
    ),
    _rule(
        "css",
        r"^\s*(?:@media|@import|@keyframes)\b|^\s*[.#]?[\w-][\w\s.#:>,\[\]=\"'-]*\{\s*(?:\n\s*)?[\w-]+\s*:\s*[^;{}]+;",
    ),
    _rule(
        "yaml",
        r"[ \t]*(?:---|#.*|[\w.\"'-]+:(?:[ \t]+\S.*)?|-[ \t]+\S.*)?[ \t]*",
        0,
        per_line=True,
    ),
)


class LanguageClassifier:
    """Ordered rule table mapping code text to a highlight language."""

    def __init__(self, rules: Iterable[LanguageRule] | None = None) -> None:
        self.rules = tuple(rules) if rules is not None else LANGUAGE_RULES

    def classify(self, code: Optional[str]) -> str:
        if not code or not code.strip():
            return NO_HIGHLIGHT
        for rule in self.rules:
            if rule.matches(code):
                return rule.language
        return NO_HIGHLIGHT

    def with_rules(self, extra: Iterable[LanguageRule], first: bool = True) -> "LanguageClassifier":
        """Return a classifier with ``extra`` rules placed before or after the table."""
        extra = tuple(extra)
        rules = extra + self.rules if first else self.rules + extra
        return LanguageClassifier(rules)


_DEFAULT = LanguageClassifier()


def classify_code(code: Optional[str]) -> str:
    return _DEFAULT.classify(code)
