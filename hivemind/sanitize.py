"""Removal of worker reasoning spans and escaping for interim display."""
from __future__ import annotations

from typing import Optional
import html
import re

REASONING_SPAN = re.compile(r"<think>[\s\S]*?</think>", re.IGNORECASE)


def strip_reasoning(text: Optional[str]) -> str:
    """Drop every ``<think>...</think>`` span and trim the remainder."""
    if not text:
        return ""
    return REASONING_SPAN.sub("", text).strip()


def escape_html(text: Optional[str]) -> str:
    if not text:
        return ""
    return html.escape(text, quote=True)


def escape_placeholder(text: Optional[str]) -> str:
    """Phase-one markup: sanitized text, escaped, inside a preformatted block."""
    return f'<pre class="raw-response">{escape_html(strip_reasoning(text))}</pre>'
