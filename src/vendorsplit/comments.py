# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Strip JavaScript/TypeScript comments before specifier matching."""

import logging
import re

logger = logging.getLogger(__name__)

_BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_LINE_COMMENT_RE = re.compile(r"//[^\r\n]*")


def strip_comments(text: str, preserve_strings: bool = False) -> str:
    """Remove line and block comments from source text.

    The default mode is purely textual: comment-like sequences inside string
    or template literals are stripped as well.

    Args:
        text: Raw JavaScript/TypeScript source.
        preserve_strings: Use the literal-aware scanner instead of patterns.

    Returns:
        Source text without comments.
    """
    if preserve_strings:
        return _strip_comments_preserve_strings(text)
    without_blocks = _BLOCK_COMMENT_RE.sub("", text)
    return _LINE_COMMENT_RE.sub("", without_blocks)


def _strip_comments_preserve_strings(text: str) -> str:
    """Strip comments while keeping quoted and template literal contents.

    Comment characters are replaced with spaces; newlines inside comments are
    kept so that line structure survives.

    Args:
        text: Raw source text.

    Returns:
        Source text with comments blanked out.
    """
    result: list[str] = []
    i = 0
    state = "normal"
    quote_states = {"'": "single", '"': "double", "`": "template"}
    closing = {"single": "'", "double": '"', "template": "`"}

    while i < len(text):
        ch = text[i]
        nxt = text[i + 1] if i + 1 < len(text) else ""

        if state == "normal":
            if ch == "/" and nxt == "/":
                result.append(" ")
                i += 1
                state = "line_comment"
            elif ch == "/" and nxt == "*":
                result.append(" ")
                i += 1
                state = "block_comment"
            elif ch in quote_states:
                result.append(ch)
                state = quote_states[ch]
            else:
                result.append(ch)
        elif state == "line_comment":
            if ch == "\n":
                result.append(ch)
                state = "normal"
            else:
                result.append(" ")
        elif state == "block_comment":
            if ch == "*" and nxt == "/":
                result.append(" ")
                i += 1
                state = "normal"
            else:
                result.append("\n" if ch == "\n" else " ")
        else:
            result.append(ch)
            if ch == "\\":
                if i + 1 < len(text):
                    i += 1
                    result.append(text[i])
            elif ch == closing[state]:
                state = "normal"

        i += 1

    return "".join(result)
