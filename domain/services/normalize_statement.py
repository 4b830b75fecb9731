from __future__ import annotations

import re

from domain.models import ASSIGNMENT_SYMBOL

# Literals are matched whole so comment markers inside them are kept.
_COMMENT_OR_LITERAL_RE = re.compile(
    r'"(?:\\.|[^"\\\n])*"'
    r"|'(?:\\.|[^'\\\n])*'"
    r"|/\*.*?\*/"
    r"|//[^\n]*",
    re.DOTALL,
)
_WHITESPACE_RE = re.compile(r"\s+")
_TRAILING_TERMINATORS_RE = re.compile(r"[;\s]+$")

_IDENTIFIER = r"[A-Za-z_$][\w$]*"
_DECLARATION_RE = re.compile(
    r"^(?:(?:final|volatile|transient|static)\s+)*"
    rf"(?P<type>{_IDENTIFIER}(?:\.{_IDENTIFIER})*(?:\s*<[^=]*>)?(?:\s*\[\s*\])*)\s+"
    rf"(?P<declarators>{_IDENTIFIER}\s*(?:=(?!=)|,).*)$"
)
_DECLARATOR_RE = re.compile(rf"^(?P<name>{_IDENTIFIER})\s*(?:=(?!=)\s*(?P<expression>.+))?$")
_PLAIN_ASSIGNMENT_RE = re.compile(
    rf"^(?P<target>{_IDENTIFIER}(?:\.{_IDENTIFIER}|\[[^\]]+\])*)\s*=(?!=)\s*(?P<expression>.+)$"
)
# Leading words that look like a type in "<word> <name> = ..." but are not one.
_NON_TYPE_KEYWORDS = {"return", "throw", "yield", "case", "new", "else", "assert", "do"}
_OPENING = "([{"
_CLOSING = ")]}"


def strip_comments(value: str) -> str:
    return _COMMENT_OR_LITERAL_RE.sub(_keep_literal, value)


def _keep_literal(match: re.Match[str]) -> str:
    token = match.group(0)
    return token if token[0] in "\"'" else " "


def collapse_whitespace(value: str) -> str:
    return _WHITESPACE_RE.sub(" ", value).strip()


def normalize_label(value: str | None, fallback: str) -> str:
    normalized = collapse_whitespace(strip_comments(value or ""))
    return normalized or fallback


def normalize_statement(value: str | None) -> str | None:
    """Turn a raw statement fragment into a one-line structogram label.

    Comments, line breaks and trailing semicolons are removed. Declarations
    with initializers and plain assignments use the assignment arrow
    (``x = 5;`` becomes ``x ← 5``). Compound assignments and anything else
    that does not match keep their whitespace-collapsed text. Returns
    ``None`` when nothing is left to display.
    """
    cleaned = collapse_whitespace(strip_comments(value or ""))
    cleaned = _TRAILING_TERMINATORS_RE.sub("", cleaned).strip()
    if not cleaned:
        return None

    declaration = _rewrite_declaration(cleaned)
    if declaration is not None:
        return declaration

    assignment = _PLAIN_ASSIGNMENT_RE.match(cleaned)
    if assignment:
        target = assignment.group("target")
        expression = assignment.group("expression").strip()
        return f"{target} {ASSIGNMENT_SYMBOL} {expression}"

    return cleaned


def _rewrite_declaration(statement: str) -> str | None:
    match = _DECLARATION_RE.match(statement)
    if not match:
        return None
    type_name = match.group("type").split("<", 1)[0].strip()
    if type_name in _NON_TYPE_KEYWORDS:
        return None

    parts: list[str] = []
    has_initializer = False
    for declarator in _split_top_level(match.group("declarators")):
        parsed = _DECLARATOR_RE.match(declarator)
        if not parsed:
            return None
        name = parsed.group("name")
        expression = parsed.group("expression")
        if expression is None:
            parts.append(name)
            continue
        has_initializer = True
        parts.append(f"{name} {ASSIGNMENT_SYMBOL} {expression.strip()}")
    if not has_initializer:
        return None
    return ", ".join(parts)


def _split_top_level(value: str) -> list[str]:
    pieces: list[str] = []
    depth = 0
    in_string: str | None = None
    escaped = False
    current: list[str] = []
    for char in value:
        if in_string:
            current.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == in_string:
                in_string = None
            continue
        if char in ('"', "'"):
            in_string = char
        elif char in _OPENING:
            depth += 1
        elif char in _CLOSING:
            depth = max(0, depth - 1)
        elif char == "," and depth == 0:
            pieces.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    pieces.append("".join(current).strip())
    return pieces
