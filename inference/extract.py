"""
Response extraction rules.

The remote response shape is not contractually fixed, so extraction is an
ordered list of small pure rules. Each rule returns a value or None ("no
match"); the first match wins.
"""

import json
import re
from typing import Any, Callable, Dict, List, Optional

TextRule = Callable[[Dict[str, Any]], Optional[str]]

_FENCED_JSON_RE = re.compile(r"```json([\s\S]*?)```", re.IGNORECASE)
_FENCED_RE = re.compile(r"```([\s\S]*?)```")


# ──────────────────────────────────────────────────────────────
# TEXT
# ──────────────────────────────────────────────────────────────


def output_text_rule(data: Dict[str, Any]) -> Optional[str]:
    """Top-level convenience field."""
    text = data.get("output_text")
    if isinstance(text, str) and text:
        return text
    return None


def output_content_rule(data: Dict[str, Any]) -> Optional[str]:
    """First content element's text in the output list."""
    output = data.get("output")
    if not isinstance(output, list):
        return None
    for item in output:
        content = item.get("content") if isinstance(item, dict) else None
        if isinstance(content, list) and content:
            first = content[0]
            if isinstance(first, dict) and isinstance(first.get("text"), str):
                return first["text"]
    return None


def chat_choice_rule(data: Dict[str, Any]) -> Optional[str]:
    """Chat-completions style choices[0].message.content."""
    choices = data.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        content = (choices[0].get("message") or {}).get("content")
        if isinstance(content, str):
            return content
    return None


TEXT_RULES: List[TextRule] = [
    output_text_rule,
    output_content_rule,
    chat_choice_rule,
]


def extract_text(data: Any, rules: List[TextRule] = TEXT_RULES) -> str:
    """
    Extract generated text from a response document.

    Falls back to the full serialized response so the caller always gets a
    string, even when the response shape drifts further.
    """
    if isinstance(data, dict):
        for rule in rules:
            text = rule(data)
            if text is not None:
                return text
    if isinstance(data, str):
        return data
    return json.dumps(data)


# ──────────────────────────────────────────────────────────────
# JSON
# ──────────────────────────────────────────────────────────────


def _loads(candidate: str) -> Optional[Any]:
    try:
        return json.loads(candidate)
    except (json.JSONDecodeError, TypeError):
        return None


def _balanced_span(text: str) -> Optional[str]:
    """
    First balanced {...} or [...] span, found by bracket counting.

    Brackets inside string literals are skipped.
    """
    start = next((i for i, ch in enumerate(text) if ch in "{["), -1)
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i, ch in enumerate(text[start:], start):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in "{[":
            depth += 1
        elif ch in "}]":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def extract_first_json(text: str) -> Optional[Any]:
    """
    Parse the first JSON document out of model text.

    Tries, in order: the whole text, a ```json fenced block, any fenced
    block, then the first balanced bracket span. Returns None when nothing
    parses.
    """
    if not isinstance(text, str):
        return None

    parsed = _loads(text)
    if parsed is not None:
        return parsed

    for pattern in (_FENCED_JSON_RE, _FENCED_RE):
        fenced = pattern.search(text)
        if fenced:
            parsed = _loads(fenced.group(1).strip())
            if parsed is not None:
                return parsed

    span = _balanced_span(text)
    if span:
        return _loads(span)
    return None
