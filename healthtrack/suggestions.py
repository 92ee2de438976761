from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Union

MAX_SUGGESTIONS = 5

# Fragments this short are usually headers or leftovers of a split sentence.
MIN_FRAGMENT_CHARS = 20

_SPLIT_RE = re.compile(r"(?:\d+\.\s+|\n+)")
_EDGE_RE = re.compile(r'^[\[\]"]+|[\[\]"]+$')
_FENCE_OPEN_RE = re.compile(r"^```[a-zA-Z0-9]*\s*")
_FENCE_CLOSE_RE = re.compile(r"\s*```$")


@dataclass(frozen=True)
class ListPayload:
    items: list[Any]


@dataclass(frozen=True)
class TextPayload:
    text: str


@dataclass(frozen=True)
class OtherPayload:
    value: Any


SuggestionPayload = Union[ListPayload, TextPayload, OtherPayload]


def classify_payload(raw: Any) -> SuggestionPayload:
    """Decide once what kind of value the AI call handed back."""
    if isinstance(raw, (list, tuple)):
        return ListPayload(list(raw))
    if isinstance(raw, str):
        return TextPayload(raw)
    return OtherPayload(raw)


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = _FENCE_OPEN_RE.sub("", text)
        text = _FENCE_CLOSE_RE.sub("", text)
    return text


def _split_plain_text(text: str) -> list[str]:
    out = []
    for fragment in _SPLIT_RE.split(text):
        fragment = fragment.strip()
        if len(fragment) <= MIN_FRAGMENT_CHARS:
            continue
        out.append(_EDGE_RE.sub("", fragment).strip())
    return out


def _from_text(text: str) -> list[Any]:
    try:
        parsed = json.loads(_strip_code_fence(text))
    except (ValueError, RecursionError):
        return _split_plain_text(text)
    if isinstance(parsed, list):
        return parsed
    return [parsed]


def _as_text(item: Any) -> str | None:
    if item is None:
        return None
    if isinstance(item, str):
        return item
    if isinstance(item, (dict, list)):
        return json.dumps(item, ensure_ascii=False, default=str)
    return str(item)


def _cleanup(items: list[Any]) -> list[str]:
    out: list[str] = []
    for item in items:
        text = _as_text(item)
        if text is None:
            continue
        text = text.strip()
        if text:
            out.append(text)
    return out[:MAX_SUGGESTIONS]


def parse_suggestions(raw: Any) -> list[str]:
    """Turn whatever the AI returned into at most five tip strings.

    Never raises. If a non-list reply yields nothing usable, the stringified
    payload itself becomes the single suggestion; an empty list stays empty.
    """
    payload = classify_payload(raw)
    if isinstance(payload, ListPayload):
        items = payload.items
    elif isinstance(payload, TextPayload):
        items = _from_text(payload.text)
    else:
        items = [str(payload.value)]

    suggestions = _cleanup(items)
    if not suggestions and not isinstance(payload, ListPayload):
        fallback = str(raw).strip() if raw is not None else ""
        if fallback:
            suggestions = [fallback]
    return suggestions
