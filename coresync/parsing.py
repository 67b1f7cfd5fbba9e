from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

_FENCE_RE = re.compile(r"```(?:[A-Za-z0-9_-]+)?[ \t]*\r?\n?(.*?)```", re.DOTALL)


@dataclass(frozen=True)
class Extraction:
    """
    Outcome of recovering a JSON object from model text.

    `payload` is the parsed object and `strategy` names the step that found it
    ("direct", "fenced" or "braces"). Both are None when the text holds no
    structured payload.
    """

    payload: Optional[Dict[str, Any]]
    strategy: Optional[str]

    @property
    def found(self) -> bool:
        return self.payload is not None


NO_PAYLOAD = Extraction(payload=None, strategy=None)


def _loads_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        value = json.loads(text)
    except (TypeError, ValueError):
        return None
    return value if isinstance(value, dict) else None


def _direct(text: str) -> Optional[Dict[str, Any]]:
    return _loads_object(text.strip())


def _fenced(text: str) -> Optional[Dict[str, Any]]:
    for match in _FENCE_RE.finditer(text):
        parsed = _loads_object(match.group(1).strip())
        if parsed is not None:
            return parsed
    return None


def _braces(text: str) -> Optional[Dict[str, Any]]:
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        return None
    return _loads_object(text[start : end + 1])


STRATEGIES: Tuple[Tuple[str, Callable[[str], Optional[Dict[str, Any]]]], ...] = (
    ("direct", _direct),
    ("fenced", _fenced),
    ("braces", _braces),
)


def extract_json_object(text: Optional[str]) -> Extraction:
    """Try each strategy in order and return the first JSON object found."""
    if not text:
        return NO_PAYLOAD
    for name, strategy in STRATEGIES:
        payload = strategy(text)
        if payload is not None:
            return Extraction(payload=payload, strategy=name)
    return NO_PAYLOAD
