"""Shared utility functions used across insights modules."""
from __future__ import annotations

import json
from typing import Any

_MISSING = object()


def json_parse(value: str | None, default: Any = _MISSING) -> Any:
    """Safely parse a JSON string, returning *default* on failure.

    If no default is given, returns ``{}`` on parse error.
    """
    try:
        return json.loads(value or "")
    except (json.JSONDecodeError, TypeError):
        return {} if default is _MISSING else default


def merge_json_key(raw: str | None, key: str, value: Any) -> str:
    """Set ``key`` inside a JSON object blob, keeping every other key as it was.

    A blob that is missing, unparseable, or not an object is treated as ``{}``.
    """
    doc = json_parse(raw, {})
    if not isinstance(doc, dict):
        doc = {}
    doc[key] = value
    return json.dumps(doc)
