"""JSON encoding of query payloads and decoding of response bodies."""

from __future__ import annotations

import json
from typing import Any


def _default(value: Any) -> Any:
    to_wire = getattr(value, "to_wire", None)
    if callable(to_wire):
        return to_wire()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json(value: Any) -> str:
    return json.dumps(value, default=_default, separators=(",", ":"))


def parse_json(text: str) -> Any:
    """Decode a response body, raising ``ValueError`` when it is not JSON."""
    return json.loads(text)


__all__ = ["parse_json", "to_json"]
