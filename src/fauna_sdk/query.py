"""Small set of query expression helpers.

Only what the client and the pagination helper need lives here: an ``Expr``
wrapper around raw wire JSON, ``wrap`` to turn Python values into wire values,
and constructors for ``paginate``, ``index`` and ``match``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class Expr:
    """A query expression already in wire form."""

    def __init__(self, raw: Any) -> None:
        self.raw = raw

    def to_wire(self) -> Any:
        return self.raw

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Expr) and self.raw == other.raw

    def __repr__(self) -> str:
        return f"Expr({self.raw!r})"


def wrap(value: Any) -> Any:
    """Convert a Python value into its wire representation.

    Plain dicts are escaped as ``{"object": ...}`` so the server treats them as
    object literals rather than function calls.
    """
    if isinstance(value, Expr):
        return value.raw
    if isinstance(value, dict):
        return {"object": {key: wrap(item) for key, item in value.items()}}
    if isinstance(value, (list, tuple)):
        return [wrap(item) for item in value]
    return value


def index(name: str) -> Expr:
    return Expr({"index": name})


def match(index_expr: Any, *terms: Any) -> Expr:
    raw: Dict[str, Any] = {"match": wrap(index_expr)}
    if len(terms) == 1:
        raw["terms"] = wrap(terms[0])
    elif terms:
        raw["terms"] = wrap(list(terms))
    return Expr(raw)


def paginate(
    set_expr: Any,
    size: Optional[int] = None,
    ts: Optional[int] = None,
    after: Any = None,
    before: Any = None,
    events: Optional[bool] = None,
    sources: Optional[bool] = None,
) -> Expr:
    """Build a paginate call; cursor values are sent exactly as the server returned them."""
    raw: Dict[str, Any] = {"paginate": wrap(set_expr)}
    for key, value in (
        ("size", size),
        ("ts", ts),
        ("after", after),
        ("before", before),
        ("events", events),
        ("sources", sources),
    ):
        if value is not None:
            raw[key] = value
    return Expr(raw)


__all__ = ["Expr", "index", "match", "paginate", "wrap"]
