"""Immutable record of a single request/response exchange."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class RequestResult:
    method: str
    path: str
    query: Optional[Mapping[str, Any]]
    request_raw: Optional[str]
    request_content: Any
    response_raw: str
    response_content: Any
    status_code: int
    response_headers: Mapping[str, str] = field(default_factory=dict)
    start_time: float = 0.0
    end_time: float = 0.0

    def __post_init__(self) -> None:
        # Detach from caller-owned objects so the record cannot change afterwards.
        if self.query is not None:
            object.__setattr__(self, "query", MappingProxyType(dict(self.query)))
        object.__setattr__(self, "response_headers", MappingProxyType(dict(self.response_headers)))
        object.__setattr__(self, "request_content", copy.deepcopy(self.request_content))
        object.__setattr__(self, "response_content", copy.deepcopy(self.response_content))

    @property
    def time_taken(self) -> float:
        """Seconds elapsed between sending the request and reading the body."""
        return self.end_time - self.start_time


__all__ = ["RequestResult"]
