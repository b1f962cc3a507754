"""Configuration objects for the Fauna Python SDK."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class ClientConfig:
    domain: str = "db.fauna.com"
    scheme: str = "https"
    port: Optional[int] = None
    secret: Optional[str] = None
    timeout: float = 60.0
    observer: Optional[Callable[..., Any]] = None
    keep_alive: bool = True

    @property
    def base_url(self) -> str:
        port = self.port
        if port is None:
            port = 443 if self.scheme == "https" else 80
        return f"{self.scheme}://{self.domain}:{port}"

    @classmethod
    def from_env(cls, observer: Optional[Callable[..., Any]] = None) -> "ClientConfig":
        port = os.environ.get("FAUNA_PORT")
        keep_alive = os.environ.get("FAUNA_KEEP_ALIVE", "true").strip().lower()
        return cls(
            domain=os.environ.get("FAUNA_DOMAIN", "db.fauna.com"),
            scheme=os.environ.get("FAUNA_SCHEME", "https"),
            port=int(port) if port else None,
            secret=os.environ.get("FAUNA_SECRET") or None,
            timeout=float(os.environ.get("FAUNA_TIMEOUT", "60")),
            observer=observer,
            keep_alive=keep_alive not in ("0", "false", "no"),
        )


__all__ = ["ClientConfig"]
