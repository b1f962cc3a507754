"""Fauna Python SDK."""

from .client import FaunaClient
from .config import ClientConfig
from .errors import DecodeFailure, FaunaError, HttpError, NetworkFailure
from .page import Page, PageHelper
from .request_result import RequestResult

__all__ = [
    "ClientConfig",
    "DecodeFailure",
    "FaunaClient",
    "FaunaError",
    "HttpError",
    "NetworkFailure",
    "Page",
    "PageHelper",
    "RequestResult",
]
