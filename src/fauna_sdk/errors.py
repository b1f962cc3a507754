"""Error taxonomy and HTTP status classification."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .request_result import RequestResult


class ValidationFailure(BaseModel):
    model_config = ConfigDict(extra="allow")

    field: List[Union[str, int]] = Field(default_factory=list)
    code: str = ""
    description: str = ""


class ErrorData(BaseModel):
    """One entry of the ``errors`` array of a failed response."""

    model_config = ConfigDict(extra="allow")

    code: str = ""
    description: str = ""
    position: Optional[List[Union[str, int]]] = Field(default_factory=list)
    failures: Optional[List[ValidationFailure]] = None


class FaunaError(Exception):
    """Base class for every error raised by the SDK."""


class NetworkFailure(FaunaError):
    """No response was received (connection refused, DNS failure, timeout)."""


class DecodeFailure(FaunaError):
    """The server answered, but the body could not be understood."""

    def __init__(self, message: str, request_result: RequestResult) -> None:
        super().__init__(message)
        self.request_result = request_result


class HttpError(FaunaError):
    status_code: Optional[int] = None
    is_transient = False

    def __init__(self, request_result: RequestResult, errors: Optional[List[ErrorData]] = None) -> None:
        self.request_result = request_result
        self.errors: List[ErrorData] = errors or []
        if self.status_code is None:
            self.status_code = request_result.status_code
        super().__init__(self._message())

    def _message(self) -> str:
        if self.errors:
            first = self.errors[0]
            return first.description or first.code
        return f"HTTP {self.request_result.status_code}"

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(status_code={self.status_code!r}, errors={self.errors!r})"


class BadRequest(HttpError):
    status_code = 400


class Unauthorized(HttpError):
    status_code = 401


class PermissionDenied(HttpError):
    status_code = 403


class NotFound(HttpError):
    status_code = 404


class MethodNotAllowed(HttpError):
    status_code = 405


class Conflict(HttpError):
    status_code = 409


class UnprocessableEntity(HttpError):
    status_code = 422


class TooManyRequests(HttpError):
    status_code = 429
    is_transient = True


class InternalError(HttpError):
    status_code = 500


class Unavailable(HttpError):
    status_code = 503
    is_transient = True


class UnknownHttpError(HttpError):
    """Any non-2xx status without a dedicated class; ``status_code`` holds the raw code."""


_STATUS_TABLE: Dict[int, Type[HttpError]] = {
    cls.status_code: cls  # type: ignore[misc]
    for cls in (
        BadRequest,
        Unauthorized,
        PermissionDenied,
        NotFound,
        MethodNotAllowed,
        Conflict,
        UnprocessableEntity,
        TooManyRequests,
        InternalError,
        Unavailable,
    )
}


def _extract_errors(content: Any) -> List[ErrorData]:
    if not isinstance(content, dict):
        return []
    raw_errors = content.get("errors")
    if not isinstance(raw_errors, list):
        return []
    parsed: List[ErrorData] = []
    for entry in raw_errors:
        if not isinstance(entry, dict):
            continue
        try:
            parsed.append(ErrorData.model_validate(entry))
        except ValidationError:
            # Keep what we can read; the raw body stays on the request result.
            parsed.append(ErrorData(code=str(entry.get("code", "")), description=str(entry.get("description", ""))))
    return parsed


def classify(request_result: RequestResult) -> Optional[HttpError]:
    code = request_result.status_code
    if 200 <= code <= 299:
        return None
    errors = _extract_errors(request_result.response_content)
    error_class = _STATUS_TABLE.get(code, UnknownHttpError)
    return error_class(request_result, errors)


def raise_for_status_code(request_result: RequestResult) -> None:
    error = classify(request_result)
    if error is not None:
        raise error


__all__ = [
    "BadRequest",
    "Conflict",
    "DecodeFailure",
    "ErrorData",
    "FaunaError",
    "HttpError",
    "InternalError",
    "MethodNotAllowed",
    "NetworkFailure",
    "NotFound",
    "PermissionDenied",
    "TooManyRequests",
    "Unauthorized",
    "UnknownHttpError",
    "Unavailable",
    "UnprocessableEntity",
    "ValidationFailure",
    "classify",
    "raise_for_status_code",
]
