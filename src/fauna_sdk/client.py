"""Async Python client for the Fauna query API."""

from __future__ import annotations

import base64
import inspect
import logging
import time
from typing import Any, Dict, Optional, Tuple

import httpx

from ._json import parse_json, to_json
from .config import ClientConfig
from .errors import DecodeFailure, NetworkFailure, classify
from .page import PageHelper
from .query import wrap
from .request_result import RequestResult
from .txn import TxnTimeTracker

logger = logging.getLogger("fauna_sdk.client")

API_VERSION = "2.7"
DRIVER_NAME = "python"
TXN_TIME_HEADER = "X-Txn-Time"
LAST_SEEN_HEADER = "X-Last-Seen-Txn"

_METHODS = frozenset({"GET", "POST", "HEAD", "PUT", "PATCH", "DELETE"})
_BODYLESS_METHODS = frozenset({"GET", "HEAD"})


def secret_header(secret: str) -> str:
    token = base64.b64encode(f"{secret}:".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


class FaunaClient:
    """Executes queries against a Fauna endpoint.

    All request methods are coroutines. A single client may be shared across
    concurrent tasks; the only state they share is the last seen transaction
    time, which only moves forward.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or ClientConfig()
        limits = httpx.Limits() if self._config.keep_alive else httpx.Limits(max_keepalive_connections=0)
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            limits=limits,
            transport=transport,
        )
        self._txn = TxnTimeTracker()

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def __aenter__(self) -> "FaunaClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def query(self, expression: Any, secret: Optional[str] = None) -> Any:
        """Run a query expression and return the decoded ``resource``."""
        return await self._execute("POST", "", data=wrap(expression), secret=secret)

    async def _query_with_result(self, expression: Any, secret: Optional[str] = None) -> Tuple[Any, RequestResult]:
        return await self._exchange("POST", "", data=wrap(expression), secret=secret)

    def paginate(
        self,
        expression: Any,
        *,
        secret: Optional[str] = None,
        flatten: bool = False,
        **params: Any,
    ) -> PageHelper:
        """Return a :class:`PageHelper` over the set described by ``expression``.

        ``params`` are forwarded to the paginate call (``size``, ``ts``,
        ``events``, ``sources``, and an initial ``after`` or ``before`` cursor).
        """
        return PageHelper(self, expression, params, secret=secret, flatten=flatten)

    async def ping(self, scope: Optional[str] = None, timeout: Optional[int] = None) -> Any:
        return await self._execute("GET", "ping", query={"scope": scope, "timeout": timeout})

    def get_last_txn_time(self) -> Optional[int]:
        return self._txn.read()

    def sync_last_txn_time(self, txn_time: int) -> None:
        """Advance the last seen transaction time.

        Has no effect when ``txn_time`` is older than the stored value. Only use
        this to coordinate several clients: moving the timestamp into the
        future makes consistency-sensitive reads stall until the server
        catches up.
        """
        self._txn.merge(txn_time)

    async def close(self) -> None:
        await self._client.aclose()

    def _headers(self, secret: Optional[str]) -> Dict[str, str]:
        headers = {
            "X-FaunaDB-API-Version": API_VERSION,
            "X-Fauna-Driver": DRIVER_NAME,
        }
        if secret:
            headers["Authorization"] = secret_header(secret)
        last_seen = self._txn.read()
        if last_seen is not None:
            headers[LAST_SEEN_HEADER] = str(last_seen)
        return headers

    async def _execute(
        self,
        method: str,
        path: str,
        data: Any = None,
        query: Optional[Dict[str, Any]] = None,
        secret: Optional[str] = None,
    ) -> Any:
        resource, _ = await self._exchange(method, path, data=data, query=query, secret=secret)
        return resource

    async def _exchange(
        self,
        method: str,
        path: str,
        data: Any = None,
        query: Optional[Dict[str, Any]] = None,
        secret: Optional[str] = None,
    ) -> Tuple[Any, RequestResult]:
        method = method.upper()
        if method not in _METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")
        if query is not None:
            query = {key: value for key, value in query.items() if value is not None}

        body = None if method in _BODYLESS_METHODS else to_json(data)
        headers = self._headers(secret or self._config.secret)
        if body is not None:
            headers["Content-Type"] = "application/json;charset=utf-8"

        start_time = time.time()
        try:
            response = await self._client.request(
                method,
                "/" + path.lstrip("/"),
                params=query,
                content=body,
                headers=headers,
            )
        except httpx.TransportError as exc:
            logger.error("Request failed method=%s path=%s error=%s", method, path, exc)
            raise NetworkFailure(str(exc) or type(exc).__name__) from exc
        response_raw = response.text
        end_time = time.time()

        try:
            response_content = parse_json(response_raw)
        except ValueError:
            response_content = None

        txn_time = response.headers.get(TXN_TIME_HEADER)
        if txn_time is not None:
            try:
                self._txn.merge(int(txn_time))
            except ValueError:
                logger.warning("Ignoring malformed %s header value=%r", TXN_TIME_HEADER, txn_time)

        request_result = RequestResult(
            method=method,
            path=path,
            query=query,
            request_raw=body,
            request_content=data,
            response_raw=response_raw,
            response_content=response_content,
            status_code=response.status_code,
            response_headers=dict(response.headers),
            start_time=start_time,
            end_time=end_time,
        )
        logger.debug(
            "method=%s path=%s status=%s time_taken=%.3f",
            method,
            path,
            response.status_code,
            request_result.time_taken,
        )

        observer = self._config.observer
        if observer is not None:
            outcome = observer(request_result)
            if inspect.isawaitable(outcome):
                await outcome

        error = classify(request_result)
        if error is not None:
            raise error

        if not isinstance(response_content, dict):
            raise DecodeFailure("Response body is not a JSON object", request_result)
        if "resource" not in response_content:
            raise DecodeFailure("Response JSON does not contain expected key 'resource'", request_result)
        return response_content["resource"], request_result


__all__ = ["FaunaClient", "secret_header"]
