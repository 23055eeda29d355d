"""A small JSON-RPC 2.0 client speaking over HTTP."""

from __future__ import annotations

import itertools
import json
import threading
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional
from urllib.parse import urlparse

from .util import encode_bytes


class RpcError(Exception):
    """An error reported by the node or met while talking to it."""

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data


class NotFoundError(LookupError):
    """The node has no object matching the request."""

    def __init__(self, message: str = "not found"):
        super().__init__(message)


@dataclass
class BatchElem:
    """One call in a batch; ``result`` or ``error`` is filled in afterwards."""

    method: str
    args: list = field(default_factory=list)
    result: Any = None
    error: Optional[Exception] = None


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (bytes, bytearray)):
        return encode_bytes(bytes(obj))
    to_json = getattr(obj, "to_json", None)
    if callable(to_json):
        return to_json()
    raise TypeError(f"object of type {type(obj).__name__} is not JSON serializable")


def _result_of(reply: Any) -> Any:
    if not isinstance(reply, dict):
        raise RpcError("invalid response message")
    error = reply.get("error")
    if error is not None:
        if isinstance(error, dict):
            raise RpcError(str(error.get("message", "")), error.get("code"), error.get("data"))
        raise RpcError(str(error))
    return reply.get("result")


class RpcClient:
    """Sends JSON-RPC requests to a node over HTTP."""

    def __init__(self, url: str, *, timeout: float = 30.0, headers: Optional[dict] = None):
        self.url = url
        self.timeout = timeout
        self._headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            **(headers or {}),
        }
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._closed = False

    def __enter__(self) -> "RpcClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _next_id(self) -> int:
        with self._lock:
            return next(self._ids)

    def _post(self, payload: Any) -> Any:
        if self._closed:
            raise RpcError("client is closed")
        body = json.dumps(payload, default=_json_default).encode()
        request = urllib.request.Request(
            self.url, data=body, headers=self._headers, method="POST"
        )
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                raw = response.read()
        except urllib.error.HTTPError as exc:
            detail = exc.read().decode(errors="replace")
            raise RpcError(f"{exc.code} {exc.reason}: {detail}", code=exc.code) from exc
        except urllib.error.URLError as exc:
            raise RpcError(f"request failed: {exc.reason}") from exc
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise RpcError("invalid JSON in response") from exc

    def call(self, method: str, *args: Any) -> Any:
        """Call ``method`` with positional ``args`` and return the decoded result."""
        message = {"jsonrpc": "2.0", "id": self._next_id(), "method": method, "params": list(args)}
        return _result_of(self._post(message))

    def batch_call(self, elems: Iterable[BatchElem]) -> None:
        """Send several calls at once, storing each result or error on its element."""
        pending: dict[int, BatchElem] = {}
        payload = []
        for elem in elems:
            ident = self._next_id()
            pending[ident] = elem
            payload.append(
                {"jsonrpc": "2.0", "id": ident, "method": elem.method, "params": list(elem.args)}
            )
        if not payload:
            return
        reply = self._post(payload)
        if isinstance(reply, dict):
            _result_of(reply)
            raise RpcError("invalid batch response")
        if not isinstance(reply, list):
            raise RpcError("invalid batch response")
        for item in reply:
            if not isinstance(item, dict):
                continue
            elem = pending.pop(item.get("id"), None)
            if elem is None:
                continue
            try:
                elem.result = _result_of(item)
            except RpcError as exc:
                elem.error = exc
        for elem in pending.values():
            elem.error = RpcError("response batch did not contain a response to this call")

    def close(self) -> None:
        """Stop the client; later calls fail."""
        self._closed = True


def dial(url: str) -> RpcClient:
    """Create a client for an HTTP or HTTPS endpoint."""
    scheme = urlparse(url).scheme
    if scheme not in ("http", "https"):
        raise ValueError(f'no known transport for URL scheme "{scheme}"')
    return RpcClient(url)