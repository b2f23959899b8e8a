"""HTTPRequest: a single authenticated request against a data-plane endpoint."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, BinaryIO

import httpx

from gateway_transfer._errors import Cancelled, GatewayError, TransportExecutionError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from gateway_transfer._context import CallContext

log = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


def _stream_body(data: BinaryIO, ctx: CallContext, endpoint: str) -> Iterator[bytes]:
    """Yield ``data`` in chunks, aborting as soon as ``ctx`` is cancelled."""
    while True:
        ctx.raise_if_cancelled(f"PUT {endpoint}")
        chunk = data.read(_CHUNK_SIZE)
        if not chunk:
            return
        yield chunk


class HTTPRequest:
    """A prepared GET or PUT carrying the session and transport tokens.

    Instances are created by ``Session.new_read_request`` and
    ``Session.new_write_request``.

    :param client: The shared ``httpx.Client`` of the session.
    :param ctx: Call context used for cancellation.
    :param method: ``"GET"`` or ``"PUT"``.
    :param endpoint: Target URL.
    :param headers: Token headers to send.
    :param data: Request body for writes.
    :param size: Length of ``data`` in bytes, if known.
    """

    def __init__(
        self,
        client: httpx.Client,
        ctx: CallContext,
        method: str,
        endpoint: str,
        headers: dict[str, str],
        data: BinaryIO | None = None,
        *,
        size: int | None = None,
    ) -> None:
        self._client = client
        self._ctx = ctx
        self.method = method
        self.endpoint = endpoint
        self.headers = dict(headers)
        self.params: dict[str, str] = {}
        self._data = data
        if data is not None and size is not None:
            self.headers["Content-Length"] = str(size)

    def add_parameters(self, params: dict[str, str]) -> None:
        """Add query parameters to the request URL."""
        self.params.update(params)

    @contextmanager
    def _errors(self) -> Iterator[None]:
        """Map httpx exceptions to gateway_transfer errors."""
        try:
            yield
        except GatewayError:
            raise
        except httpx.HTTPError as exc:
            raise TransportExecutionError(
                f"Unable to perform the HTTP request: {exc}", operation=self.method, endpoint=self.endpoint
            ) from exc

    def _check(self, response: httpx.Response) -> None:
        if response.status_code != httpx.codes.OK:
            raise TransportExecutionError(
                f"Performing the HTTP request failed: {response.status_code} {response.reason_phrase}",
                operation=self.method,
                endpoint=self.endpoint,
            )

    def read(self) -> bytes:
        """Perform the request and return the full response body.

        :raises TransportExecutionError: On connection errors or a non-200 status.
        :raises Cancelled: If the call context is cancelled mid-transfer.
        """
        self._ctx.raise_if_cancelled(f"{self.method} {self.endpoint}")
        with self._errors():
            with self._client.stream(self.method, self.endpoint, headers=self.headers, params=self.params) as res:
                self._check(res)
                buf = bytearray()
                for chunk in res.iter_bytes():
                    if self._ctx.cancelled:
                        raise Cancelled("Context cancelled during download", endpoint=self.endpoint)
                    buf.extend(chunk)
        log.debug("Read %d bytes from %s", len(buf), self.endpoint)
        return bytes(buf)

    def write(self) -> None:
        """Perform the request, streaming the body.

        :raises TransportExecutionError: On connection errors or a non-200 status.
        :raises Cancelled: If the call context is cancelled mid-transfer.
        """
        self._ctx.raise_if_cancelled(f"{self.method} {self.endpoint}")
        content = _stream_body(self._data, self._ctx, self.endpoint) if self._data is not None else b""
        with self._errors():
            res = self._client.request(
                self.method, self.endpoint, headers=self.headers, params=self.params, content=content
            )
            self._check(res)

    def __repr__(self) -> str:
        return f"HTTPRequest({self.method} {self.endpoint!r})"
