"""Combined metadata+data transport over WebDAV (webdav4)."""

from __future__ import annotations

import io
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, BinaryIO

import httpx

from gateway_transfer._capabilities import TransferCapability, TransferCapabilitySet
from gateway_transfer._errors import Cancelled, GatewayError, TransportExecutionError
from gateway_transfer._hints import CombinedProtocolHints
from gateway_transfer.transports._base import TransferClient

if TYPE_CHECKING:
    from collections.abc import Iterator

    from gateway_transfer._checksum import ChecksumSelection
    from gateway_transfer._models import TransferEndpoint
    from gateway_transfer._path import GatewayPath
    from gateway_transfer._session import Session

log = logging.getLogger(__name__)

_WEBDAV_CAPABILITIES = TransferCapabilitySet({TransferCapability.READ, TransferCapability.WRITE})


def _default_client_factory(base_url: str, headers: dict[str, str], timeout: float, verify: bool) -> Any:
    from webdav4.client import Client

    return Client(base_url, retry=False, headers=headers, timeout=timeout, verify=verify)


class CombinedProtocolClient(TransferClient):
    """Reads and writes a file through a WebDAV server named by the endpoint hints.

    Build instances with :meth:`from_endpoint`, which rejects endpoints that
    do not advertise the protocol.

    :param session: The authenticated session providing context and config.
    :param endpoint: WebDAV base URL.
    :param hints: Decoded token and file path.
    :param client_factory: Builds the WebDAV client from ``(url, headers, timeout, verify)``.
    """

    def __init__(
        self,
        session: Session,
        endpoint: str,
        hints: CombinedProtocolHints,
        *,
        client_factory: Any = None,
    ) -> None:
        self._session = session
        self._endpoint = endpoint
        self._hints = hints
        self._client_factory = client_factory or _default_client_factory

    @classmethod
    def from_endpoint(
        cls, session: Session, endpoint: TransferEndpoint, *, client_factory: Any = None
    ) -> CombinedProtocolClient:
        """Create a client if the endpoint's opaque hints enable the protocol.

        :raises TransportUnsupported: If the hints are absent.
        :raises TransportNegotiationError: If the hints are present but malformed.
        """
        hints = CombinedProtocolHints.from_opaque(endpoint.opaque)
        return cls(session, endpoint.endpoint, hints, client_factory=client_factory)

    @property
    def name(self) -> str:
        return "webdav"

    @property
    def capabilities(self) -> TransferCapabilitySet:
        return _WEBDAV_CAPABILITIES

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def hints(self) -> CombinedProtocolHints:
        return self._hints

    @contextmanager
    def _webdav(self, extra_headers: dict[str, str] | None = None) -> Iterator[Any]:
        """Yield a WebDAV client whose HTTP connection pool is closed afterwards."""
        headers = {self._session.config.access_token_header: self._hints.token}
        if extra_headers:
            headers.update(extra_headers)
        config = self._session.config
        client = self._client_factory(self._endpoint, headers, config.transfer_timeout, config.verify_tls)
        try:
            yield client
        finally:
            client.http.close()

    @contextmanager
    def _errors(self, operation: str) -> Iterator[None]:
        """Map webdav4/httpx exceptions to gateway_transfer errors."""
        from webdav4.client import ClientError

        try:
            yield
        except GatewayError:
            raise
        except (ClientError, httpx.HTTPError, OSError) as exc:
            raise TransportExecutionError(
                f"Unable to {operation} the data via WebDAV: {exc}",
                operation=f"webdav {operation}",
                path=self._hints.path,
                endpoint=self._endpoint,
            ) from exc

    def write(self, stream: BinaryIO, size: int, target: GatewayPath, checksum: ChecksumSelection) -> None:
        ctx = self._session.context
        ctx.raise_if_cancelled(f"webdav write {self._endpoint}")
        log.info("Uploading %d bytes to %s via WebDAV", size, target)
        with self._errors("write"), self._webdav({"Upload-Length": str(size)}) as client:
            client.upload_fileobj(stream, self._hints.path, overwrite=True)

    def read(self) -> bytes:
        ctx = self._session.context
        ctx.raise_if_cancelled(f"webdav read {self._endpoint}")
        buf = io.BytesIO()

        def _progress(*_: object) -> None:
            if ctx.cancelled:
                raise Cancelled("Context cancelled during download", endpoint=self._endpoint)

        with self._errors("read"), self._webdav() as client:
            client.download_fileobj(self._hints.path, buf, callback=_progress)
        return buf.getvalue()
