"""Direct HTTP transport: plain PUT uploads and GET downloads."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, BinaryIO

from gateway_transfer._capabilities import TransferCapability, TransferCapabilitySet
from gateway_transfer.transports._base import TransferClient

if TYPE_CHECKING:
    from gateway_transfer._checksum import ChecksumSelection
    from gateway_transfer._path import GatewayPath
    from gateway_transfer._session import Session

log = logging.getLogger(__name__)

_HTTP_CAPABILITIES = TransferCapabilitySet(
    {TransferCapability.READ, TransferCapability.WRITE, TransferCapability.CHECKSUM}
)


class DirectHTTPClient(TransferClient):
    """Transfers data with a single HTTP request authorized by the transport token.

    :param session: The authenticated session providing the HTTP client and tokens.
    :param endpoint: Data-plane URL.
    :param transport_token: Token scoped to ``endpoint``.
    """

    def __init__(self, session: Session, endpoint: str, transport_token: str) -> None:
        self._session = session
        self._endpoint = endpoint
        self._transport_token = transport_token

    @property
    def name(self) -> str:
        return "http"

    @property
    def capabilities(self) -> TransferCapabilitySet:
        return _HTTP_CAPABILITIES

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def write(self, stream: BinaryIO, size: int, target: GatewayPath, checksum: ChecksumSelection) -> None:
        request = self._session.new_write_request(self._endpoint, self._transport_token, stream, size)
        request.add_parameters({"xs": checksum.digest, "xs_type": checksum.name})
        log.info("Uploading %d bytes to %s via HTTP PUT", size, target)
        request.write()

    def read(self) -> bytes:
        request = self._session.new_read_request(self._endpoint, self._transport_token)
        return request.read()
