"""UploadAction: store data on the gateway through a negotiated transport."""

from __future__ import annotations

import io
import logging
import os
from typing import TYPE_CHECKING, Any, BinaryIO

from gateway_transfer._action import Action
from gateway_transfer._capabilities import TransferCapability
from gateway_transfer._checksum import NO_CHECKSUM, negotiate_checksum
from gateway_transfer._errors import GatewayError, InvalidPath, VerificationError
from gateway_transfer._fileops import FileOperationsAction
from gateway_transfer._negotiation import negotiate_upload_transport
from gateway_transfer._path import GatewayPath
from gateway_transfer._status import unwrap

if TYPE_CHECKING:
    from gateway_transfer._models import ResourceInfo, TransferEndpoint
    from gateway_transfer._session import Session

log = logging.getLogger(__name__)


class UploadAction(Action):
    """Upload files through the gateway.

    The gateway assigns an endpoint per upload. If the endpoint advertises the
    combined protocol it is used; otherwise a checksum is negotiated and the
    data goes out via the resumable protocol or a plain PUT. Once a transport
    has started sending data, a failure is reported and never retried through
    another transport.

    :param session: An authenticated session.
    :param enable_tus: Prefer the resumable protocol over a plain PUT;
        defaults to ``session.config.prefer_resumable``.
    :param webdav_factory: Optional WebDAV client factory for the combined protocol.
    :param tus_factory: Optional TUS client factory for the resumable protocol.
    """

    def __init__(
        self,
        session: Session,
        *,
        enable_tus: bool | None = None,
        webdav_factory: Any = None,
        tus_factory: Any = None,
    ) -> None:
        super().__init__(session)
        self.enable_tus = session.config.prefer_resumable if enable_tus is None else enable_tus
        self._webdav_factory = webdav_factory
        self._tus_factory = tus_factory

    def upload_file(self, file_path: str | os.PathLike[str], target: str) -> ResourceInfo:
        """Upload a local file to ``target``."""
        size = os.path.getsize(file_path)
        with open(file_path, "rb") as f:
            return self.upload(f, size, target)

    def upload_bytes(self, data: bytes, target: str) -> ResourceInfo:
        """Upload ``data`` to ``target``."""
        return self.upload(io.BytesIO(data), len(data), target)

    def upload(self, stream: BinaryIO, size: int, target: str) -> ResourceInfo:
        """Upload ``size`` bytes from ``stream`` to ``target``.

        :returns: The metadata of the uploaded file as reported by the gateway.
        :raises InvalidPath: If ``target`` is empty, malformed or the root.
        :raises RPCError: If preparing the target or initiating the upload fails.
        :raises TransportNegotiationError: If the endpoint's transport hints are malformed.
        :raises ChecksumError: If a checksum is required but cannot be computed.
        :raises TransportExecutionError: If sending the data fails.
        :raises VerificationError: If the data was sent but the target cannot be stat'ed.
        """
        if size < 0:
            raise ValueError(f"size must not be negative, got {size!r}")
        self._session.require_valid()
        path = GatewayPath(target)
        if path.is_root:
            raise InvalidPath("Cannot upload to the root container", path=target)
        fileops = FileOperationsAction(self._session)

        parent = path.parent
        if parent is not None:
            fileops.make_path(parent)

        endpoint = self._initiate_upload(path, size)
        client = negotiate_upload_transport(
            self._session,
            endpoint,
            prefer_resumable=self.enable_tus,
            webdav_factory=self._webdav_factory,
            tus_factory=self._tus_factory,
        )
        try:
            checksum = NO_CHECKSUM
            if client.capabilities.supports(TransferCapability.CHECKSUM):
                checksum = negotiate_checksum(endpoint.checksums, stream)
            client.write(stream, size, path, checksum)
        finally:
            client.close()
        log.info("Uploaded %d bytes to %s via %s", size, path, client.name)

        try:
            return fileops.stat(path)
        except GatewayError as exc:
            raise VerificationError(
                f"Upload may have succeeded but verification failed: {exc}",
                path=str(path),
                operation="Stat",
                endpoint=endpoint.endpoint,
            ) from exc

    def _initiate_upload(self, path: GatewayPath, size: int) -> TransferEndpoint:
        reply = self._session.gateway.initiate_file_upload(
            self._session.context, str(path), size, prefer_resumable=self.enable_tus
        )
        return unwrap("InitiateFileUpload", reply)
