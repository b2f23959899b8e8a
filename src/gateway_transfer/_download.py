"""DownloadAction: retrieve file contents through a negotiated transport."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from gateway_transfer._action import Action
from gateway_transfer._errors import InvalidResource
from gateway_transfer._fileops import FileOperationsAction
from gateway_transfer._negotiation import negotiate_download_transport
from gateway_transfer._status import unwrap

if TYPE_CHECKING:
    from gateway_transfer._models import ResourceInfo, TransferEndpoint
    from gateway_transfer._path import GatewayPath
    from gateway_transfer._session import Session

log = logging.getLogger(__name__)


class DownloadAction(Action):
    """Download files through the gateway.

    Falls back from the combined protocol to plain HTTP only when the endpoint
    does not offer the combined protocol. A failed read is reported as is.

    :param session: An authenticated session.
    :param webdav_factory: Optional WebDAV client factory for the combined protocol.
    """

    def __init__(self, session: Session, *, webdav_factory: Any = None) -> None:
        super().__init__(session)
        self._webdav_factory = webdav_factory

    def download_file_by_path(self, path: str | GatewayPath) -> bytes:
        """Download the file at ``path``.

        :raises NotFound: If the path does not exist.
        """
        info = FileOperationsAction(self._session).stat(path)
        return self.download_file(info)

    def download_file(self, info: ResourceInfo) -> bytes:
        """Download the complete contents of a file.

        :raises InvalidResource: If ``info`` does not describe a file.
        :raises RPCError: If initiating the download fails.
        :raises TransportNegotiationError: If the endpoint's transport hints are malformed.
        :raises TransportExecutionError: If reading the data fails.
        """
        if not info.is_file:
            raise InvalidResource("Resource is not a file", path=info.path)
        self._session.require_valid()
        endpoint = self._initiate_download(info)
        client = negotiate_download_transport(self._session, endpoint, webdav_factory=self._webdav_factory)
        try:
            data = client.read()
        finally:
            client.close()
        log.info("Downloaded %d bytes from %s via %s", len(data), info.path, client.name)
        return data

    def _initiate_download(self, info: ResourceInfo) -> TransferEndpoint:
        reply = self._session.gateway.initiate_file_download(self._session.context, info.path)
        return unwrap("InitiateFileDownload", reply)
