"""Transport negotiation: choose a transfer client from an endpoint's hints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from gateway_transfer._capabilities import TransferCapability
from gateway_transfer._errors import TransportUnsupported
from gateway_transfer.transports import CombinedProtocolClient, DirectHTTPClient, ResumableUploadClient

if TYPE_CHECKING:
    from gateway_transfer._models import TransferEndpoint
    from gateway_transfer._session import Session
    from gateway_transfer.transports import TransferClient

log = logging.getLogger(__name__)

RESUMABLE_PROTOCOL = "tus"


def _combined_protocol(
    session: Session, endpoint: TransferEndpoint, webdav_factory: Any
) -> CombinedProtocolClient | None:
    """Return a combined-protocol client, or ``None`` if the endpoint lacks the hints.

    Malformed hints are not swallowed; they propagate as
    :class:`~gateway_transfer.TransportNegotiationError`.
    """
    try:
        return CombinedProtocolClient.from_endpoint(session, endpoint, client_factory=webdav_factory)
    except TransportUnsupported as exc:
        log.debug("Combined protocol not offered by %s: %s", endpoint.endpoint, exc)
        return None


def negotiate_upload_transport(
    session: Session,
    endpoint: TransferEndpoint,
    *,
    prefer_resumable: bool,
    webdav_factory: Any = None,
    tus_factory: Any = None,
) -> TransferClient:
    """Pick the transfer client for an upload.

    The combined protocol wins when its hints are present. Otherwise the
    protocol the gateway announced for the endpoint decides between the
    resumable protocol and a plain PUT; ``prefer_resumable`` decides only
    when no protocol was announced.

    :raises TransportNegotiationError: If the combined-protocol hints are malformed.
    """
    client: TransferClient | None = _combined_protocol(session, endpoint, webdav_factory)
    if client is None:
        resumable = endpoint.protocol == RESUMABLE_PROTOCOL if endpoint.protocol else prefer_resumable
        if resumable:
            client = ResumableUploadClient(session, endpoint.endpoint, endpoint.token, client_factory=tus_factory)
        else:
            client = DirectHTTPClient(session, endpoint.endpoint, endpoint.token)
        log.info("Falling back to %s transport for %s", client.name, endpoint.endpoint)
    client.capabilities.require(TransferCapability.WRITE, transport=client.name)
    log.debug("Selected %s transport for upload to %s", client.name, endpoint.endpoint)
    return client


def negotiate_download_transport(
    session: Session, endpoint: TransferEndpoint, *, webdav_factory: Any = None
) -> TransferClient:
    """Pick the transfer client for a download.

    :raises TransportNegotiationError: If the combined-protocol hints are malformed.
    """
    client: TransferClient | None = _combined_protocol(session, endpoint, webdav_factory)
    if client is None:
        client = DirectHTTPClient(session, endpoint.endpoint, endpoint.token)
        log.info("Falling back to %s transport for %s", client.name, endpoint.endpoint)
    client.capabilities.require(TransferCapability.READ, transport=client.name)
    log.debug("Selected %s transport for download from %s", client.name, endpoint.endpoint)
    return client
