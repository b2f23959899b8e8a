"""Resumable-upload transport using the TUS protocol (tuspy)."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, BinaryIO

from gateway_transfer._capabilities import TransferCapability, TransferCapabilitySet
from gateway_transfer._errors import CapabilityNotSupported, GatewayError, TransportExecutionError
from gateway_transfer.transports._base import TransferClient

if TYPE_CHECKING:
    from collections.abc import Iterator

    from gateway_transfer._checksum import ChecksumSelection
    from gateway_transfer._path import GatewayPath
    from gateway_transfer._session import Session

log = logging.getLogger(__name__)

_TUS_CAPABILITIES = TransferCapabilitySet(
    {TransferCapability.WRITE, TransferCapability.RESUMABLE, TransferCapability.CHECKSUM}
)


def _default_client_factory(url: str, headers: dict[str, str]) -> Any:
    from tusclient.client import TusClient

    return TusClient(url, headers=headers)


class ResumableUploadClient(TransferClient):
    """Uploads data in checkpointed chunks to a TUS endpoint.

    :param session: The authenticated session providing tokens, context and config.
    :param endpoint: URL of the upload resource.
    :param transport_token: Token scoped to ``endpoint``.
    :param client_factory: Builds the TUS client from ``(url, headers)``.
    """

    def __init__(
        self,
        session: Session,
        endpoint: str,
        transport_token: str,
        *,
        client_factory: Any = None,
    ) -> None:
        self._session = session
        self._endpoint = endpoint
        self._transport_token = transport_token
        self._client_factory = client_factory or _default_client_factory

    @property
    def name(self) -> str:
        return "tus"

    @property
    def capabilities(self) -> TransferCapabilitySet:
        return _TUS_CAPABILITIES

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def _headers(self) -> dict[str, str]:
        config = self._session.config
        headers = {config.access_token_header: self._session.token}
        if self._transport_token:
            headers[config.transport_token_header] = self._transport_token
        return headers

    @contextmanager
    def _errors(self) -> Iterator[None]:
        """Map tuspy/requests exceptions to gateway_transfer errors."""
        from tusclient.exceptions import TusCommunicationError

        try:
            yield
        except GatewayError:
            raise
        except TusCommunicationError as exc:
            raise TransportExecutionError(
                f"Writing data via TUS failed: {exc}", operation="tus", endpoint=self._endpoint
            ) from exc
        except OSError as exc:
            raise TransportExecutionError(
                f"Writing data via TUS failed: {exc}", operation="tus", endpoint=self._endpoint
            ) from exc

    def write(self, stream: BinaryIO, size: int, target: GatewayPath, checksum: ChecksumSelection) -> None:
        seekable = getattr(stream, "seekable", None)
        if seekable is None or not seekable():
            raise CapabilityNotSupported(
                "Resumable uploads require a seekable data stream",
                capability=TransferCapability.RESUMABLE.value,
                transport=self.name,
                endpoint=self._endpoint,
            )
        metadata = {
            "filename": target.name,
            "dir": target.dirname,
            "checksum": f"{checksum.name} {checksum.digest}",
        }
        ctx = self._session.context
        log.info("Uploading %d bytes to %s via TUS", size, target)
        with self._errors():
            client = self._client_factory(self._endpoint, self._headers())
            uploader = client.uploader(
                file_stream=stream,
                url=self._endpoint,
                chunk_size=self._session.config.tus_chunk_size,
                metadata=metadata,
            )
            while uploader.offset < size:
                ctx.raise_if_cancelled(f"tus {self._endpoint}")
                before = uploader.offset
                uploader.upload_chunk()
                if uploader.offset <= before:
                    raise TransportExecutionError(
                        f"TUS upload stalled at offset {before}", operation="tus", endpoint=self._endpoint
                    )
        log.debug("TUS upload to %s finished at offset %d", self._endpoint, size)
