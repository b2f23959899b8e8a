"""TransferClient abstract base class: the data-plane contract."""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, BinaryIO

from gateway_transfer._capabilities import TransferCapability

if TYPE_CHECKING:
    from gateway_transfer._capabilities import TransferCapabilitySet
    from gateway_transfer._checksum import ChecksumSelection
    from gateway_transfer._path import GatewayPath


class TransferClient(abc.ABC):
    """Moves the bytes of one transfer to or from a server-assigned location.

    Implementations wrap an existing protocol library. Library-native
    exceptions must never leak; they are mapped to
    :class:`~gateway_transfer.TransportExecutionError`.
    """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Unique identifier of the transport (e.g. ``'http'``, ``'tus'``)."""

    @property
    @abc.abstractmethod
    def capabilities(self) -> TransferCapabilitySet:
        """Declared capabilities of this transport."""

    @property
    @abc.abstractmethod
    def endpoint(self) -> str:
        """The data-plane URL this client talks to."""

    @abc.abstractmethod
    def write(self, stream: BinaryIO, size: int, target: GatewayPath, checksum: ChecksumSelection) -> None:
        """Write ``size`` bytes from ``stream`` to the endpoint.

        :param target: The gateway path the data is destined for.
        :param checksum: Negotiated checksum; ignored by transports without ``CHECKSUM``.
        :raises TransportExecutionError: If the transfer fails.
        """

    def read(self) -> bytes:
        """Read the full payload from the endpoint.

        :raises CapabilityNotSupported: If the transport cannot read.
        :raises TransportExecutionError: If the transfer fails.
        """
        self.capabilities.require(TransferCapability.READ, transport=self.name)
        raise NotImplementedError  # pragma: no cover

    def close(self) -> None:  # noqa: B027
        """Release resources. Default is a no-op."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(endpoint={self.endpoint!r})"
