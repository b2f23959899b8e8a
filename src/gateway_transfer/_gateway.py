"""Gateway abstract base class: the control-plane contract."""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gateway_transfer._config import SessionConfig
    from gateway_transfer._context import CallContext
    from gateway_transfer._models import ResourceInfo, TransferEndpoint
    from gateway_transfer._status import Reply


class Gateway(abc.ABC):
    """Abstract base class for control-plane clients.

    Every call returns a :class:`~gateway_transfer._status.Reply` whose status
    is checked by the caller. Transport-level failures of the RPC layer itself
    must be mapped to ``gateway_transfer`` errors, never leak.
    """

    @classmethod
    @abc.abstractmethod
    def connect(cls, host: str, *, insecure: bool, config: SessionConfig) -> Gateway:
        """Dial ``host`` and return a ready gateway client.

        :raises GatewayConnectionError: If the channel cannot be established.
        """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Identifier of the gateway implementation (e.g. ``'grpc'``)."""

    @abc.abstractmethod
    def list_auth_providers(self, ctx: CallContext) -> Reply[list[str]]:
        """List the login methods the gateway accepts."""

    @abc.abstractmethod
    def authenticate(self, ctx: CallContext, method: str, principal: str, secret: str) -> Reply[str]:
        """Authenticate and return the access token."""

    @abc.abstractmethod
    def stat(self, ctx: CallContext, path: str) -> Reply[ResourceInfo]:
        """Query metadata of a single resource."""

    @abc.abstractmethod
    def create_container(self, ctx: CallContext, path: str) -> Reply[None]:
        """Create a single container (directory)."""

    @abc.abstractmethod
    def delete(self, ctx: CallContext, path: str) -> Reply[None]:
        """Delete a resource."""

    @abc.abstractmethod
    def move(self, ctx: CallContext, source: str, target: str) -> Reply[None]:
        """Move or rename a resource."""

    @abc.abstractmethod
    def list_container(self, ctx: CallContext, path: str) -> Reply[list[ResourceInfo]]:
        """List the immediate children of a container."""

    @abc.abstractmethod
    def initiate_file_upload(
        self, ctx: CallContext, path: str, size: int, *, prefer_resumable: bool = False
    ) -> Reply[TransferEndpoint]:
        """Ask for an endpoint to upload ``size`` bytes to ``path``.

        When the gateway announces several protocols, ``prefer_resumable``
        picks the resumable one if it is among them.
        """

    @abc.abstractmethod
    def initiate_file_download(self, ctx: CallContext, path: str) -> Reply[TransferEndpoint]:
        """Ask for an endpoint to download ``path`` from."""

    def close(self) -> None:  # noqa: B027
        """Release the channel. Default is a no-op."""
