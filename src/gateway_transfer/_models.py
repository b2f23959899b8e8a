"""Immutable resource metadata and transfer endpoint models."""

from __future__ import annotations

import dataclasses
import enum
from typing import TYPE_CHECKING

from gateway_transfer._hints import OpaqueEntry

if TYPE_CHECKING:
    from datetime import datetime

    from gateway_transfer._checksum import ChecksumPriority


class ResourceType(enum.IntEnum):
    """Resource types reported by the gateway."""

    INVALID = 0
    FILE = 1
    CONTAINER = 2
    REFERENCE = 3
    SYMLINK = 4
    INTERNAL = 5


@dataclasses.dataclass(frozen=True, eq=False)
class ResourceInfo:
    """Immutable snapshot of a remote resource's metadata.

    :param path: Absolute path on the gateway.
    :param type: The resource type.
    :param size: Size in bytes (0 for containers on most gateways).
    :param mtime: Last modification time, if reported.
    :param checksum: Checksum as ``"<type>:<digest>"``, if reported.
    :param etag: Entity tag, if reported.
    :param mime_type: MIME type, if reported.
    :param id: Opaque resource identifier, if reported.
    """

    path: str
    type: ResourceType
    size: int = 0
    mtime: datetime | None = None
    checksum: str | None = None
    etag: str | None = None
    mime_type: str | None = None
    id: str | None = None

    @property
    def name(self) -> str:
        return self.path.rstrip("/").rsplit("/", 1)[-1]

    @property
    def is_file(self) -> bool:
        return self.type is ResourceType.FILE

    @property
    def is_container(self) -> bool:
        return self.type is ResourceType.CONTAINER

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ResourceInfo):
            return self.path == other.path and self.type == other.type
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.path, self.type))


@dataclasses.dataclass(frozen=True)
class TransferEndpoint:
    """Where and how to move the bytes of one transfer.

    Produced by an initiate-transfer call and consumed by exactly one upload
    or download.

    :param endpoint: URL of the data-plane endpoint.
    :param token: Short-lived transport token scoped to this endpoint.
    :param checksums: Checksum algorithms offered for uploads, with priorities.
    :param opaque: Opaque transport hints.
    :param protocol: Protocol name announced by the gateway, if any.
    """

    endpoint: str
    token: str = ""
    checksums: tuple[ChecksumPriority, ...] = ()
    opaque: dict[str, OpaqueEntry] = dataclasses.field(default_factory=dict)
    protocol: str = ""
