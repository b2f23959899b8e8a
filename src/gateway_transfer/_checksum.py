"""Checksum negotiation and digest computation for uploads."""

from __future__ import annotations

import dataclasses
import enum
import hashlib
import logging
import zlib
from typing import TYPE_CHECKING, BinaryIO

from gateway_transfer._errors import ChecksumError

if TYPE_CHECKING:
    from collections.abc import Iterable

log = logging.getLogger(__name__)

_MAX_PRIORITY = 2**32 - 1
_CHUNK_SIZE = 64 * 1024


class ChecksumType(enum.Enum):
    """Checksum algorithms known to the gateway."""

    INVALID = "invalid"
    UNSET = "unset"
    ADLER32 = "adler32"
    MD5 = "md5"
    SHA1 = "sha1"

    @classmethod
    def from_name(cls, name: str) -> ChecksumType:
        """Parse a wire name; unknown names map to :attr:`INVALID`."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            return cls.INVALID


@dataclasses.dataclass(frozen=True)
class ChecksumPriority:
    """An algorithm offered by the server; a lower ``priority`` value wins."""

    type: ChecksumType
    priority: int


@dataclasses.dataclass(frozen=True)
class ChecksumSelection:
    """The negotiated algorithm and the digest computed over the payload."""

    type: ChecksumType = ChecksumType.UNSET
    digest: str = ""

    @property
    def is_set(self) -> bool:
        return self.type is not ChecksumType.UNSET

    @property
    def name(self) -> str:
        return self.type.value


NO_CHECKSUM = ChecksumSelection()


def select_checksum_type(offered: Iterable[ChecksumPriority]) -> ChecksumType:
    """Pick the offered algorithm with the smallest priority value.

    Ties resolve to the first entry; an empty offer yields ``UNSET``.
    """
    selected = ChecksumType.UNSET
    best = _MAX_PRIORITY
    for xs in offered:
        if xs.priority < best:
            best = xs.priority
            selected = xs.type
    return selected


def _hasher(checksum_type: ChecksumType) -> hashlib._Hash | None:
    if checksum_type is ChecksumType.MD5:
        return hashlib.md5()  # noqa: S324
    if checksum_type is ChecksumType.SHA1:
        return hashlib.sha1()  # noqa: S324
    return None


def compute_checksum(checksum_type: ChecksumType, stream: BinaryIO) -> str:
    """Digest ``stream`` with the given algorithm, consuming it once.

    :returns: Lowercase hex digest, or ``""`` for ``UNSET`` (stream untouched).
    :raises ChecksumError: If the algorithm is not supported.
    """
    if checksum_type is ChecksumType.UNSET:
        return ""
    if checksum_type is ChecksumType.ADLER32:
        value = 1
        while chunk := stream.read(_CHUNK_SIZE):
            value = zlib.adler32(chunk, value)
        return f"{value & 0xFFFFFFFF:08x}"
    hasher = _hasher(checksum_type)
    if hasher is None:
        raise ChecksumError(f"Invalid checksum type: {checksum_type.value}")
    while chunk := stream.read(_CHUNK_SIZE):
        hasher.update(chunk)
    return hasher.hexdigest()


def _is_seekable(stream: BinaryIO) -> bool:
    seekable = getattr(stream, "seekable", None)
    if seekable is None:
        return False
    try:
        return bool(seekable())
    except (OSError, ValueError):
        return False


def negotiate_checksum(offered: Iterable[ChecksumPriority], stream: BinaryIO) -> ChecksumSelection:
    """Select an algorithm, digest ``stream`` and rewind it for the transfer.

    :raises ChecksumError: If the algorithm is unsupported, or the stream must
        be digested but cannot be rewound afterwards. Nothing has been read
        from the stream in the latter case.
    """
    checksum_type = select_checksum_type(offered)
    if checksum_type is ChecksumType.UNSET:
        log.debug("No checksum negotiated")
        return NO_CHECKSUM
    if checksum_type is ChecksumType.INVALID:
        raise ChecksumError("Server offered an invalid checksum type")
    if not _is_seekable(stream):
        raise ChecksumError(
            f"Cannot compute a {checksum_type.value} checksum: the data stream is not seekable "
            "and could not be rewound for the transfer"
        )
    start = stream.tell()
    digest = compute_checksum(checksum_type, stream)
    stream.seek(start)
    log.debug("Negotiated %s checksum", checksum_type.value)
    return ChecksumSelection(checksum_type, digest)
