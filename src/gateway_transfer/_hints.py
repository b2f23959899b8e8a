"""Opaque transport hints: typed decoding of the server's side-channel map."""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Mapping

from gateway_transfer._errors import TransportNegotiationError, TransportUnsupported

if TYPE_CHECKING:
    from collections.abc import Iterable

PLAIN_DECODER = "plain"

WEBDAV_TOKEN_KEY = "webdav-token"
WEBDAV_PATH_KEY = "webdav-file-path"


@dataclasses.dataclass(frozen=True)
class OpaqueEntry:
    """One value of an opaque map together with the name of its decoder."""

    decoder: str
    value: bytes


OpaqueMap = Mapping[str, OpaqueEntry]


def encode_plain(value: object) -> OpaqueEntry:
    """Wrap ``value`` as a ``plain`` opaque entry."""
    return OpaqueEntry(decoder=PLAIN_DECODER, value=str(value).encode("utf-8"))


def _decode_entry(key: str, entry: OpaqueEntry) -> str:
    if entry.decoder.lower() != PLAIN_DECODER:
        raise TransportNegotiationError(f"Unsupported opaque decoder {entry.decoder!r} for key {key!r}")
    return entry.value.decode("utf-8")


def decode_opaque(opaque: OpaqueMap | None, required_keys: Iterable[str], *, strict: bool = True) -> dict[str, str]:
    """Decode the requested keys of an opaque map.

    :param opaque: The opaque map; ``None`` counts as empty.
    :param required_keys: Keys that must be present.
    :param strict: If ``True``, a key with an unknown decoder is an error;
        otherwise such keys are left out of the result.
    :raises TransportUnsupported: If a required key is missing.
    :raises TransportNegotiationError: If a key uses an unsupported decoder and ``strict`` is set.
    """
    opaque = opaque or {}
    decoded: dict[str, str] = {}
    for key in required_keys:
        entry = opaque.get(key)
        if entry is None:
            raise TransportUnsupported(f"Opaque hint {key!r} is missing")
        try:
            decoded[key] = _decode_entry(key, entry)
        except TransportNegotiationError:
            if strict:
                raise
    return decoded


@dataclasses.dataclass(frozen=True)
class CombinedProtocolHints:
    """Validated hints that enable the combined metadata+data protocol.

    :param token: Access token the combined-protocol server expects.
    :param path: Path of the target file on that server.
    """

    token: str
    path: str

    @classmethod
    def from_opaque(cls, opaque: OpaqueMap | None) -> CombinedProtocolHints:
        """Decode the reserved keys or reject the map.

        :raises TransportUnsupported: If the map or either reserved key is missing.
        :raises TransportNegotiationError: If a reserved key is present but not ``plain``.
        """
        if not opaque:
            raise TransportUnsupported("No opaque hints were provided")
        # Decoder checks come first so a malformed hint is never mistaken for an absent one.
        for key in (WEBDAV_TOKEN_KEY, WEBDAV_PATH_KEY):
            if key in opaque:
                _decode_entry(key, opaque[key])
        values = decode_opaque(opaque, (WEBDAV_TOKEN_KEY, WEBDAV_PATH_KEY))
        return cls(token=values[WEBDAV_TOKEN_KEY], path=values[WEBDAV_PATH_KEY])
