"""TransferCapability enum and TransferCapabilitySet."""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from gateway_transfer._errors import CapabilityNotSupported

if TYPE_CHECKING:
    from collections.abc import Iterator


class TransferCapability(enum.Enum):
    """What a data-plane transfer client can do."""

    READ = "read"
    WRITE = "write"
    RESUMABLE = "resumable"
    CHECKSUM = "checksum"


class TransferCapabilitySet:
    """Immutable set of capabilities declared by a transfer client.

    :param capabilities: The set of supported capabilities.
    """

    __slots__ = ("_caps",)
    _caps: frozenset[TransferCapability]

    def __init__(self, capabilities: set[TransferCapability]) -> None:
        object.__setattr__(self, "_caps", frozenset(capabilities))

    def supports(self, cap: TransferCapability) -> bool:
        """Check whether a capability is supported."""
        return cap in self._caps

    def require(self, cap: TransferCapability, *, transport: str = "") -> None:
        """Raise if a capability is not supported.

        :raises CapabilityNotSupported: If the capability is missing.
        """
        if cap not in self._caps:
            raise CapabilityNotSupported(
                f"Capability '{cap.value}' is not supported",
                capability=cap.value,
                transport=transport,
            )

    def __contains__(self, cap: object) -> bool:
        return cap in self._caps

    def __iter__(self) -> Iterator[TransferCapability]:
        return iter(self._caps)

    def __len__(self) -> int:
        return len(self._caps)

    def __repr__(self) -> str:
        names = sorted(c.name for c in self._caps)
        return f"TransferCapabilitySet({{{', '.join(names)}}})"

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("TransferCapabilitySet is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("TransferCapabilitySet is immutable")
