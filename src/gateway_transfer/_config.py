"""Configuration model: immutable settings passed into a Session."""

from __future__ import annotations

import dataclasses

ACCESS_TOKEN_HEADER = "x-access-token"
TRANSPORT_TOKEN_HEADER = "X-Reva-Transfer"

# Data-plane transfers may legitimately run for a very long time.
DEFAULT_TRANSFER_TIMEOUT = 24 * 60 * 60.0


@dataclasses.dataclass(frozen=True)
class SessionConfig:
    """Settings shared by a session and every transfer it drives.

    :param gateway_type: Registered gateway type used by ``Session.initiate``.
    :param connect_timeout: Seconds to wait for the control-plane channel to become ready.
    :param rpc_timeout: Per-call deadline for control-plane calls, or ``None`` for none.
    :param transfer_timeout: Timeout in seconds for data-plane requests.
    :param verify_tls: Verify TLS certificates of data-plane endpoints.
    :param prefer_resumable: Upload through the resumable protocol instead of a plain PUT.
    :param tus_chunk_size: Chunk size in bytes for resumable uploads.
    :param access_token_header: Header/metadata key carrying the session token.
    :param transport_token_header: Header carrying the per-endpoint transport token.
    :param preferred_protocols: Order in which announced data-plane protocols are picked.
    """

    gateway_type: str = "grpc"
    connect_timeout: float = 10.0
    rpc_timeout: float | None = None
    transfer_timeout: float = DEFAULT_TRANSFER_TIMEOUT
    verify_tls: bool = True
    prefer_resumable: bool = False
    tus_chunk_size: int = 8 * 1024 * 1024
    access_token_header: str = ACCESS_TOKEN_HEADER
    transport_token_header: str = TRANSPORT_TOKEN_HEADER
    preferred_protocols: tuple[str, ...] = ("simple", "tus", "spaces")

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Check value ranges.

        :raises ValueError: If a timeout or the chunk size is not positive.
        """
        if self.connect_timeout <= 0:
            raise ValueError(f"connect_timeout must be positive, got {self.connect_timeout!r}")
        if self.rpc_timeout is not None and self.rpc_timeout <= 0:
            raise ValueError(f"rpc_timeout must be positive or None, got {self.rpc_timeout!r}")
        if self.transfer_timeout <= 0:
            raise ValueError(f"transfer_timeout must be positive, got {self.transfer_timeout!r}")
        if self.tus_chunk_size <= 0:
            raise ValueError(f"tus_chunk_size must be positive, got {self.tus_chunk_size!r}")
        if not self.gateway_type:
            raise ValueError("gateway_type must not be empty")

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> SessionConfig:
        """Construct from a plain dict (e.g. parsed TOML/JSON).

        :raises TypeError: If ``data`` contains unknown keys.
        """
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            msg = f"Unknown session config keys: {unknown}. Known keys: {sorted(known)}"
            raise TypeError(msg)
        values = dict(data)
        if "preferred_protocols" in values:
            raw = values["preferred_protocols"]
            if isinstance(raw, str) or not isinstance(raw, (list, tuple)):
                msg = "'preferred_protocols' must be a list of strings"
                raise TypeError(msg)
            values["preferred_protocols"] = tuple(str(p) for p in raw)
        return cls(**values)  # type: ignore[arg-type]
