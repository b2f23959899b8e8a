"""Normalized error hierarchy for gateway_transfer."""

from __future__ import annotations

from typing import Optional


class GatewayError(Exception):
    """Base class for all gateway_transfer errors.

    :param message: Human-readable error description.
    :param path: The remote path involved in the error, if any.
    :param operation: The control-plane or transfer operation that failed, if any.
    :param endpoint: The data-plane endpoint involved, if any.
    """

    def __init__(
        self,
        message: str = "",
        *,
        path: Optional[str] = None,
        operation: Optional[str] = None,
        endpoint: Optional[str] = None,
    ) -> None:
        self.path = path
        self.operation = operation
        self.endpoint = endpoint
        super().__init__(message)

    def _context(self) -> list[tuple[str, object]]:
        ctx: list[tuple[str, object]] = []
        if self.operation is not None:
            ctx.append(("operation", self.operation))
        if self.path is not None:
            ctx.append(("path", self.path))
        if self.endpoint is not None:
            ctx.append(("endpoint", self.endpoint))
        return ctx

    def __str__(self) -> str:
        parts = [super().__str__()]
        parts.extend(f"{key}={value!r}" for key, value in self._context())
        return " | ".join(parts) if len(parts) > 1 else parts[0]

    def __repr__(self) -> str:
        cls = type(self).__name__
        args = [repr(super().__str__())]
        args.extend(f"{key}={value!r}" for key, value in self._context())
        return f"{cls}({', '.join(args)})"


class GatewayConnectionError(GatewayError):
    """Raised when the control-plane channel cannot be established."""


class AuthError(GatewayError):
    """Raised for login failures and for calls issued on an unauthenticated session."""


class RPCError(GatewayError):
    """Raised for any non-OK control-plane status.

    :param code: Name of the status code returned by the gateway.
    :param status_message: The message carried by the status.
    :param trace: The server-side trace identifier.
    """

    def __init__(
        self,
        message: str = "",
        *,
        path: Optional[str] = None,
        operation: Optional[str] = None,
        endpoint: Optional[str] = None,
        code: str = "",
        status_message: str = "",
        trace: str = "",
    ) -> None:
        self.code = code
        self.status_message = status_message
        self.trace = trace
        super().__init__(message, path=path, operation=operation, endpoint=endpoint)

    def _context(self) -> list[tuple[str, object]]:
        ctx = super()._context()
        if self.code:
            ctx.append(("code", self.code))
        if self.trace:
            ctx.append(("trace", self.trace))
        return ctx


class NotFound(RPCError):
    """Raised when the gateway reports that a resource does not exist."""


class TransportNegotiationError(GatewayError):
    """Raised when the transport hints of an endpoint are present but unusable.

    A malformed hint aborts the operation; see :class:`TransportUnsupported`
    for the case that allows falling back to another transport.
    """


class TransportUnsupported(TransportNegotiationError):
    """Raised when an endpoint simply does not offer a transport."""


class TransportExecutionError(GatewayError):
    """Raised when the payload transfer fails after a transport was chosen."""


class ChecksumError(GatewayError):
    """Raised for unsupported checksum types or streams that cannot be rewound."""


class VerificationError(GatewayError):
    """Raised when a transfer finished but the result could not be confirmed."""


class InvalidPath(GatewayError):
    """Raised for malformed or unsafe remote paths."""


class InvalidResource(GatewayError):
    """Raised when a resource has the wrong type for the requested operation."""


class CapabilityNotSupported(GatewayError):
    """Raised when a transfer client lacks a required capability.

    :param capability: The name of the unsupported capability.
    :param transport: The transport that lacks it.
    """

    def __init__(
        self,
        message: str = "",
        *,
        path: Optional[str] = None,
        endpoint: Optional[str] = None,
        capability: str = "",
        transport: str = "",
    ) -> None:
        self.capability = capability
        self.transport = transport
        super().__init__(message, path=path, endpoint=endpoint)

    def _context(self) -> list[tuple[str, object]]:
        ctx = super()._context()
        if self.transport:
            ctx.append(("transport", self.transport))
        if self.capability:
            ctx.append(("capability", self.capability))
        return ctx


class Cancelled(GatewayError):
    """Raised when the call context was cancelled or its deadline passed."""
