"""Control-plane status values and the status-to-error mapping."""

from __future__ import annotations

import dataclasses
import enum
from typing import Generic, TypeVar

from gateway_transfer._errors import NotFound, RPCError

T = TypeVar("T")


class StatusCode(enum.IntEnum):
    """Status codes of the CS3 rpc API."""

    INVALID = 0
    OK = 1
    CANCELLED = 2
    UNKNOWN = 3
    INVALID_ARGUMENT = 4
    DEADLINE_EXCEEDED = 5
    NOT_FOUND = 6
    ALREADY_EXISTS = 7
    PERMISSION_DENIED = 8
    UNAUTHENTICATED = 9
    RESOURCE_EXHAUSTED = 10
    FAILED_PRECONDITION = 11
    ABORTED = 12
    OUT_OF_RANGE = 13
    UNIMPLEMENTED = 14
    INTERNAL = 15
    UNAVAILABLE = 16
    DATA_LOSS = 17
    REDIRECTION = 18
    INSUFFICIENT_STORAGE = 19
    LOCKED = 20
    TOO_EARLY = 21

    @classmethod
    def coerce(cls, code: int) -> StatusCode | int:
        """Return the enum member for ``code``, or the raw int if unknown."""
        try:
            return cls(code)
        except ValueError:
            return code


def _code_name(code: StatusCode | int) -> str:
    return code.name if isinstance(code, StatusCode) else f"CODE_{int(code)}"


@dataclasses.dataclass(frozen=True)
class RPCStatus:
    """Immutable status returned by every control-plane call.

    :param code: The status code; only :attr:`StatusCode.OK` means success.
    :param message: Server-supplied description.
    :param trace: Server-side trace identifier.
    """

    code: StatusCode | int
    message: str = ""
    trace: str = ""

    @property
    def ok(self) -> bool:
        return self.code == StatusCode.OK

    @property
    def code_name(self) -> str:
        return _code_name(self.code)


OK = RPCStatus(StatusCode.OK)


@dataclasses.dataclass(frozen=True)
class Reply(Generic[T]):
    """The status and payload of a single gateway call."""

    status: RPCStatus
    value: T | None = None


def check_status(operation: str, status: RPCStatus | None) -> None:
    """Raise unless ``status`` carries the OK code.

    Every other code is an error, including ones a caller may consider
    benign such as ``ALREADY_EXISTS``.

    :param operation: Name of the control-plane operation, included in the error.
    :param status: The status to check. A missing status is treated as a failure.
    :raises NotFound: If the code is ``NOT_FOUND``.
    :raises RPCError: For every other non-OK code.
    """
    if status is None:
        raise RPCError(f"{operation}: no status returned", operation=operation, code=StatusCode.INVALID.name)
    if status.ok:
        return
    cls = NotFound if status.code == StatusCode.NOT_FOUND else RPCError
    raise cls(
        f"{operation}: {status.message!r} (code={status.code_name}, trace={status.trace!r})",
        operation=operation,
        code=status.code_name,
        status_message=status.message,
        trace=status.trace,
    )


def unwrap(operation: str, reply: Reply[T]) -> T:
    """Check the status of ``reply`` and return its payload."""
    check_status(operation, reply.status)
    return reply.value  # type: ignore[return-value]
