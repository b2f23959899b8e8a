"""CallContext: metadata, deadline and cancellation for outgoing calls."""

from __future__ import annotations

import threading
import time

from gateway_transfer._errors import Cancelled


class CallContext:
    """Carries outgoing call metadata and a cancellation signal.

    Contexts are immutable except for cancellation: :meth:`with_metadata`
    returns a new context that shares the cancellation state of its parent.

    :param metadata: Key/value pairs attached to every control-plane call.
    :param deadline: Absolute ``time.monotonic()`` deadline, or ``None``.
    """

    __slots__ = ("_metadata", "_deadline", "_cancel")

    def __init__(
        self,
        metadata: tuple[tuple[str, str], ...] = (),
        deadline: float | None = None,
        *,
        _cancel: threading.Event | None = None,
    ) -> None:
        self._metadata = tuple(metadata)
        self._deadline = deadline
        self._cancel = _cancel or threading.Event()

    @classmethod
    def background(cls) -> CallContext:
        """A fresh context with no metadata and no deadline."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> CallContext:
        """A fresh context whose deadline is ``seconds`` from now."""
        return cls(deadline=time.monotonic() + seconds)

    @property
    def metadata(self) -> tuple[tuple[str, str], ...]:
        return self._metadata

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def with_metadata(self, key: str, value: str) -> CallContext:
        """Return a child context with ``key`` appended to the outgoing metadata."""
        return CallContext((*self._metadata, (key, value)), self._deadline, _cancel=self._cancel)

    def get(self, key: str) -> str | None:
        """Return the last metadata value stored under ``key``."""
        for k, v in reversed(self._metadata):
            if k == key:
                return v
        return None

    def cancel(self) -> None:
        """Cancel this context and every context derived from the same root."""
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        if self._cancel.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def raise_if_cancelled(self, operation: str = "") -> None:
        """:raises Cancelled: If the context was cancelled or its deadline passed."""
        if self._cancel.is_set():
            raise Cancelled("Context cancelled", operation=operation or None)
        if self._deadline is not None and time.monotonic() >= self._deadline:
            raise Cancelled("Context deadline exceeded", operation=operation or None)

    def timeout(self, default: float | None = None) -> float | None:
        """Seconds left until the deadline, capped by ``default``."""
        if self._deadline is None:
            return default
        remaining = max(self._deadline - time.monotonic(), 0.0)
        if default is None:
            return remaining
        return min(remaining, default)

    def __repr__(self) -> str:
        keys = [k for k, _ in self._metadata]
        return f"CallContext(metadata_keys={keys!r}, cancelled={self.cancelled!r})"
