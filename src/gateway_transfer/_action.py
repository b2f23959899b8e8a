"""Common base of all session-bound actions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gateway_transfer._path import GatewayPath

if TYPE_CHECKING:
    from gateway_transfer._session import Session


class Action:
    """An operation bound to an authenticated session.

    :param session: The session to issue calls through.
    :raises AuthError: If the session is not initiated and logged in.
    """

    def __init__(self, session: Session) -> None:
        session.require_valid()
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    def __repr__(self) -> str:
        return f"{type(self).__name__}(session={self._session!r})"

    @staticmethod
    def _path(path: str | GatewayPath) -> str:
        """Validate and normalize a remote path."""
        return str(path if isinstance(path, GatewayPath) else GatewayPath(path))
