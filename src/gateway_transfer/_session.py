"""Session: the authenticated control-plane connection and its call context."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, BinaryIO

import httpx

from gateway_transfer._config import SessionConfig
from gateway_transfer._context import CallContext
from gateway_transfer._errors import AuthError, GatewayConnectionError, GatewayError
from gateway_transfer._httpreq import HTTPRequest
from gateway_transfer._registry import get_gateway_factory
from gateway_transfer._status import check_status, unwrap

if TYPE_CHECKING:
    from types import TracebackType

    from gateway_transfer._gateway import Gateway

log = logging.getLogger(__name__)

BASIC_LOGIN = "basic"


class Session:
    """A session with a storage gateway.

    A session becomes valid once :meth:`initiate` has opened the channel and
    a login has stored an access token. The token is attached to the call
    context, so every later control-plane call and data-plane request carries it.

    Logging in mutates the session; it must complete before other calls are
    issued on the same session.

    :param config: Session settings; defaults to :class:`SessionConfig`.
    :param context: Root call context; defaults to a background context.
    :param http_client: Client for data-plane requests; built from ``config`` if omitted.
    """

    def __init__(
        self,
        config: SessionConfig | None = None,
        *,
        context: CallContext | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._config = config or SessionConfig()
        self._ctx = context or CallContext.background()
        self._gateway: Gateway | None = None
        self._token = ""
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(
            timeout=self._config.transfer_timeout,
            verify=self._config.verify_tls,
            follow_redirects=True,
        )

    def __repr__(self) -> str:
        gateway = self._gateway.name if self._gateway is not None else None
        return f"Session(gateway={gateway!r}, authenticated={bool(self._token)!r})"

    # region: properties

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def context(self) -> CallContext:
        return self._ctx

    @property
    def token(self) -> str:
        return self._token

    @property
    def http(self) -> httpx.Client:
        return self._http

    @property
    def gateway(self) -> Gateway:
        """The control-plane client.

        :raises AuthError: If :meth:`initiate` has not been called.
        """
        if self._gateway is None:
            raise AuthError("Session has not been initiated; call initiate() first")
        return self._gateway

    # endregion

    # region: lifecycle

    def initiate(self, host: str, insecure: bool = False) -> None:
        """Open the control-plane channel to ``host``.

        :param host: ``host:port`` of the gateway.
        :param insecure: Use a plaintext channel instead of TLS.
        :raises GatewayConnectionError: If ``host`` is empty or the channel cannot be established.
        """
        if not host or not host.strip():
            raise GatewayConnectionError("No host provided")
        try:
            factory = get_gateway_factory(self._config.gateway_type)
        except ValueError as exc:
            raise GatewayConnectionError(str(exc), operation="initiate") from exc
        try:
            gateway = factory.connect(host, insecure=insecure, config=self._config)
        except GatewayConnectionError:
            raise
        except GatewayError as exc:
            raise GatewayConnectionError(f"Unable to establish a connection to {host!r}: {exc}") from exc
        if self._gateway is not None:
            self._gateway.close()
        self._gateway = gateway
        log.info("Session initiated against %s (%s)", host, gateway.name)

    def is_valid(self) -> bool:
        """Check whether the session has been initiated and authenticated."""
        return self._gateway is not None and self._ctx is not None and self._token != ""

    def require_valid(self) -> None:
        """:raises AuthError: If the session is not initiated and logged in."""
        if self._gateway is None:
            raise AuthError("Session has not been initiated; call initiate() first")
        if not self._token:
            raise AuthError("Session is not authenticated; log in first")

    def close(self) -> None:
        """Close the channel and, if owned, the HTTP client."""
        if self._gateway is not None:
            self._gateway.close()
            self._gateway = None
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> Session:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    # endregion

    # region: authentication

    def list_login_methods(self) -> list[str]:
        """Return all login methods supported by the gateway.

        :raises AuthError: If the session has not been initiated.
        :raises RPCError: If the gateway returns a non-OK status.
        """
        reply = self.gateway.list_auth_providers(self._ctx)
        return list(unwrap("ListAuthProviders", reply) or [])

    def login(self, method: str, principal: str, secret: str) -> None:
        """Authenticate and attach the returned token to the call context.

        :raises AuthError: If the session has not been initiated or no token was returned.
        :raises RPCError: If the gateway returns a non-OK status.
        """
        reply = self.gateway.authenticate(self._ctx, method, principal, secret)
        check_status("Authenticate", reply.status)
        token = reply.value or ""
        if not token:
            raise AuthError(f"Invalid token received: {token!r}", operation="Authenticate")
        self._token = token
        self._ctx = self._ctx.with_metadata(self._config.access_token_header, token)
        log.info("Logged in as %r using %r", principal, method)

    def basic_login(self, username: str, password: str) -> None:
        """Log in with the ``basic`` method if the gateway offers it.

        :raises AuthError: If ``basic`` is not supported or the methods cannot be listed.
        """
        try:
            methods = self.list_login_methods()
        except AuthError:
            raise
        except GatewayError as exc:
            raise AuthError(f"Unable to get a list of all supported login methods: {exc}") from exc
        if BASIC_LOGIN not in (m.lower() for m in methods):
            raise AuthError(f"'{BASIC_LOGIN}' login method is not supported")
        self.login(BASIC_LOGIN, username, password)

    # endregion

    # region: raw requests

    def _request_headers(self, transport_token: str) -> dict[str, str]:
        headers = {self._config.access_token_header: self._token}
        if transport_token:
            headers[self._config.transport_token_header] = transport_token
        return headers

    def new_read_request(self, endpoint: str, transport_token: str) -> HTTPRequest:
        """Build a GET request against a data-plane endpoint."""
        return HTTPRequest(self._http, self._ctx, "GET", endpoint, self._request_headers(transport_token))

    def new_write_request(
        self, endpoint: str, transport_token: str, data: BinaryIO, size: int | None = None
    ) -> HTTPRequest:
        """Build a PUT request that streams ``data`` to a data-plane endpoint.

        A known ``size`` is sent as ``Content-Length`` instead of a chunked body.
        """
        return HTTPRequest(
            self._http, self._ctx, "PUT", endpoint, self._request_headers(transport_token), data, size=size
        )

    # endregion


def new_session(config: SessionConfig | None = None, *, context: CallContext | None = None) -> Session:
    """Create a new, not yet initiated session."""
    return Session(config, context=context)
