"""Tests for Session: connection, login and raw requests."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING

import httpx
import pytest

from gateway_transfer._config import SessionConfig
from gateway_transfer._errors import AuthError, GatewayConnectionError, RPCError
from gateway_transfer._session import Session, new_session
from gateway_transfer._status import RPCStatus, StatusCode

if TYPE_CHECKING:
    from conftest import DataServer, MemoryGateway


class TestInitiate:
    def test_empty_host(self, new_session: Session) -> None:
        with pytest.raises(GatewayConnectionError):
            new_session.initiate("")

    def test_blank_host(self, new_session: Session) -> None:
        with pytest.raises(GatewayConnectionError):
            new_session.initiate("   ")

    def test_unknown_gateway_type(self) -> None:
        with Session(SessionConfig(gateway_type="nope")) as s, pytest.raises(GatewayConnectionError) as exc_info:
            s.initiate("gateway.test:9142")
        assert "nope" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_initiate_sets_gateway(self, new_session: Session, gateway: MemoryGateway) -> None:
        new_session.initiate("gateway.test:9142")
        assert new_session.gateway is gateway
        assert not new_session.is_valid()

    def test_gateway_before_initiate(self, new_session: Session) -> None:
        """Accessing the control plane before initiate is an auth error, not an attribute error."""
        with pytest.raises(AuthError):
            new_session.gateway  # noqa: B018

    def test_new_session(self) -> None:
        s = new_session(SessionConfig(gateway_type="memory"))
        try:
            assert isinstance(s, Session)
            assert s.config.gateway_type == "memory"
        finally:
            s.close()


class TestLogin:
    def test_calls_before_initiate(self, new_session: Session) -> None:
        with pytest.raises(AuthError):
            new_session.list_login_methods()
        with pytest.raises(AuthError):
            new_session.login("basic", "alice", "secret")
        with pytest.raises(AuthError):
            new_session.basic_login("alice", "secret")

    def test_login_attaches_token(self, new_session: Session, gateway: MemoryGateway) -> None:
        new_session.initiate("gateway.test:9142")
        new_session.login("basic", "alice", "secret")
        assert new_session.is_valid()
        assert new_session.token == gateway.token
        assert new_session.context.get("x-access-token") == gateway.token
        assert gateway.calls[-1] == ("Authenticate", ("basic", "alice", "secret"))

    def test_later_calls_carry_token(self, session: Session, gateway: MemoryGateway) -> None:
        session.list_login_methods()
        assert gateway.contexts[-1].get("x-access-token") == gateway.token

    def test_empty_token(self, new_session: Session, gateway: MemoryGateway) -> None:
        gateway.token = ""
        new_session.initiate("gateway.test:9142")
        with pytest.raises(AuthError, match="Invalid token"):
            new_session.login("basic", "alice", "secret")
        assert not new_session.is_valid()

    def test_authenticate_rejected(self, new_session: Session, gateway: MemoryGateway) -> None:
        gateway.failures["Authenticate"] = RPCStatus(StatusCode.UNAUTHENTICATED, "bad password")
        new_session.initiate("gateway.test:9142")
        with pytest.raises(RPCError) as exc_info:
            new_session.login("basic", "alice", "wrong")
        assert exc_info.value.code == "UNAUTHENTICATED"
        assert new_session.token == ""

    def test_list_login_methods(self, new_session: Session, gateway: MemoryGateway) -> None:
        gateway.auth_methods = ["basic", "oidc"]
        new_session.initiate("gateway.test:9142")
        assert new_session.list_login_methods() == ["basic", "oidc"]


class TestBasicLogin:
    def test_basic_login(self, new_session: Session, gateway: MemoryGateway) -> None:
        gateway.auth_methods = ["oidc", "BASIC"]
        new_session.initiate("gateway.test:9142")
        new_session.basic_login("alice", "secret")
        assert new_session.is_valid()

    def test_basic_not_offered(self, new_session: Session, gateway: MemoryGateway) -> None:
        gateway.auth_methods = ["oidc"]
        new_session.initiate("gateway.test:9142")
        with pytest.raises(AuthError, match="'basic' login method is not supported"):
            new_session.basic_login("alice", "secret")
        assert "Authenticate" not in gateway.operations()

    def test_listing_fails(self, new_session: Session, gateway: MemoryGateway) -> None:
        gateway.failures["ListAuthProviders"] = RPCStatus(StatusCode.INTERNAL, "down")
        new_session.initiate("gateway.test:9142")
        with pytest.raises(AuthError) as exc_info:
            new_session.basic_login("alice", "secret")
        assert isinstance(exc_info.value.__cause__, RPCError)


class TestRequireValid:
    def test_before_login(self, new_session: Session) -> None:
        new_session.initiate("gateway.test:9142")
        with pytest.raises(AuthError, match="not authenticated"):
            new_session.require_valid()

    def test_valid(self, session: Session) -> None:
        session.require_valid()


class TestRawRequests:
    def test_read_request_headers(self, session: Session, gateway: MemoryGateway, data_server: DataServer) -> None:
        gateway.add_file("/home/a.txt", b"abc")
        gateway.downloads["7"] = "/home/a.txt"
        request = session.new_read_request("http://data.test/download/7", "xfer-7")
        assert request.read() == b"abc"
        sent = data_server.requests[-1]
        assert sent.headers["x-access-token"] == gateway.token
        assert sent.headers["X-Reva-Transfer"] == "xfer-7"

    def test_write_request_without_transport_token(
        self, session: Session, gateway: MemoryGateway, data_server: DataServer
    ) -> None:
        gateway.uploads["3"] = "/home/b.txt"
        request = session.new_write_request("http://data.test/upload/3", "", io.BytesIO(b"data"))
        request.write()
        sent = data_server.requests[-1]
        assert "X-Reva-Transfer" not in sent.headers
        assert data_server.bodies[-1] == b"data"
        assert gateway.blobs["/home/b.txt"] == b"data"

    def test_write_request_with_size(self, session: Session, gateway: MemoryGateway, data_server: DataServer) -> None:
        gateway.uploads["4"] = "/home/c.txt"
        session.new_write_request("http://data.test/upload/4", "xfer-4", io.BytesIO(b"data"), size=4).write()
        sent = data_server.requests[-1]
        assert sent.headers["Content-Length"] == "4"
        assert "Transfer-Encoding" not in sent.headers


class TestClose:
    def test_close_releases_gateway(self, session: Session, gateway: MemoryGateway) -> None:
        session.close()
        assert gateway.closed
        assert not session.is_valid()

    def test_does_not_close_foreign_http_client(self, session: Session, http_client: httpx.Client) -> None:
        session.close()
        assert not http_client.is_closed
