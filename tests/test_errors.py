"""Tests for the error hierarchy."""

from __future__ import annotations

import pytest

from gateway_transfer._errors import (
    AuthError,
    Cancelled,
    CapabilityNotSupported,
    ChecksumError,
    GatewayConnectionError,
    GatewayError,
    InvalidPath,
    InvalidResource,
    NotFound,
    RPCError,
    TransportExecutionError,
    TransportNegotiationError,
    TransportUnsupported,
    VerificationError,
)


class TestGatewayError:
    def test_default_attributes(self) -> None:
        e = GatewayError("boom")
        assert e.path is None
        assert e.operation is None
        assert e.endpoint is None
        assert str(e) == "boom"

    def test_context_in_str(self) -> None:
        e = GatewayError("boom", path="/a", operation="Stat", endpoint="https://x")
        assert str(e) == "boom | operation='Stat' | path='/a' | endpoint='https://x'"

    def test_repr(self) -> None:
        assert repr(GatewayError("boom", path="/a")) == "GatewayError('boom', path='/a')"


class TestHierarchy:
    @pytest.mark.parametrize(
        "cls",
        [
            GatewayConnectionError,
            AuthError,
            RPCError,
            TransportNegotiationError,
            TransportExecutionError,
            ChecksumError,
            VerificationError,
            InvalidPath,
            InvalidResource,
            CapabilityNotSupported,
            Cancelled,
        ],
    )
    def test_is_gateway_error(self, cls: type[GatewayError]) -> None:
        assert issubclass(cls, GatewayError)

    def test_not_found_is_rpc_error(self) -> None:
        assert issubclass(NotFound, RPCError)

    def test_unsupported_is_negotiation_error(self) -> None:
        assert issubclass(TransportUnsupported, TransportNegotiationError)

    def test_execution_is_not_negotiation(self) -> None:
        assert not issubclass(TransportExecutionError, TransportNegotiationError)


class TestRPCError:
    def test_fields(self) -> None:
        e = RPCError("failed", operation="Stat", code="INTERNAL", status_message="oops", trace="t-1")
        assert e.code == "INTERNAL"
        assert e.status_message == "oops"
        assert e.trace == "t-1"
        assert "code='INTERNAL'" in str(e)
        assert "trace='t-1'" in str(e)


class TestCapabilityNotSupported:
    def test_fields(self) -> None:
        e = CapabilityNotSupported("nope", capability="read", transport="tus")
        assert e.capability == "read"
        assert e.transport == "tus"
        assert "transport='tus'" in str(e)
