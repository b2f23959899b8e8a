"""Gateway factory registry: maps gateway type names to implementations."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gateway_transfer._gateway import Gateway

# Global gateway factory registry: maps type strings to gateway classes.
_GATEWAY_FACTORIES: dict[str, type[Gateway]] = {}


def register_gateway(type_name: str, cls: type[Gateway]) -> None:
    """Register a gateway class for a given type string.

    :param type_name: The type identifier (e.g. ``"grpc"``).
    :param cls: The gateway class; its ``connect`` classmethod is used as factory.
    """
    _GATEWAY_FACTORIES[type_name] = cls


def _register_builtin_gateways() -> None:
    """Register the built-in gateways."""
    if "grpc" not in _GATEWAY_FACTORIES:
        from gateway_transfer.gateways._grpc import GrpcGateway

        register_gateway("grpc", GrpcGateway)


def get_gateway_factory(type_name: str) -> type[Gateway]:
    """Look up the gateway class registered for ``type_name``.

    :raises ValueError: If no gateway is registered under that name.
    """
    _register_builtin_gateways()
    if type_name not in _GATEWAY_FACTORIES:
        raise ValueError(
            f"Unknown gateway type '{type_name}'. Registered types: {sorted(_GATEWAY_FACTORIES.keys())}"
        )
    return _GATEWAY_FACTORIES[type_name]
