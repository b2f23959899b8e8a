"""Gateway implementations."""

from gateway_transfer.gateways._grpc import GrpcGateway

__all__ = ["GrpcGateway"]
