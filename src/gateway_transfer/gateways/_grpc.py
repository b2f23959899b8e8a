"""CS3 gateway client over gRPC using grpcio and the cs3apis stubs."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from gateway_transfer._checksum import ChecksumPriority, ChecksumType
from gateway_transfer._errors import Cancelled, GatewayConnectionError, GatewayError, RPCError
from gateway_transfer._gateway import Gateway
from gateway_transfer._hints import OpaqueEntry, encode_plain
from gateway_transfer._models import ResourceInfo, ResourceType, TransferEndpoint
from gateway_transfer._status import Reply, RPCStatus, StatusCode

if TYPE_CHECKING:
    from collections.abc import Iterator

    from gateway_transfer._config import SessionConfig
    from gateway_transfer._context import CallContext

log = logging.getLogger(__name__)

_CHECKSUM_PREFIX = "RESOURCE_CHECKSUM_TYPE_"
_UPLOAD_LENGTH_KEY = "Upload-Length"
_CANCEL_POLL_INTERVAL = 0.1


# region: message conversion


def _has_field(message: Any, name: str) -> bool:
    return name in message.DESCRIPTOR.fields_by_name


def _to_status(status: Any) -> RPCStatus:
    return RPCStatus(StatusCode.coerce(int(status.code)), status.message, status.trace)


def _checksum_type_name(value: int) -> str:
    from cs3.storage.provider.v1beta1 import resources_pb2 as cs3spr

    try:
        name = cs3spr.ResourceChecksumType.Name(value)
    except ValueError:
        return ChecksumType.INVALID.value
    return name[len(_CHECKSUM_PREFIX) :].lower() if name.startswith(_CHECKSUM_PREFIX) else name.lower()


def _to_resource_info(info: Any) -> ResourceInfo:
    try:
        rtype = ResourceType(int(info.type))
    except ValueError:
        rtype = ResourceType.INVALID
    mtime = None
    if info.HasField("mtime"):
        mtime = datetime.fromtimestamp(info.mtime.seconds + info.mtime.nanos / 1e9, tz=timezone.utc)
    checksum = None
    if info.HasField("checksum") and info.checksum.sum:
        checksum = f"{_checksum_type_name(info.checksum.type)}:{info.checksum.sum}"
    resource_id = None
    if info.HasField("id"):
        resource_id = f"{info.id.storage_id}!{info.id.opaque_id}"
    return ResourceInfo(
        path=info.path,
        type=rtype,
        size=int(info.size),
        mtime=mtime,
        checksum=checksum,
        etag=info.etag or None,
        mime_type=info.mime_type or None,
        id=resource_id,
    )


def _to_opaque(opaque: Any) -> dict[str, OpaqueEntry]:
    if opaque is None:
        return {}
    return {key: OpaqueEntry(entry.decoder, bytes(entry.value)) for key, entry in opaque.map.items()}


def _to_checksums(available: Any) -> tuple[ChecksumPriority, ...]:
    return tuple(
        ChecksumPriority(ChecksumType.from_name(_checksum_type_name(xs.type)), int(xs.priority)) for xs in available
    )


# endregion


class GrpcGateway(Gateway):
    """Control-plane client for a CS3 gateway.

    :param channel: An open ``grpc.Channel``.
    :param stub: The generated ``GatewayAPIStub`` bound to ``channel``.
    :param config: Session settings (RPC deadline, protocol preference).
    """

    def __init__(self, channel: Any, stub: Any, *, config: SessionConfig) -> None:
        self._channel = channel
        self._stub = stub
        self._config = config

    @classmethod
    def connect(cls, host: str, *, insecure: bool, config: SessionConfig) -> GrpcGateway:
        import grpc
        from cs3.gateway.v1beta1 import gateway_api_pb2_grpc as cs3gw_grpc

        if insecure:
            log.warning("Opening a plaintext channel to %s -- NOT safe for production.", host)
            channel = grpc.insecure_channel(host)
        else:
            channel = grpc.secure_channel(host, grpc.ssl_channel_credentials())
        try:
            grpc.channel_ready_future(channel).result(timeout=config.connect_timeout)
        except grpc.FutureTimeoutError as exc:
            channel.close()
            raise GatewayConnectionError(
                f"Unable to establish a gRPC connection to {host!r} within {config.connect_timeout}s"
            ) from exc
        log.info("gRPC channel to %s is ready.", host)
        return cls(channel, cs3gw_grpc.GatewayAPIStub(channel), config=config)

    @property
    def name(self) -> str:
        return "grpc"

    # region: call plumbing

    @contextmanager
    def _errors(self, operation: str, path: str | None = None) -> Iterator[None]:
        """Map grpc exceptions to gateway_transfer errors."""
        import grpc

        try:
            yield
        except GatewayError:
            raise
        except grpc.RpcError as exc:
            code = exc.code() if hasattr(exc, "code") else None
            details = exc.details() if hasattr(exc, "details") else str(exc)
            if code in (grpc.StatusCode.CANCELLED, grpc.StatusCode.DEADLINE_EXCEEDED):
                raise Cancelled(f"{operation}: {details}", operation=operation, path=path) from exc
            if code is grpc.StatusCode.UNAVAILABLE:
                raise GatewayConnectionError(f"{operation}: {details}", operation=operation, path=path) from exc
            raise RPCError(
                f"{operation}: {details}",
                operation=operation,
                path=path,
                code=code.name if code is not None else "",
                status_message=details or "",
            ) from exc

    def _call(self, ctx: CallContext, operation: str, request: Any, path: str | None = None) -> Any:
        """Run one unary call, aborting it as soon as ``ctx`` is cancelled."""
        import grpc

        ctx.raise_if_cancelled(operation)
        method = getattr(self._stub, operation)
        with self._errors(operation, path):
            future = method.future(request, metadata=list(ctx.metadata), timeout=ctx.timeout(self._config.rpc_timeout))
            while True:
                try:
                    return future.result(timeout=_CANCEL_POLL_INTERVAL)
                except grpc.FutureTimeoutError:
                    if ctx.cancelled:
                        future.cancel()
                        raise Cancelled(
                            f"{operation}: cancelled while in flight", operation=operation, path=path
                        ) from None
                except grpc.FutureCancelledError as exc:
                    raise Cancelled(f"{operation}: call was cancelled", operation=operation, path=path) from exc

    @staticmethod
    def _ref(path: str) -> Any:
        from cs3.storage.provider.v1beta1 import resources_pb2 as cs3spr

        return cs3spr.Reference(path=path)

    def _pick_protocol(self, protocols: list[Any], *, prefer_resumable: bool = False) -> Any:
        order = list(self._config.preferred_protocols)
        if prefer_resumable and "tus" in order:
            order.remove("tus")
            order.insert(0, "tus")
        for name in order:
            for proto in protocols:
                if proto.protocol == name:
                    return proto
        return protocols[0]

    # endregion

    # region: authentication

    def list_auth_providers(self, ctx: CallContext) -> Reply[list[str]]:
        from cs3.auth.registry.v1beta1 import registry_api_pb2 as cs3auth

        res = self._call(ctx, "ListAuthProviders", cs3auth.ListAuthProvidersRequest())
        if _has_field(res, "types"):
            methods = list(res.types)
        else:
            methods = [p.provider_type for p in res.providers]
        return Reply(_to_status(res.status), methods)

    def authenticate(self, ctx: CallContext, method: str, principal: str, secret: str) -> Reply[str]:
        from cs3.gateway.v1beta1 import gateway_api_pb2 as cs3gw

        req = cs3gw.AuthenticateRequest(type=method, client_id=principal, client_secret=secret)
        res = self._call(ctx, "Authenticate", req)
        return Reply(_to_status(res.status), res.token)

    # endregion

    # region: resource operations

    def stat(self, ctx: CallContext, path: str) -> Reply[ResourceInfo]:
        from cs3.storage.provider.v1beta1 import provider_api_pb2 as cs3sp

        res = self._call(ctx, "Stat", cs3sp.StatRequest(ref=self._ref(path)), path)
        status = _to_status(res.status)
        return Reply(status, _to_resource_info(res.info) if status.ok else None)

    def create_container(self, ctx: CallContext, path: str) -> Reply[None]:
        from cs3.storage.provider.v1beta1 import provider_api_pb2 as cs3sp

        res = self._call(ctx, "CreateContainer", cs3sp.CreateContainerRequest(ref=self._ref(path)), path)
        return Reply(_to_status(res.status))

    def delete(self, ctx: CallContext, path: str) -> Reply[None]:
        from cs3.storage.provider.v1beta1 import provider_api_pb2 as cs3sp

        res = self._call(ctx, "Delete", cs3sp.DeleteRequest(ref=self._ref(path)), path)
        return Reply(_to_status(res.status))

    def move(self, ctx: CallContext, source: str, target: str) -> Reply[None]:
        from cs3.storage.provider.v1beta1 import provider_api_pb2 as cs3sp

        req = cs3sp.MoveRequest(source=self._ref(source), destination=self._ref(target))
        res = self._call(ctx, "Move", req, source)
        return Reply(_to_status(res.status))

    def list_container(self, ctx: CallContext, path: str) -> Reply[list[ResourceInfo]]:
        from cs3.storage.provider.v1beta1 import provider_api_pb2 as cs3sp

        res = self._call(ctx, "ListContainer", cs3sp.ListContainerRequest(ref=self._ref(path)), path)
        return Reply(_to_status(res.status), [_to_resource_info(info) for info in res.infos])

    # endregion

    # region: transfers

    def initiate_file_upload(
        self, ctx: CallContext, path: str, size: int, *, prefer_resumable: bool = False
    ) -> Reply[TransferEndpoint]:
        from cs3.storage.provider.v1beta1 import provider_api_pb2 as cs3sp
        from cs3.types.v1beta1 import types_pb2 as cs3types

        length = encode_plain(size)
        opaque = cs3types.Opaque(map={_UPLOAD_LENGTH_KEY: cs3types.OpaqueEntry(decoder=length.decoder, value=length.value)})
        res = self._call(ctx, "InitiateFileUpload", cs3sp.InitiateFileUploadRequest(ref=self._ref(path), opaque=opaque), path)
        status = _to_status(res.status)
        if not status.ok:
            return Reply(status)

        opaque_hints = _to_opaque(res.opaque) if res.HasField("opaque") else {}
        if _has_field(res, "protocols") and len(res.protocols) > 0:
            proto = self._pick_protocol(list(res.protocols), prefer_resumable=prefer_resumable)
            opaque_hints.update(_to_opaque(proto.opaque))
            endpoint = TransferEndpoint(
                endpoint=proto.upload_endpoint,
                token=proto.token,
                checksums=_to_checksums(proto.available_checksums),
                opaque=opaque_hints,
                protocol=proto.protocol,
            )
        else:
            endpoint = TransferEndpoint(
                endpoint=res.upload_endpoint,
                token=res.token,
                checksums=_to_checksums(res.available_checksums),
                opaque=opaque_hints,
            )
        return Reply(status, endpoint)

    def initiate_file_download(self, ctx: CallContext, path: str) -> Reply[TransferEndpoint]:
        from cs3.storage.provider.v1beta1 import provider_api_pb2 as cs3sp

        res = self._call(ctx, "InitiateFileDownload", cs3sp.InitiateFileDownloadRequest(ref=self._ref(path)), path)
        status = _to_status(res.status)
        if not status.ok:
            return Reply(status)

        opaque_hints = _to_opaque(res.opaque) if res.HasField("opaque") else {}
        if _has_field(res, "protocols") and len(res.protocols) > 0:
            proto = self._pick_protocol(list(res.protocols))
            opaque_hints.update(_to_opaque(proto.opaque))
            endpoint = TransferEndpoint(
                endpoint=proto.download_endpoint,
                token=proto.token,
                opaque=opaque_hints,
                protocol=proto.protocol,
            )
        else:
            endpoint = TransferEndpoint(endpoint=res.download_endpoint, token=res.token, opaque=opaque_hints)
        return Reply(status, endpoint)

    # endregion

    def close(self) -> None:
        if self._channel is not None:
            self._channel.close()
            self._channel = None
