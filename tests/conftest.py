"""Shared test fixtures: an in-memory gateway and a mock data plane."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import httpx
import pytest

from gateway_transfer._config import SessionConfig
from gateway_transfer._gateway import Gateway
from gateway_transfer._models import ResourceInfo, ResourceType, TransferEndpoint
from gateway_transfer._registry import register_gateway
from gateway_transfer._session import Session
from gateway_transfer._status import OK, Reply, RPCStatus, StatusCode

if TYPE_CHECKING:
    from collections.abc import Iterator

    from gateway_transfer._checksum import ChecksumPriority
    from gateway_transfer._context import CallContext
    from gateway_transfer._hints import OpaqueEntry

DATA_HOST = "http://data.test"


def pytest_configure(config: object) -> None:
    """Register custom markers."""
    if isinstance(config, pytest.Config):
        config.addinivalue_line("markers", "integration: requires external services")


def _not_found(path: str) -> RPCStatus:
    return RPCStatus(StatusCode.NOT_FOUND, f"{path} not found", "trace-nf")


class MemoryGateway(Gateway):
    """Control plane that keeps resources in a dict.

    ``failures`` maps an operation name to the status it should return.
    Every call is recorded in ``calls`` as ``(operation, args)``.
    """

    pending: MemoryGateway | None = None

    def __init__(self) -> None:
        self.resources: dict[str, ResourceInfo] = {}
        self.blobs: dict[str, bytes] = {}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.contexts: list[CallContext] = []
        self.failures: dict[str, RPCStatus] = {}
        self.auth_methods = ["basic"]
        self.token = "access-token-1"
        self.checksums: tuple[ChecksumPriority, ...] = ()
        self.upload_opaque: dict[str, OpaqueEntry] = {}
        self.download_opaque: dict[str, OpaqueEntry] = {}
        self.upload_protocol = ""
        self.uploads: dict[str, str] = {}
        self.downloads: dict[str, str] = {}
        self.prefer_resumable: bool | None = None
        self.closed = False
        self._ids = itertools.count(1)

    @classmethod
    def connect(cls, host: str, *, insecure: bool, config: SessionConfig) -> MemoryGateway:
        assert cls.pending is not None
        return cls.pending

    @property
    def name(self) -> str:
        return "memory"

    # region: helpers

    def add_dir(self, path: str) -> None:
        self.resources[path] = ResourceInfo(path=path, type=ResourceType.CONTAINER)

    def add_file(self, path: str, data: bytes = b"") -> None:
        self.resources[path] = ResourceInfo(path=path, type=ResourceType.FILE, size=len(data))
        self.blobs[path] = data

    def add_resource(self, path: str, rtype: ResourceType) -> None:
        self.resources[path] = ResourceInfo(path=path, type=rtype)

    def operations(self) -> list[str]:
        return [op for op, _ in self.calls]

    def _record(self, ctx: CallContext, operation: str, *args: Any) -> RPCStatus | None:
        self.calls.append((operation, args))
        self.contexts.append(ctx)
        return self.failures.get(operation)

    # endregion

    def list_auth_providers(self, ctx: CallContext) -> Reply[list[str]]:
        failed = self._record(ctx, "ListAuthProviders")
        if failed is not None:
            return Reply(failed)
        return Reply(OK, list(self.auth_methods))

    def authenticate(self, ctx: CallContext, method: str, principal: str, secret: str) -> Reply[str]:
        failed = self._record(ctx, "Authenticate", method, principal, secret)
        if failed is not None:
            return Reply(failed)
        return Reply(OK, self.token)

    def stat(self, ctx: CallContext, path: str) -> Reply[ResourceInfo]:
        failed = self._record(ctx, "Stat", path)
        if failed is not None:
            return Reply(failed)
        if path not in self.resources:
            return Reply(_not_found(path))
        return Reply(OK, self.resources[path])

    def create_container(self, ctx: CallContext, path: str) -> Reply[None]:
        failed = self._record(ctx, "CreateContainer", path)
        if failed is not None:
            return Reply(failed)
        if path in self.resources:
            return Reply(RPCStatus(StatusCode.ALREADY_EXISTS, f"{path} exists"))
        self.add_dir(path)
        return Reply(OK)

    def delete(self, ctx: CallContext, path: str) -> Reply[None]:
        failed = self._record(ctx, "Delete", path)
        if failed is not None:
            return Reply(failed)
        if path not in self.resources:
            return Reply(_not_found(path))
        for key in [k for k in self.resources if k == path or k.startswith(path + "/")]:
            del self.resources[key]
            self.blobs.pop(key, None)
        return Reply(OK)

    def move(self, ctx: CallContext, source: str, target: str) -> Reply[None]:
        failed = self._record(ctx, "Move", source, target)
        if failed is not None:
            return Reply(failed)
        if source not in self.resources:
            return Reply(_not_found(source))
        for key in [k for k in self.resources if k == source or k.startswith(source + "/")]:
            new_key = target + key[len(source) :]
            info = self.resources.pop(key)
            self.resources[new_key] = ResourceInfo(path=new_key, type=info.type, size=info.size)
            if key in self.blobs:
                self.blobs[new_key] = self.blobs.pop(key)
        return Reply(OK)

    def list_container(self, ctx: CallContext, path: str) -> Reply[list[ResourceInfo]]:
        failed = self._record(ctx, "ListContainer", path)
        if failed is not None:
            return Reply(failed)
        if path not in self.resources:
            return Reply(_not_found(path))
        prefix = path.rstrip("/") + "/"
        children = [
            info
            for key, info in sorted(self.resources.items())
            if key != path and key.startswith(prefix) and "/" not in key[len(prefix) :]
        ]
        return Reply(OK, children)

    def initiate_file_upload(
        self, ctx: CallContext, path: str, size: int, *, prefer_resumable: bool = False
    ) -> Reply[TransferEndpoint]:
        failed = self._record(ctx, "InitiateFileUpload", path, size)
        self.prefer_resumable = prefer_resumable
        if failed is not None:
            return Reply(failed)
        upload_id = str(next(self._ids))
        self.uploads[upload_id] = path
        return Reply(
            OK,
            TransferEndpoint(
                endpoint=f"{DATA_HOST}/upload/{upload_id}",
                token=f"transfer-{upload_id}",
                checksums=self.checksums,
                opaque=dict(self.upload_opaque),
                protocol=self.upload_protocol,
            ),
        )

    def initiate_file_download(self, ctx: CallContext, path: str) -> Reply[TransferEndpoint]:
        failed = self._record(ctx, "InitiateFileDownload", path)
        if failed is not None:
            return Reply(failed)
        if path not in self.resources:
            return Reply(_not_found(path))
        download_id = str(next(self._ids))
        self.downloads[download_id] = path
        return Reply(
            OK,
            TransferEndpoint(
                endpoint=f"{DATA_HOST}/download/{download_id}",
                token=f"transfer-{download_id}",
                opaque=dict(self.download_opaque),
            ),
        )

    def close(self) -> None:
        self.closed = True


@dataclass
class DataServer:
    """HTTP data plane served through ``httpx.MockTransport``.

    PUTs to ``/upload/<id>`` store the body under the path the gateway
    assigned to ``<id>``; GETs from ``/download/<id>`` return it.
    """

    gateway: MemoryGateway
    requests: list[httpx.Request] = field(default_factory=list)
    bodies: list[bytes] = field(default_factory=list)
    fail_status: int | None = None
    refuse: bool = False
    hook: Any = None
    commit: bool = True

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = request.read()
        self.requests.append(request)
        self.bodies.append(body)
        if self.hook is not None:
            self.hook(request)
        if self.refuse:
            raise httpx.ConnectError("connection refused", request=request)
        if self.fail_status is not None:
            return httpx.Response(self.fail_status)
        kind, _, transfer_id = request.url.path.strip("/").partition("/")
        if request.method == "PUT" and kind == "upload":
            path = self.gateway.uploads.get(transfer_id)
            if path is None:
                return httpx.Response(404)
            if self.commit:
                self.gateway.add_file(path, body)
            return httpx.Response(200)
        if request.method == "GET" and kind == "download":
            path = self.gateway.downloads.get(transfer_id)
            if path is None or path not in self.gateway.blobs:
                return httpx.Response(404)
            return httpx.Response(200, content=self.gateway.blobs[path])
        return httpx.Response(405)

    def methods(self) -> list[str]:
        return [r.method for r in self.requests]


class FakeHTTPPool:
    def __init__(self) -> None:
        self.closed = False

    def close(self) -> None:
        self.closed = True


class FakeWebDAVClient:
    """Stands in for ``webdav4.client.Client`` against the memory gateway.

    Files are stored under the WebDAV path itself; ``target`` maps a WebDAV
    path back to a gateway path when an upload should become visible.
    """

    def __init__(self, factory: FakeWebDAVFactory, url: str, headers: dict[str, str]) -> None:
        self._factory = factory
        self.url = url
        self.headers = headers
        self.http = FakeHTTPPool()

    def upload_fileobj(self, file_obj: Any, path: str, overwrite: bool = False, **_: Any) -> None:
        if self._factory.error is not None:
            raise self._factory.error
        data = file_obj.read()
        self._factory.files[path] = data
        target = self._factory.targets.get(path)
        if target is not None:
            self._factory.gateway.add_file(target, data)

    def download_fileobj(self, path: str, file_obj: Any, callback: Any = None, **_: Any) -> None:
        if self._factory.error is not None:
            raise self._factory.error
        data = self._factory.files[path]
        if callback is not None:
            callback(len(data))
        file_obj.write(data)


@dataclass
class FakeWebDAVFactory:
    """Callable with the ``(url, headers, timeout, verify)`` factory signature."""

    gateway: MemoryGateway
    files: dict[str, bytes] = field(default_factory=dict)
    targets: dict[str, str] = field(default_factory=dict)
    created: list[FakeWebDAVClient] = field(default_factory=list)
    error: Exception | None = None

    def __call__(self, url: str, headers: dict[str, str], timeout: float, verify: bool) -> FakeWebDAVClient:
        client = FakeWebDAVClient(self, url, dict(headers))
        self.created.append(client)
        return client


class FakeTusUploader:
    def __init__(self, factory: FakeTusFactory, file_stream: Any, url: str, chunk_size: int, metadata: dict) -> None:
        self._factory = factory
        self._stream = file_stream
        self.url = url
        self.chunk_size = chunk_size
        self.metadata = metadata
        self.offset = 0
        self.received = bytearray()

    def upload_chunk(self) -> None:
        if self._factory.error is not None:
            raise self._factory.error
        if self._factory.stall:
            return
        chunk = self._stream.read(self.chunk_size)
        self.received.extend(chunk)
        self.offset += len(chunk)
        self._factory.chunks += 1
        upload_id = self.url.rsplit("/", 1)[-1]
        path = self._factory.gateway.uploads.get(upload_id)
        if path is not None and self._factory.commit:
            self._factory.gateway.add_file(path, bytes(self.received))


class FakeTusClient:
    def __init__(self, factory: FakeTusFactory, url: str, headers: dict[str, str]) -> None:
        self._factory = factory
        self.url = url
        self.headers = headers

    def uploader(self, file_stream: Any = None, url: str = "", chunk_size: int = 0, metadata: Any = None) -> FakeTusUploader:
        uploader = FakeTusUploader(self._factory, file_stream, url, chunk_size, dict(metadata or {}))
        self._factory.uploaders.append(uploader)
        return uploader


@dataclass
class FakeTusFactory:
    """Callable with the ``(url, headers)`` factory signature of the TUS transport."""

    gateway: MemoryGateway
    clients: list[FakeTusClient] = field(default_factory=list)
    uploaders: list[FakeTusUploader] = field(default_factory=list)
    chunks: int = 0
    error: Exception | None = None
    stall: bool = False
    commit: bool = True

    def __call__(self, url: str, headers: dict[str, str]) -> FakeTusClient:
        client = FakeTusClient(self, url, dict(headers))
        self.clients.append(client)
        return client


# region: fixtures


@pytest.fixture
def gateway() -> Iterator[MemoryGateway]:
    gw = MemoryGateway()
    MemoryGateway.pending = gw
    register_gateway("memory", MemoryGateway)
    yield gw
    MemoryGateway.pending = None


@pytest.fixture
def data_server(gateway: MemoryGateway) -> DataServer:
    return DataServer(gateway)


@pytest.fixture
def config() -> SessionConfig:
    return SessionConfig(gateway_type="memory", tus_chunk_size=4)


@pytest.fixture
def http_client(data_server: DataServer) -> Iterator[httpx.Client]:
    client = httpx.Client(transport=httpx.MockTransport(data_server.handler))
    yield client
    client.close()


@pytest.fixture
def new_session(config: SessionConfig, http_client: httpx.Client, gateway: MemoryGateway) -> Session:
    """A session that is neither initiated nor logged in."""
    return Session(config, http_client=http_client)


@pytest.fixture
def session(new_session: Session, gateway: MemoryGateway) -> Session:
    """An initiated and authenticated session; the login calls are forgotten."""
    new_session.initiate("gateway.test:9142", insecure=True)
    new_session.basic_login("alice", "secret")
    gateway.calls.clear()
    gateway.contexts.clear()
    return new_session


@pytest.fixture
def webdav_factory(gateway: MemoryGateway) -> FakeWebDAVFactory:
    return FakeWebDAVFactory(gateway)


@pytest.fixture
def tus_factory(gateway: MemoryGateway) -> FakeTusFactory:
    return FakeTusFactory(gateway)


# endregion
