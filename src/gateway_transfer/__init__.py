"""Client library for moving files through a storage gateway."""

from gateway_transfer._capabilities import TransferCapability, TransferCapabilitySet
from gateway_transfer._checksum import ChecksumPriority, ChecksumSelection, ChecksumType
from gateway_transfer._config import SessionConfig
from gateway_transfer._context import CallContext
from gateway_transfer._download import DownloadAction
from gateway_transfer._enumfiles import EnumFilesAction
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
from gateway_transfer._fileops import FileOperationsAction
from gateway_transfer._gateway import Gateway
from gateway_transfer._hints import CombinedProtocolHints, OpaqueEntry
from gateway_transfer._models import ResourceInfo, ResourceType, TransferEndpoint
from gateway_transfer._path import GatewayPath
from gateway_transfer._registry import register_gateway
from gateway_transfer._session import Session, new_session
from gateway_transfer._status import Reply, RPCStatus, StatusCode
from gateway_transfer._upload import UploadAction

__version__ = "0.1.0"

__all__ = [
    # Core
    "Session",
    "new_session",
    "Gateway",
    "register_gateway",
    "CallContext",
    # Actions
    "FileOperationsAction",
    "EnumFilesAction",
    "UploadAction",
    "DownloadAction",
    # Path & Models
    "GatewayPath",
    "ResourceInfo",
    "ResourceType",
    "TransferEndpoint",
    "OpaqueEntry",
    "CombinedProtocolHints",
    # Status
    "StatusCode",
    "RPCStatus",
    "Reply",
    # Checksums
    "ChecksumType",
    "ChecksumPriority",
    "ChecksumSelection",
    # Capabilities
    "TransferCapability",
    "TransferCapabilitySet",
    # Config
    "SessionConfig",
    # Errors
    "GatewayError",
    "GatewayConnectionError",
    "AuthError",
    "RPCError",
    "NotFound",
    "TransportNegotiationError",
    "TransportUnsupported",
    "TransportExecutionError",
    "ChecksumError",
    "VerificationError",
    "InvalidPath",
    "InvalidResource",
    "CapabilityNotSupported",
    "Cancelled",
    # Version
    "__version__",
]
