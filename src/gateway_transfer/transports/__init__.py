"""Data-plane transfer clients."""

from gateway_transfer.transports._base import TransferClient
from gateway_transfer.transports._http import DirectHTTPClient
from gateway_transfer.transports._tus import ResumableUploadClient
from gateway_transfer.transports._webdav import CombinedProtocolClient

__all__ = ["TransferClient", "DirectHTTPClient", "ResumableUploadClient", "CombinedProtocolClient"]
