"""Transport test fixtures."""

from __future__ import annotations

import pytest

from gateway_transfer._models import TransferEndpoint

UPLOAD_URL = "http://data.test/upload/u1"
DOWNLOAD_URL = "http://data.test/download/d1"


@pytest.fixture
def upload_endpoint() -> TransferEndpoint:
    return TransferEndpoint(endpoint=UPLOAD_URL, token="transfer-u1")


@pytest.fixture
def download_endpoint() -> TransferEndpoint:
    return TransferEndpoint(endpoint=DOWNLOAD_URL, token="transfer-d1")
