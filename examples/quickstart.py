"""Quickstart: log in, upload and download a file through a storage gateway.

Demonstrates:
- Opening a Session against a gateway and logging in with ``basic``
- Uploading bytes (parent directories are created on the fly)
- Listing a directory and downloading the file again

Set ``GATEWAY_HOST``, ``GATEWAY_USER`` and ``GATEWAY_PASSWORD`` before running.
"""

from __future__ import annotations

import logging
import os

from gateway_transfer import DownloadAction, EnumFilesAction, Session, UploadAction

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    host = os.environ.get("GATEWAY_HOST", "localhost:19000")
    user = os.environ.get("GATEWAY_USER", "einstein")
    password = os.environ.get("GATEWAY_PASSWORD", "relativity")

    with Session() as session:
        session.initiate(host, insecure=True)
        session.basic_login(user, password)

        # Upload a file
        info = UploadAction(session).upload_bytes(b"Hello, world!", f"/home/{user}/quickstart/hello.txt")
        print(f"Uploaded {info.path} ({info.size} bytes)")

        # List the directory
        for entry in EnumFilesAction(session).list_all(f"/home/{user}/quickstart"):
            print(f"  {entry.type.name:<9} {entry.path}")

        # Read it back
        content = DownloadAction(session).download_file(info)
        print(f"Content: {content!r}")

    print("Done!")
