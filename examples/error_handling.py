"""Error handling: catching NotFound, AuthError, InvalidPath, etc.

Demonstrates the normalized error hierarchy and how to handle errors
programmatically using structured attributes.
"""

from __future__ import annotations

import os

from gateway_transfer import (
    AuthError,
    DownloadAction,
    FileOperationsAction,
    GatewayError,
    InvalidPath,
    NotFound,
    RPCError,
    Session,
    TransportExecutionError,
    VerificationError,
)

if __name__ == "__main__":
    host = os.environ.get("GATEWAY_HOST", "localhost:19000")
    user = os.environ.get("GATEWAY_USER", "einstein")
    password = os.environ.get("GATEWAY_PASSWORD", "relativity")

    with Session() as session:
        session.initiate(host, insecure=True)

        # --- AuthError: actions need a logged-in session ---
        try:
            FileOperationsAction(session)
        except AuthError as exc:
            print(f"AuthError: {exc}")

        session.basic_login(user, password)
        fileops = FileOperationsAction(session)

        # --- NotFound carries the status fields of the gateway ---
        try:
            fileops.stat(f"/home/{user}/nonexistent.txt")
        except NotFound as exc:
            print(f"\nNotFound: {exc}")
            print(f"  operation={exc.operation}, code={exc.code}, trace={exc.trace}")

        # --- InvalidPath (path traversal attempt) ---
        try:
            fileops.stat("/home/../etc/passwd")
        except InvalidPath as exc:
            print(f"\nInvalidPath: {exc}")
            print(f"  path={exc.path}")

        # --- Other non-OK statuses surface as RPCError ---
        try:
            fileops.remove(f"/home/{user}/nonexistent-dir")
        except RPCError as exc:
            print(f"\nRPCError ({type(exc).__name__}): code={exc.code}")

        # --- Transfer failures are reported, never retried over another transport ---
        try:
            DownloadAction(session).download_file_by_path(f"/home/{user}/quickstart/hello.txt")
        except (TransportExecutionError, VerificationError) as exc:
            print(f"\nTransfer failed: {exc}")
            print(f"  endpoint={exc.endpoint}")

        # --- Catch any gateway_transfer error with the base class ---
        for path in ["/missing.txt", "/../escape"]:
            try:
                fileops.stat(path)
            except GatewayError as exc:
                print(f"\nGatewayError ({type(exc).__name__}): {exc}")

    print("\nDone!")
