"""Configuration: config-as-code, from_dict(), and validation.

Demonstrates the ways to build a SessionConfig and how it shapes the
transfers a session drives. These are config-only examples; no gateway is
contacted.
"""

from __future__ import annotations

import json

from gateway_transfer import CallContext, Session, SessionConfig

if __name__ == "__main__":
    # --- Option 1: Config-as-code ---
    config = SessionConfig(
        connect_timeout=5.0,
        rpc_timeout=30.0,
        prefer_resumable=True,
        tus_chunk_size=16 * 1024 * 1024,
    )
    print(f"Config-as-code: {config}")

    # --- Option 2: from_dict(), e.g. loaded from TOML or JSON ---
    raw = json.loads(
        """
        {
            "gateway_type": "grpc",
            "verify_tls": false,
            "transfer_timeout": 3600,
            "preferred_protocols": ["tus", "simple"]
        }
        """
    )
    config = SessionConfig.from_dict(raw)
    print(f"\nfrom_dict(): protocols={config.preferred_protocols}, verify_tls={config.verify_tls}")

    # --- A session owns an HTTP client built from the config ---
    with Session(config, context=CallContext.with_timeout(600)) as session:
        print(f"Session: {session!r}, transfer timeout={session.http.timeout.read}s")

    # --- Validation errors ---
    try:
        SessionConfig(tus_chunk_size=0)
    except ValueError as exc:
        print(f"\nValidation error: {exc}")

    try:
        SessionConfig.from_dict({"retries": 3})
    except TypeError as exc:
        print(f"Unknown key: {exc}")

    print("\nDone!")
