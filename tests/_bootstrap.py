"""Test helper that normalizes sys.path and environment defaults."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


_DEFAULT_ENV_VARS: dict[str, str] = {
    "RELAY_CLIENT_ID": "test-client-id",
    "RELAY_CLIENT_SECRET": "test-client-secret",
    "RELAY_REDIRECT_URI": "https://relay.example.com/callback",
    "PROVIDER_AUTHORIZE_URL": "https://provider.example.com/oauth2/authorize",
    "PROVIDER_TOKEN_URL": "https://provider.example.com/oauth2/token",
    "TOKEN_ENCRYPTION_SECRET": "test-secret",
    "STORE_BACKEND": "sqlite",
    "STORE_DB_PATH": str(Path(tempfile.gettempdir()) / "oauth-relay-tests" / "relay.db"),
}

for key, value in _DEFAULT_ENV_VARS.items():
    os.environ.setdefault(key, value)
