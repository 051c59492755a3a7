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
    "STRAVA_CLIENT_ID": "12345",
    "STRAVA_CLIENT_SECRET": "test-client-secret",
    "STRAVA_REDIRECT_URI": "https://example.com/api/auth/strava/callback",
    "TOKEN_ENCRYPTION_SECRET": "test-secret",
    "SESSION_SECRET": "test-session-secret",
    "DATABASE_PATH": str(Path(tempfile.mkdtemp()) / "activity_cards.db"),
}

for key, value in _DEFAULT_ENV_VARS.items():
    os.environ.setdefault(key, value)
