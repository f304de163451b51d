"""Root conftest: loads .env.test before any application module is imported.

Settings() is built at import time and needs the Postgres credentials even
though unit tests never open a database connection.
"""
from __future__ import annotations

import os
from pathlib import Path

_env_test = Path(__file__).resolve().parent / ".env.test"
if _env_test.exists():
    for raw in _env_test.read_text().splitlines():
        raw = raw.strip()
        if not raw or raw.startswith("#"):
            continue
        key, _, value = raw.partition("=")
        os.environ.setdefault(key.strip(), value.strip())

for _key, _default in (
    ("POSTGRES_USER", "telemed"),
    ("POSTGRES_PASSWORD", "telemed"),
    ("POSTGRES_DB", "telemed_test"),
    ("JWT_SECRET", "test-secret-key-for-websocket-handshakes"),
):
    os.environ.setdefault(_key, _default)
