import sys
import pathlib

import pytest

# Ensure project root is importable in tests
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def _clean_server_env(monkeypatch):
    # Host settings must not leak into the server under test
    for name in ("REMOTE_ENABLED", "MCP_REMOTE_TOKEN", "RATE_LIMIT_RPS", "RATE_LIMIT_BURST", "PROTOCOL_VERSION"):
        monkeypatch.delenv(name, raising=False)
