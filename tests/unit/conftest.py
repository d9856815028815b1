import os
import sys

import httpx
import pytest

# Get the directory of the current conftest.py file
current_dir = os.path.dirname(os.path.abspath(__file__))

# Calculate the project root
project_root = os.path.abspath(os.path.join(current_dir, '../../'))

# Insert the project root at the beginning of sys.path
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from fastapi.testclient import TestClient  # noqa: E402

from config import Config  # noqa: E402
from main import create_app  # noqa: E402


@pytest.fixture
def config():
    return Config({
        "client_id": "test-client-id",
        "client_secret": "test-client-secret",
    })


@pytest.fixture
def make_client(config):
    """Build a TestClient whose GitHub token endpoint is served by `handler`."""
    def _make(handler=None, **overrides):
        data = dict(config.data, **overrides)
        transport = httpx.MockTransport(handler) if handler else None
        app = create_app(Config(data), transport=transport)
        return TestClient(app)
    return _make
