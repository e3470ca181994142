"""
Global test configuration with support for different test types.
"""

import os

import pytest

from tests.helpers import FakeClock

_ALIASED_ENV = (
    "GEMINI_API_KEY",
    "PURCHASE_ORDERS_FOLDER",
    "SERVICE_ACCOUNT_CONFIG_PATH",
)


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def isolate_extractor_env(request, monkeypatch):
    """Ensure a clean PO_EXTRACT_* environment for each test.

    - Removes all PO_EXTRACT_* variables, the accepted legacy aliases and the
      debug toggle before each test
    - Leaves unrelated variables intact

    Escape hatch: @pytest.mark.allow_env_pollution keeps the env unchanged.
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return

    for key in list(os.environ.keys()):
        if key.startswith("PO_EXTRACT_"):
            monkeypatch.delenv(key, raising=False)
    for key in _ALIASED_ENV:
        monkeypatch.delenv(key, raising=False)
    # Avoid DEBUG toggles enabling telemetry
    monkeypatch.delenv("DEBUG", raising=False)


def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "integration: Component integration tests with mocked APIs",
        "allow_env_pollution: Skip PO_EXTRACT_* environment isolation",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)


# --- Core Fixtures ---


@pytest.fixture
def fake_clock():
    """Virtual clock whose sleep advances time instantly."""
    return FakeClock()


@pytest.fixture
def po_dir(tmp_path):
    """Directory with three small fake purchase orders."""
    directory = tmp_path / "purchase_orders"
    directory.mkdir()
    for name in ("po_1.pdf", "po_2.pdf", "po_3.pdf"):
        (directory / name).write_bytes(b"%PDF-1.4 " + name.encode())
    return directory
