"""
Pytest Configuration and Global Fixtures.

Shared fixtures available to all tests, plus location-based markers.
"""

import sys
from pathlib import Path

import pytest

# Ensure the project root is importable (tests.helpers)
sys.path.insert(0, str(Path(__file__).parent.parent))

from tests.helpers.fixtures import (
    FakeS3Client,
    client_error,
    flux_workflow,
    make_node,
    make_workflow,
)
from wfscan.config.settings import reset_config


# =============================================================================
# Function-Scoped Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    """Keep tests away from the user's ~/.wfscan and real credentials."""
    monkeypatch.setenv("WFSCAN_HOME", str(tmp_path / ".wfscan"))
    for var in (
        "SCALEWAY_REGION",
        "SCALEWAY_ACCESS_KEY_ID",
        "SCALEWAY_SECRET_ACCESS_KEY",
        "SCALEWAY_BUCKET_NAME",
        "SCALEWAY_ENDPOINT_URL",
        "WFSCAN_PROVISIONER_SCRIPT",
    ):
        monkeypatch.delenv(var, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def fake_s3() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def sample_workflow() -> dict:
    return flux_workflow()


# =============================================================================
# Collection Hooks
# =============================================================================

def pytest_collection_modifyitems(config, items):
    """Mark everything under tests/integration as integration."""
    for item in items:
        rel_path = Path(item.fspath).relative_to(Path(__file__).parent)
        if "integration" in rel_path.parts:
            item.add_marker(pytest.mark.integration)
