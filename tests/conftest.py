"""Shared pytest fixtures for uniform-component-sync tests."""

from unittest.mock import MagicMock

import pytest
from dotenv import load_dotenv

from uniform_sync.config import Config
from uniform_sync.models import Project

load_dotenv()

PROJECT_A_ID = "6f2b5c1e-3d4a-4b8c-9e0f-1a2b3c4d5e6f"
PROJECT_B_ID = "0c9d8e7f-6a5b-4c3d-8e2f-1a0b9c8d7e6f"
PROJECT_C_ID = "a1b2c3d4-e5f6-4789-a012-b3c4d5e6f789"
API_KEY_A = "a" * 60
API_KEY_B = "b" * 60
API_KEY_C = "c" * 60


def pytest_addoption(parser):
    """Add custom CLI options for test filtering."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run tests that require a live Uniform project",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "live: mark test as requiring a live Uniform project"
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is passed."""
    if config.getoption("--run-live"):
        return
    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


@pytest.fixture
def mock_config(tmp_path):
    """Create a Config instance whose files live under tmp_path."""
    return Config(
        api_url="https://uniform.example.com",
        projects_file=tmp_path / "config" / "projects.json",
        backup_dir=tmp_path / "backups",
        component_page_limit=500,
        request_timeout=30.0,
    )


@pytest.fixture
def mock_gateway(mock_config):
    """Create a mock VendorGateway instance for testing."""
    from uniform_sync.core.gateway import VendorGateway

    gateway = MagicMock(spec=VendorGateway)
    gateway.config = mock_config
    return gateway


@pytest.fixture
def project_a():
    return Project(
        id=PROJECT_A_ID,
        api_key=API_KEY_A,
        team_id="team-1",
        team_name="Marketing",
        display_name="Website",
    )


@pytest.fixture
def project_b():
    return Project(
        id=PROJECT_B_ID,
        api_key=API_KEY_B,
        team_id="team-1",
        team_name="Marketing",
        display_name="Website Staging",
    )


@pytest.fixture
def project_c():
    return Project(
        id=PROJECT_C_ID,
        api_key=API_KEY_C,
        team_id="team-2",
        team_name="Docs",
        display_name="Docs Portal",
    )


@pytest.fixture
def make_definition():
    """Factory fixture for raw vendor component definitions."""

    def _make(component_id, updated="2024-01-01T00:00:00Z", params=0, name=None):
        return {
            "id": component_id,
            "name": name or component_id.title(),
            "parameters": [
                {"id": f"p{i}", "type": "text"} for i in range(params)
            ],
            "updated": updated,
        }

    return _make

