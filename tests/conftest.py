"""
Pytest configuration and fixtures for Compose Explorer tests
"""

import os
import sys
import asyncio
import json
import tempfile
import shutil
from pathlib import Path
import pytest
from unittest.mock import Mock, AsyncMock, patch

# Add parent directory to path to import modules
parent_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if parent_dir not in sys.path:
    sys.path.insert(0, parent_dir)


# Two containers of the "shop" project as printed by `docker compose ps --format json`
PS_ENTRIES = [
    {
        "Name": "shop-web-1",
        "Service": "web",
        "State": "running",
        "Status": "Up 5 minutes",
        "Command": '"nginx -g daemon off;"',
        "Publishers": [
            {"URL": "0.0.0.0", "TargetPort": 80, "PublishedPort": 8080, "Protocol": "tcp"},
            {"URL": "::", "TargetPort": 80, "PublishedPort": 8080, "Protocol": "tcp"},
        ],
    },
    {
        "Name": "shop-db-1",
        "Service": "db",
        "State": "exited",
        "Status": "Exited (0) 2 minutes ago",
        "Command": "docker-entrypoint.sh postgres",
        "Publishers": [],
    },
]
PS_OUTPUT = "\n".join(json.dumps(entry) for entry in PS_ENTRIES)
SERVICES = ["db", "web"]


def python_cli(script: str):
    """Base command factory running a Python snippet in place of docker"""
    return lambda command_key: [sys.executable, "-c", script]


# Configure asyncio for tests
@pytest.fixture(scope="session")
def event_loop_policy():
    """Set event loop policy for tests"""
    from services.platform_service import PlatformService

    if PlatformService.is_windows():
        # Windows requires special handling
        asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())
    return asyncio.get_event_loop_policy()


@pytest.fixture
def temp_directory():
    """Create a temporary directory for tests"""
    temp_dir = tempfile.mkdtemp(prefix="compose_explorer_test_")
    yield Path(temp_dir)
    # Cleanup
    if os.path.exists(temp_dir):
        shutil.rmtree(temp_dir)


@pytest.fixture
def workspace_folders(temp_directory):
    """Two workspace folders, 'shop' and 'billing'"""
    from models.workspace import WorkspaceFolder

    paths = []
    for name in ("shop", "billing"):
        path = temp_directory / name
        path.mkdir()
        paths.append(path)
    return WorkspaceFolder.from_paths(paths)


@pytest.fixture
def message_sink():
    return Mock()


@pytest.fixture
def provider(workspace_folders, message_sink):
    """Provider over the two workspace folders; its timer is stopped afterwards"""
    from core.compose_provider import DockerComposeProvider

    explorer = DockerComposeProvider(
        workspace_folders,
        ["docker-compose.yml"],
        "/bin/sh",
        message_sink=message_sink,
    )
    yield explorer
    explorer.close()


@pytest.fixture
def compose_listing():
    """Answer `config --services` and `ps` without docker"""
    from services.docker_compose_executor import DockerComposeExecutor

    with patch.object(
        DockerComposeExecutor, "get_services", AsyncMock(return_value=list(SERVICES))
    ) as get_services, patch.object(
        DockerComposeExecutor, "get_ps", AsyncMock(return_value=PS_OUTPUT)
    ) as get_ps:
        yield get_services, get_ps


@pytest.fixture
def fake_cli():
    """Replace the docker / docker compose base command with a Python snippet"""
    from services.platform_service import PlatformService

    patchers = []

    def install(script: str = "import sys; sys.exit(0)"):
        patcher = patch.object(
            PlatformService, "get_base_command", side_effect=python_cli(script)
        )
        patchers.append(patcher)
        return patcher.start()

    yield install

    for patcher in patchers:
        patcher.stop()


@pytest.fixture
def async_task_manager():
    """Create and setup an async task manager for tests"""
    from utils.async_utils import ImprovedAsyncTaskManager

    manager = ImprovedAsyncTaskManager()
    manager.setup_event_loop()

    yield manager

    # Cleanup
    manager.shutdown(timeout=2.0)


# Test markers
def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "asyncio: marks tests as async tests")
