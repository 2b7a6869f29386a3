"""
Tests for the compose tree provider - listing, refresh after actions and logs
"""

import os
import sys
import asyncio
from unittest.mock import Mock, patch, AsyncMock
import pytest

# Add parent directory to path to import modules
parent_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if parent_dir not in sys.path:
    sys.path.insert(0, parent_dir)

from core.compose_provider import DockerComposeProvider
from core.explorer_nodes import ExplorerNode, NodeKind
from models.container import Container
from models.service import Service
from services.docker_compose_executor import DockerComposeExecutor
from services.docker_executor import DockerExecutor
from services.platform_service import PlatformService
from utils.async_base import ComposeError, ComposeFileNotFound

SLOW_EXIT = "import sys, time; time.sleep(0.2); sys.exit({code})"


class RefreshCounter:
    def __init__(self, provider):
        self.count = 0
        provider.on_did_change_tree_data(self)

    def __call__(self, data):
        self.count += 1


async def settle():
    """Let done-callbacks scheduled on the loop run"""
    await asyncio.sleep(0.05)


@pytest.fixture
def project_node(provider):
    return ExplorerNode.for_project(provider.projects[0], provider.root)


@pytest.fixture
def service_node(provider, project_node):
    return ExplorerNode.for_service(Service(provider.projects[0], "web"), project_node)


@pytest.fixture
def container_node(provider, service_node):
    project = provider.projects[0]
    container = Container(
        "shop-web-1", "web", "running", docker_executor=project.docker_executor
    )
    return ExplorerNode.for_container(container, service_node)


class TestTreeQueries:
    """Test cases for get_children and get_tree_item"""

    @pytest.mark.asyncio
    async def test_root_lists_one_project_per_folder(self, provider):
        children = await provider.get_children()

        assert [c.project.name for c in children] == ["shop", "billing"]
        assert all(c.kind is NodeKind.PROJECT for c in children)

    @pytest.mark.asyncio
    async def test_project_names_use_mapping(self, workspace_folders):
        provider = DockerComposeProvider(
            workspace_folders, ["docker-compose.yml"], "/bin/sh", ["store", ""]
        )
        try:
            children = await provider.get_children()
        finally:
            provider.close()

        assert [c.project.name for c in children] == ["store", "billing"]

    @pytest.mark.asyncio
    async def test_empty_workspace(self):
        provider = DockerComposeProvider([], ["docker-compose.yml"], "/bin/sh")
        try:
            children = await provider.get_children()
        finally:
            provider.close()

        assert [c.value for c in children] == ["No workspace folders"]

    @pytest.mark.asyncio
    async def test_full_tree(self, provider, compose_listing):
        projects = await provider.get_children()
        services = await provider.get_children(projects[0])
        web = next(s for s in services if s.service.name == "web")
        containers = await provider.get_children(web)

        assert [s.service.name for s in services] == ["db", "web"]
        assert [c.container.name for c in containers] == ["shop-web-1"]
        assert provider.get_tree_item(containers[0]).label == "shop-web-1"


class TestLoadingGuard:
    """Test cases for concurrent loads"""

    @pytest.mark.asyncio
    async def test_concurrent_loads_of_same_node_share_one_result(
        self, provider, project_node
    ):
        calls = []
        result = [ExplorerNode.for_message("loaded")]

        async def slow_children(node):
            calls.append(node)
            await asyncio.sleep(0.1)
            return result

        with patch.object(ExplorerNode, "get_children", slow_children):
            first, second = await asyncio.gather(
                provider.get_children(project_node),
                provider.get_children(project_node),
            )

        assert first is second is result
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_loads_of_different_nodes_run_one_at_a_time(self, provider):
        projects = await provider.get_children()
        active = []
        overlap = []

        async def slow_children(node):
            active.append(node)
            overlap.append(len(active))
            await asyncio.sleep(0.05)
            active.remove(node)
            return [ExplorerNode.for_message(node.node_id)]

        with patch.object(ExplorerNode, "get_children", slow_children):
            first, second = await asyncio.gather(
                provider.get_children(projects[0]),
                provider.get_children(projects[1]),
            )

        assert first[0].value == "shop"
        assert second[0].value == "billing"
        assert max(overlap) == 1

    @pytest.mark.asyncio
    async def test_later_load_runs_again(self, provider, project_node):
        calls = []

        async def children(node):
            calls.append(node)
            return []

        with patch.object(ExplorerNode, "get_children", children):
            await provider.get_children(project_node)
            await provider.get_children(project_node)

        assert len(calls) == 2
        assert provider._loading is None


class TestListingErrors:
    """Test cases for failures while listing"""

    @pytest.mark.asyncio
    async def test_missing_compose_file(self, provider, project_node, message_sink):
        with patch.object(
            DockerComposeExecutor,
            "get_services",
            AsyncMock(side_effect=ComposeFileNotFound("no configuration file provided")),
        ):
            children = await provider.get_children(project_node)

        message_sink.assert_called_once_with(
            "Docker Compose Error: no configuration file provided"
        )
        assert [c.value for c in children] == ["No docker compose file(s)"]

    @pytest.mark.asyncio
    async def test_compose_error_message(self, provider, project_node, message_sink):
        with patch.object(
            DockerComposeExecutor,
            "get_services",
            AsyncMock(side_effect=ComposeError("yaml: line 3: bad indentation")),
        ):
            children = await provider.get_children(project_node)

        message_sink.assert_called_once_with(
            "Docker Compose Error: yaml: line 3: bad indentation"
        )
        assert [c.value for c in children] == ["yaml: line 3: bad indentation"]

    @pytest.mark.asyncio
    async def test_unexpected_error_is_reported_once(
        self, provider, service_node, message_sink
    ):
        with patch.object(
            DockerComposeExecutor, "get_ps", AsyncMock(side_effect=RuntimeError("boom"))
        ):
            children = await provider.get_children(service_node)

        assert message_sink.call_count == 1
        assert message_sink.call_args[0][0] == "Docker Compose Error: boom"
        assert [c.kind for c in children] == [NodeKind.MESSAGE]

    @pytest.mark.asyncio
    async def test_hung_listing_times_out(self, workspace_folders, message_sink, fake_cli):
        fake_cli("import time; time.sleep(10)")
        explorer = DockerComposeProvider(
            workspace_folders[:1],
            ["docker-compose.yml"],
            "/bin/sh",
            message_sink=message_sink,
            query_timeout=0.3,
        )
        try:
            (project,) = await explorer.get_children()
            children = await asyncio.wait_for(explorer.get_children(project), 5)
        finally:
            explorer.close()

        assert [c.kind for c in children] == [NodeKind.MESSAGE]
        assert children[0].value.startswith("Command timed out after 0.3 seconds")
        message_sink.assert_called_once()
        assert message_sink.call_args[0][0].startswith(
            "Docker Compose Error: Command timed out"
        )


@pytest.mark.integration
class TestRefreshAfterActions:
    """Test cases for the refresh issued once a spawned process exits"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("exit_code", [0, 3])
    @pytest.mark.parametrize(
        "method", ["start_project", "stop_project", "up_project", "down_project"]
    )
    async def test_project_actions(
        self, provider, project_node, fake_cli, method, exit_code
    ):
        fake_cli(SLOW_EXIT.format(code=exit_code))
        counter = RefreshCounter(provider)

        handle = await getattr(provider, method)(project_node)
        assert counter.count == 0

        assert await handle.wait() == exit_code
        await settle()
        assert counter.count == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method",
        [
            "up_service",
            "down_service",
            "build_service",
            "start_service",
            "stop_service",
            "restart_service",
            "kill_service",
        ],
    )
    async def test_service_actions(self, provider, service_node, fake_cli, method):
        fake_cli(SLOW_EXIT.format(code=1))
        counter = RefreshCounter(provider)

        handle = await getattr(provider, method)(service_node)
        assert counter.count == 0

        await handle.wait()
        await settle()
        assert counter.count == 1
        assert "web" in handle.command

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method", ["start_container", "stop_container", "kill_container"]
    )
    async def test_container_actions(self, provider, container_node, fake_cli, method):
        fake_cli(SLOW_EXIT.format(code=0))
        counter = RefreshCounter(provider)

        handle = await getattr(provider, method)(container_node)
        await handle.wait()
        await settle()

        assert counter.count == 1
        assert handle.command[-1] == "shop-web-1"

    @pytest.mark.asyncio
    async def test_waiting_twice_refreshes_once(self, provider, project_node, fake_cli):
        fake_cli(SLOW_EXIT.format(code=0))
        counter = RefreshCounter(provider)

        handle = await provider.up_project(project_node)
        await asyncio.gather(handle.wait(), handle.wait())
        await settle()

        assert counter.count == 1

    @pytest.mark.asyncio
    async def test_attach_and_shell_do_not_refresh(
        self, provider, service_node, container_node
    ):
        counter = RefreshCounter(provider)

        with patch.object(PlatformService, "open_terminal") as mock_open:
            await provider.attach_container(container_node)
            await provider.shell_service(service_node)
            await settle()

        assert counter.count == 0
        attach_cmd = mock_open.call_args_list[0][0][0]
        shell_cmd = mock_open.call_args_list[1][0][0]
        assert attach_cmd[-2:] == ["attach", "shop-web-1"]
        assert shell_cmd[-3:] == ["exec", "web", "/bin/sh"]


class TestLogs:
    """Test cases for log snapshots"""

    @pytest.mark.asyncio
    async def test_logs_open_untitled_document(self, provider, container_node):
        shown = []
        provider.document_store.on_did_show_document(shown.append)
        counter = RefreshCounter(provider)

        with patch.object(
            DockerExecutor,
            "get_logs",
            AsyncMock(return_value="starting\nlistening on :80\n"),
        ):
            document = await provider.logs_container(container_node)

        assert document.title == "shop-web-1.logs"
        assert document.is_untitled
        assert document.get_text() == "starting\nlistening on :80\n"
        assert shown == [document]
        assert provider.document_store.get("shop-web-1.logs") is document
        assert counter.count == 0

    @pytest.mark.asyncio
    @pytest.mark.integration
    async def test_logs_from_process(self, provider, container_node, fake_cli):
        fake_cli("print('hello from web')")

        document = await provider.logs_container(container_node)

        assert document.get_text().strip() == "hello from web"

    @pytest.mark.asyncio
    async def test_logs_failure_propagates(self, provider, container_node):
        with patch.object(
            DockerExecutor, "get_logs", AsyncMock(side_effect=ComposeError("gone"))
        ):
            with pytest.raises(ComposeError):
                await provider.logs_container(container_node)

        assert provider.document_store.documents == []


class TestLifecycle:
    """Test cases for provider teardown"""

    def test_close_cancels_timer(self, provider):
        provider.set_auto_refresh(1000)
        assert provider.auto_refresh_active

        provider.close()

        assert not provider.auto_refresh_active

    def test_default_message_sink_logs(self, workspace_folders):
        provider = DockerComposeProvider(workspace_folders, ["a.yml"], "/bin/sh")
        try:
            assert callable(provider.message_sink)
        finally:
            provider.close()
