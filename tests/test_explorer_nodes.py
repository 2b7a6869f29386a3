"""
Tests for explorer tree nodes
"""

import os
import sys
import pytest

# Add parent directory to path to import modules
parent_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if parent_dir not in sys.path:
    sys.path.insert(0, parent_dir)

from core.explorer_nodes import (
    CollapsibleState,
    ExplorerNode,
    NodeKind,
    describe_error,
)
from models.container import Container
from models.project import Project
from services.docker_compose_executor import DockerComposeExecutor
from services.docker_executor import DockerExecutor
from utils.async_base import (
    CommandNotFoundError,
    ComposeError,
    ComposeFileNotFound,
    DockerComposeCommandNotFound,
)


@pytest.fixture
def project():
    return Project(
        "shop",
        DockerExecutor(cwd="/ws/shop"),
        DockerComposeExecutor("shop", ["docker-compose.yml"], cwd="/ws/shop"),
    )


@pytest.fixture
def project_node(project):
    root = ExplorerNode.for_projects([project])
    return ExplorerNode.for_project(project, root)


class TestChildren:
    """Test cases for child listing per node kind"""

    @pytest.mark.asyncio
    async def test_root_lists_projects(self, project):
        root = ExplorerNode.for_projects([project])

        children = await root.get_children()

        assert [c.kind for c in children] == [NodeKind.PROJECT]
        assert children[0].project is project
        assert children[0].parent is root

    @pytest.mark.asyncio
    async def test_root_without_folders(self):
        children = await ExplorerNode.for_projects([]).get_children()

        assert len(children) == 1
        assert children[0].kind is NodeKind.MESSAGE
        assert children[0].value == "No workspace folders"

    @pytest.mark.asyncio
    async def test_project_lists_services(self, project_node, compose_listing):
        get_services, get_ps = compose_listing

        children = await project_node.get_children()

        assert [c.service.name for c in children] == ["db", "web"]
        assert all(c.kind is NodeKind.SERVICE for c in children)
        # Expanding a project reloads the container listing once
        assert get_ps.await_count == 1

    @pytest.mark.asyncio
    async def test_project_without_services(self, project_node, compose_listing):
        get_services, _ = compose_listing
        get_services.return_value = []

        children = await project_node.get_children()

        assert [c.value for c in children] == ["No services"]

    @pytest.mark.asyncio
    async def test_service_lists_its_containers(self, project_node, compose_listing):
        services = await project_node.get_children()
        web = next(s for s in services if s.service.name == "web")

        containers = await web.get_children()

        assert [c.container.name for c in containers] == ["shop-web-1"]
        assert containers[0].kind is NodeKind.CONTAINER

    @pytest.mark.asyncio
    async def test_leaves_have_no_children(self, project_node):
        container = ExplorerNode.for_container(
            Container("shop-web-1", "web", "running"), project_node
        )
        message = ExplorerNode.for_message("hello", project_node)

        assert await container.get_children() == []
        assert await message.get_children() == []


class TestNodeIds:
    """Test cases for path-like node identifiers"""

    @pytest.mark.asyncio
    async def test_ids_follow_the_tree(self, project_node, compose_listing):
        services = await project_node.get_children()
        web = next(s for s in services if s.service.name == "web")
        containers = await web.get_children()

        assert project_node.node_id == "shop"
        assert web.node_id == "shop/web"
        assert containers[0].node_id == "shop/web/shop-web-1"

    def test_message_id(self, project_node):
        message = ExplorerNode.for_message("No services", project_node)
        assert message.node_id == "shop/#No services"

    def test_actionable_kinds(self, project_node):
        assert project_node.is_actionable
        assert not ExplorerNode.for_message("x").is_actionable
        assert not ExplorerNode.for_projects([]).is_actionable


class TestTreeItems:
    """Test cases for rendering"""

    def test_project_item(self, project_node):
        item = project_node.get_tree_item()

        assert item.label == "shop"
        assert item.collapsible_state is CollapsibleState.COLLAPSED
        assert item.tooltip == "/ws/shop"
        assert item.icon == "project"

    @pytest.mark.asyncio
    async def test_service_item_counts_running_containers(
        self, project_node, compose_listing
    ):
        services = await project_node.get_children()
        items = {s.service.name: s.get_tree_item() for s in services}

        assert items["web"].description == "1/1 running"
        assert items["web"].icon == "service-up"
        assert items["db"].description == "0/1 running"
        assert items["db"].icon == "service-down"

    def test_container_item(self, project_node):
        container = Container(
            "shop-web-1", "web", "running", "Up 5 minutes", "nginx", "8080->80/tcp"
        )
        item = ExplorerNode.for_container(container, project_node).get_tree_item()

        assert item.label == "shop-web-1"
        assert item.collapsible_state is CollapsibleState.NONE
        assert item.description == "Up 5 minutes"
        assert item.tooltip == "nginx\n8080->80/tcp"
        assert item.icon == "container-running"

    def test_message_item(self):
        item = ExplorerNode.for_message("No services").get_tree_item()

        assert item.label == "No services"
        assert item.kind is NodeKind.MESSAGE
        assert item.collapsible_state is CollapsibleState.NONE

    def test_to_dict(self, project_node):
        data = project_node.get_tree_item().to_dict()

        assert data["kind"] == "project"
        assert data["collapsible_state"] == "collapsed"


class TestErrorFallbacks:
    """Test cases for listing failures"""

    @pytest.mark.parametrize(
        "error, expected",
        [
            (ComposeFileNotFound("no configuration file provided"), "No docker compose file(s)"),
            (DockerComposeCommandNotFound("docker"), "docker compose command not found"),
            (CommandNotFoundError("docker"), "docker command not found"),
            (ComposeError("invalid compose file"), "invalid compose file"),
            (RuntimeError("boom"), "boom"),
        ],
    )
    def test_describe_error(self, error, expected):
        assert describe_error(error) == expected

    def test_project_falls_back_to_message(self, project_node):
        children = project_node.handle_error(ComposeFileNotFound("missing"))

        assert len(children) == 1
        assert children[0].kind is NodeKind.MESSAGE
        assert children[0].value == "No docker compose file(s)"
        assert children[0].parent is project_node

    def test_container_has_no_fallback(self, project_node):
        container = ExplorerNode.for_container(
            Container("shop-web-1", "web", "running"), project_node
        )
        assert container.handle_error(RuntimeError("boom")) == []
