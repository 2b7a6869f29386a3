"""
Explorer tree nodes

A node is a tagged value: its NodeKind selects how it lists children, renders
itself and degrades on errors, through the per-kind tables at the bottom of
this module.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from models.container import Container
from models.project import Project
from models.service import Service
from utils.async_base import (
    CommandNotFoundError,
    ComposeFileNotFound,
    DockerComposeCommandNotFound,
)


class NodeKind(Enum):
    PROJECTS = "projects"
    PROJECT = "project"
    SERVICE = "service"
    CONTAINER = "container"
    MESSAGE = "message"


class CollapsibleState(Enum):
    NONE = "none"
    COLLAPSED = "collapsed"
    EXPANDED = "expanded"


@dataclass(frozen=True)
class TreeItem:
    """Renderable projection of a node"""

    label: str
    kind: NodeKind
    collapsible_state: CollapsibleState = CollapsibleState.NONE
    description: str = ""
    tooltip: Optional[str] = None
    icon: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "kind": self.kind.value,
            "collapsible_state": self.collapsible_state.value,
            "description": self.description,
            "tooltip": self.tooltip,
            "icon": self.icon,
        }


@dataclass(eq=False)
class ExplorerNode:
    """A node of the explorer tree wrapping one domain object"""

    kind: NodeKind
    value: Any
    parent: Optional["ExplorerNode"] = field(default=None, repr=False)

    # Constructors

    @classmethod
    def for_projects(cls, projects: Sequence[Project]) -> "ExplorerNode":
        return cls(NodeKind.PROJECTS, tuple(projects))

    @classmethod
    def for_project(cls, project: Project, parent=None) -> "ExplorerNode":
        return cls(NodeKind.PROJECT, project, parent)

    @classmethod
    def for_service(cls, service: Service, parent=None) -> "ExplorerNode":
        return cls(NodeKind.SERVICE, service, parent)

    @classmethod
    def for_container(cls, container: Container, parent=None) -> "ExplorerNode":
        return cls(NodeKind.CONTAINER, container, parent)

    @classmethod
    def for_message(cls, text: str, parent=None) -> "ExplorerNode":
        return cls(NodeKind.MESSAGE, text, parent)

    # Typed views of `value`, valid for the matching kind

    @property
    def project(self) -> Project:
        return self.value

    @property
    def service(self) -> Service:
        return self.value

    @property
    def container(self) -> Container:
        return self.value

    @property
    def node_id(self) -> str:
        """Path-like identifier, e.g. 'shop/web/shop-web-1'"""
        prefix = self.parent.node_id if self.parent is not None else ""
        own = _NODE_NAMES[self.kind](self)
        if not prefix:
            return own
        return f"{prefix}/{own}" if own else prefix

    @property
    def is_actionable(self) -> bool:
        return self.kind in (NodeKind.PROJECT, NodeKind.SERVICE, NodeKind.CONTAINER)

    # Capabilities

    async def get_children(self) -> List["ExplorerNode"]:
        return await _CHILDREN[self.kind](self)

    def get_tree_item(self) -> TreeItem:
        return _RENDERERS[self.kind](self)

    def handle_error(self, error: Exception) -> List["ExplorerNode"]:
        return _ERROR_HANDLERS[self.kind](self, error)


# Children


async def _projects_children(node: ExplorerNode) -> List[ExplorerNode]:
    if not node.value:
        return [ExplorerNode.for_message("No workspace folders", node)]
    return [ExplorerNode.for_project(project, node) for project in node.value]


async def _project_children(node: ExplorerNode) -> List[ExplorerNode]:
    services = await node.project.get_services(force=True)
    # Reload once here; service nodes below reuse the listing
    await node.project.get_containers(force=True)
    if not services:
        return [ExplorerNode.for_message("No services", node)]
    return [ExplorerNode.for_service(service, node) for service in services]


async def _service_children(node: ExplorerNode) -> List[ExplorerNode]:
    containers = await node.service.get_containers()
    return [ExplorerNode.for_container(container, node) for container in containers]


async def _no_children(node: ExplorerNode) -> List[ExplorerNode]:
    return []


# Rendering


def _render_projects(node: ExplorerNode) -> TreeItem:
    return TreeItem("Projects", node.kind, CollapsibleState.EXPANDED)


def _render_project(node: ExplorerNode) -> TreeItem:
    project = node.project
    return TreeItem(
        label=project.name,
        kind=node.kind,
        collapsible_state=CollapsibleState.COLLAPSED,
        tooltip=project.docker_compose_executor.cwd,
        icon="project",
    )


def _render_service(node: ExplorerNode) -> TreeItem:
    containers = node.service.cached_containers() or []
    running = sum(1 for container in containers if container.is_running)
    return TreeItem(
        label=node.service.name,
        kind=node.kind,
        collapsible_state=CollapsibleState.COLLAPSED,
        description=f"{running}/{len(containers)} running" if containers else "",
        icon="service-up" if running else "service-down",
    )


def _render_container(node: ExplorerNode) -> TreeItem:
    container = node.container
    tooltip = "\n".join(part for part in (container.command, container.ports) if part)
    return TreeItem(
        label=container.name,
        kind=node.kind,
        description=container.status or container.state,
        tooltip=tooltip or None,
        icon="container-running" if container.is_running else "container-stopped",
    )


def _render_message(node: ExplorerNode) -> TreeItem:
    return TreeItem(node.value, node.kind, icon="message")


# Error fallbacks


def describe_error(error: Exception) -> str:
    """Short label for a failed listing"""
    if isinstance(error, ComposeFileNotFound):
        return "No docker compose file(s)"
    if isinstance(error, DockerComposeCommandNotFound):
        return "docker compose command not found"
    if isinstance(error, CommandNotFoundError):
        return f"{error.command} command not found"
    return getattr(error, "message", None) or str(error) or type(error).__name__


def _message_fallback(node: ExplorerNode, error: Exception) -> List[ExplorerNode]:
    return [ExplorerNode.for_message(describe_error(error), node)]


def _no_fallback(node: ExplorerNode, error: Exception) -> List[ExplorerNode]:
    return []


_NODE_NAMES: Dict[NodeKind, Callable[[ExplorerNode], str]] = {
    NodeKind.PROJECTS: lambda node: "",
    NodeKind.PROJECT: lambda node: node.project.name,
    NodeKind.SERVICE: lambda node: node.service.name,
    NodeKind.CONTAINER: lambda node: node.container.name,
    NodeKind.MESSAGE: lambda node: f"#{node.value}",
}

_CHILDREN: Dict[NodeKind, Callable[[ExplorerNode], Awaitable[List[ExplorerNode]]]] = {
    NodeKind.PROJECTS: _projects_children,
    NodeKind.PROJECT: _project_children,
    NodeKind.SERVICE: _service_children,
    NodeKind.CONTAINER: _no_children,
    NodeKind.MESSAGE: _no_children,
}

_RENDERERS: Dict[NodeKind, Callable[[ExplorerNode], TreeItem]] = {
    NodeKind.PROJECTS: _render_projects,
    NodeKind.PROJECT: _render_project,
    NodeKind.SERVICE: _render_service,
    NodeKind.CONTAINER: _render_container,
    NodeKind.MESSAGE: _render_message,
}

_ERROR_HANDLERS: Dict[
    NodeKind, Callable[[ExplorerNode, Exception], List[ExplorerNode]]
] = {
    NodeKind.PROJECTS: _message_fallback,
    NodeKind.PROJECT: _message_fallback,
    NodeKind.SERVICE: _message_fallback,
    NodeKind.CONTAINER: _no_fallback,
    NodeKind.MESSAGE: _no_fallback,
}
