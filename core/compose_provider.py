"""
Docker Compose tree provider

Answers tree queries for host adapters and dispatches lifecycle actions on
projects, services and containers. Every state-changing action refreshes the
tree once its process has exited.
"""

import asyncio
import logging
from typing import Callable, List, Optional, Sequence, Tuple

from config.settings import ERROR_MESSAGE_PREFIX
from core.explorer_nodes import ExplorerNode, TreeItem
from core.refresh_notifier import RefreshNotifier
from models.document import DocumentStore, VirtualDocument
from models.project import Project
from models.workspace import WorkspaceFolder, derive_project_name
from services.docker_compose_executor import DockerComposeExecutor
from services.docker_executor import DockerExecutor
from services.executor import ProcessHandle

logger = logging.getLogger(__name__)


def build_projects(
    folders: Sequence[WorkspaceFolder],
    files: Sequence[str],
    shell: str,
    project_names: Optional[Sequence[str]] = None,
    query_timeout: Optional[float] = None,
) -> List[Project]:
    """One project per workspace folder, each with its own executors"""
    projects = []
    for folder in folders:
        name = derive_project_name(folder, project_names)
        docker_executor = DockerExecutor(shell, folder.full_path)
        compose_executor = DockerComposeExecutor(
            name, files, shell, folder.full_path
        )
        projects.append(
            Project(name, docker_executor, compose_executor, query_timeout)
        )
    return projects


class DockerComposeProvider(RefreshNotifier):
    """Tree data provider and command façade for docker compose projects"""

    def __init__(
        self,
        folders: Sequence[WorkspaceFolder],
        files: Sequence[str],
        shell: str,
        project_names: Optional[Sequence[str]] = None,
        message_sink: Optional[Callable[[str], None]] = None,
        document_store: Optional[DocumentStore] = None,
        logs_timeout: Optional[float] = None,
        query_timeout: Optional[float] = None,
    ):
        super().__init__()
        self.files = list(files)
        self.shell = shell
        self.project_names = list(project_names or [])
        self.message_sink = message_sink or logger.error
        self.document_store = document_store or DocumentStore()
        self.logs_timeout = logs_timeout
        self.query_timeout = query_timeout

        self._projects: Tuple[Project, ...] = tuple(
            build_projects(
                folders, self.files, shell, self.project_names, query_timeout
            )
        )
        self._root = ExplorerNode.for_projects(self._projects)
        self._loading: Optional[Tuple[ExplorerNode, asyncio.Future]] = None

    @property
    def projects(self) -> Tuple[Project, ...]:
        return self._projects

    @property
    def root(self) -> ExplorerNode:
        return self._root

    # Tree queries

    async def get_children(
        self, node: Optional[ExplorerNode] = None
    ) -> List[ExplorerNode]:
        if node is None:
            node = self._root

        # Join a pending load of the same node, otherwise let it finish first
        while self._loading is not None:
            loading_node, pending = self._loading
            if loading_node is node:
                return await asyncio.shield(pending)
            await asyncio.wait({pending})

        pending = asyncio.ensure_future(self._load_children(node))
        self._loading = (node, pending)
        pending.add_done_callback(self._clear_loading)
        return await asyncio.shield(pending)

    def _clear_loading(self, future: asyncio.Future):
        if self._loading is not None and self._loading[1] is future:
            self._loading = None

    async def _load_children(self, node: ExplorerNode) -> List[ExplorerNode]:
        try:
            return await node.get_children()
        except Exception as err:
            message = getattr(err, "message", None) or str(err)
            logger.error(f"Listing {node.node_id or 'projects'} failed: {message}")
            self.message_sink(ERROR_MESSAGE_PREFIX + message)
            return node.handle_error(err)

    def get_tree_item(self, node: ExplorerNode) -> TreeItem:
        return node.get_tree_item()

    # Completion hooks

    def _refresh_on_exit(self, handle: ProcessHandle) -> ProcessHandle:
        """Refresh exactly once when the process terminates, whatever its exit code"""
        handle.completion().add_done_callback(lambda _future: self.refresh())
        return handle

    # Projects

    async def start_project(self, node: ExplorerNode) -> ProcessHandle:
        return self._refresh_on_exit(node.project.start())

    async def stop_project(self, node: ExplorerNode) -> ProcessHandle:
        return self._refresh_on_exit(node.project.stop())

    async def up_project(self, node: ExplorerNode) -> ProcessHandle:
        return self._refresh_on_exit(node.project.up())

    async def down_project(self, node: ExplorerNode) -> ProcessHandle:
        return self._refresh_on_exit(node.project.down())

    # Services

    async def shell_service(self, node: ExplorerNode) -> None:
        node.service.shell()

    async def up_service(self, node: ExplorerNode) -> ProcessHandle:
        return self._refresh_on_exit(node.service.up())

    async def down_service(self, node: ExplorerNode) -> ProcessHandle:
        return self._refresh_on_exit(node.service.down())

    async def build_service(self, node: ExplorerNode) -> ProcessHandle:
        return self._refresh_on_exit(node.service.build())

    async def start_service(self, node: ExplorerNode) -> ProcessHandle:
        return self._refresh_on_exit(node.service.start())

    async def stop_service(self, node: ExplorerNode) -> ProcessHandle:
        return self._refresh_on_exit(node.service.stop())

    async def restart_service(self, node: ExplorerNode) -> ProcessHandle:
        return self._refresh_on_exit(node.service.restart())

    async def kill_service(self, node: ExplorerNode) -> ProcessHandle:
        return self._refresh_on_exit(node.service.kill())

    # Containers

    async def attach_container(self, node: ExplorerNode) -> None:
        node.container.attach()

    async def logs_container(self, node: ExplorerNode) -> VirtualDocument:
        """Open a one-shot snapshot of the container's logs as `<name>.logs`"""
        container = node.container
        content = await container.logs(timeout=self.logs_timeout)
        document = self.document_store.open_untitled(f"{container.name}.logs")
        document.insert(0, content)
        self.document_store.show(document)
        return document

    async def start_container(self, node: ExplorerNode) -> ProcessHandle:
        return self._refresh_on_exit(node.container.start())

    async def stop_container(self, node: ExplorerNode) -> ProcessHandle:
        return self._refresh_on_exit(node.container.stop())

    async def kill_container(self, node: ExplorerNode) -> ProcessHandle:
        return self._refresh_on_exit(node.container.kill())
