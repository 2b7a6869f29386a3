"""
Operation Manager for the Compose Explorer

Maps explorer command identifiers to provider methods, runs them on the
background event loop and reports their outcome through the callback handler.
"""

import asyncio
import logging
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from core.callback_handler import CallbackHandler
from core.compose_provider import DockerComposeProvider
from core.explorer_nodes import ExplorerNode, NodeKind
from models.document import VirtualDocument
from services.executor import ProcessHandle
from utils.async_base import AsyncError, AsyncResult, ProcessError, ValidationError
from utils.async_utils import ImprovedAsyncTaskManager, task_manager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExplorerCommand:
    """A command exposed to hosts; `kind` is the node kind it applies to"""

    command_id: str
    title: str
    method: str
    kind: Optional[NodeKind] = None

    @property
    def family(self) -> str:
        return self.kind.value if self.kind else "explorer"


_COMMANDS = [
    ExplorerCommand("docker-compose.explorer.refresh", "Refresh", "refresh"),
    ExplorerCommand(
        "docker-compose.explorer.enableAutoRefresh",
        "Enable auto refresh",
        "enable_auto_refresh",
    ),
    ExplorerCommand(
        "docker-compose.explorer.disableAutoRefresh",
        "Disable auto refresh",
        "disable_auto_refresh",
    ),
    ExplorerCommand("docker-compose.project.up", "Up", "up_project", NodeKind.PROJECT),
    ExplorerCommand(
        "docker-compose.project.down", "Down", "down_project", NodeKind.PROJECT
    ),
    ExplorerCommand(
        "docker-compose.project.start", "Start", "start_project", NodeKind.PROJECT
    ),
    ExplorerCommand(
        "docker-compose.project.stop", "Stop", "stop_project", NodeKind.PROJECT
    ),
    ExplorerCommand("docker-compose.service.up", "Up", "up_service", NodeKind.SERVICE),
    ExplorerCommand(
        "docker-compose.service.down", "Down", "down_service", NodeKind.SERVICE
    ),
    ExplorerCommand(
        "docker-compose.service.build", "Build", "build_service", NodeKind.SERVICE
    ),
    ExplorerCommand(
        "docker-compose.service.start", "Start", "start_service", NodeKind.SERVICE
    ),
    ExplorerCommand(
        "docker-compose.service.stop", "Stop", "stop_service", NodeKind.SERVICE
    ),
    ExplorerCommand(
        "docker-compose.service.restart", "Restart", "restart_service", NodeKind.SERVICE
    ),
    ExplorerCommand(
        "docker-compose.service.kill", "Kill", "kill_service", NodeKind.SERVICE
    ),
    ExplorerCommand(
        "docker-compose.service.shell", "Shell", "shell_service", NodeKind.SERVICE
    ),
    ExplorerCommand(
        "docker-compose.container.start",
        "Start",
        "start_container",
        NodeKind.CONTAINER,
    ),
    ExplorerCommand(
        "docker-compose.container.stop", "Stop", "stop_container", NodeKind.CONTAINER
    ),
    ExplorerCommand(
        "docker-compose.container.kill", "Kill", "kill_container", NodeKind.CONTAINER
    ),
    ExplorerCommand(
        "docker-compose.container.attach",
        "Attach",
        "attach_container",
        NodeKind.CONTAINER,
    ),
    ExplorerCommand(
        "docker-compose.container.logs", "Logs", "logs_container", NodeKind.CONTAINER
    ),
]

EXPLORER_COMMANDS: Dict[str, ExplorerCommand] = {
    command.command_id: command for command in _COMMANDS
}

# Actions offered for each node kind, in menu order
NODE_ACTIONS: Dict[NodeKind, List[ExplorerCommand]] = {
    kind: [command for command in _COMMANDS if command.kind is kind]
    for kind in (NodeKind.PROJECT, NodeKind.SERVICE, NodeKind.CONTAINER)
}


class OperationManager:
    """
    Dispatches explorer commands for the desktop and web hosts.

    Provider methods propagate their failures; this is where they become
    user-visible messages. Non-zero exit codes are reported the same way.
    """

    def __init__(
        self,
        provider: DockerComposeProvider,
        callback_handler: CallbackHandler,
        manager: Optional[ImprovedAsyncTaskManager] = None,
    ):
        self.provider = provider
        self.callback_handler = callback_handler
        self.task_manager = manager or task_manager

    @staticmethod
    def get_command(command_id: str) -> ExplorerCommand:
        try:
            return EXPLORER_COMMANDS[command_id]
        except KeyError:
            raise ValidationError(f"Unknown command: {command_id}", "command_id")

    @staticmethod
    def get_actions(node: Optional[ExplorerNode]) -> List[ExplorerCommand]:
        if node is None:
            return []
        return NODE_ACTIONS.get(node.kind, [])

    def execute(
        self,
        command_id: str,
        node: Optional[ExplorerNode] = None,
        callback: Optional[Callable] = None,
    ) -> Future:
        """Schedule a command on the background loop; resolves to AsyncResult"""
        command = self.get_command(command_id)
        if command.kind is not None and (node is None or node.kind is not command.kind):
            raise ValidationError(
                f"{command_id} requires a {command.kind.value} node", "node"
            )

        return self.task_manager.run_task(
            self.run_command(command, node),
            callback=callback,
            task_name=f"{command_id}:{node.node_id if node else ''}",
        )

    async def run_command(
        self, command: ExplorerCommand, node: Optional[ExplorerNode] = None
    ) -> AsyncResult:
        label = f"{command.title} {node.node_id}" if node else command.title
        method = getattr(self.provider, command.method)

        try:
            outcome = method(node) if command.kind is not None else method()
            if asyncio.iscoroutine(outcome):
                outcome = await outcome
        except Exception as e:
            logger.error(f"{label} failed: {e}")
            self.callback_handler.show_failure(command.family, label, e)
            error = e if isinstance(e, AsyncError) else ProcessError(str(e))
            return AsyncResult.error_result(error, metadata={"command": command.command_id})

        if isinstance(outcome, ProcessHandle):
            return await self._await_process(command, label, outcome)

        if isinstance(outcome, VirtualDocument):
            return AsyncResult.success_result(
                {"document": outcome.title},
                message=f"Opened {outcome.title}",
                metadata={"command": command.command_id},
            )

        self.callback_handler.show_success(command.family, label)
        return AsyncResult.success_result(
            None, message=label, metadata={"command": command.command_id}
        )

    async def _await_process(
        self, command: ExplorerCommand, label: str, handle: ProcessHandle
    ) -> AsyncResult:
        return_code = await handle.wait()
        metadata = {"command": command.command_id, "argv": handle.command}

        if return_code != 0:
            self.callback_handler.show_exit_code(command.family, label, return_code)
            error = ProcessError(
                f"{label} exited with code {return_code}",
                return_code=return_code,
                stdout=handle.output,
            )
            return AsyncResult.error_result(error, metadata=metadata)

        self.callback_handler.show_success(command.family, label)
        return AsyncResult.success_result(
            {"return_code": return_code, "output": handle.output},
            message=f"{label} completed",
            metadata=metadata,
        )
