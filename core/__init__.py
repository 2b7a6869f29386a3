# Core package: tree provider, nodes, refresh notifier and command dispatch

from .callback_handler import CallbackHandler
from .compose_provider import DockerComposeProvider
from .explorer_nodes import ExplorerNode, NodeKind, TreeItem
from .operation_manager import OperationManager
from .refresh_notifier import RefreshNotifier

__all__ = [
    "CallbackHandler",
    "DockerComposeProvider",
    "ExplorerNode",
    "NodeKind",
    "TreeItem",
    "OperationManager",
    "RefreshNotifier",
]
