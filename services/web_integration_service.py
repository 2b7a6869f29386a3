"""
Web Integration Module for the Compose Explorer
Serves the explorer tree and its commands as a small Flask JSON API
"""

import logging
import threading
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from core.callback_handler import CallbackHandler
from core.compose_provider import DockerComposeProvider
from core.explorer_nodes import CollapsibleState, ExplorerNode
from core.operation_manager import EXPLORER_COMMANDS, OperationManager
from utils.async_base import ValidationError
from utils.async_utils import ImprovedAsyncTaskManager, task_manager

logger = logging.getLogger(__name__)

# Suppress Flask's default info level logging
log = logging.getLogger("werkzeug")
log.setLevel(logging.ERROR)

DEFAULT_TREE_DEPTH = 3


class WebIntegration:
    """Web interface for the explorer, backed by the shared provider"""

    def __init__(
        self,
        provider: DockerComposeProvider,
        operation_manager: OperationManager,
        callback_handler: CallbackHandler,
        manager: Optional[ImprovedAsyncTaskManager] = None,
        request_timeout: Optional[float] = None,
    ):
        self.provider = provider
        self.operation_manager = operation_manager
        self.callback_handler = callback_handler
        self.task_manager = manager or task_manager
        self.request_timeout = request_timeout
        self.app = None
        self.web_thread = None
        self.is_running = False
        self.host = "127.0.0.1"
        self.port = 5000

    def _run(self, coro):
        """Run a coroutine on the explorer's event loop and wait for it"""
        return self.task_manager.run_task_sync(coro, timeout=self.request_timeout)

    async def _serialize(self, node: ExplorerNode, depth: int) -> Dict[str, Any]:
        item = node.get_tree_item()
        data = item.to_dict()
        data["id"] = node.node_id
        data["actions"] = [
            command.command_id for command in self.operation_manager.get_actions(node)
        ]
        if item.collapsible_state is not CollapsibleState.NONE and depth > 0:
            children = await self.provider.get_children(node)
            data["children"] = [
                await self._serialize(child, depth - 1) for child in children
            ]
        return data

    async def _tree(self, depth: int):
        children = await self.provider.get_children()
        return [await self._serialize(child, depth - 1) for child in children]

    async def _find_node(self, node_id: str) -> Optional[ExplorerNode]:
        """Walk the tree from the root following a node id like 'shop/web'"""
        parts = node_id.strip("/").split("/")
        node = None
        for depth in range(len(parts)):
            target = "/".join(parts[: depth + 1])
            children = await self.provider.get_children(node)
            node = next((child for child in children if child.node_id == target), None)
            if node is None:
                return None
        return node

    def setup_flask_app(self):
        """Set up Flask application with routes"""
        self.app = Flask(__name__)
        self._setup_routes()
        return self.app

    def _setup_routes(self):
        """Set up all Flask routes"""

        @self.app.route("/api/tree")
        def api_tree():
            """Nested tree of projects, services and containers"""
            depth = request.args.get("depth", DEFAULT_TREE_DEPTH, type=int)
            try:
                tree = self._run(self._tree(max(depth, 1)))
                return jsonify({"success": True, "tree": tree})
            except Exception as e:
                logger.error(f"Error building tree: {e}")
                return jsonify({"success": False, "message": str(e)}), 500

        @self.app.route("/api/refresh", methods=["POST"])
        def api_refresh():
            self.provider.refresh()
            return jsonify({"success": True, "message": "Refresh requested"})

        @self.app.route("/api/auto-refresh", methods=["GET", "POST"])
        def api_auto_refresh():
            if request.method == "POST":
                data = request.get_json(silent=True) or {}
                if "enabled" not in data:
                    return (
                        jsonify({"success": False, "message": "Missing 'enabled'"}),
                        400,
                    )
                if data["enabled"]:
                    self.provider.enable_auto_refresh()
                else:
                    self.provider.disable_auto_refresh()
            return jsonify(
                {
                    "success": True,
                    "enabled": self.provider.auto_refresh_enabled,
                    "active": self.provider.auto_refresh_active,
                }
            )

        @self.app.route("/api/commands")
        def api_commands():
            commands = [
                {
                    "id": command.command_id,
                    "title": command.title,
                    "kind": command.kind.value if command.kind else None,
                }
                for command in EXPLORER_COMMANDS.values()
            ]
            return jsonify({"success": True, "commands": commands})

        @self.app.route("/api/commands/<command_id>", methods=["POST"])
        def api_run_command(command_id):
            data = request.get_json(silent=True) or {}
            node_id = data.get("node")

            node = None
            if node_id:
                try:
                    node = self._run(self._find_node(node_id))
                except FutureTimeoutError:
                    return (
                        jsonify(
                            {"success": False, "message": f"Timed out resolving {node_id}"}
                        ),
                        504,
                    )
                if node is None:
                    return (
                        jsonify({"success": False, "message": f"No node {node_id}"}),
                        404,
                    )

            try:
                future = self.operation_manager.execute(command_id, node)
            except ValidationError as e:
                return jsonify({"success": False, "message": e.message}), 400

            try:
                result = future.result(timeout=self.request_timeout)
            except FutureTimeoutError:
                # The command keeps running; its outcome reaches /api/messages
                return (
                    jsonify(
                        {
                            "success": True,
                            "message": f"{command_id} is still running",
                            "pending": True,
                        }
                    ),
                    202,
                )
            return jsonify(result.to_dict())

        @self.app.route("/api/documents")
        def api_documents():
            titles = [doc.title for doc in self.provider.document_store.documents]
            return jsonify({"success": True, "documents": titles})

        @self.app.route("/api/documents/<path:title>")
        def api_document(title):
            document = self.provider.document_store.get(title)
            if document is None:
                return jsonify({"success": False, "message": f"No document {title}"}), 404
            return jsonify({"success": True, **document.to_dict()})

        @self.app.route("/api/messages")
        def api_messages():
            limit = request.args.get("limit", type=int)
            messages = [
                message.to_dict()
                for message in self.callback_handler.get_messages(limit)
            ]
            return jsonify({"success": True, "messages": messages})

    def start_web_server(self, host="127.0.0.1", port=5000, debug=False):
        """Start the web server in a separate thread"""
        if self.is_running:
            return

        self.setup_flask_app()
        self.host = host
        self.port = port
        self.is_running = True

        def run_server():
            try:
                self.app.run(host=host, port=port, debug=debug, use_reloader=False)
            except Exception as e:
                logger.error(f"Web server error: {e}")
            finally:
                self.is_running = False

        self.web_thread = threading.Thread(target=run_server, daemon=True)
        self.web_thread.start()
        logger.info(f"Web interface available at {self.get_web_url()}")

    def stop_web_server(self):
        """Stop the web server"""
        if self.is_running:
            self.is_running = False
            logger.info("Web server stopped")

    def get_web_url(self) -> str:
        """Get the web interface URL"""
        return f"http://{self.host}:{self.port}"

    def is_web_server_running(self) -> bool:
        """Check if web server is running"""
        return self.is_running
