"""
Compose Explorer - Main Application

Lists docker compose projects for one or more workspace folders and drives
their lifecycle from a desktop tree view, an embedded web API, or both.
"""

import argparse
import logging
import threading
from typing import List, Optional

from config.config import get_config
from core.callback_handler import CallbackHandler
from core.compose_provider import DockerComposeProvider
from core.operation_manager import OperationManager
from models.workspace import WorkspaceFolder
from services.web_integration_service import WebIntegration
from utils.async_utils import shutdown_all, task_manager

logger = logging.getLogger(__name__)


class ComposeExplorerApp:
    """Wires the provider, command dispatch and host adapters together"""

    def __init__(self, folders: List[str]):
        self.config = get_config()
        self.callback_handler = CallbackHandler(
            history_size=self.config.service.message_history_size
        )

        explorer = self.config.explorer
        self.provider = DockerComposeProvider(
            WorkspaceFolder.from_paths(folders),
            explorer.files,
            explorer.shell,
            project_names=explorer.project_names,
            message_sink=self.callback_handler.show_error,
            logs_timeout=self.config.service.logs_timeout,
            query_timeout=self.config.service.default_timeout,
        )
        self.operation_manager = OperationManager(
            self.provider, self.callback_handler, task_manager
        )
        self.web_integration = WebIntegration(
            self.provider,
            self.operation_manager,
            self.callback_handler,
            task_manager,
            request_timeout=self.config.service.web_request_timeout,
        )
        self.main_window = None

        self._setup_async_integration()
        self.provider.set_auto_refresh(explorer.auto_refresh_interval)

    def _setup_async_integration(self):
        """Start the background event loop used by every host"""
        task_manager.setup_event_loop()
        logger.info("Async integration setup complete")

    def start_web_interface(self, host: str, port: int):
        try:
            self.web_integration.start_web_server(host=host, port=port)
        except Exception as e:
            logger.error(f"Failed to start web interface: {e}")

    def run_gui(self):
        from gui import MainWindow

        self.main_window = MainWindow(
            self.provider, self.operation_manager, self.callback_handler, task_manager
        )
        self.main_window.setup_window_protocol(self._on_window_close)
        self.main_window.create_gui()
        self.main_window.run()

    def run_headless(self):
        """Block until interrupted, serving only the web interface"""
        stop = threading.Event()
        try:
            while not stop.wait(1.0):
                if not self.web_integration.is_web_server_running():
                    break
        except KeyboardInterrupt:
            logger.info("Interrupted")

    def _on_window_close(self):
        logger.info("Application shutdown initiated")
        self.main_window.destroy()

    def shutdown(self):
        self.web_integration.stop_web_server()
        self.provider.close()
        shutdown_all(timeout=3.0)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    config = get_config()
    parser = argparse.ArgumentParser(description="Explore docker compose projects")
    parser.add_argument(
        "folders", nargs="*", default=["."], help="Workspace folders (default: .)"
    )
    parser.add_argument(
        "--web",
        action="store_true",
        default=config.web.enabled,
        help="Serve the JSON web interface",
    )
    parser.add_argument("--host", default=config.web.host)
    parser.add_argument("--port", type=int, default=config.web.port)
    parser.add_argument(
        "--no-gui", action="store_true", help="Do not open the desktop window"
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None):
    """Main function to run the explorer"""
    args = parse_args(argv)
    config = get_config()

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.no_gui and not args.web:
        logger.error("Nothing to run: --no-gui requires --web")
        return 2

    app = ComposeExplorerApp(args.folders)
    try:
        if args.web:
            app.start_web_interface(args.host, args.port)
        if args.no_gui:
            app.run_headless()
        else:
            app.run_gui()
    finally:
        app.shutdown()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
