"""
Main Window GUI Components for the Compose Explorer
"""

import logging
import tkinter as tk
from tkinter import ttk
from typing import Callable, Dict, List, Optional, Set

from config.settings import COLORS, FONTS, MAIN_WINDOW_SIZE, WINDOW_TITLE
from core.callback_handler import CallbackHandler
from core.compose_provider import DockerComposeProvider
from core.explorer_nodes import CollapsibleState, ExplorerNode
from core.operation_manager import ExplorerCommand, OperationManager
from gui.gui_utils import GuiUtils
from gui.popup_windows import LogDocumentWindow
from models.document import VirtualDocument
from utils.async_utils import ImprovedAsyncTaskManager, task_manager

logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = "Loading..."

# Commands whose buttons get the danger style
DANGER_TITLES = {"Down", "Kill"}


class MainWindow:
    """Tree view of compose projects with per-node action buttons"""

    def __init__(
        self,
        provider: DockerComposeProvider,
        operation_manager: OperationManager,
        callback_handler: CallbackHandler,
        manager: Optional[ImprovedAsyncTaskManager] = None,
    ):
        self.provider = provider
        self.operation_manager = operation_manager
        self.callback_handler = callback_handler
        self.task_manager = manager or task_manager

        # Initialize main window
        self.window = tk.Tk()
        self.window.title(WINDOW_TITLE)
        self.window.geometry(MAIN_WINDOW_SIZE)
        self.window.configure(bg=COLORS["background"])
        self.callback_handler.attach_window(self.window)

        # GUI components
        self.tree: Optional[ttk.Treeview] = None
        self.actions_frame = None
        self.status_label = None
        self.context_menu = None
        self.auto_refresh_var = tk.BooleanVar(value=provider.auto_refresh_enabled)

        # Tree item id -> explorer node, rebuilt on every refresh
        self._nodes: Dict[str, ExplorerNode] = {}
        self._loaded: Set[str] = set()
        self._generation = 0
        self._subscriptions = []
        self._log_windows: Dict[str, LogDocumentWindow] = {}

    def setup_window_protocol(self, on_close_callback: Callable):
        """Set up window close protocol"""

        def cleanup_and_close():
            for subscription in self._subscriptions:
                subscription.dispose()
            self._subscriptions.clear()
            on_close_callback()

        self.window.protocol("WM_DELETE_WINDOW", cleanup_and_close)

    def create_gui(self):
        """Create the main GUI layout"""
        self._create_toolbar()

        main_frame = GuiUtils.create_styled_frame(self.window)
        main_frame.pack(fill=tk.BOTH, expand=True, padx=10, pady=(0, 10))

        style = ttk.Style(self.window)
        style.configure("Explorer.Treeview", font=FONTS["tree"], rowheight=22)

        self.tree = ttk.Treeview(
            main_frame, columns=("description",), style="Explorer.Treeview"
        )
        self.tree.heading("#0", text="Projects", anchor="w")
        self.tree.heading("description", text="Status", anchor="w")
        self.tree.column("description", width=220, stretch=False)

        scrollbar = ttk.Scrollbar(main_frame, orient="vertical", command=self.tree.yview)
        self.tree.configure(yscrollcommand=scrollbar.set)
        self.tree.pack(side="left", fill=tk.BOTH, expand=True)
        scrollbar.pack(side="right", fill="y")

        self.actions_frame = GuiUtils.create_styled_frame(self.window)
        self.actions_frame.pack(fill="x", padx=10, pady=(0, 5))

        self.status_label = GuiUtils.create_styled_label(self.window, text="")
        self.status_label.pack(fill="x", padx=10, pady=(0, 10))

        self.context_menu = tk.Menu(self.window, tearoff=0)

        self.tree.bind("<<TreeviewOpen>>", self._on_item_open)
        self.tree.bind("<<TreeviewSelect>>", self._on_selection_changed)
        self.tree.bind("<Button-3>", self._show_context_menu)

        # Only poll while the window is visible
        self.window.bind("<Map>", self._on_map)
        self.window.bind("<Unmap>", self._on_unmap)

        self._subscriptions.append(
            self.provider.on_did_change_tree_data(
                lambda _data: self.schedule_task(self.reload_tree)
            )
        )
        self._subscriptions.append(
            self.provider.document_store.on_did_show_document(
                lambda document: self.schedule_task(
                    lambda: self.show_document(document)
                )
            )
        )

        self.reload_tree()

    def _create_toolbar(self):
        toolbar = GuiUtils.create_styled_frame(self.window)
        toolbar.pack(fill="x", padx=10, pady=10)

        title_label = GuiUtils.create_styled_label(
            toolbar, text=WINDOW_TITLE, font_key="title", color_key="text"
        )
        title_label.pack(side="left")

        refresh_btn = GuiUtils.create_styled_button(
            toolbar,
            text="Refresh",
            command=lambda: self._execute("docker-compose.explorer.refresh"),
            style="refresh",
        )
        refresh_btn.pack(side="right")

        auto_refresh_check = tk.Checkbutton(
            toolbar,
            text="Auto refresh",
            variable=self.auto_refresh_var,
            command=self._toggle_auto_refresh,
            bg=COLORS["background"],
            font=FONTS["info"],
        )
        auto_refresh_check.pack(side="right", padx=(0, 10))

    # Tree loading

    def reload_tree(self):
        """Rebuild the tree from the root, keeping expanded nodes expanded"""
        reopen = {
            node.node_id
            for item_id, node in self._nodes.items()
            if self.tree.exists(item_id) and self.tree.item(item_id, "open")
        }

        self._generation += 1
        self.tree.delete(*self.tree.get_children(""))
        self._nodes.clear()
        self._loaded.clear()
        self._update_actions(None)
        self._load_children("", None, reopen)

    def _load_children(
        self, item_id: str, node: Optional[ExplorerNode], reopen: Set[str]
    ):
        generation = self._generation

        def on_loaded(children, error):
            self.schedule_task(
                lambda: self._populate(item_id, generation, children, error, reopen)
            )

        self.task_manager.run_task(
            self.provider.get_children(node),
            callback=on_loaded,
            task_name=f"load:{node.node_id if node else 'projects'}",
        )

    def _populate(
        self,
        item_id: str,
        generation: int,
        children: Optional[List[ExplorerNode]],
        error: Optional[Exception],
        reopen: Set[str],
    ):
        # Results of a load started before the last refresh are dropped
        if generation != self._generation:
            return
        if item_id and not self.tree.exists(item_id):
            return

        for placeholder in self.tree.get_children(item_id):
            self.tree.delete(placeholder)
        self._loaded.add(item_id)

        if error is not None:
            self.callback_handler.show_error(str(error))
            return

        for child in children or []:
            tree_item = child.get_tree_item()
            child_id = self.tree.insert(
                item_id,
                "end",
                text=GuiUtils.format_label(tree_item.label, tree_item.icon),
                values=(tree_item.description,),
            )
            self._nodes[child_id] = child

            if tree_item.collapsible_state is CollapsibleState.NONE:
                continue

            self.tree.insert(child_id, "end", text=PLACEHOLDER_TEXT)
            if (
                tree_item.collapsible_state is CollapsibleState.EXPANDED
                or child.node_id in reopen
            ):
                self.tree.item(child_id, open=True)
                self._load_children(child_id, child, reopen)

    def _on_item_open(self, event=None):
        item_id = self.tree.focus()
        node = self._nodes.get(item_id)
        if node is None or item_id in self._loaded:
            return
        self._load_children(item_id, node, set())

    # Actions

    def get_selected_node(self) -> Optional[ExplorerNode]:
        selection = self.tree.selection()
        return self._nodes.get(selection[0]) if selection else None

    def _on_selection_changed(self, event=None):
        self._update_actions(self.get_selected_node())

    def _update_actions(self, node: Optional[ExplorerNode]):
        for widget in self.actions_frame.winfo_children():
            widget.destroy()

        for command in self.operation_manager.get_actions(node):
            button = GuiUtils.create_styled_button(
                self.actions_frame,
                text=command.title,
                command=lambda c=command, n=node: self._execute(c.command_id, n),
                style="danger" if command.title in DANGER_TITLES else "action",
            )
            button.pack(side="left", padx=(0, 5))

    def _show_context_menu(self, event):
        item_id = self.tree.identify_row(event.y)
        node = self._nodes.get(item_id)
        if node is None:
            return

        self.tree.selection_set(item_id)
        commands: List[ExplorerCommand] = self.operation_manager.get_actions(node)
        if not commands:
            return

        self.context_menu.delete(0, tk.END)
        for command in commands:
            self.context_menu.add_command(
                label=command.title,
                command=lambda c=command, n=node: self._execute(c.command_id, n),
            )
        self.context_menu.tk_popup(event.x_root, event.y_root)

    def _execute(self, command_id: str, node: Optional[ExplorerNode] = None):
        label = f"{command_id} {node.node_id}" if node else command_id
        self.set_status(f"Running {label}...")

        def on_done(result, error):
            if error is not None:
                logger.error(f"{label} failed: {error}")
                text = f"{label} failed"
            else:
                text = result.message or label
            self.schedule_task(lambda: self.set_status(text))

        self.operation_manager.execute(command_id, node, callback=on_done)

    def _toggle_auto_refresh(self):
        command_id = (
            "docker-compose.explorer.enableAutoRefresh"
            if self.auto_refresh_var.get()
            else "docker-compose.explorer.disableAutoRefresh"
        )
        self._execute(command_id)

    def _on_map(self, event):
        if event.widget is self.window and self.auto_refresh_var.get():
            self.provider.enable_auto_refresh()

    def _on_unmap(self, event):
        if event.widget is self.window:
            self.provider.disable_auto_refresh()

    # Documents and status

    def show_document(self, document: VirtualDocument):
        # A newer snapshot replaces the open window of the same container
        previous = self._log_windows.get(document.title)
        if previous is not None:
            previous.destroy()

        log_window = LogDocumentWindow(
            self.window, document, on_close=self._forget_log_window
        )
        log_window.create_window()
        self._log_windows[document.title] = log_window

    def _forget_log_window(self, log_window: LogDocumentWindow):
        if self._log_windows.get(log_window.document.title) is log_window:
            del self._log_windows[log_window.document.title]

    def set_status(self, text: str):
        if self.status_label is not None:
            self.status_label.config(text=text)

    def schedule_task(self, task: Callable, delay: int = 0):
        """Schedule a task to run on the GUI thread"""
        try:
            self.window.after(delay, task)
        except (RuntimeError, tk.TclError):
            # Window already destroyed
            pass

    def run(self):
        """Start the GUI main loop"""
        self.window.mainloop()

    def destroy(self):
        """Destroy the main window"""
        self.window.destroy()
