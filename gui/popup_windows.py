"""
Popup windows for the Compose Explorer
"""

import logging
import tkinter as tk
from tkinter import messagebox
from typing import Callable, Optional

from config.settings import COLORS, LOG_WINDOW_SIZE
from gui.gui_utils import GuiUtils
from models.document import VirtualDocument

logger = logging.getLogger(__name__)


class LogDocumentWindow:
    """Read-only view of a log snapshot document"""

    def __init__(
        self,
        parent_window: tk.Tk,
        document: VirtualDocument,
        size: str = LOG_WINDOW_SIZE,
        on_close: Optional[Callable[["LogDocumentWindow"], None]] = None,
    ):
        self.parent_window = parent_window
        self.document = document
        self.size = size
        self.on_close = on_close
        self.window = None
        self.text_area = None
        self.copy_btn = None
        self.is_created = False

    def create_window(self):
        """Create the log window and fill it with the document text"""
        if self.is_created:
            return

        self.window = tk.Toplevel(self.parent_window)
        self.window.title(self.document.title)
        self.window.geometry(self.size)
        self.window.configure(bg=COLORS["terminal_bg"])
        self.window.protocol("WM_DELETE_WINDOW", self.destroy)

        main_frame = GuiUtils.create_styled_frame(self.window, bg_color="terminal_bg")
        main_frame.pack(fill=tk.BOTH, expand=True, padx=10, pady=10)

        title_label = GuiUtils.create_styled_label(
            main_frame,
            text=self.document.title,
            font_key="console_title",
            bg=COLORS["terminal_bg"],
            fg=COLORS["terminal_text"],
        )
        title_label.pack(pady=(0, 10))

        self.text_area = GuiUtils.create_console_text_area(main_frame)
        self.text_area.pack(fill=tk.BOTH, expand=True)
        self.text_area.insert("1.0", self.document.get_text())
        self.text_area.config(state=tk.DISABLED)

        buttons_frame = GuiUtils.create_styled_frame(main_frame, bg_color="terminal_bg")
        buttons_frame.pack(fill="x", pady=(10, 0))

        self.copy_btn = GuiUtils.create_styled_button(
            buttons_frame,
            text="Copy",
            command=self._copy_text,
            style="copy",
            padx=20,
            pady=5,
        )
        self.copy_btn.pack(side="left")

        close_btn = GuiUtils.create_styled_button(
            buttons_frame,
            text="Close",
            command=self.destroy,
            style="close",
            padx=20,
            pady=5,
        )
        close_btn.pack(side="right")

        GuiUtils.center_window(self.window, *GuiUtils.parse_size(self.size))
        self.is_created = True

    def _copy_text(self):
        try:
            self.window.clipboard_clear()
            self.window.clipboard_append(self.document.get_text())
            self.copy_btn.config(text="Copied!", bg=COLORS["success"])
            self.window.after(
                2000, lambda: self.copy_btn.config(text="Copy", bg=COLORS["secondary"])
            )
        except tk.TclError as e:
            logger.error(f"Failed to copy {self.document.title}: {e}")
            messagebox.showerror(
                "Copy Error", f"Failed to copy to clipboard: {str(e)}", parent=self.window
            )

    def destroy(self):
        """Destroy the window"""
        if self.window:
            self.window.destroy()
            self.window = None
            if self.on_close:
                self.on_close(self)
