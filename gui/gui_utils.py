"""
GUI utilities for common operations
"""

import tkinter as tk
from tkinter import scrolledtext
from typing import Callable, Optional

from config.settings import BUTTON_STYLES, COLORS, FONTS, ICONS


class GuiUtils:
    """Utility class for common GUI operations"""

    @staticmethod
    def create_styled_button(
        parent, text: str, command: Callable, style: str = "close", **kwargs
    ) -> tk.Button:
        """Create a button with predefined styling"""
        button_style = BUTTON_STYLES.get(style, BUTTON_STYLES["close"])

        default_config = {
            "text": text,
            "command": command,
            "font": FONTS["button"],
            "relief": "flat",
            "padx": 10,
            "pady": 4,
            **button_style,
        } | kwargs
        return tk.Button(parent, **default_config)

    @staticmethod
    def create_styled_label(
        parent, text: str, font_key: str = "info", color_key: str = "muted", **kwargs
    ) -> tk.Label:
        """Create a label with predefined styling"""
        default_config = {
            "text": text,
            "font": FONTS[font_key],
            "bg": COLORS["background"],
            "fg": COLORS[color_key],
        } | kwargs
        return tk.Label(parent, **default_config)

    @staticmethod
    def create_styled_frame(parent, bg_color: str = "background", **kwargs) -> tk.Frame:
        """Create a frame with predefined styling"""
        default_config = {"bg": COLORS[bg_color]} | kwargs
        return tk.Frame(parent, **default_config)

    @staticmethod
    def center_window(window, width: int, height: int):
        """Center a window on screen"""
        window.update_idletasks()
        x = (window.winfo_screenwidth() // 2) - (width // 2)
        y = (window.winfo_screenheight() // 2) - (height // 2)
        window.geometry(f"{width}x{height}+{x}+{y}")

    @staticmethod
    def parse_size(size: str) -> tuple[int, int]:
        """'900x600' -> (900, 600)"""
        width, height = (int(x) for x in size.split("x"))
        return width, height

    @staticmethod
    def format_label(label: str, icon: Optional[str]) -> str:
        """Tree label with its icon prefix, when the icon is known"""
        prefix = ICONS.get(icon) if icon else None
        return f"{prefix} {label}" if prefix else label

    @staticmethod
    def create_console_text_area(parent) -> scrolledtext.ScrolledText:
        """Create a console-style text area"""
        return scrolledtext.ScrolledText(
            parent,
            font=FONTS["console"],
            bg=COLORS["terminal_bg"],
            fg=COLORS["terminal_text"],
            insertbackground="white",
            wrap=tk.NONE,
            state=tk.NORMAL,
        )
