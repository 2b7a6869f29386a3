"""
Unified Callback Handler for Compose Explorer messages

Collects user-visible messages (tree listing errors and command outcomes),
shows them in the desktop window when one is attached and keeps a short
history for the web interface.
"""

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional

logger = logging.getLogger(__name__)

MESSAGE_TITLE = "Docker Compose"


@dataclass
class CallbackConfig:
    """Message templates for one family of commands"""

    success_message_template: str = "{label} completed"
    error_message_template: str = "{label} failed: {error_message}"
    exit_code_message_template: str = "{label} exited with code {return_code}"
    success_show_dialog: bool = False


@dataclass
class UserMessage:
    level: str
    text: str
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {"level": self.level, "text": self.text, "timestamp": self.timestamp}


class CallbackHandler:
    """Routes user-visible messages to the active host"""

    def __init__(self, window=None, history_size: int = 100):
        """
        Args:
            window: Optional tkinter root; dialogs are only shown when set
            history_size: Number of messages kept for the web interface
        """
        self.window = window
        self._history: Deque[UserMessage] = deque(maxlen=history_size)
        self._lock = threading.Lock()
        self.operation_configs = self._initialize_operation_configs()

    def _initialize_operation_configs(self) -> Dict[str, CallbackConfig]:
        configs = {
            "project": CallbackConfig(),
            "service": CallbackConfig(),
            "container": CallbackConfig(),
        }
        configs["explorer"] = CallbackConfig(
            success_message_template="{label}",
        )
        return configs

    def attach_window(self, window):
        self.window = window

    def _record(self, level: str, text: str):
        with self._lock:
            self._history.append(UserMessage(level, text))

    def _show_dialog(self, level: str, text: str):
        if self.window is None:
            return

        from tkinter import messagebox

        show = messagebox.showerror if level == "error" else messagebox.showinfo
        self.window.after(0, lambda: show(MESSAGE_TITLE, text, parent=self.window))

    def show_error(self, message: str) -> None:
        logger.error(message)
        self._record("error", message)
        self._show_dialog("error", message)

    def show_info(self, message: str, dialog: bool = False) -> None:
        logger.info(message)
        self._record("info", message)
        if dialog:
            self._show_dialog("info", message)

    # Command outcomes

    def show_success(self, family: str, label: str) -> None:
        config = self.operation_configs.get(family, CallbackConfig())
        self.show_info(
            config.success_message_template.format(label=label),
            dialog=config.success_show_dialog,
        )

    def show_failure(self, family: str, label: str, error: Exception) -> None:
        config = self.operation_configs.get(family, CallbackConfig())
        error_message = getattr(error, "message", None) or str(error)
        self.show_error(
            config.error_message_template.format(
                label=label, error_message=error_message
            )
        )

    def show_exit_code(self, family: str, label: str, return_code: int) -> None:
        config = self.operation_configs.get(family, CallbackConfig())
        self.show_error(
            config.exit_code_message_template.format(
                label=label, return_code=return_code
            )
        )

    def get_messages(self, limit: Optional[int] = None) -> List[UserMessage]:
        with self._lock:
            messages = list(self._history)
        return messages[-limit:] if limit else messages

    def clear_messages(self):
        with self._lock:
            self._history.clear()
