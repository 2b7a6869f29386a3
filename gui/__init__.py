# GUI package

from .main_window import MainWindow
from .gui_utils import GuiUtils
from .popup_windows import LogDocumentWindow

__all__ = [
    "MainWindow",
    "GuiUtils",
    "LogDocumentWindow",
]
