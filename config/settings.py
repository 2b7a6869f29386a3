"""
Configuration settings for the Compose Explorer GUI

Module-level constants resolved once from the unified configuration.
"""

from config.config import get_config

_config = get_config()

# GUI Configuration
WINDOW_TITLE = _config.gui.window_title
MAIN_WINDOW_SIZE = _config.gui.main_window_size
LOG_WINDOW_SIZE = _config.gui.log_window_size

COLORS = _config.gui.colors
FONTS = _config.gui.fonts
ICONS = _config.gui.icons
BUTTON_STYLES = _config.gui.button_styles

# Prefix of every user-visible error raised while listing the tree
ERROR_MESSAGE_PREFIX = "Docker Compose Error: "
