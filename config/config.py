"""
Unified Configuration Management System
Centralizes all explorer settings with validation, type checking, and environment support
"""

import os
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field
from enum import Enum


class Environment(Enum):
    """Application environments"""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class ConfigValidationError(Exception):
    """Raised when configuration validation fails"""

    pass


@dataclass
class ExplorerConfig:
    """Compose explorer behaviour"""

    # Compose files passed with -f, relative to each workspace folder
    files: List[str] = field(default_factory=lambda: ["docker-compose.yml"])

    # Shell used for `exec` inside service and container terminals
    shell: str = "/bin/sh"

    # Explicit project names indexed by workspace folder position
    project_names: List[str] = field(default_factory=list)

    # Auto refresh interval in milliseconds (0 disables the timer)
    auto_refresh_interval: int = 90000


@dataclass
class GuiConfig:
    """GUI-related configuration"""

    window_title: str = "Docker Compose Explorer"
    main_window_size: str = "520x640"
    log_window_size: str = "900x600"

    colors: Dict[str, str] = field(
        default_factory=lambda: {
            "background": "#f0f0f0",
            "terminal_bg": "#2c3e50",
            "terminal_text": "#ffffff",
            "success": "#27ae60",
            "error": "#e74c3c",
            "warning": "#f39c12",
            "info": "#3498db",
            "secondary": "#34495e",
            "muted": "#7f8c8d",
            "white": "white",
            "text": "#2c3e50",
        }
    )

    fonts: Dict[str, tuple] = field(
        default_factory=lambda: {
            "title": ("Arial", 14, "bold"),
            "button": ("Arial", 9, "bold"),
            "info": ("Arial", 9),
            "tree": ("Arial", 10),
            "console": ("Consolas", 9),
            "console_title": ("Consolas", 12, "bold"),
        }
    )

    # Text prefixes shown in front of tree labels
    icons: Dict[str, str] = field(
        default_factory=lambda: {
            "project": "▣",
            "service-up": "●",
            "service-down": "○",
            "container-running": "▶",
            "container-stopped": "■",
            "message": "ℹ",
        }
    )

    button_styles: Dict[str, Dict[str, str]] = field(
        default_factory=lambda: {
            "refresh": {"bg": "#27ae60", "fg": "white"},
            "action": {"bg": "#3498db", "fg": "white"},
            "danger": {"bg": "#e74c3c", "fg": "white"},
            "close": {"bg": "#34495e", "fg": "white"},
            "copy": {"bg": "#34495e", "fg": "white"},
        }
    )


@dataclass
class CommandConfig:
    """System commands configuration"""

    commands: Dict[str, Dict] = field(
        default_factory=lambda: {
            "DOCKER_COMMANDS": {
                "base": ["docker"],
            },
            "COMPOSE_COMMANDS": {
                "base": ["docker", "compose"],
            },
            # Interactive terminals for attach and exec
            "TERMINAL_COMMANDS": {
                "windows": ["cmd", "/c", "start", "{title}", "cmd", "/k", "{command}"],
                "darwin": [
                    "osascript",
                    "-e",
                    'tell application "Terminal" to do script "cd {cwd} && {command}"',
                ],
                "linux": [
                    "x-terminal-emulator",
                    "-T",
                    "{title}",
                    "-e",
                    "sh",
                    "-c",
                    "{command}",
                ],
            },
        }
    )

    # Error messages by platform
    error_messages: Dict[str, Dict[str, str]] = field(
        default_factory=lambda: {
            "windows": {
                "docker_not_found": "NOTE: Make sure Docker Desktop is installed and running.",
                "terminal_not_found": "NOTE: Could not open a command prompt window.",
            },
            "linux": {
                "docker_not_found": "NOTE: Make sure docker is available in your PATH.",
                "terminal_not_found": "NOTE: Install a terminal emulator registered as x-terminal-emulator.",
            },
            "darwin": {
                "docker_not_found": "NOTE: Make sure Docker Desktop is installed and running.",
                "terminal_not_found": "NOTE: Terminal.app could not be scripted with osascript.",
            },
        }
    )


@dataclass
class ServiceConfig:
    """Service-specific configuration"""

    # Timeout settings (seconds)
    default_timeout: float = 30.0
    logs_timeout: float = 60.0
    web_request_timeout: float = 120.0

    # Messages kept for the web interface
    message_history_size: int = 100


@dataclass
class WebConfig:
    """Embedded web interface configuration"""

    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 5000


@dataclass
class UnifiedConfig:
    """Main configuration container"""

    explorer: ExplorerConfig = field(default_factory=ExplorerConfig)
    gui: GuiConfig = field(default_factory=GuiConfig)
    commands: CommandConfig = field(default_factory=CommandConfig)
    service: ServiceConfig = field(default_factory=ServiceConfig)
    web: WebConfig = field(default_factory=WebConfig)

    # Environment settings
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False
    log_level: str = "INFO"

    # Application metadata
    version: str = "1.0.0"
    config_version: str = "1.0"


def _split_list(value: str) -> List[str]:
    """Split an environment list on os.pathsep or commas"""
    separator = os.pathsep if os.pathsep in value else ","
    return [item.strip() for item in value.split(separator) if item.strip()]


class ConfigManager:
    """Manages configuration loading, validation, and access"""

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = config_dir or Path(__file__).parent
        self.config: Optional[UnifiedConfig] = None
        self.logger = logging.getLogger("ConfigManager")

        self._load_config()

    def _load_config(self):
        """Load configuration from files and environment"""
        self.config = UnifiedConfig()
        self._apply_user_overrides()
        self._apply_environment_overrides()
        self._validate_config()

    def _apply_user_overrides(self):
        """Apply user settings from user_settings.json"""
        user_settings_file = self.config_dir / "user_settings.json"

        if not user_settings_file.exists():
            return

        try:
            with open(user_settings_file, "r", encoding="utf-8") as f:
                user_settings = json.load(f)

            self._apply_settings_dict(user_settings)
            self.logger.info("Applied user settings overrides")

        except (json.JSONDecodeError, FileNotFoundError) as e:
            self.logger.warning(f"Could not load user settings: {e}")

    def _apply_environment_overrides(self):
        """Apply environment-specific overrides"""
        env_name = os.getenv("PROJECT_ENV", "development").lower()
        try:
            self.config.environment = Environment(env_name)
        except ValueError:
            self.logger.warning(f"Unknown environment '{env_name}', using development")
            self.config.environment = Environment.DEVELOPMENT

        if os.getenv("DEBUG") is not None:
            self.config.debug = os.getenv("DEBUG").lower() in ("true", "1", "yes", "on")

        if os.getenv("LOG_LEVEL"):
            self.config.log_level = os.getenv("LOG_LEVEL").upper()

        if os.getenv("COMPOSE_FILES"):
            self.config.explorer.files = _split_list(os.getenv("COMPOSE_FILES"))

        if os.getenv("COMPOSE_SHELL"):
            self.config.explorer.shell = os.getenv("COMPOSE_SHELL")

        interval = os.getenv("COMPOSE_AUTO_REFRESH_INTERVAL")
        if interval:
            try:
                self.config.explorer.auto_refresh_interval = int(interval)
            except ValueError:
                raise ConfigValidationError(
                    f"COMPOSE_AUTO_REFRESH_INTERVAL must be an integer: {interval}"
                )

        port = os.getenv("COMPOSE_EXPLORER_PORT")
        if port:
            try:
                self.config.web.port = int(port)
            except ValueError:
                raise ConfigValidationError(
                    f"COMPOSE_EXPLORER_PORT must be an integer: {port}"
                )

    def _apply_settings_dict(self, settings: Dict[str, Any]):
        """Apply settings from a dictionary using dot notation"""
        for key, value in settings.items():
            self._set_nested_value(self.config, key, value)

    def _set_nested_value(self, obj: Any, key_path: str, value: Any):
        """Set a nested value using dot notation (e.g., 'explorer.files')"""
        keys = key_path.split(".")
        current = obj

        for index, key in enumerate(keys[:-1]):
            if isinstance(current, dict) and key in current:
                current = current[key]
            elif not isinstance(current, dict) and hasattr(current, key):
                current = getattr(current, key)
            else:
                self.logger.warning(
                    f"Unknown config path: {'.'.join(keys[:index + 1])}"
                )
                return

        final_key = keys[-1]

        if isinstance(current, dict):
            if final_key not in current:
                self.logger.warning(f"Unknown config key: {key_path}")
                return
            existing = current[final_key]
            if isinstance(existing, dict) and isinstance(value, dict):
                existing.update(value)
            elif isinstance(existing, tuple) and isinstance(value, list):
                current[final_key] = tuple(value)
            else:
                current[final_key] = value
        elif hasattr(current, final_key):
            existing = getattr(current, final_key)
            if isinstance(existing, dict) and isinstance(value, dict):
                existing.update(value)
            elif isinstance(existing, tuple) and isinstance(value, list):
                setattr(current, final_key, tuple(value))
            else:
                setattr(current, final_key, value)
        else:
            self.logger.warning(f"Unknown config key: {key_path}")

    def _validate_config(self):
        """Validate the loaded configuration"""
        explorer = self.config.explorer

        if not explorer.files:
            raise ConfigValidationError("At least one compose file must be configured")

        if not all(isinstance(name, str) for name in explorer.files):
            raise ConfigValidationError("Compose files must be strings")

        if not isinstance(explorer.auto_refresh_interval, int) or isinstance(
            explorer.auto_refresh_interval, bool
        ):
            raise ConfigValidationError("Auto refresh interval must be an integer")

        if not explorer.shell:
            raise ConfigValidationError("Shell cannot be empty")

        if self.config.service.default_timeout <= 0:
            raise ConfigValidationError("Default timeout must be positive")

        self.logger.debug("Configuration validation completed")

    def get_config(self) -> UnifiedConfig:
        """Get the current configuration"""
        if self.config is None:
            raise RuntimeError("Configuration not loaded")
        return self.config

    def reload_config(self):
        """Reload configuration from files"""
        self._load_config()

    def save_user_settings(self, settings: Dict[str, Any]):
        """Save user settings to user_settings.json"""
        user_settings_file = self.config_dir / "user_settings.json"

        try:
            with open(user_settings_file, "w", encoding="utf-8") as f:
                json.dump(settings, f, indent=2)

            self.reload_config()
            self.logger.info("User settings saved and configuration reloaded")

        except OSError as e:
            self.logger.error(f"Failed to save user settings: {e}")
            raise


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def initialize_config(config_dir: Optional[Path] = None) -> ConfigManager:
    """Initialize the global configuration manager"""
    global _config_manager
    _config_manager = ConfigManager(config_dir)
    return _config_manager


def get_config() -> UnifiedConfig:
    """Get the current configuration"""
    if _config_manager is None:
        initialize_config()
    return _config_manager.get_config()


def get_config_manager() -> ConfigManager:
    """Get the configuration manager"""
    if _config_manager is None:
        initialize_config()
    return _config_manager


def reload_config():
    """Reload configuration from files"""
    if _config_manager is not None:
        _config_manager.reload_config()


# Convenience functions for common access patterns
def get_explorer_config() -> ExplorerConfig:
    """Get explorer configuration"""
    return get_config().explorer


def get_gui_config() -> GuiConfig:
    """Get GUI configuration"""
    return get_config().gui


def get_command_config() -> CommandConfig:
    """Get command configuration"""
    return get_config().commands


def get_service_config() -> ServiceConfig:
    """Get service configuration"""
    return get_config().service
