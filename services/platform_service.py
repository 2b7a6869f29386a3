"""
Platform-specific operations service
"""

import logging
import platform
import shlex
import subprocess
from typing import List, Tuple, Optional, Union

from config.config import get_config
from utils.async_base import CommandNotFoundError

logger = logging.getLogger(__name__)

COMMANDS = get_config().commands.commands
ERROR_MESSAGES = get_config().commands.error_messages


def _applescript_quote(text: str) -> str:
    """Escape text for use inside a double-quoted AppleScript string"""
    return text.replace("\\", "\\\\").replace('"', '\\"')


class PlatformService:
    """Service for handling platform-specific operations"""

    @staticmethod
    def get_platform() -> str:
        """Get the current platform (windows, linux, darwin)"""
        return platform.system().lower()

    @staticmethod
    def is_windows() -> bool:
        """Check if running on Windows"""
        return PlatformService.get_platform() == "windows"

    @staticmethod
    def get_error_message(error_type: str) -> str:
        """Get platform-specific error message"""
        current_platform = PlatformService.get_platform()
        platform_errors = ERROR_MESSAGES.get(current_platform, ERROR_MESSAGES["linux"])
        return platform_errors.get(error_type, f"Error: {error_type}")

    @staticmethod
    def join_command(cmd: List[str]) -> str:
        """Render an argument list as a single shell command line"""
        if PlatformService.is_windows():
            return subprocess.list2cmdline(cmd)
        return shlex.join(cmd)

    @staticmethod
    def _prepare_command(
        command_key: str, subkey: Optional[str] = None, **kwargs
    ) -> Tuple[Union[List[str], str], bool]:
        """
        Prepare command from COMMANDS dictionary with formatting
        Returns (command, use_shell)
        """
        if command_key not in COMMANDS:
            raise ValueError(f"Unknown command key: {command_key}")

        cmd_template = COMMANDS[command_key]

        if subkey is not None:
            if not isinstance(cmd_template, dict):
                raise ValueError(f"Command key {command_key} does not support subkeys")
            if subkey not in cmd_template:
                raise ValueError(
                    f"Unknown subkey '{subkey}' for command key '{command_key}'"
                )
            cmd_template = cmd_template[subkey]

        current_platform = PlatformService.get_platform()

        # Handle platform-specific commands
        if isinstance(cmd_template, dict):
            if current_platform in cmd_template:
                cmd_template = cmd_template[current_platform]
            else:
                # Default to linux for unknown platforms
                cmd_template = cmd_template.get("linux", cmd_template.get("unix"))

        if isinstance(cmd_template, str):
            formatted_cmd = cmd_template.format(**kwargs)
            use_shell = current_platform == "windows"
            return (formatted_cmd, use_shell)
        elif isinstance(cmd_template, list):
            cmd = [
                (
                    part.format(**kwargs)
                    if isinstance(part, str)
                    and any(f"{{{key}}}" in part for key in kwargs)
                    else part
                )
                for part in cmd_template
            ]
            return (cmd, False)
        else:
            raise ValueError(f"Invalid command template type: {type(cmd_template)}")

    @staticmethod
    def get_base_command(command_key: str) -> List[str]:
        """Get the configured base argument list (e.g. ['docker', 'compose'])"""
        cmd, _ = PlatformService._prepare_command(command_key, subkey="base")
        return list(cmd)

    @staticmethod
    def open_terminal(
        cmd: List[str], cwd: Optional[str] = None, title: str = "docker"
    ) -> subprocess.Popen:
        """
        Open an interactive terminal window running the given command

        The terminal is detached; nothing waits for it to close.

        Raises:
            CommandNotFoundError: If no terminal emulator could be started
        """
        command_line = PlatformService.join_command(cmd)
        cwd_arg = cwd or "."
        if PlatformService.get_platform() == "darwin":
            # Terminal.app runs "cd {cwd} && {command}" from inside an AppleScript string
            cwd_arg = _applescript_quote(shlex.quote(cwd_arg))
            command_line = _applescript_quote(command_line)
        terminal_cmd, use_shell = PlatformService._prepare_command(
            "TERMINAL_COMMANDS",
            command=command_line,
            title=title,
            cwd=cwd_arg,
        )
        logger.debug(f"Opening terminal: {terminal_cmd}")

        try:
            return subprocess.Popen(
                terminal_cmd,
                shell=use_shell,
                cwd=cwd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=not PlatformService.is_windows(),
            )
        except FileNotFoundError as e:
            hint = PlatformService.get_error_message("terminal_not_found")
            logger.error(f"{hint} ({e})")
            raise CommandNotFoundError(terminal_cmd[0], hint) from e
