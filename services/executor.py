"""
Command-line executor base and process handles

Executors turn domain actions into docker / docker compose invocations bound
to a workspace folder. State-changing actions spawn a process and hand back a
ProcessHandle; queries capture output through the async thread pool.
"""

import asyncio
import logging
import subprocess
import threading
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from services.platform_service import PlatformService
from utils.async_base import CommandNotFoundError, ProcessError
from utils.async_utils import run_subprocess_async

logger = logging.getLogger(__name__)


class ProcessHandle:
    """A spawned external process and the single future of its completion"""

    def __init__(self, process: subprocess.Popen, command: Optional[List[str]] = None):
        self.process = process
        self.command = command or []
        self.output: Optional[str] = None
        self._completion: Optional[asyncio.Future] = None

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def returncode(self) -> Optional[int]:
        return self.process.returncode

    def _collect(self) -> Tuple[int, str]:
        stdout, _ = self.process.communicate()
        return self.process.returncode, stdout or ""

    def _wait_in_thread(self, loop: asyncio.AbstractEventLoop, future: asyncio.Future):
        """Block on the process in a dedicated thread and settle the future on the loop"""
        try:
            return_code, self.output = self._collect()
            settle = (self._set_result, future, return_code)
        except Exception as e:
            logger.error(f"Waiting for {self.command} failed: {e}")
            settle = (self._set_exception, future, e)
        try:
            loop.call_soon_threadsafe(*settle)
        except RuntimeError:
            logger.debug(f"Event loop closed before {self.command} exited")

    @staticmethod
    def _set_result(future: asyncio.Future, return_code: int):
        if not future.done():
            future.set_result(return_code)

    @staticmethod
    def _set_exception(future: asyncio.Future, error: Exception):
        if not future.done():
            future.set_exception(error)

    def completion(self) -> asyncio.Future:
        """
        Future resolving to the exit code once the process has terminated

        Created on first use on the running loop and shared by every caller.
        Each handle waits in its own daemon thread so long-running actions
        never occupy the worker pool that queries run on.
        """
        if self._completion is None:
            loop = asyncio.get_running_loop()
            self._completion = loop.create_future()
            threading.Thread(
                target=self._wait_in_thread,
                args=(loop, self._completion),
                name=f"process_waiter_{self.pid}",
                daemon=True,
            ).start()
        return self._completion

    async def wait(self) -> int:
        return await asyncio.shield(self.completion())

    def __repr__(self) -> str:
        return f"ProcessHandle(pid={self.pid}, command={self.command!r})"


class Executor(ABC):
    """Base class for executors issuing CLI commands in a working directory"""

    command_not_found_error = CommandNotFoundError

    def __init__(self, shell: str = "/bin/sh", cwd: Optional[str] = None):
        self.shell = shell
        self.cwd = cwd
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def get_base_command(self) -> List[str]:
        """Argument list every command starts with"""

    def build_command(self, *args: str) -> List[str]:
        return [*self.get_base_command(), *args]

    def exec(self, *args: str) -> ProcessHandle:
        """Spawn a command without waiting for it"""
        cmd = self.build_command(*args)
        self.logger.debug(f"Spawning {cmd} in {self.cwd}")
        try:
            process = subprocess.Popen(
                cmd,
                cwd=self.cwd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as e:
            raise self._command_not_found(cmd) from e
        return ProcessHandle(process, cmd)

    async def exec_sync(
        self, *args: str, timeout: Optional[float] = None, merge_output: bool = False
    ) -> str:
        """Run a command to completion and return its stdout (or stdout+stderr)"""
        cmd = self.build_command(*args)
        self.logger.debug(f"Running {cmd} in {self.cwd}")
        stream_kwargs = (
            {
                "capture_output": False,
                "stdout": subprocess.PIPE,
                "stderr": subprocess.STDOUT,
            }
            if merge_output
            else {}
        )
        try:
            result = await run_subprocess_async(
                cmd, cwd=self.cwd, timeout=timeout, **stream_kwargs
            )
        except FileNotFoundError as e:
            raise self._command_not_found(cmd) from e
        except subprocess.TimeoutExpired as e:
            raise ProcessError(
                f"Command timed out after {timeout} seconds: {' '.join(cmd)}",
                error_code="PROCESS_TIMEOUT",
            ) from e

        if result.returncode != 0:
            raise self.classify_failure(cmd, result)
        return result.stdout or ""

    def _command_not_found(self, cmd: List[str]) -> CommandNotFoundError:
        hint = PlatformService.get_error_message("docker_not_found")
        self.logger.error(f"{cmd[0]} could not be started. {hint}")
        return self.command_not_found_error(cmd[0], hint)

    def classify_failure(
        self, cmd: List[str], result: subprocess.CompletedProcess
    ) -> ProcessError:
        """Map a failed capture to an error; subclasses recognise known causes"""
        stderr = (result.stderr or result.stdout or "").strip()
        return ProcessError(
            stderr or f"Command failed with exit code {result.returncode}",
            return_code=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )

    def run_in_terminal(self, *args: str, title: Optional[str] = None) -> None:
        """Run an interactive command in a new terminal window"""
        cmd = self.build_command(*args)
        PlatformService.open_terminal(cmd, cwd=self.cwd, title=title or cmd[0])
