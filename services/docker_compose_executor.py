"""
Docker Compose executor - project and service commands issued through compose
"""

import subprocess
from typing import List, Optional, Sequence

from services.executor import Executor, ProcessHandle
from services.platform_service import PlatformService
from utils.async_base import (
    ComposeError,
    ComposeFileNotFound,
    DockerComposeCommandNotFound,
)

# Fragments of compose stderr meaning the project has no usable compose file
COMPOSE_FILE_MISSING_MARKERS = (
    "no configuration file provided",
    "can't find a suitable configuration file",
    "no such file or directory",
)


class DockerComposeExecutor(Executor):
    """Issues `docker compose -p <project> -f <file>... <command>` invocations"""

    command_not_found_error = DockerComposeCommandNotFound

    def __init__(
        self,
        project_name: str,
        files: Sequence[str],
        shell: str = "/bin/sh",
        cwd: Optional[str] = None,
    ):
        super().__init__(shell, cwd)
        self.project_name = project_name
        self.files = list(files)

    def get_base_command(self) -> List[str]:
        cmd = PlatformService.get_base_command("COMPOSE_COMMANDS")
        cmd.extend(["-p", self.project_name])
        for compose_file in self.files:
            cmd.extend(["-f", compose_file])
        return cmd

    def classify_failure(
        self, cmd: List[str], result: subprocess.CompletedProcess
    ) -> ComposeError:
        stderr = (result.stderr or "").strip()
        if any(marker in stderr.lower() for marker in COMPOSE_FILE_MISSING_MARKERS):
            return ComposeFileNotFound(
                stderr, stderr=result.stderr, return_code=result.returncode
            )
        return ComposeError(
            stderr or f"docker compose failed with exit code {result.returncode}",
            return_code=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            error_code="COMPOSE_ERROR",
        )

    # Queries

    async def get_services(self, timeout: Optional[float] = None) -> List[str]:
        output = await self.exec_sync("config", "--services", timeout=timeout)
        return [line.strip() for line in output.splitlines() if line.strip()]

    async def get_ps(self, timeout: Optional[float] = None) -> str:
        return await self.exec_sync("ps", "--all", "--format", "json", timeout=timeout)

    # Actions; service_name=None targets the whole project

    def up(self, service_name: Optional[str] = None) -> ProcessHandle:
        return self.exec("up", "-d", *self._target(service_name))

    def down(self, service_name: Optional[str] = None) -> ProcessHandle:
        if service_name:
            # `down` has no per-service form
            return self.exec("rm", "--force", "--stop", service_name)
        return self.exec("down")

    def start(self, service_name: Optional[str] = None) -> ProcessHandle:
        return self.exec("start", *self._target(service_name))

    def stop(self, service_name: Optional[str] = None) -> ProcessHandle:
        return self.exec("stop", *self._target(service_name))

    def restart(self, service_name: Optional[str] = None) -> ProcessHandle:
        return self.exec("restart", *self._target(service_name))

    def kill(self, service_name: Optional[str] = None) -> ProcessHandle:
        return self.exec("kill", *self._target(service_name))

    def build(self, service_name: Optional[str] = None) -> ProcessHandle:
        return self.exec("build", *self._target(service_name))

    def exec_shell(self, service_name: str, shell: Optional[str] = None) -> None:
        self.run_in_terminal(
            "exec",
            service_name,
            shell or self.shell,
            title=f"{self.project_name}/{service_name}",
        )

    @staticmethod
    def _target(service_name: Optional[str]) -> List[str]:
        return [service_name] if service_name else []
