"""
Docker executor - single-container commands issued through the docker CLI
"""

from typing import List, Optional

from services.executor import Executor, ProcessHandle
from services.platform_service import PlatformService


class DockerExecutor(Executor):
    """Issues `docker <command> <container>` invocations"""

    def __init__(self, shell: str = "/bin/sh", cwd: Optional[str] = None):
        super().__init__(shell, cwd)

    def get_base_command(self) -> List[str]:
        return PlatformService.get_base_command("DOCKER_COMMANDS")

    def start(self, name: str) -> ProcessHandle:
        return self.exec("start", name)

    def stop(self, name: str) -> ProcessHandle:
        return self.exec("stop", name)

    def kill(self, name: str) -> ProcessHandle:
        return self.exec("kill", name)

    def attach(self, name: str) -> None:
        self.run_in_terminal("attach", name, title=name)

    async def get_logs(self, name: str, timeout: Optional[float] = None) -> str:
        return await self.exec_sync("logs", name, timeout=timeout, merge_output=True)
