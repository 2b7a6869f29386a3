"""
Service model - a service declared in a project's compose files
"""

from typing import TYPE_CHECKING, List, Optional

from models.container import Container
from services.executor import ProcessHandle

if TYPE_CHECKING:
    from models.project import Project


class Service:
    """A compose service; actions are scoped to this service only"""

    def __init__(self, project: "Project", name: str):
        self.project = project
        self.name = name

    @property
    def _compose(self):
        return self.project.docker_compose_executor

    async def get_containers(self, force: bool = False) -> List[Container]:
        containers = await self.project.get_containers(force=force)
        return [c for c in containers if c.service_name == self.name]

    def cached_containers(self) -> Optional[List[Container]]:
        """Containers from the project's last listing, without running docker"""
        containers = self.project.cached_containers()
        if containers is None:
            return None
        return [c for c in containers if c.service_name == self.name]

    def up(self) -> ProcessHandle:
        return self._compose.up(self.name)

    def down(self) -> ProcessHandle:
        return self._compose.down(self.name)

    def build(self) -> ProcessHandle:
        return self._compose.build(self.name)

    def start(self) -> ProcessHandle:
        return self._compose.start(self.name)

    def stop(self) -> ProcessHandle:
        return self._compose.stop(self.name)

    def restart(self) -> ProcessHandle:
        return self._compose.restart(self.name)

    def kill(self) -> ProcessHandle:
        return self._compose.kill(self.name)

    def shell(self) -> None:
        self._compose.exec_shell(self.name)

    def __repr__(self) -> str:
        return f"Service({self.project.name}/{self.name})"
