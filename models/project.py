"""
Project model - one docker compose project per workspace folder
"""

import logging
from typing import List, Optional

from models.container import Container, parse_ps_output
from models.service import Service
from services.docker_compose_executor import DockerComposeExecutor
from services.docker_executor import DockerExecutor
from services.executor import ProcessHandle

logger = logging.getLogger(__name__)


class Project:
    """A compose project with its executors and cached container listing"""

    def __init__(
        self,
        name: str,
        docker_executor: DockerExecutor,
        docker_compose_executor: DockerComposeExecutor,
        query_timeout: Optional[float] = None,
    ):
        self.name = name
        self.query_timeout = query_timeout
        self.docker_executor = docker_executor
        self.docker_compose_executor = docker_compose_executor
        self._services: Optional[List[Service]] = None
        self._containers: Optional[List[Container]] = None

    @property
    def display_name(self) -> str:
        return self.name

    async def get_services(self, force: bool = False) -> List[Service]:
        if self._services is None or force:
            names = await self.docker_compose_executor.get_services(
                timeout=self.query_timeout
            )
            self._services = [Service(self, name) for name in names]
        return self._services

    async def get_containers(self, force: bool = False) -> List[Container]:
        if self._containers is None or force:
            output = await self.docker_compose_executor.get_ps(timeout=self.query_timeout)
            self._containers = [
                Container.from_ps_entry(entry, self.docker_executor)
                for entry in parse_ps_output(output)
            ]
            logger.debug(
                f"Project {self.name}: {len(self._containers)} container(s)"
            )
        return self._containers

    def cached_containers(self) -> Optional[List[Container]]:
        return self._containers

    def up(self) -> ProcessHandle:
        return self.docker_compose_executor.up()

    def down(self) -> ProcessHandle:
        return self.docker_compose_executor.down()

    def start(self) -> ProcessHandle:
        return self.docker_compose_executor.start()

    def stop(self) -> ProcessHandle:
        return self.docker_compose_executor.stop()

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"Project({self.name!r})"
