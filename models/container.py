"""
Container model - one row of `docker compose ps`
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from services.docker_executor import DockerExecutor
from services.executor import ProcessHandle

logger = logging.getLogger(__name__)


def parse_ps_output(output: str) -> List[Dict[str, Any]]:
    """
    Parse `docker compose ps --format json`

    Older compose releases print one JSON array, newer ones one object per line.
    """
    text = output.strip()
    if not text:
        return []
    if text.startswith("["):
        return json.loads(text)

    entries = []
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            entries.append(json.loads(line))
        except json.JSONDecodeError:
            logger.warning(f"Skipping unparsable ps line: {line!r}")
    return entries


def _format_ports(entry: Dict[str, Any]) -> str:
    publishers = entry.get("Publishers") or []
    if not publishers:
        return entry.get("Ports", "") or ""
    ports = []
    for publisher in publishers:
        published = publisher.get("PublishedPort")
        target = publisher.get("TargetPort")
        protocol = publisher.get("Protocol", "tcp")
        if published:
            ports.append(f"{published}->{target}/{protocol}")
        else:
            ports.append(f"{target}/{protocol}")
    return ", ".join(dict.fromkeys(ports))


@dataclass
class Container:
    """A container belonging to a compose service"""

    name: str
    service_name: str
    state: str
    status: str = ""
    command: str = ""
    ports: str = ""
    docker_executor: Optional[DockerExecutor] = field(
        default=None, repr=False, compare=False
    )

    @classmethod
    def from_ps_entry(
        cls, entry: Dict[str, Any], docker_executor: Optional[DockerExecutor] = None
    ) -> "Container":
        return cls(
            name=entry.get("Name", ""),
            service_name=entry.get("Service", ""),
            state=(entry.get("State") or "").lower(),
            status=entry.get("Status", "") or "",
            command=(entry.get("Command") or "").strip('"'),
            ports=_format_ports(entry),
            docker_executor=docker_executor,
        )

    @property
    def is_running(self) -> bool:
        return self.state == "running"

    def start(self) -> ProcessHandle:
        return self.docker_executor.start(self.name)

    def stop(self) -> ProcessHandle:
        return self.docker_executor.stop(self.name)

    def kill(self) -> ProcessHandle:
        return self.docker_executor.kill(self.name)

    def attach(self) -> None:
        self.docker_executor.attach(self.name)

    async def logs(self, timeout: Optional[float] = None) -> str:
        return await self.docker_executor.get_logs(self.name, timeout=timeout)
