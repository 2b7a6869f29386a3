"""
Workspace folders and compose project naming
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

# Anything outside [A-Za-z0-9_-] is stripped from folder names
_INVALID_PROJECT_CHARS = re.compile(r"[^A-Za-z0-9_-]")


@dataclass(frozen=True)
class WorkspaceFolder:
    """A folder opened in the explorer; one compose project per folder"""

    index: int
    name: str
    path: Path

    @property
    def full_path(self) -> str:
        return str(self.path)

    @classmethod
    def from_paths(cls, paths: Iterable) -> List["WorkspaceFolder"]:
        """Number folders in the order given, starting at 0"""
        folders = []
        for index, raw_path in enumerate(paths):
            path = Path(raw_path).resolve()
            folders.append(cls(index=index, name=path.name, path=path))
        return folders


def sanitize_project_name(name: str) -> str:
    return _INVALID_PROJECT_CHARS.sub("", name)


def derive_project_name(
    folder: WorkspaceFolder, project_names: Optional[Sequence[str]] = None
) -> str:
    """Explicit mapping entry for the folder's index, else its sanitized name"""
    if project_names and 0 <= folder.index < len(project_names):
        mapped = project_names[folder.index]
        if mapped:
            return mapped
    return sanitize_project_name(folder.name)
