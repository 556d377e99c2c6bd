from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple
from urllib.parse import urlparse

from .errors import InvalidArgumentError, NotFoundError

logger = logging.getLogger(__name__)

URI_SCHEME = "project"
URI_PREFIX = "project:///"
MIME_TYPE = "text/plain"

DEFAULT_PROJECTS: Tuple[Tuple[str, str], ...] = (
    ("ts-polaris Project", "/Users/cosmoxu/Documents/code/work/github.com/lotusflare/ts-polaris"),
    ("lua Project", "/Users/cosmoxu/Documents/code/work/github.com/lotusflare/lua"),
)


@dataclass
class Project:
    title: str
    path: str


def project_uri(project_id: str) -> str:
    return f"{URI_PREFIX}{project_id}"


def parse_project_id(uri: str) -> str:
    """Extract the identifier from a ``project:///<id>`` locator.

    Only the path component counts; a single leading slash is stripped.
    """
    parsed = urlparse(uri or "")
    path = parsed.path or ""
    if path.startswith("/"):
        path = path[1:]
    return path


class ProjectRegistry:
    """In-memory project store keyed by decimal string identifiers.

    Identifiers come from a counter kept next to the mapping, so they are
    never reused even if the mapping were to shrink. Not thread-safe: all
    access is expected from the dispatcher's event loop thread.
    """

    def __init__(self, seed: Optional[Iterable[Tuple[str, str]]] = None) -> None:
        self._projects: Dict[str, Project] = {}
        self._last_id = 0
        for title, path in (DEFAULT_PROJECTS if seed is None else seed):
            self._insert(Project(title=title, path=path))

    def __len__(self) -> int:
        return len(self._projects)

    def get(self, project_id: str) -> Optional[Project]:
        return self._projects.get(project_id)

    def items(self) -> List[Tuple[str, Project]]:
        return list(self._projects.items())

    def list(self) -> List[Dict[str, str]]:
        return [
            {
                "uri": project_uri(pid),
                "mimeType": MIME_TYPE,
                "name": project.title,
                "description": f"A text project: {project.title}",
            }
            for pid, project in self._projects.items()
        ]

    def read(self, uri: str) -> List[Dict[str, str]]:
        project_id = parse_project_id(uri)
        project = self.get(project_id)
        if project is None:
            raise NotFoundError(f"Project {project_id} not found")
        return [{"uri": uri, "mimeType": MIME_TYPE, "text": project.path}]

    def create(self, title: Optional[str], path: Optional[str]) -> str:
        if not title or not path:
            raise InvalidArgumentError("Title and path are required")
        project_id = self._insert(Project(title=title, path=path))
        logger.info("Created project %s (%s)", project_id, title)
        return f"Created project {project_id}: {title}"

    # --- internals ---
    def _insert(self, project: Project) -> str:
        self._last_id += 1
        project_id = str(self._last_id)
        self._projects[project_id] = project
        return project_id
