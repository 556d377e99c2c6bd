from __future__ import annotations

from typing import Any, Dict, List

from core.errors import UnknownOperationError
from core.projects import MIME_TYPE, project_uri

SUMMARIZE_PROJECTS = "summarize_projects"


def list_prompts() -> List[Dict[str, Any]]:
    return [{"name": SUMMARIZE_PROJECTS, "description": "Summarize all projects"}]


def get_prompt(name: str, projects) -> Dict[str, Any]:
    """Build the prompt messages for ``name``.

    ``summarize_projects`` embeds every project as a resource, then asks for a
    summary of them all.
    """
    if name != SUMMARIZE_PROJECTS:
        raise UnknownOperationError(f"Unknown prompt: {name}")

    embedded = [
        {
            "role": "user",
            "content": {
                "type": "resource",
                "resource": {"uri": project_uri(pid), "mimeType": MIME_TYPE, "text": project.path},
            },
        }
        for pid, project in projects.items()
    ]
    return {
        "messages": [
            {
                "role": "user",
                "content": {"type": "text", "text": "Please summarize the following projects:"},
            },
            *embedded,
            {
                "role": "user",
                "content": {"type": "text", "text": "Provide a concise summary of all the projects above."},
            },
        ]
    }
