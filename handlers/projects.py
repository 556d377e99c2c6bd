from __future__ import annotations

from typing import Any, Dict

CREATE_PROJECT_SCHEMA = {
    "type": "object",
    "properties": {
        "title": {"type": "string", "description": "Title of the project"},
        "path": {"type": "string", "description": "Text path of the project"},
    },
    "required": ["title", "path"],
}

OPEN_PROJECT_SCHEMA = {
    "type": "object",
    "properties": {
        "path": {"type": "string", "description": "Path of the project"},
    },
    "required": ["path"],
}


def _text_arg(arguments: Dict[str, Any], key: str) -> str:
    value = arguments.get(key)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def handle_create_project(arguments: Dict[str, Any], server) -> str:
    title = _text_arg(arguments, "title")
    path = _text_arg(arguments, "path")
    return server.projects.create(title, path)


async def handle_open_project(arguments: Dict[str, Any], server) -> str:
    path = _text_arg(arguments, "path")
    return await server.opener.open(path)


def register(registry) -> None:
    registry.register(
        "create_project",
        handle_create_project,
        description="Create a new project",
        input_schema=CREATE_PROJECT_SCHEMA,
    )
    registry.register(
        "open_project",
        handle_open_project,
        description="Open a project from the file system.",
        input_schema=OPEN_PROJECT_SCHEMA,
    )
