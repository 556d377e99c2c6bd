from __future__ import annotations

from typing import Any, Callable, Dict, Optional


class ToolRegistry:
    """Tool registry mapping names to handlers and their advertised schemas.

    Handlers take (arguments: dict, server) and can be sync or async.
    """

    def __init__(self) -> None:
        # name -> handler
        self._handlers: Dict[str, Callable[..., Any]] = {}
        # name -> {"name", "description", "inputSchema"}
        self._schemas: Dict[str, dict] = {}

    def register(
        self,
        name: str,
        handler: Callable[..., Any],
        *,
        description: str = "",
        input_schema: Optional[dict] = None,
    ) -> None:
        if not isinstance(name, str) or not name:
            raise ValueError("Tool name must be a non-empty string")
        self._handlers[name] = handler
        self._schemas[name] = {
            "name": name,
            "description": description,
            "inputSchema": input_schema or {"type": "object", "properties": {}},
        }

    def get_handler(self, name: str) -> Optional[Callable[..., Any]]:
        return self._handlers.get(name)

    def get_all_tool_schemas(self) -> list[dict]:
        return [dict(schema) for schema in self._schemas.values()]
