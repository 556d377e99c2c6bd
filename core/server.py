from __future__ import annotations

import inspect
import logging
import os
import time
from typing import Any, Dict, Optional

from .errors import InvalidArgumentError, ProjectServerError, UnknownOperationError
from .opener import DirectoryOpener
from .projects import ProjectRegistry
from .registry import ToolRegistry
from observability.metrics import record_request, set_project_count
from utils import text_content
from handlers import projects as project_tools
from handlers import prompts

logger = logging.getLogger(__name__)

SERVER_NAME = "demo-mcp-server"
SERVER_VERSION = "0.1.0"
DEFAULT_PROTOCOL_VERSION = "2024-11-05"


class ProjectsMCPServer:
    """JSON-RPC dispatcher for the projects MCP server.

    Owns the project registry, the directory opener and the tool registry.
    Every instance is independent, so tests can build isolated servers.
    """

    def __init__(
        self,
        projects: Optional[ProjectRegistry] = None,
        opener: Optional[DirectoryOpener] = None,
    ) -> None:
        self.projects = projects if projects is not None else ProjectRegistry()
        self.opener = opener if opener is not None else DirectoryOpener()
        self.registry = ToolRegistry()
        self._methods = {
            "initialize": self._initialize,
            "ping": self._ping,
            "resources/list": self._list_resources,
            "resources/read": self._read_resource,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
            "prompts/list": self._list_prompts,
            "prompts/get": self._get_prompt,
        }
        project_tools.register(self.registry)
        set_project_count(len(self.projects))

    # --- Public API ---
    async def handle_message(self, message: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Dispatch one JSON-RPC message; returns None for notifications."""
        method = message.get("method")
        msg_id = message.get("id")
        if isinstance(method, str) and method.startswith("notifications/"):
            logger.debug("Notification received: %s", method)
            return None

        handler = self._methods.get(method) if isinstance(method, str) else None
        if handler is None:
            return self._error(msg_id, -32601, f"Method not found: {method}")

        params = message.get("params")
        started = time.perf_counter()
        try:
            if params is None:
                params = {}
            elif not isinstance(params, dict):
                raise InvalidArgumentError("params must be an object")
            result = await handler(params)
        except ProjectServerError as e:
            logger.warning("%s failed: %s", method, e.message)
            record_request(method, False, time.perf_counter() - started)
            return self._error(msg_id, e.code, e.message)
        except Exception:
            logger.exception("Unexpected error handling %s", method)
            record_request(method, False, time.perf_counter() - started)
            return self._error(msg_id, -32603, "Internal error")

        record_request(method, True, time.perf_counter() - started)
        return {"jsonrpc": "2.0", "id": msg_id, "result": result}

    async def call_tool(self, name: Optional[str], arguments: Optional[Dict[str, Any]] = None) -> str:
        handler = self.registry.get_handler(name) if isinstance(name, str) and name else None
        if handler is None:
            raise UnknownOperationError(f"Unknown tool: {name}")
        if arguments is None:
            arguments = {}
        elif not isinstance(arguments, dict):
            raise InvalidArgumentError("Tool arguments must be an object")
        if inspect.iscoroutinefunction(handler):
            result = await handler(arguments, self)
        else:
            # Sync handlers stay on the loop thread; the registry is not locked.
            result = handler(arguments, self)
        set_project_count(len(self.projects))
        return result

    # --- Method handlers ---
    async def _initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        client_info = params.get("clientInfo")
        client = client_info.get("name", "unknown") if isinstance(client_info, dict) else "unknown"
        logger.info("Client %s initializing", client)
        return {
            "protocolVersion": os.getenv("PROTOCOL_VERSION", DEFAULT_PROTOCOL_VERSION),
            "capabilities": {
                "resources": {},
                "tools": {},
                "prompts": {},
            },
            "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
        }

    async def _ping(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {}

    async def _list_resources(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"resources": self.projects.list()}

    async def _read_resource(self, params: Dict[str, Any]) -> Dict[str, Any]:
        uri = params.get("uri")
        if not isinstance(uri, str) or not uri:
            raise InvalidArgumentError("Resource uri is required")
        return {"contents": self.projects.read(uri)}

    async def _list_tools(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"tools": self.registry.get_all_tool_schemas()}

    async def _call_tool(self, params: Dict[str, Any]) -> Dict[str, Any]:
        text = await self.call_tool(params.get("name"), params.get("arguments"))
        return {"content": [text_content(text)]}

    async def _list_prompts(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"prompts": prompts.list_prompts()}

    async def _get_prompt(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return prompts.get_prompt(params.get("name"), self.projects)

    # --- Utilities ---
    @staticmethod
    def _error(msg_id: Any, code: int, message: str) -> Dict[str, Any]:
        return {"jsonrpc": "2.0", "id": msg_id, "error": {"code": code, "message": message}}
