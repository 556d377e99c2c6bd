#!/usr/bin/env python3
"""
Projects MCP server: stdio entrypoint.

Speaks JSON-RPC 2.0 over stdin/stdout. Both newline-delimited JSON and
Content-Length framed messages are accepted; replies use the framing the
client used. Logs go to stderr since stdout carries the protocol.
"""
import asyncio
import json
import logging
import os
import sys
import threading
from typing import Any, BinaryIO, Dict, Optional, Set

from core.server import ProjectsMCPServer, SERVER_NAME, SERVER_VERSION

logger = logging.getLogger(__name__)

PARSE_ERROR = {"jsonrpc": "2.0", "id": None, "error": {"code": -32700, "message": "Parse error"}}


class StdioTransport:
    """Blocking reader/writer for MCP messages on a pair of byte streams."""

    def __init__(self, stdin: Optional[BinaryIO] = None, stdout: Optional[BinaryIO] = None):
        self.stdin = stdin if stdin is not None else sys.stdin.buffer
        self.stdout = stdout if stdout is not None else sys.stdout.buffer
        self.use_headers = False

    def read_message(self) -> Optional[Any]:
        """Read the next message; None at end of input.

        Raises json.JSONDecodeError for a malformed body.
        """
        while True:
            line = self.stdin.readline()
            if not line:
                return None
            stripped = line.strip()
            if not stripped:
                continue
            if stripped.lower().startswith(b"content-length:"):
                self.use_headers = True
                length = int(stripped.split(b":", 1)[1].strip())
                # consume remaining headers until blank line
                while True:
                    h = self.stdin.readline()
                    if not h or h in (b"\r\n", b"\n"):
                        break
                body = self.stdin.read(length)
                return json.loads(body.decode("utf-8", errors="replace"))
            return json.loads(stripped.decode("utf-8", errors="replace"))

    def send(self, obj: Dict[str, Any]) -> None:
        body = json.dumps(obj, ensure_ascii=False).encode("utf-8")
        if self.use_headers:
            self.stdout.write(f"Content-Length: {len(body)}\r\n\r\n".encode("utf-8"))
            self.stdout.write(body)
        else:
            self.stdout.write(body + b"\n")
        self.stdout.flush()


async def _dispatch(mcp: ProjectsMCPServer, transport: StdioTransport, message: Any) -> None:
    if not isinstance(message, dict):
        transport.send({"jsonrpc": "2.0", "id": None, "error": {"code": -32600, "message": "Invalid Request"}})
        return
    response = await mcp.handle_message(message)
    if response is not None:
        transport.send(response)


def _start_reader(transport: StdioTransport, loop: asyncio.AbstractEventLoop, queue: asyncio.Queue) -> threading.Thread:
    """Read messages on a daemon thread so a blocked stdin never delays exit."""

    def _run():
        while True:
            try:
                message = transport.read_message()
            except ValueError as e:
                loop.call_soon_threadsafe(queue.put_nowait, ("invalid", e))
                continue
            except Exception as e:
                loop.call_soon_threadsafe(queue.put_nowait, ("failed", e))
                return
            loop.call_soon_threadsafe(queue.put_nowait, ("message", message))
            if message is None:
                return

    reader = threading.Thread(target=_run, name="stdio-reader", daemon=True)
    reader.start()
    return reader


def _log_task_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Request dispatch failed: %r", exc)


async def serve_stdio(mcp: ProjectsMCPServer, transport: StdioTransport) -> None:
    """Read messages until EOF, handling each request as its own task.

    A request that waits on an external process does not hold up the ones
    read after it.
    """
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()
    _start_reader(transport, loop, queue)
    pending: Set[asyncio.Task] = set()
    while True:
        kind, item = await queue.get()
        if kind == "invalid":
            logger.error("Invalid message received: %s", item)
            transport.send(PARSE_ERROR)
            continue
        if kind == "failed":
            raise item
        if item is None:
            break
        task = asyncio.create_task(_dispatch(mcp, transport, item))
        pending.add(task)
        task.add_done_callback(pending.discard)
        task.add_done_callback(_log_task_failure)
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)
    logger.info("Input closed, shutting down")


def main():
    """Main entry point for the projects MCP server"""
    logging.basicConfig(
        level=os.getenv("MCP_LOG_LEVEL", "INFO").upper(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        mcp = ProjectsMCPServer()
        logger.info("%s v%s starting on stdio", SERVER_NAME, SERVER_VERSION)
        logger.info("Serving %d projects", len(mcp.projects))
        asyncio.run(serve_stdio(mcp, StdioTransport()))
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error("Server error: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
