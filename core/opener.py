from __future__ import annotations

import asyncio
import logging
import sys
from typing import Awaitable, Callable, List, Optional, Tuple

from .errors import ExternalCommandError, InvalidArgumentError

logger = logging.getLogger(__name__)

# (returncode, stderr text)
LaunchResult = Tuple[int, str]
Launcher = Callable[[List[str]], Awaitable[LaunchResult]]


def reveal_command(path: str, platform: Optional[str] = None) -> List[str]:
    """Return the argv that opens ``path`` in the host's file browser."""
    platform = platform or sys.platform
    if platform == "win32":
        return ["explorer", path]
    if platform == "darwin":
        return ["open", path]
    return ["xdg-open", path]


async def launch_process(argv: List[str]) -> LaunchResult:
    """Run ``argv`` without a shell and wait for it to exit."""
    proc = await asyncio.create_subprocess_exec(
        *argv,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.DEVNULL,
        stderr=asyncio.subprocess.PIPE,
    )
    _, stderr = await proc.communicate()
    return proc.returncode, (stderr or b"").decode("utf-8", errors="replace").strip()


class DirectoryOpener:
    """Reveals a filesystem path with the platform's reveal command.

    The path is handed over as a single argument, never through a shell.
    """

    def __init__(self, platform: Optional[str] = None, launcher: Optional[Launcher] = None) -> None:
        self.platform = platform or sys.platform
        self._launch = launcher or launch_process

    async def open(self, path: Optional[str]) -> str:
        if not path:
            raise InvalidArgumentError("Path is required")
        argv = reveal_command(path, self.platform)
        logger.info("Opening directory with %s", argv[0])
        try:
            returncode, stderr = await self._launch(argv)
        except OSError as e:
            raise ExternalCommandError(f"Failed to open directory: {e}") from e
        if returncode != 0:
            detail = stderr or f"Command failed: {' '.join(argv)} (exit status {returncode})"
            raise ExternalCommandError(f"Failed to open directory: {detail}")
        return f"Successfully opened directory: {path}"
