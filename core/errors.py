from __future__ import annotations


class ProjectServerError(Exception):
    """Base class for request-level failures surfaced to the caller.

    Each subclass carries the JSON-RPC error code the dispatcher replies with.
    """

    code = -32000

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(ProjectServerError):
    code = -32002


class InvalidArgumentError(ProjectServerError):
    code = -32602


class UnknownOperationError(ProjectServerError):
    code = -32601


class ExternalCommandError(ProjectServerError):
    code = -32000
