"""JSON-RPC 2.0 envelopes for the line-delimited stdio transport."""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

from mcp.types import ErrorData

JSONRPC_VERSION = "2.0"

_ID_PATTERN = re.compile(r'"id"\s*:\s*(-?\d+|"(?:[^"\\]|\\.)*"|null)')


class ProtocolError(Exception):
    """A request failed at the JSON-RPC level; carries the error object to send back."""

    def __init__(self, error: ErrorData):
        super().__init__(error.message)
        self.error = error


class InvalidRequest(ValueError):
    """A line could not be read as a JSON-RPC request."""

    def __init__(self, message: str, request_id: Any = None):
        super().__init__(message)
        self.request_id = request_id


@dataclass(frozen=True)
class Request:
    method: str
    id: Any = None
    params: Any = None
    has_id: bool = False

    @property
    def is_notification(self) -> bool:
        return not self.has_id


def salvage_id(line: str) -> Any:
    """Best-effort recovery of the request id from text that is not valid JSON."""
    match = _ID_PATTERN.search(line)
    if not match:
        return None
    try:
        return json.loads(match.group(1))
    except ValueError:
        return None


def parse_request(line: str) -> Request:
    try:
        message = json.loads(line)
    except ValueError as e:
        raise InvalidRequest(f"Parse error: {e}", salvage_id(line)) from e

    if not isinstance(message, dict):
        raise InvalidRequest("Request must be a JSON object")

    method = message.get("method", "")
    if not isinstance(method, str):
        raise InvalidRequest("Request method must be a string", message.get("id"))

    return Request(
        method=method,
        id=message.get("id"),
        params=message.get("params"),
        has_id="id" in message,
    )


def success(request_id: Any, result: Any) -> dict:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def failure(request_id: Any, error: ErrorData) -> dict:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": error.model_dump(mode="json", exclude_none=True),
    }


def encode(message: dict) -> str:
    """Serialize one message as a single line of JSON (no trailing newline).

    Non-ASCII text is escaped, so lone surrogates echoed back from a request
    can always be written to a UTF-8 stream.
    """
    return json.dumps(message, separators=(",", ":"))
