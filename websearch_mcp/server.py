"""
WebSearch MCP Server - request dispatcher

Reads one JSON-RPC request per line from stdin and writes one response per
line to stdout, strictly in sequence. Supported methods: initialize,
tools/list, tools/call and notifications/initialized.

Errors come in two tiers:
  - protocol errors (bad JSON, unknown method, bad params, unexpected
    exceptions) become a JSON-RPC ``error`` object
  - tool errors (missing query, unknown tool name) become a normal ``result``
    with ``isError: true`` so the calling agent sees them as content
Neither tier ever stops the read loop.
"""
from __future__ import annotations

import sys
import threading
from typing import Any, Callable, TextIO

from mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    CallToolResult,
    ErrorData,
    Implementation,
    InitializeResult,
    ListToolsResult,
    ServerCapabilities,
    TextContent,
    ToolsCapability,
)

from . import SERVER_NAME, __version__
from .catalog import (
    FTRACK_DOMAINS,
    FTRACK_SEARCH_LABEL,
    TOOLS,
    build_ftrack_query,
    format_allowed_domains,
    format_results,
)
from .config import Settings
from .domain_filter import normalize_domains
from .log import get_logger
from .models import (
    DEFAULT_MAX_RESULTS,
    AllowedDomainsArgs,
    FtrackDocsArgs,
    SearchRequest,
    ToolArgumentError,
    UnknownToolError,
    WebSearchArgs,
    parse_tool_arguments,
)
from .protocol import InvalidRequest, ProtocolError, Request, encode, failure, parse_request, salvage_id, success
from .search import DuckDuckGoLiteClient

PROTOCOL_VERSION = "2024-11-05"
NOTIFICATION_PREFIX = "notifications/"

logger = get_logger("server")


def _dump(model) -> dict:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def _text_result(text: str, is_error: bool = False) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


def _tool_error(message: str) -> CallToolResult:
    return _text_result(f"Error: {message}", is_error=True)


class WebSearchServer:
    """Routes JSON-RPC requests to handlers and tool calls to the search client."""

    def __init__(self, settings: Settings, search_client: DuckDuckGoLiteClient | None = None):
        self.settings = settings
        self.search_client = search_client if search_client is not None else DuckDuckGoLiteClient(settings)
        self._methods: dict[str, Callable[[Any], dict]] = {
            "initialize": self._initialize,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
            "notifications/initialized": self._initialized,
        }
        self._tools: dict[type, Callable[[Any], CallToolResult]] = {
            WebSearchArgs: self._web_search,
            AllowedDomainsArgs: self._get_allowed_domains,
            FtrackDocsArgs: self._search_ftrack_docs,
        }
        logger.info("Domain filter initialized with %d allowed domains", len(settings.allowed_domains))

    # --- transport ---

    def run(self, stdin: TextIO | None = None, stdout: TextIO | None = None, stop_event: threading.Event | None = None) -> None:
        """Serve until end of input or until ``stop_event`` is set.

        The stop event is checked between lines only; a search already in
        flight runs to completion.
        """
        stdin = stdin if stdin is not None else sys.stdin
        stdout = stdout if stdout is not None else sys.stdout
        logger.info("Starting %s...", SERVER_NAME)

        while stop_event is None or not stop_event.is_set():
            line = stdin.readline()
            if not line:
                break
            try:
                response = self.handle_line(line)
            except Exception as e:
                logger.exception("Error processing request: %s", line.strip())
                response = failure(salvage_id(line), ErrorData(code=INTERNAL_ERROR, message="Internal error", data=str(e)))
            if response is not None:
                self._send(stdout, response)

        logger.info("%s stopped", SERVER_NAME)

    def _send(self, stdout: TextIO, response: dict) -> None:
        """Write one response line; a response that cannot be written is replaced by an error."""
        try:
            payload = encode(response)
            logger.debug("Sending response: %s", payload)
            stdout.write(payload + "\n")
            stdout.flush()
        except Exception as e:
            logger.exception("Failed to send response")
            fallback = failure(response.get("id"), ErrorData(code=INTERNAL_ERROR, message="Internal error", data=str(e)))
            try:
                stdout.write(encode(fallback) + "\n")
                stdout.flush()
            except Exception:
                logger.exception("Failed to send error response")

    def handle_line(self, line: str) -> dict | None:
        """Handle one input line; returns the response, or None when none is due."""
        line = line.strip()
        if not line:
            return None
        logger.debug("Received request: %s", line)
        try:
            request = parse_request(line)
        except InvalidRequest as e:
            logger.error("Error processing request: %s", e)
            return failure(e.request_id, ErrorData(code=INTERNAL_ERROR, message="Internal error", data=str(e)))
        return self.handle_request(request)

    def handle_request(self, request: Request) -> dict | None:
        silent = request.is_notification and request.method.startswith(NOTIFICATION_PREFIX)
        try:
            handler = self._methods.get(request.method)
            if handler is None:
                if silent:
                    logger.debug("Ignoring notification: %s", request.method)
                    return None
                raise ProtocolError(ErrorData(code=METHOD_NOT_FOUND, message=f"Method not found: {request.method}"))
            result = handler(request.params)
        except ProtocolError as e:
            logger.warning("Request %s failed: %s", request.method, e.error.message)
            return None if silent else failure(request.id, e.error)
        except Exception as e:
            logger.exception("Error processing request: %s", request.method)
            if silent:
                return None
            return failure(request.id, ErrorData(code=INTERNAL_ERROR, message="Internal error", data=str(e)))

        # Notifications without an id never get a response
        if silent:
            return None
        return success(request.id, result)

    # --- methods ---

    def _initialize(self, params: Any) -> dict:
        logger.info("Handling initialize request")
        client = params.get("clientInfo") if isinstance(params, dict) else None
        if isinstance(client, dict):
            logger.info("Client: %s v%s", client.get("name", "Unknown"), client.get("version", "Unknown"))

        return _dump(
            InitializeResult(
                protocolVersion=PROTOCOL_VERSION,
                capabilities=ServerCapabilities(tools=ToolsCapability()),
                serverInfo=Implementation(name=SERVER_NAME, version=__version__),
            )
        )

    def _list_tools(self, params: Any) -> dict:
        logger.info("Handling tools/list request")
        return _dump(ListToolsResult(tools=list(TOOLS)))

    def _initialized(self, params: Any) -> dict:
        logger.info("Client initialized notification received")
        return {}

    def _call_tool(self, params: Any) -> dict:
        if not isinstance(params, dict) or not isinstance(params.get("name"), str):
            raise ProtocolError(ErrorData(code=INVALID_PARAMS, message="Invalid tool call parameters"))
        name = params["name"]
        arguments = params.get("arguments")
        if arguments is not None and not isinstance(arguments, dict):
            raise ProtocolError(ErrorData(code=INVALID_PARAMS, message="Tool arguments must be an object"))

        logger.info("Handling tool call: %s", name)
        try:
            args = parse_tool_arguments(name, arguments)
        except (ToolArgumentError, UnknownToolError) as e:
            logger.warning("Tool call %s rejected: %s", name, e)
            return _dump(_tool_error(str(e)))
        return _dump(self._tools[type(args)](args))

    # --- tools ---

    def _web_search(self, args: WebSearchArgs) -> CallToolResult:
        allowed = None if args.allowed_domains is None else normalize_domains(args.allowed_domains)
        results = self.search_client.search(
            SearchRequest(query=args.query, allowed_domains=allowed, max_results=args.max_results)
        )
        return _text_result(format_results(results, args.query))

    def _get_allowed_domains(self, args: AllowedDomainsArgs) -> CallToolResult:
        return _text_result(format_allowed_domains(self.settings.allowed_domains))

    def _search_ftrack_docs(self, args: FtrackDocsArgs) -> CallToolResult:
        query = build_ftrack_query(args.query, args.doc_type)
        results = self.search_client.search(
            SearchRequest(query=query, allowed_domains=FTRACK_DOMAINS, max_results=DEFAULT_MAX_RESULTS)
        )
        return _text_result(format_results(results, query, FTRACK_SEARCH_LABEL))
