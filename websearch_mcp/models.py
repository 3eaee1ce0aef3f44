"""
Value types shared by the search client and the dispatcher.

Tool arguments arrive as untyped JSON objects. ``parse_tool_arguments`` turns
them into one typed value per tool, or raises ``ToolArgumentError`` with a
message that is shown to the calling agent as a tool error.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

DEFAULT_MAX_RESULTS = 10
DOC_TYPES = ("all", "api", "python-api", "rest-api", "javascript-api", "developer-guide")


@dataclass(frozen=True)
class SearchResult:
    title: str
    url: str
    snippet: str
    domain: str


@dataclass(frozen=True)
class SearchRequest:
    query: str
    allowed_domains: tuple[str, ...] | None = None
    max_results: int = DEFAULT_MAX_RESULTS


class ToolArgumentError(ValueError):
    """A tool was called with missing or invalid arguments."""


class UnknownToolError(LookupError):
    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


@dataclass(frozen=True)
class WebSearchArgs:
    query: str
    allowed_domains: tuple[str, ...] | None = None
    max_results: int = DEFAULT_MAX_RESULTS


@dataclass(frozen=True)
class AllowedDomainsArgs:
    pass


@dataclass(frozen=True)
class FtrackDocsArgs:
    query: str
    doc_type: str = "all"


ToolArguments = Union[WebSearchArgs, AllowedDomainsArgs, FtrackDocsArgs]


def _require_query(arguments: dict) -> str:
    query = arguments.get("query")
    if not isinstance(query, str) or not query.strip():
        raise ToolArgumentError("Query parameter is required")
    return query


def _positive_int(value: Any, name: str) -> int:
    # JSON numbers may arrive as floats (10.0) or, from loose clients, strings
    if isinstance(value, bool):
        raise ToolArgumentError(f"{name} must be a positive integer")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    elif isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise ToolArgumentError(f"{name} must be a positive integer") from None
    if not isinstance(value, int) or value < 1:
        raise ToolArgumentError(f"{name} must be a positive integer")
    return value


def _domain_list(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(d, str) for d in value):
        raise ToolArgumentError("allowed_domains must be an array of strings")
    return tuple(value)


def _parse_web_search(arguments: dict) -> WebSearchArgs:
    query = _require_query(arguments)
    max_results = arguments.get("max_results")
    allowed = arguments.get("allowed_domains")
    return WebSearchArgs(
        query=query,
        allowed_domains=None if allowed is None else _domain_list(allowed),
        max_results=DEFAULT_MAX_RESULTS if max_results is None else _positive_int(max_results, "max_results"),
    )


def _parse_ftrack_docs(arguments: dict) -> FtrackDocsArgs:
    query = _require_query(arguments)
    doc_type = arguments.get("doc_type")
    if doc_type is None:
        doc_type = "all"
    if doc_type not in DOC_TYPES:
        raise ToolArgumentError(f"doc_type must be one of: {', '.join(DOC_TYPES)}")
    return FtrackDocsArgs(query=query, doc_type=doc_type)


_PARSERS = {
    "web_search": _parse_web_search,
    "get_allowed_domains": lambda arguments: AllowedDomainsArgs(),
    "search_ftrack_docs": _parse_ftrack_docs,
}


def parse_tool_arguments(name: str, arguments: dict | None) -> ToolArguments:
    """Validate ``arguments`` for tool ``name`` and return the typed value."""
    parser = _PARSERS.get(name)
    if parser is None:
        raise UnknownToolError(name)
    return parser(arguments or {})
