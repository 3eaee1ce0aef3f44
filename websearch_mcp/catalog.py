"""
Tool catalog and result formatting.

Tools:
  - web_search(query, allowed_domains, max_results): Search the web, optionally restricted to domains
  - get_allowed_domains(): List the server's configured domain restrictions
  - search_ftrack_docs(query, doc_type): Search ftrack developer documentation only
"""
from __future__ import annotations

from typing import Sequence

from mcp.types import Tool

from .models import DEFAULT_MAX_RESULTS, DOC_TYPES, SearchResult

FTRACK_DOMAINS = (
    "ftrack.com",
    "www.ftrack.com",
    "help.ftrack.com",
    "docs.ftrack.com",
    "developer.ftrack.com",
    "api.ftrack.com",
)
FTRACK_SEARCH_LABEL = "ftrack developer documentation"

_FTRACK_DOC_CLAUSES = {
    "all": "",
    "api": " (API OR python-api OR rest-api OR javascript-api)",
    "python-api": " python-api",
    "rest-api": " rest-api",
    "javascript-api": " javascript-api",
    "developer-guide": " (developer OR guide OR tutorial)",
}

NO_RESTRICTIONS_TEXT = "No domain restrictions configured - all domains allowed"

TOOLS = (
    Tool(
        name="web_search",
        description=(
            "Search the web for information, with optional domain filtering. "
            "Particularly useful for searching ftrack developer documentation and related resources."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The search query to execute",
                },
                "allowed_domains": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Optional array of domains to restrict search to (e.g., ['ftrack.com', 'github.com'])",
                },
                "max_results": {
                    "type": "number",
                    "description": f"Maximum number of results to return (default: {DEFAULT_MAX_RESULTS})",
                    "default": DEFAULT_MAX_RESULTS,
                },
            },
            "required": ["query"],
        },
    ),
    Tool(
        name="get_allowed_domains",
        description="Get the list of currently configured allowed domains for web search",
        inputSchema={
            "type": "object",
            "properties": {},
            "required": [],
        },
    ),
    Tool(
        name="search_ftrack_docs",
        description="Specialized search for ftrack developer documentation and API resources",
        inputSchema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The search query for ftrack documentation",
                },
                "doc_type": {
                    "type": "string",
                    "description": "Type of documentation to search",
                    "enum": list(DOC_TYPES),
                    "default": "all",
                },
            },
            "required": ["query"],
        },
    ),
)


def build_ftrack_query(query: str, doc_type: str = "all") -> str:
    """Restrict ``query`` to ftrack.com and add the keywords for ``doc_type``."""
    return f"site:ftrack.com {query}{_FTRACK_DOC_CLAUSES[doc_type]}"


def format_results(results: Sequence[SearchResult], query: str, label: str | None = None) -> str:
    scope = f" in {label}" if label else ""
    if not results:
        return f"No results found for query: '{query}'{scope}"

    lines = [f"Search results for '{query}'{scope} ({len(results)} results):", ""]
    for index, result in enumerate(results, start=1):
        lines.append(f"{index}. **{result.title}**")
        lines.append(f"   URL: {result.url}")
        lines.append(f"   Domain: {result.domain}")
        if result.snippet.strip():
            lines.append(f"   Summary: {result.snippet}")
        lines.append("")
    return "\n".join(lines)


def format_allowed_domains(domains: Sequence[str]) -> str:
    if not domains:
        return NO_RESTRICTIONS_TEXT
    return "\n- ".join(["Allowed domains:", *domains])
