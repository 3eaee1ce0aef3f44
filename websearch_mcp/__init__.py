"""
WebSearch MCP Server

Keyless web search exposed as MCP tools over stdio, using DuckDuckGo lite HTML
scraping with an optional domain allow-list. Includes a specialised search for
ftrack developer documentation.
"""

__version__ = "1.0.0"
SERVER_NAME = "WebSearch MCP Server"
