"""
DuckDuckGo lite search client.

Zero authentication required: results are scraped from the lite HTML endpoint
(https://lite.duckduckgo.com/lite/). The markup is not a stable contract, so
``extract`` fails closed and returns no results rather than raising, and
``DuckDuckGoLiteClient.search`` turns every fetch failure into an
empty list. Callers cannot tell "no results" from "search unavailable".
"""
from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import requests
from bs4 import BeautifulSoup

from .config import Settings
from .domain_filter import domain_from_url, filter_results
from .log import get_logger
from .models import SearchRequest, SearchResult

# Fetch this many times max_results so domain filtering still leaves enough
OVERFETCH_FACTOR = 3

logger = get_logger("search")


def _is_result_node(tag) -> bool:
    if tag.name == "a":
        return tag.has_attr("href") and "nofollow" in tag.get("rel", [])
    if tag.name == "td":
        return "result-snippet" in tag.get("class", [])
    return False


def _text(tag) -> str:
    return " ".join(tag.get_text().split())


def unwrap_redirect(href: str) -> str:
    """Return the target of a DuckDuckGo ``/l/?uddg=`` redirect link, else ``href``."""
    parsed = urlparse(href)
    if parsed.path.startswith("/l/"):
        target = parse_qs(parsed.query).get("uddg")
        if target:
            return target[0]
    return href


def extract(page_text: str, limit: int | None = None) -> list[SearchResult]:
    """Extract search results from a lite results page.

    Result links and snippet cells are walked together in document order and
    each snippet attaches to the link right before it, so a result without a
    snippet never borrows the next one's. Links that do not resolve to an
    absolute http(s) URL are skipped.

    Args:
        page_text: HTML of the results page
        limit: Stop after this many results (default: no limit)

    Returns:
        List of SearchResult in page order
    """
    try:
        soup = BeautifulSoup(page_text, "html.parser")
        entries: list[list] = []
        for node in soup.find_all(_is_result_node):
            if node.name == "a":
                entries.append([node["href"], _text(node), None])
            elif entries and entries[-1][2] is None:
                entries[-1][2] = _text(node)

        results = []
        for href, title, snippet in entries:
            url = unwrap_redirect(href)
            domain = domain_from_url(url)
            if domain is None:
                continue
            results.append(SearchResult(title=title, url=url, snippet=snippet or "", domain=domain))
            if limit is not None and len(results) >= limit:
                break
        return results
    except Exception as e:
        logger.warning("Failed to parse DuckDuckGo lite HTML: %s", e)
        return []


class DuckDuckGoLiteClient:
    """Runs one search per call against the lite endpoint, no retries."""

    def __init__(self, settings: Settings, session: requests.Session | None = None):
        self.settings = settings
        self.session = session if session is not None else requests.Session()
        # Realistic browser user agent, the lite endpoint blocks obvious bots
        self.session.headers.update({"User-Agent": settings.user_agent})

    def _fetch(self, query: str) -> str:
        response = self.session.get(
            self.settings.search_url,
            params={"q": query},
            timeout=self.settings.request_timeout,
        )
        response.raise_for_status()
        return response.text

    def search(self, request: SearchRequest) -> list[SearchResult]:
        """Search and return at most ``request.max_results`` allowed results.

        ``request.allowed_domains`` replaces the configured allow-list when it
        is not None; an empty tuple there lifts all restrictions.
        """
        logger.info("Performing DuckDuckGo search for: %s", request.query)
        try:
            page = self._fetch(request.query)
        except requests.exceptions.Timeout:
            logger.warning("DuckDuckGo search timed out for query: %s", request.query)
            return []
        except requests.exceptions.RequestException as e:
            # DuckDuckGo may block or be unavailable
            logger.warning("DuckDuckGo search failed for query %s: %s", request.query, e)
            return []
        except Exception as e:
            logger.warning("DuckDuckGo search error for query %r: %s", request.query, e)
            return []

        results = extract(page, limit=request.max_results * OVERFETCH_FACTOR)
        logger.info("Retrieved %d raw search results", len(results))

        allow_list = request.allowed_domains
        if allow_list is None:
            allow_list = self.settings.allowed_domains
        if allow_list:
            before = len(results)
            results = filter_results(results, allow_list)
            logger.info("After domain filtering: %d results (was %d)", len(results), before)

        return results[: request.max_results]
