"""Shared fixtures: fake HTTP session, fake search client, sample lite pages."""
import pytest
import requests

from websearch_mcp.config import Settings
from websearch_mcp.models import SearchResult

# Trimmed copy of the lite results table: result 2 has no snippet, result 3 is
# a relative link, and result 2 goes through the /l/?uddg= redirect.
LITE_PAGE = """
<html><body>
<a href="https://duckduckgo.com/">DuckDuckGo</a>
<table>
<tr><td valign="top">1.&nbsp;</td>
    <td><a rel="nofollow" href="https://developer.ftrack.com/api/" class='result-link'>ftrack &amp; API</a></td></tr>
<tr><td>&nbsp;&nbsp;&nbsp;</td><td class='result-snippet'>The ftrack <b>API</b>   reference.</td></tr>
<tr><td>&nbsp;&nbsp;&nbsp;</td><td><span class='link-text'>developer.ftrack.com/api</span></td></tr>
<tr><td valign="top">2.&nbsp;</td>
    <td><a rel="nofollow" href="//duckduckgo.com/l/?uddg=https%3A%2F%2Fnotftrack.com%2Fpage&amp;rut=abc" class='result-link'>Not ftrack</a></td></tr>
<tr><td>&nbsp;&nbsp;&nbsp;</td><td><span class='link-text'>notftrack.com/page</span></td></tr>
<tr><td valign="top">3.&nbsp;</td>
    <td><a rel="nofollow" href="/relative/path" class='result-link'>Relative</a></td></tr>
<tr><td>&nbsp;&nbsp;&nbsp;</td><td class='result-snippet'>Relative snippet</td></tr>
<tr><td valign="top">4.&nbsp;</td>
    <td><a rel="nofollow" href="https://help.ftrack.com/x" class='result-link'>Help</a></td></tr>
<tr><td>&nbsp;&nbsp;&nbsp;</td><td class='result-snippet'>Help &quot;centre&quot;</td></tr>
</table>
</body></html>
"""


def lite_page(urls):
    """Build a lite results page with one linked, snippeted row per url."""
    rows = []
    for i, url in enumerate(urls, start=1):
        rows.append(
            f'<tr><td>{i}.</td><td><a rel="nofollow" href="{url}" class="result-link">Result {i}</a></td></tr>'
            f'<tr><td></td><td class="result-snippet">Snippet {i}</td></tr>'
        )
    return "<table>" + "".join(rows) + "</table>"


class FakeResponse:
    def __init__(self, text="", status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")


class FakeSession:
    def __init__(self, response=None, error=None):
        self.headers = {}
        self.response = response if response is not None else FakeResponse()
        self.error = error
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


class FakeSearchClient:
    def __init__(self, results=()):
        self.results = list(results)
        self.requests = []

    def search(self, request):
        self.requests.append(request)
        return list(self.results)


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def ftrack_results():
    return [
        SearchResult(
            title="API reference",
            url="https://developer.ftrack.com/api/",
            snippet="The ftrack API reference.",
            domain="developer.ftrack.com",
        ),
        SearchResult(title="Help", url="https://help.ftrack.com/x", snippet="", domain="help.ftrack.com"),
    ]
