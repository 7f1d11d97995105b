# tools.py
# Demo tools. Plain functions with scalar signatures; the registry derives
# each tool's name and type descriptor from the function itself.
#
# Network tools never raise on ordinary failures; they return an
# "error: ..." string the model can read.

from urllib.parse import urlparse

import httpx

_USERS = {
    1: "Alice (age: 28, city: Beijing)",
    2: "Bob (age: 32, city: Shanghai)",
    3: "Charlie (age: 25, city: Shenzhen)",
}

USER_AGENT = "react-harness/0.1"


def add(a: int, b: int) -> int:
    return a + b


def multiply(a: int, b: int) -> int:
    return a * b


def square(n: int) -> int:
    return n * n


def get_user_info(user_id: int) -> str:
    return _USERS.get(user_id, f"User {user_id} not found")


def http_get(url: str) -> str:
    """GET `url` with a 10 s timeout and return the body text."""
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return f"error: invalid URL {url!r}"
    if parsed.scheme not in ("http", "https"):
        return f"error: unsupported scheme {parsed.scheme!r}"

    try:
        response = httpx.get(
            url,
            headers={"User-Agent": USER_AGENT},
            timeout=10,
            follow_redirects=True,
        )
    except httpx.HTTPError as e:
        return f"error: request failed: {e}"

    if not response.is_success:
        return f"error: HTTP {response.status_code} {response.reason_phrase}"
    return response.text


def search_internet(query: str) -> str:
    """Top four DuckDuckGo hits as title, snippet and link blocks."""
    from ddgs import DDGS

    query = query.strip()
    if not query:
        return "error: empty query"

    try:
        hits = list(DDGS().text(query, max_results=4))
    except Exception as e:
        return f"error: search failed: {e}"
    if not hits:
        return f"no results for {query!r}"

    return "\n\n".join(
        f"{hit.get('title', '')}\n{hit.get('body', '')}\n{hit.get('href', '')}" for hit in hits
    )
