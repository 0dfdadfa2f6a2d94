"""Tests for the shared HTTP fetcher and session credentials."""
import httpx
import pytest

from src.auth.session import CookieSession
from src.errors import TransportError


@pytest.mark.asyncio
async def test_post_sends_body_and_headers(make_fetcher):
    """Test POST requests carry the body and merged headers."""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    async with make_fetcher(handler) as fetcher:
        response = await fetcher.post(
            "https://mobile.free.fr/account/v2/api/SI/invoices",
            headers=CookieSession("sid=1").apply({"Accept": "application/json"}),
            data={"phone": "0612345678"},
        )

    assert response.json() == {"ok": True}
    request = seen[0]
    assert request.method == "POST"
    assert request.headers["Cookie"] == "sid=1"
    assert request.headers["Accept"] == "application/json"
    assert request.headers["User-Agent"] == "tvgame-tests"
    assert request.content == b"phone=0612345678"


@pytest.mark.asyncio
async def test_post_error_status(make_fetcher):
    """Test a non-2xx POST answer is a transport failure."""
    async with make_fetcher(lambda request: httpx.Response(401)) as fetcher:
        with pytest.raises(TransportError) as exc_info:
            await fetcher.post("https://mobile.free.fr/login")

    assert exc_info.value.status_code == 401
    assert exc_info.value.url == "https://mobile.free.fr/login"


@pytest.mark.asyncio
async def test_get_timeout(make_fetcher):
    """Test a timeout is a transport failure without status."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    async with make_fetcher(handler) as fetcher:
        with pytest.raises(TransportError) as exc_info:
            await fetcher.get_text("https://www.tf1.fr/")

    assert exc_info.value.status_code is None


def test_cookie_session_apply():
    """Test the cookie is added to a copy of the headers."""
    headers = {"Accept": "application/json"}

    assert CookieSession("sid=1").apply(headers) == {"Accept": "application/json", "Cookie": "sid=1"}
    assert headers == {"Accept": "application/json"}
    assert CookieSession(None).apply(headers) == headers
