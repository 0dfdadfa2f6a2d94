"""HTTP client shared by the channel scrapers and the invoice client."""
import logging
from dataclasses import dataclass, field
from typing import Optional

import httpx

from src.config import config
from src.errors import TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchSettings:
    """Read-only request settings injected into every fetcher."""

    user_agent: str
    accept_language: str
    timeout: float
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_config(cls) -> "FetchSettings":
        return cls(
            user_agent=config.USER_AGENT,
            accept_language=config.ACCEPT_LANGUAGE,
            timeout=config.TIMEOUT,
        )

    def default_headers(self) -> dict[str, str]:
        headers = {
            "User-Agent": self.user_agent,
            "Accept-Language": self.accept_language,
        }
        headers.update(self.headers)
        return headers


class HtmlFetcher:
    """
    Thin async wrapper around httpx.AsyncClient.

    Every failure (timeout, network error, non-2xx status) surfaces as a
    TransportError. No retries here: callers decide.
    """

    def __init__(
        self,
        settings: Optional[FetchSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or FetchSettings.from_config()
        limits = httpx.Limits(
            max_connections=100,
            max_keepalive_connections=20,
        )
        client_kwargs = {
            "timeout": self.settings.timeout,
            "follow_redirects": True,
            "limits": limits,
            "headers": self.settings.default_headers(),
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        else:
            client_kwargs["http2"] = True
        self.client = httpx.AsyncClient(**client_kwargs)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, str]] = None,
        **kwargs,
    ) -> httpx.Response:
        """Send a request, raising TransportError on any failure."""
        try:
            response = await self.client.request(method, url, headers=headers, params=params, **kwargs)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning(f"HTTP {status} for {url}")
            raise TransportError(f"HTTP {status} for {url}", url=url, status_code=status) from e
        except httpx.TimeoutException as e:
            logger.warning(f"Timeout for {url}: {e}")
            raise TransportError(f"Timeout for {url}", url=url) from e
        except httpx.HTTPError as e:
            logger.warning(f"Network error for {url}: {e}")
            raise TransportError(f"Network error for {url}: {e}", url=url) from e

    async def get(self, url: str, headers: Optional[dict[str, str]] = None, **kwargs) -> httpx.Response:
        return await self.request("GET", url, headers=headers, **kwargs)

    async def post(self, url: str, headers: Optional[dict[str, str]] = None, **kwargs) -> httpx.Response:
        return await self.request("POST", url, headers=headers, **kwargs)

    async def get_text(self, url: str, headers: Optional[dict[str, str]] = None) -> str:
        response = await self.get(url, headers=headers)
        return response.text

    async def get_bytes(self, url: str, headers: Optional[dict[str, str]] = None) -> bytes:
        response = await self.get(url, headers=headers)
        return response.content
