"""Credentials attached to telecom account requests."""
import logging
from typing import Optional, Protocol

from src.config import config

logger = logging.getLogger(__name__)


class AuthenticatedHttpSession(Protocol):
    """Anything able to add session credentials to outgoing headers."""

    def apply(self, headers: dict[str, str]) -> dict[str, str]:
        ...


class CookieSession:
    """Session backed by a cookie header copied from a logged-in browser."""

    def __init__(self, cookie: Optional[str]):
        self._cookie = cookie

    @classmethod
    def from_config(cls) -> "CookieSession":
        if not config.FREE_SESSION_COOKIE:
            logger.warning("FREE_SESSION_COOKIE not set, invoice requests will be anonymous")
        return cls(config.FREE_SESSION_COOKIE)

    def apply(self, headers: dict[str, str]) -> dict[str, str]:
        merged = dict(headers)
        if self._cookie:
            merged["Cookie"] = self._cookie
        return merged
