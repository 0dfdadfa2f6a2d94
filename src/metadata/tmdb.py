"""Show posters and TMDb ids for game listings."""
import logging
from typing import Optional, Protocol

from src.config import config
from src.errors import ScraperError
from src.fetch.client import HtmlFetcher
from src.fetch.endpoints import TMDB_IMAGE_BASE_URL, TMDB_SEARCH_URL
from src.parse.models import GameListing, ShowMetadata

logger = logging.getLogger(__name__)


class ShowMetadataLookup(Protocol):
    async def find_show(self, title: str) -> Optional[ShowMetadata]:
        ...


def _image_url(path: Optional[str]) -> Optional[str]:
    return f"{TMDB_IMAGE_BASE_URL}{path}" if path else None


class TmdbLookup:
    """TV show search on The Movie Database."""

    def __init__(self, fetcher: HtmlFetcher, api_key: Optional[str] = None):
        self.fetcher = fetcher
        self.api_key = api_key or config.TMDB_API_KEY

    async def find_show(self, title: str) -> Optional[ShowMetadata]:
        """First search result for the title, None when nothing matches."""
        if not self.api_key or not title:
            return None
        response = await self.fetcher.get(
            TMDB_SEARCH_URL,
            params={"api_key": self.api_key, "query": title, "language": "fr-FR"},
        )
        try:
            results = response.json().get("results") or []
        except ValueError as e:
            logger.warning(f"[TMDB] invalid search response for '{title}': {e}")
            return None
        if not results:
            logger.debug(f"[TMDB] no result for '{title}'")
            return None
        show = results[0]
        return ShowMetadata(
            tmdb_id=show["id"],
            title=show.get("name") or title,
            poster_url=_image_url(show.get("poster_path")),
            backdrop_url=_image_url(show.get("backdrop_path")),
        )


def show_query(listing: GameListing) -> str:
    """"Koh Lanta - Question du jour" -> "Koh Lanta"."""
    return listing.title.split(" - ")[0].strip()


async def decorate_listing(listing: GameListing, lookup: ShowMetadataLookup) -> GameListing:
    """Set tmdb_id, and image_url when the listing has none. Lookup failures leave it unchanged."""
    try:
        show = await lookup.find_show(show_query(listing))
    except (ScraperError, KeyError, TypeError, AttributeError) as e:
        logger.warning(f"[TMDB] lookup failed for {listing.title}: {e}")
        return listing
    if show is None:
        return listing
    updates = {"tmdb_id": show.tmdb_id}
    if not listing.image_url and show.poster_url:
        updates["image_url"] = show.poster_url
    return listing.model_copy(update=updates)
