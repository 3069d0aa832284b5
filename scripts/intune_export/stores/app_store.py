"""Apple App Store listing metadata via the public iTunes lookup API.

Per-star rating counts are not part of the lookup payload; they come from
the customer-reviews ratings page, which answers per storefront.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

import requests
from bs4 import BeautifulSoup

from scripts.intune_export.config import StoreConfig
from scripts.intune_export.models import IOS, StoreMetadata
from scripts.intune_export.stores.base import AppNotFoundError, BaseStoreProvider

logger = logging.getLogger("intune_export.stores.app_store")

LOOKUP_API_URL = "https://itunes.apple.com/lookup"
RATINGS_URL = "https://itunes.apple.com/{country}/customer-reviews/id{id}?displayable-kind=11"

# iTunes storefront ids, sent as X-Apple-Store-Front
STOREFRONTS = {
    "us": 143441,
    "fr": 143442,
    "de": 143443,
    "gb": 143444,
    "ca": 143455,
    "au": 143460,
    "jp": 143462,
    "in": 143467,
}


def parse_ratings(html: str) -> tuple[int, dict[str, int]]:
    """Return (total ratings, {"5": n, ..., "1": n}) from the ratings page."""
    soup = BeautifulSoup(html, "html.parser")

    count_el = soup.select_one(".rating-count")
    match = re.search(r"\d+", count_el.get_text().replace(",", "")) if count_el else None
    total = int(match.group()) if match else 0

    histogram: dict[str, int] = {}
    for index, el in enumerate(soup.select(".vote .total")):
        text = el.get_text().replace(",", "").strip()
        histogram[str(5 - index)] = int(text) if text.isdigit() else 0
    return total, histogram


class AppStoreProvider(BaseStoreProvider):
    PLATFORM = IOS
    ID_COLUMN = "itunesId"

    def __init__(self, config: StoreConfig, session: Optional[requests.Session] = None) -> None:
        super().__init__(config)
        self._session = session or requests.Session()

    def fetch_ratings(self, identifier: str) -> tuple[int, dict[str, int]]:
        storefront = STOREFRONTS.get(self.country.lower(), STOREFRONTS["us"])
        resp = self._session.get(
            RATINGS_URL.format(country=self.country, id=identifier),
            headers={"X-Apple-Store-Front": f"{storefront},12"},
            timeout=self.config.timeout,
        )
        resp.raise_for_status()
        return parse_ratings(resp.text)

    def fetch(self, identifier: str) -> Optional[StoreMetadata]:
        params = {"id": identifier, "country": self.country, "entity": "software"}
        resp = self._session.get(LOOKUP_API_URL, params=params, timeout=self.config.timeout)
        resp.raise_for_status()
        results = resp.json().get("results", [])
        if not results:
            raise AppNotFoundError("App not found (404)")
        rec = results[0]

        ratings, histogram = self.fetch_ratings(identifier)
        logger.debug("Fetched %d ratings for %s", ratings, identifier)

        return StoreMetadata(
            title=rec.get("trackName"),
            url=rec.get("trackViewUrl"),
            description=rec.get("description"),
            icon=rec.get("artworkUrl512") or rec.get("artworkUrl100"),
            genre=rec.get("primaryGenreName"),
            released=rec.get("releaseDate"),
            updated=rec.get("currentVersionReleaseDate"),
            developer_id=rec.get("artistId"),
            developer=rec.get("artistName"),
            developer_url=rec.get("artistViewUrl"),
            developer_website=rec.get("sellerUrl"),
            score=rec.get("averageUserRating"),
            reviews=rec.get("userRatingCount"),
            ratings=ratings,
            histogram=histogram,
        )
