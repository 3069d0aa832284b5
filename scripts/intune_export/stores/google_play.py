"""Google Play listing metadata via google-play-scraper."""

from __future__ import annotations

import logging
from typing import Optional

from google_play_scraper import app as gplay_app

from scripts.intune_export.models import ANDROID, StoreMetadata
from scripts.intune_export.stores.base import BaseStoreProvider

logger = logging.getLogger("intune_export.stores.google_play")


class GooglePlayProvider(BaseStoreProvider):
    PLATFORM = ANDROID
    ID_COLUMN = "packageId"

    def fetch(self, identifier: str) -> Optional[StoreMetadata]:
        details = gplay_app(identifier, lang=self.language, country=self.country)
        if not details:
            return None

        # google-play-scraper reports "updated" in epoch seconds
        updated = details.get("updated")
        if isinstance(updated, (int, float)) and not isinstance(updated, bool):
            updated = int(updated) * 1000

        return StoreMetadata(
            title=details.get("title"),
            url=details.get("url"),
            description=details.get("description"),
            min_installs=details.get("minInstalls"),
            max_installs=details.get("realInstalls"),
            icon=details.get("icon"),
            genre=details.get("genre"),
            released=details.get("released"),
            updated=updated,
            developer_id=details.get("developerId"),
            developer_email=details.get("developerEmail"),
            developer=details.get("developer"),
            developer_url=details.get("developerUrl"),
            developer_website=details.get("developerWebsite"),
            developer_address=details.get("developerAddress"),
            score=details.get("score"),
            reviews=details.get("reviews"),
            ratings=details.get("ratings"),
            histogram=details.get("histogram"),
        )
