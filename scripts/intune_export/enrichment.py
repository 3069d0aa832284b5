"""Fill descriptive columns from the public stores, one app at a time."""

from __future__ import annotations

import json
import logging
import sqlite3
import time
from datetime import date, datetime, timezone
from typing import Any, Callable, Optional

from scripts.intune_export.config import StoreConfig
from scripts.intune_export.db import Database
from scripts.intune_export.models import StoreMetadata
from scripts.intune_export.stores import get_provider
from scripts.intune_export.stores.base import BaseStoreProvider

logger = logging.getLogger("intune_export.enrichment")

# Formats seen in store payloads besides ISO 8601, e.g. "Feb 26, 2015"
_FALLBACK_DATE_FORMATS = ("%b %d, %Y", "%B %d, %Y")


def to_epoch_seconds(value: Any) -> Optional[int]:
    """Normalise a provider timestamp to whole epoch seconds.

    Strings are parsed as ISO 8601 (naive values are UTC), numbers are
    epoch milliseconds. Unparseable input yields None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp())
    if isinstance(value, date):
        return to_epoch_seconds(datetime(value.year, value.month, value.day))
    if isinstance(value, (int, float)):
        return int(value // 1000)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return to_epoch_seconds(datetime.fromisoformat(text))
        except ValueError:
            pass
        for fmt in _FALLBACK_DATE_FORMATS:
            try:
                return to_epoch_seconds(datetime.strptime(text, fmt))
            except ValueError:
                continue
    logger.warning("Could not parse timestamp %r", value)
    return None


def metadata_to_fields(meta: StoreMetadata) -> dict[str, Any]:
    """Map provider metadata onto app table columns."""
    histogram = meta.histogram
    return {
        "title": meta.title,
        "url": meta.url,
        "description": meta.description,
        "minInstalls": meta.min_installs,
        "maxInstalls": meta.max_installs,
        "icon": meta.icon,
        "primaryGenre": meta.genre,
        "releasedAt": to_epoch_seconds(meta.released),
        "updatedAt": to_epoch_seconds(meta.updated),
        "developerId": None if meta.developer_id is None else str(meta.developer_id),
        "developerEmail": meta.developer_email,
        "developer": meta.developer,
        "developerUrl": meta.developer_url,
        "developerWebsite": meta.developer_website,
        "developerAddress": meta.developer_address,
        "score": meta.score,
        "reviews": meta.reviews,
        "ratings": meta.ratings,
        "ratingsHistogram": None if histogram is None else json.dumps(histogram),
    }


class MetadataEnricher:
    """Enrich every row whose title is still NULL, pausing between store calls.

    A provider error is written into ``title`` so the row is not retried on
    later runs. A provider that returns nothing leaves the row untouched.
    """

    def __init__(
        self,
        db: Database,
        config: StoreConfig,
        delay_seconds: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
        provider_factory: Callable[[str, StoreConfig], Optional[BaseStoreProvider]] = get_provider,
    ) -> None:
        self.db = db
        self.config = config
        self.delay_seconds = delay_seconds
        self._sleep = sleep
        self._provider_factory = provider_factory
        self._providers: dict[str, Optional[BaseStoreProvider]] = {}

    def _provider(self, platform: str) -> Optional[BaseStoreProvider]:
        if platform not in self._providers:
            self._providers[platform] = self._provider_factory(platform, self.config)
        return self._providers[platform]

    def enrich_row(self, row: dict[str, Any]) -> str:
        """Enrich one row. Returns "enriched", "failed" or "skipped"."""
        key = row["platformAppKey"]
        provider = self._provider(row.get("platform") or "")
        if provider is None:
            return "skipped"

        try:
            meta = provider.fetch_for_row(row)
        except Exception as exc:
            message = str(exc) or exc.__class__.__name__
            logger.error(
                "Error fetching %s metadata: %s",
                key,
                message,
                extra={"platform_app_key": key},
            )
            try:
                self.db.update_metadata(key, {"title": message})
            except sqlite3.Error as db_exc:
                logger.error("Error updating app metadata for %s: %s", key, db_exc)
                return "failed"
            logger.info("Updated app metadata for %s with error message", key)
            return "failed"

        if meta is None:
            logger.error("No app metadata found for %s", key)
            return "skipped"

        logger.debug("App metadata for %s: %r", key, meta)
        self.db.update_metadata(key, metadata_to_fields(meta))
        logger.info("Updated app metadata for %s", key, extra={"platform_app_key": key})
        return "enriched"

    def run(self) -> dict[str, int]:
        counts = {"enriched": 0, "failed": 0, "skipped": 0}
        rows = self.db.find_unenriched()
        logger.info("Enriching metadata for %d apps", len(rows), extra={"records": len(rows)})
        started = time.monotonic()

        for i, row in enumerate(rows):
            if i:
                self._sleep(self.delay_seconds)
            counts[self.enrich_row(row)] += 1

        logger.info(
            "Enrichment complete: %s",
            counts,
            extra={"duration_s": round(time.monotonic() - started, 3)},
        )
        return counts
