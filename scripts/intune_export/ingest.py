"""Persist the raw Graph inventory into the app table, one row per platformAppKey."""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Iterable

from scripts.intune_export.db import Database
from scripts.intune_export.identifiers import resolve_record
from scripts.intune_export.models import InvalidRecordError

logger = logging.getLogger("intune_export.ingest")


def _record_id(raw: Any) -> Any:
    return raw.get("id") if isinstance(raw, dict) else raw


def ingest_apps(db: Database, apps: Iterable[dict[str, Any]]) -> dict[str, int]:
    """Insert every new app. Returns {"inserted", "existing", "skipped"} counts.

    Records that fail validation or insertion are logged and skipped; the loop
    always continues.
    """
    counts = {"inserted": 0, "existing": 0, "skipped": 0}

    for raw in apps:
        try:
            record = resolve_record(raw)
        except InvalidRecordError as exc:
            logger.error("Skipping inventory record %s: %s", _record_id(raw), exc)
            counts["skipped"] += 1
            continue
        except Exception as exc:
            logger.error(
                "Error processing app insertion for %s: %s", _record_id(raw), exc
            )
            counts["skipped"] += 1
            continue

        try:
            inserted = db.insert_if_absent(record)
        except sqlite3.Error as exc:
            logger.error(
                "Error inserting app %s: %s",
                record.platform_app_key,
                exc,
                extra={"platform_app_key": record.platform_app_key},
            )
            counts["skipped"] += 1
            continue

        if inserted:
            logger.info(
                "Inserted app %s into the database",
                record.platform_app_key,
                extra={"platform_app_key": record.platform_app_key},
            )
            counts["inserted"] += 1
        else:
            counts["existing"] += 1

    return counts
