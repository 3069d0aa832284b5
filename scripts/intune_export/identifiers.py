"""Derive platform and platformAppKey for raw Graph mobileApp records."""

from __future__ import annotations

import logging
from typing import Any, Optional

from scripts.intune_export.models import (
    ANDROID,
    IOS,
    AppRecord,
    InvalidRecordError,
    UnsupportedPlatformError,
)

logger = logging.getLogger("intune_export.identifiers")

PLAY_STORE_PREFIX = "https://play.google.com/store/apps/details?id="
APP_STORE_PREFIX = "https://apps.apple.com/us/app/"

NULL_SEGMENT = "null"


def detect_platform(odata_type: Optional[str]) -> str:
    """Map an @odata.type such as ``#microsoft.graph.iosStoreApp`` to a platform."""
    if not odata_type:
        raise UnsupportedPlatformError("Record has no @odata.type")
    if not isinstance(odata_type, str):
        raise InvalidRecordError(f"@odata.type must be a string, got {odata_type!r}")
    if "android" in odata_type:
        return ANDROID
    if "ios" in odata_type:
        return IOS
    raise UnsupportedPlatformError(f"Unsupported platform {odata_type}")


def parse_store_url(url: Optional[str]) -> Optional[str]:
    """Extract the package name or numeric iTunes id from a store URL.

    Returns None for URLs on neither store.
    """
    store_id = None
    if not url:
        return None
    if not isinstance(url, str):
        raise InvalidRecordError(f"appStoreUrl must be a string, got {url!r}")
    if url.startswith(PLAY_STORE_PREFIX):
        store_id = url[len(PLAY_STORE_PREFIX):].split("&")[0]
    elif url.startswith(APP_STORE_PREFIX):
        path = url[len(APP_STORE_PREFIX):].split("?")[0]
        last = path.split("/")[-1]
        store_id = last[2:] if last.startswith("id") else last
    logger.debug("Parsed appStoreUrl %s to %s", url, store_id)
    return store_id or None


def resolve_record(raw: dict[str, Any]) -> AppRecord:
    """Validate one inventory record and build its AppRecord.

    Raises UnsupportedPlatformError / InvalidRecordError for records that
    must be skipped.
    """
    intune_app_id = raw.get("id")
    if not intune_app_id:
        raise InvalidRecordError("Inventory record has no id")

    platform = detect_platform(raw.get("@odata.type"))

    package_id = raw.get("packageId") or None
    itunes_id = None
    if not package_id:
        parsed = parse_store_url(raw.get("appStoreUrl"))
        if platform == IOS:
            itunes_id = parsed
        else:
            package_id = parsed

    store_id = package_id or itunes_id
    if store_id is None:
        logger.warning(
            "Could not resolve a store id for %s (%s)",
            intune_app_id,
            raw.get("appStoreUrl"),
            extra={"platform": platform},
        )

    return AppRecord(
        intune_app_id=intune_app_id,
        platform_app_key=f"{platform}-{store_id or NULL_SEGMENT}",
        platform=platform,
        package_id=package_id,
        itunes_id=itunes_id,
    )
