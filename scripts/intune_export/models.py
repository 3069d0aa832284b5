"""Typed record shapes flowing from Graph through SQLite to the exports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

ANDROID = "android"
IOS = "ios"
PLATFORMS = (ANDROID, IOS)


class InvalidRecordError(ValueError):
    """An inventory record is missing a field required for ingestion."""


class UnsupportedPlatformError(InvalidRecordError):
    """The @odata.type discriminator names neither Android nor iOS."""


@dataclass(frozen=True)
class AppRecord:
    """One distinct app on a platform, as inserted at ingestion time.

    ``intune_app_id``, ``platform_app_key`` and ``platform`` are required;
    the store identifiers are None when they could not be resolved.
    """

    intune_app_id: str
    platform_app_key: str
    platform: str
    package_id: Optional[str] = None
    itunes_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.intune_app_id:
            raise InvalidRecordError("Inventory record has no id")
        if self.platform not in PLATFORMS:
            raise UnsupportedPlatformError(f"Unsupported platform {self.platform}")
        if not self.platform_app_key:
            raise InvalidRecordError("platformAppKey must not be empty")

    @property
    def app_identifier(self) -> Optional[str]:
        return self.package_id or self.itunes_id

    def as_row(self) -> dict[str, Any]:
        return {
            "intuneAppId": self.intune_app_id,
            "platformAppKey": self.platform_app_key,
            "packageId": self.package_id,
            "itunesId": self.itunes_id,
            "appIdentifier": self.app_identifier,
            "platform": self.platform,
        }


@dataclass
class StoreMetadata:
    """Descriptive fields returned by a store provider, before normalisation.

    ``released`` and ``updated`` hold whatever the provider returned: an ISO
    string, a datetime, or epoch milliseconds.
    """

    title: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None
    min_installs: Optional[int] = None
    max_installs: Optional[int] = None
    icon: Optional[str] = None
    genre: Optional[str] = None
    released: Any = None
    updated: Any = None
    developer_id: Optional[str] = None
    developer_email: Optional[str] = None
    developer: Optional[str] = None
    developer_url: Optional[str] = None
    developer_website: Optional[str] = None
    developer_address: Optional[str] = None
    score: Optional[float] = None
    reviews: Optional[int] = None
    ratings: Optional[int] = None
    histogram: Any = None
