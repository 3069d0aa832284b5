"""Abstract base class for public store metadata providers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from scripts.intune_export.config import StoreConfig
from scripts.intune_export.models import StoreMetadata

logger = logging.getLogger("intune_export.stores")


class AppNotFoundError(LookupError):
    """The store has no listing for the requested identifier."""


class BaseStoreProvider(ABC):
    """Each provider declares PLATFORM and ID_COLUMN and overrides fetch()."""

    PLATFORM: str = ""
    # app table column holding the identifier this store understands
    ID_COLUMN: str = ""

    def __init__(self, config: StoreConfig) -> None:
        self.config = config
        self.country = config.country
        self.language = config.language

    @abstractmethod
    def fetch(self, identifier: str) -> Optional[StoreMetadata]:
        """Look up one app. Raises on provider failure."""

    def fetch_for_row(self, row: dict[str, Any]) -> Optional[StoreMetadata]:
        identifier = row.get(self.ID_COLUMN)
        if not identifier:
            raise AppNotFoundError(f"No {self.ID_COLUMN} to look up")
        logger.debug("Fetching %s app metadata for %s", self.PLATFORM, identifier)
        return self.fetch(str(identifier))
