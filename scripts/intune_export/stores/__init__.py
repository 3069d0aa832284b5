"""Store metadata providers, loaded lazily by platform."""

from __future__ import annotations

import importlib
import logging
from typing import Optional

from scripts.intune_export.config import StoreConfig
from scripts.intune_export.stores.base import BaseStoreProvider

logger = logging.getLogger("intune_export.stores")

STORE_REGISTRY: dict[str, tuple[str, str]] = {
    # platform -> (module_path, class_name)
    "android": ("scripts.intune_export.stores.google_play", "GooglePlayProvider"),
    "ios": ("scripts.intune_export.stores.app_store", "AppStoreProvider"),
}


def get_provider(platform: str, config: StoreConfig) -> Optional[BaseStoreProvider]:
    """Instantiate the provider for a platform. Returns None if unsupported."""
    entry = STORE_REGISTRY.get(platform)
    if not entry:
        logger.error("Unsupported platform %s", platform)
        return None

    module_path, class_name = entry
    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)
    return cls(config)
