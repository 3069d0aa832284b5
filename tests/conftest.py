import logging
from typing import Any, Dict, List, Optional

import pytest
import requests

from scripts.intune_export.config import ExportConfig, GraphConfig, StoreConfig
from scripts.intune_export.db import Database
from scripts.intune_export.logging_config import ROOT_LOGGER


class FakeResponse:
    def __init__(self, status_code: int, json_data: Any):
        self.status_code = status_code
        self._json = json_data
        self.text = str(json_data)

    def json(self):
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Records calls and replays queued responses keyed by URL."""

    def __init__(self, token: Optional[str] = "TOKEN123", pages: Optional[Dict[str, Any]] = None):
        self.token = token
        self.pages = pages or {}
        self.posts: List[Dict[str, Any]] = []
        self.gets: List[Dict[str, Any]] = []

    def post(self, url, data=None, headers=None, timeout=0):
        self.posts.append({"url": url, "data": data, "headers": headers})
        if self.token is None:
            return FakeResponse(200, {"error": "no token"})
        return FakeResponse(200, {"access_token": self.token, "expires_in": 3599})

    def get(self, url, params=None, headers=None, timeout=0):
        self.gets.append({"url": url, "params": params, "headers": headers})
        page = self.pages.get(url)
        if isinstance(page, FakeResponse):
            return page
        if page is None:
            return FakeResponse(404, {"error": "not found"})
        return FakeResponse(200, page)


def ios_app(app_id: str, itunes_id: str) -> Dict[str, Any]:
    return {
        "@odata.type": "#microsoft.graph.iosStoreApp",
        "id": app_id,
        "appStoreUrl": f"https://apps.apple.com/us/app/some-app/id{itunes_id}?uo=4",
    }


def android_app(app_id: str, package_id: str) -> Dict[str, Any]:
    return {
        "@odata.type": "#microsoft.graph.androidStoreApp",
        "id": app_id,
        "packageId": package_id,
        "appStoreUrl": f"https://play.google.com/store/apps/details?id={package_id}",
    }


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger(ROOT_LOGGER)
    handlers, level, propagate = list(root.handlers), root.level, root.propagate
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    root.propagate = propagate


@pytest.fixture
def db(tmp_path):
    database = Database(tmp_path / "output" / "intune-apps.db")
    yield database
    database.close()


@pytest.fixture
def graph_config():
    return GraphConfig(tenant_id="tenant", client_id="cid", client_secret="csec")


@pytest.fixture
def export_config(tmp_path, graph_config):
    return ExportConfig(
        graph=graph_config,
        store=StoreConfig(),
        output_dir=tmp_path / "output",
    )
