"""Microsoft Graph client: client-credentials token and mobileApps inventory."""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from scripts.intune_export.config import GraphConfig

logger = logging.getLogger("intune_export.graph")

GRAPH_SCOPE = "https://graph.microsoft.com/.default"
MOBILE_APPS_PATH = "/v1.0/deviceAppManagement/mobileApps"


class GraphError(RuntimeError):
    """Graph or the identity provider answered with an unusable payload."""


class GraphClient:
    """Exchanges client credentials for a token and pages through the inventory."""

    def __init__(self, config: GraphConfig, session: Optional[requests.Session] = None) -> None:
        self._config = config
        self._authority = config.authority_url.rstrip("/")
        self._base = config.api_base_url.rstrip("/")
        self._timeout = config.timeout
        self._session = session or requests.Session()
        self._token: Optional[str] = None

    @property
    def token_url(self) -> str:
        return f"{self._authority}/{self._config.tenant_id}/oauth2/v2.0/token"

    def get_token(self) -> str:
        """POST the client-credentials grant and return the bearer token."""
        data = {
            "client_id": self._config.client_id,
            "scope": GRAPH_SCOPE,
            "client_secret": self._config.client_secret,
            "grant_type": "client_credentials",
        }
        resp = self._session.post(
            self.token_url,
            data=data,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        token = resp.json().get("access_token")
        if not token:
            raise GraphError("Token response did not contain an access_token")
        self._token = token
        logger.debug("Acquired Graph access token for tenant %s", self._config.tenant_id)
        return token

    def _get_paginated(self, url: str, token: str) -> list[dict[str, Any]]:
        """Fetch all pages of a Graph collection, following @odata.nextLink."""
        results: list[dict[str, Any]] = []
        headers = {"Authorization": f"Bearer {token}"}
        page = 0

        while url:
            resp = self._session.get(url, headers=headers, timeout=self._timeout)
            resp.raise_for_status()
            data = resp.json()
            results.extend(data.get("value", []))
            page += 1
            logger.debug("Fetched page %d (%d records so far)", page, len(results))
            url = data.get("@odata.nextLink")
        return results

    def list_mobile_apps(self, token: Optional[str] = None) -> list[dict[str, Any]]:
        token = token or self._token or self.get_token()
        apps = self._get_paginated(f"{self._base}{MOBILE_APPS_PATH}", token)
        logger.info("Fetched %d Intune apps", len(apps), extra={"records": len(apps)})
        return apps
