"""Configuration via CLI flags, environment variables and .env files.

Command line flags win over TENANT_ID / CLIENT_ID; CLIENT_SECRET is only
ever read from the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DB_FILENAME = "intune-apps.db"
DEFAULT_OUTPUT_NAME = "intune_apps"


class ConfigError(ValueError):
    """Raised when required settings are missing or malformed."""


@dataclass(frozen=True)
class GraphConfig:
    tenant_id: str
    client_id: str
    client_secret: str
    authority_url: str = "https://login.microsoftonline.com"
    api_base_url: str = "https://graph.microsoft.com"
    timeout: float = 30.0


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    json_format: bool = False


@dataclass(frozen=True)
class StoreConfig:
    country: str = "us"
    language: str = "en"
    timeout: float = 30.0


@dataclass(frozen=True)
class ExportConfig:
    graph: GraphConfig
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    output_dir: Path = Path("output")
    output_name: str = DEFAULT_OUTPUT_NAME
    enrich_metadata: bool = False
    enrich_delay_seconds: float = 5.0

    @property
    def db_path(self) -> Path:
        return self.output_dir / DB_FILENAME

    @property
    def csv_path(self) -> Path:
        return self.output_dir / f"{self.output_name}.csv"

    @property
    def json_path(self) -> Path:
        return self.output_dir / f"{self.output_name}.json"


def _float_env(name: str, default: str) -> float:
    raw = os.environ.get(name, default)
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")


def load_logging_config(debug: bool = False) -> LoggingConfig:
    """Resolve log level and format once. --debug wins over LOG_LEVEL."""
    level = "DEBUG" if debug else os.environ.get("LOG_LEVEL", "INFO").upper()
    env = os.environ.get("NODE_ENV", "development")
    return LoggingConfig(level=level, json_format=env != "development")


def load_config(
    tenant_id: Optional[str] = None,
    client_id: Optional[str] = None,
    output_name: Optional[str] = None,
    enrich_metadata: bool = False,
    debug: bool = False,
) -> ExportConfig:
    """Build the run configuration. Explicit arguments take precedence over env vars.

    Raises ConfigError before any network call when a credential is missing.
    """
    load_dotenv()

    tenant_id = tenant_id or os.environ.get("TENANT_ID", "")
    client_id = client_id or os.environ.get("CLIENT_ID", "")
    client_secret = os.environ.get("CLIENT_SECRET", "")

    if not tenant_id or not client_id or not client_secret:
        raise ConfigError(
            "Please provide the tenantId, clientId and clientSecret as "
            "environment variables or command line arguments"
        )

    http_timeout = _float_env("HTTP_TIMEOUT_SECONDS", "30")

    graph = GraphConfig(
        tenant_id=tenant_id,
        client_id=client_id,
        client_secret=client_secret,
        authority_url=os.environ.get(
            "GRAPH_AUTHORITY_URL", "https://login.microsoftonline.com"
        ),
        api_base_url=os.environ.get("GRAPH_API_BASE_URL", "https://graph.microsoft.com"),
        timeout=http_timeout,
    )

    store = StoreConfig(
        country=os.environ.get("STORE_COUNTRY", "us"),
        language=os.environ.get("STORE_LANGUAGE", "en"),
        timeout=http_timeout,
    )

    return ExportConfig(
        graph=graph,
        logging=load_logging_config(debug),
        store=store,
        output_dir=Path(os.environ.get("OUTPUT_DIR", "output")),
        output_name=output_name or DEFAULT_OUTPUT_NAME,
        enrich_metadata=enrich_metadata,
        enrich_delay_seconds=_float_env("ENRICH_DELAY_SECONDS", "5"),
    )
