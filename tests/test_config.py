from pathlib import Path

import pytest

from scripts.intune_export.config import ConfigError, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in (
        "TENANT_ID", "CLIENT_ID", "CLIENT_SECRET", "LOG_LEVEL", "NODE_ENV",
        "OUTPUT_DIR", "ENRICH_DELAY_SECONDS", "HTTP_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_missing_credentials_raise(monkeypatch):
    monkeypatch.setenv("TENANT_ID", "t")
    monkeypatch.setenv("CLIENT_ID", "c")
    with pytest.raises(ConfigError):
        load_config()


def test_cli_values_win_over_env(monkeypatch):
    monkeypatch.setenv("TENANT_ID", "env-tenant")
    monkeypatch.setenv("CLIENT_ID", "env-client")
    monkeypatch.setenv("CLIENT_SECRET", "s3cret")

    config = load_config(tenant_id="cli-tenant", output_name="apps", enrich_metadata=True)

    assert config.graph.tenant_id == "cli-tenant"
    assert config.graph.client_id == "env-client"
    assert config.graph.client_secret == "s3cret"
    assert config.enrich_metadata is True
    assert config.enrich_delay_seconds == 5.0
    assert config.db_path == Path("output") / "intune-apps.db"
    assert config.csv_path == Path("output") / "apps.csv"
    assert config.json_path == Path("output") / "apps.json"


def test_logging_settings(monkeypatch):
    monkeypatch.setenv("CLIENT_SECRET", "s")
    monkeypatch.setenv("LOG_LEVEL", "warning")

    dev = load_config("t", "c")
    assert dev.logging.level == "WARNING"
    assert dev.logging.json_format is False

    monkeypatch.setenv("NODE_ENV", "production")
    prod = load_config("t", "c", debug=True)
    assert prod.logging.level == "DEBUG"
    assert prod.logging.json_format is True


def test_bad_number_env(monkeypatch):
    monkeypatch.setenv("CLIENT_SECRET", "s")
    monkeypatch.setenv("ENRICH_DELAY_SECONDS", "soon")
    with pytest.raises(ConfigError):
        load_config("t", "c")


def test_client_secret_is_used_verbatim(monkeypatch):
    monkeypatch.setenv("CLIENT_SECRET", "aws-secret://not/a/reference")
    config = load_config("t", "c")
    assert config.graph.client_secret == "aws-secret://not/a/reference"
