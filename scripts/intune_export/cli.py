"""CLI entry point: authenticate, fetch, persist, enrich, export."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import Callable, Optional, Sequence

from scripts.intune_export.config import DEFAULT_OUTPUT_NAME, ConfigError, ExportConfig, load_config
from scripts.intune_export.db import Database
from scripts.intune_export.enrichment import MetadataEnricher
from scripts.intune_export.exporter import export_to_csv_and_json
from scripts.intune_export.graph_client import GraphClient
from scripts.intune_export.ingest import ingest_apps
from scripts.intune_export.logging_config import configure_logging

logger = logging.getLogger("intune_export.cli")


def run(
    config: ExportConfig,
    graph: Optional[GraphClient] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> dict[str, int]:
    """Run every phase in order. Any exception outside the per-record loops is fatal."""
    graph = graph or GraphClient(config.graph)

    token = graph.get_token()
    apps = graph.list_mobile_apps(token)

    db = Database(config.db_path)
    try:
        results = ingest_apps(db, apps)
        logger.info("Ingestion results: %s", results)

        if config.enrich_metadata:
            logger.debug("Enriching app metadata")
            enricher = MetadataEnricher(
                db,
                config.store,
                delay_seconds=config.enrich_delay_seconds,
                sleep=sleep,
            )
            for key, count in enricher.run().items():
                results[f"metadata_{key}"] = count

        results["exported"] = export_to_csv_and_json(db, config.csv_path, config.json_path)
    finally:
        db.close()
    return results


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="intune-export",
        description="Export the Intune mobile app inventory to SQLite, CSV and JSON",
    )
    parser.add_argument("--tenantId", dest="tenant_id", help="Azure Tenant ID (or TENANT_ID)")
    parser.add_argument("--clientId", dest="client_id", help="Azure Client ID (or CLIENT_ID)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--metadata", action="store_true", help="Enrich app metadata")
    parser.add_argument(
        "--output",
        default=DEFAULT_OUTPUT_NAME,
        help=f"Output filename without extension (default: {DEFAULT_OUTPUT_NAME})",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(
            tenant_id=args.tenant_id,
            client_id=args.client_id,
            output_name=args.output,
            enrich_metadata=args.metadata,
            debug=args.debug,
        )
    except ConfigError as exc:
        print(exc, file=sys.stderr)
        sys.exit(1)

    configure_logging(config.logging)
    logger.debug("Debug logging enabled")

    try:
        results = run(config)
    except Exception as exc:
        logger.debug("Run failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    logger.info("Run complete: %s", results)
