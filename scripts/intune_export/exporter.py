"""Dump the app table to CSV and pretty-printed JSON."""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Sequence

from scripts.intune_export.db import Database

logger = logging.getLogger("intune_export.exporter")


def header_for(rows: Iterable[dict[str, Any]], fallback: Sequence[str] = ()) -> list[str]:
    """Union of row keys in first-seen order."""
    header: dict[str, None] = {}
    for row in rows:
        for key in row:
            header.setdefault(key, None)
    return list(header) or list(fallback)


def write_csv(path: Path, rows: list[dict[str, Any]], fallback_header: Sequence[str] = ()) -> None:
    with open(path, "w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(
            fh,
            fieldnames=header_for(rows, fallback_header),
            lineterminator="\n",
            quoting=csv.QUOTE_NONNUMERIC,
        )
        writer.writeheader()
        writer.writerows(rows)


def write_json(path: Path, rows: list[dict[str, Any]]) -> None:
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(rows, fh, indent=2, ensure_ascii=False, default=_json_default)


def _json_default(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def export_to_csv_and_json(db: Database, csv_path: Path, json_path: Path) -> int:
    """Write every row to both files, overwriting them. Returns the row count."""
    rows = db.all_rows()
    csv_path.parent.mkdir(parents=True, exist_ok=True)
    json_path.parent.mkdir(parents=True, exist_ok=True)

    write_csv(csv_path, rows, fallback_header=db.columns())
    write_json(json_path, rows)
    logger.info(
        "Exported data to %s & %s", csv_path, json_path, extra={"records": len(rows)}
    )
    return len(rows)
