"""
Module: reporting
Purpose: Logging and export manifest utilities.
"""

import hashlib
import json
import os
from datetime import datetime, timezone
from typing import Any, List

from .models.exportplan import ExportPlan

ARTIFACTS_DIR = "artifacts"
LOG_FILE_NAME = os.path.join(ARTIFACTS_DIR, "skufolders.log")
MANIFEST_SCHEMA_VERSION = "1.0"


def artifact_path(filename: str) -> str:
    return os.path.abspath(os.path.join(ARTIFACTS_DIR, filename))


def ensure_log_initialized() -> str:
    """Ensure the SKU Folders log file exists and return its absolute path."""
    path = os.path.abspath(LOG_FILE_NAME)
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    with open(path, "a", encoding="utf-8"):
        pass
    return path


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def write_log(entries: List[str], outfile: str = LOG_FILE_NAME):
    """
    Append entries to logfile.
    """
    directory = os.path.dirname(os.path.abspath(outfile)) or "."
    os.makedirs(directory, exist_ok=True)
    timestamp = _timestamp()
    with open(outfile, "a", encoding="utf-8") as handle:
        for entry in entries:
            normalized = entry if entry.startswith("[") else f"[INFO] {entry}"
            handle.write(f"[{timestamp}] {normalized}\n")


def _manifest_entries(plan: ExportPlan) -> list[dict[str, Any]]:
    entries: list[dict[str, Any]] = []
    for entry in plan.entries:
        entries.append(
            {
                "path": entry.path,
                "source_filename": entry.payload.filename,
                "size": entry.payload.size,
                "sha256": hashlib.sha256(entry.payload.data).hexdigest(),
            }
        )
    return entries


def write_export_manifest(plan: ExportPlan, outfile: str) -> str:
    """
    Write a JSON manifest describing an export plan.

    Args:
        plan: Planned archive layout.
        outfile: Destination JSON path.

    Returns:
        Absolute path of the manifest.
    """
    path = os.path.abspath(outfile)
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    payload = {
        "schema_version": MANIFEST_SCHEMA_VERSION,
        "archive_name": plan.archive_name,
        "generated_at": _timestamp(),
        "group_count": plan.group_count,
        "total_size": plan.total_size,
        "entries": _manifest_entries(plan),
    }
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2)
    return path
