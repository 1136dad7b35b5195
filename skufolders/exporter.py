"""
Module: exporter
Purpose: Plan archive layouts for organized groups and write them as zip files.
"""

import os
import re
import zipfile
from typing import List, Optional, Set

from .config import NamingConfig
from .exceptions import ExportError
from .keys import UNIDENTIFIED_GROUP
from .models.exportplan import ExportEntry, ExportPlan
from .models.item import Item
from .store import GroupStore
from .utils import ensure_directory, human_readable_size, log_error, log_info

ALL_GROUPS_ARCHIVE = "organized_images.zip"
_UNSAFE_PATH_CHARS = re.compile(r"[\\/\x00]")


def effective_prefix(item: Item, config: NamingConfig) -> str:
    """
    Resolve the prefix used for an item at export time. An explicit override
    wins even when it is empty; otherwise the global default applies.
    """
    if item.prefix_override is not None:
        return item.prefix_override.strip()
    return (config.default_prefix or "").strip()


def safe_path_component(name: str) -> str:
    """
    Make a group key or file name usable as one archive or filesystem path
    segment. Separators become "_" and leading dots are dropped, so the
    result never names a parent directory or a hidden file.
    """
    cleaned = _UNSAFE_PATH_CHARS.sub("_", name).lstrip(".").strip()
    return cleaned or UNIDENTIFIED_GROUP


def export_name_for(position: int, filename: str, prefix: str) -> str:
    if prefix:
        name = f"{position}-{prefix}-{filename}"
    else:
        name = f"{position}-{filename}"
    return safe_path_component(name)


def group_archive_name(group_key: str) -> str:
    return f"{safe_path_component(group_key)}.zip"


def _unique_folder(group_key: str, used: Set[str]) -> str:
    # Distinct keys such as "a/b" and "a_b" must not share a folder.
    base = safe_path_component(group_key)
    folder = base
    counter = 2
    while folder in used:
        folder = f"{base} ({counter})"
        counter += 1
    used.add(folder)
    return folder


def _group_entries(items: tuple[Item, ...], config: NamingConfig, folder: Optional[str]) -> List[ExportEntry]:
    entries: List[ExportEntry] = []
    for position, item in enumerate(items, start=1):
        name = export_name_for(position, item.filename, effective_prefix(item, config))
        path = f"{folder}/{name}" if folder is not None else name
        entries.append(ExportEntry(path=path, payload=item.payload))
    return entries


def plan_export(
    store: GroupStore,
    config: NamingConfig,
    group_key: Optional[str] = None,
) -> ExportPlan:
    """
    Map a store snapshot to an archive layout.

    Args:
        store: Snapshot to export.
        config: Naming configuration; the default prefix is read here.
        group_key: When given, plan only this group as a flat archive.

    Returns:
        ExportPlan whose entries are numbered 1..n per group in current item
        order. Full exports place each group under "<key>/". Keys and file
        names are reduced to single safe path segments. An unknown
        group_key yields an empty plan.
    """
    if group_key is not None:
        plan = ExportPlan(archive_name=group_archive_name(group_key))
        items = store.get(group_key)
        if items:
            plan.entries.extend(_group_entries(items, config, folder=None))
            plan.group_count = 1
        return plan

    plan = ExportPlan(archive_name=ALL_GROUPS_ARCHIVE)
    used_folders: Set[str] = set()
    for key, items in store.items():
        folder = _unique_folder(key, used_folders)
        plan.entries.extend(_group_entries(items, config, folder=folder))
        plan.group_count += 1
    return plan


def write_archive(plan: ExportPlan, destination_dir: str) -> str:
    """
    Write an export plan to a zip file.

    Args:
        plan: Archive layout to write.
        destination_dir: Folder that receives plan.archive_name.

    Returns:
        Absolute path of the written archive.

    Raises:
        ExportError: If the archive cannot be written or would land outside
            destination_dir. A partial file is removed before raising.
    """
    if not plan.entries:
        raise ExportError(f"Nothing to export for {plan.archive_name}")
    try:
        ensure_directory(destination_dir)
    except Exception as exc:
        raise ExportError(f"Failed to create zip file {plan.archive_name}.") from exc
    target_dir = os.path.abspath(destination_dir)
    archive_path = os.path.abspath(os.path.join(target_dir, plan.archive_name))
    if os.path.dirname(archive_path) != target_dir:
        log_error(f"Refusing to write {plan.archive_name!r} outside {target_dir}")
        raise ExportError(f"Invalid archive name {plan.archive_name}.")
    try:
        with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for entry in plan.entries:
                zf.writestr(entry.path, entry.payload.data)
    except Exception as exc:
        log_error(f"Failed to write archive {archive_path}: {exc}")
        if os.path.exists(archive_path):
            try:
                os.remove(archive_path)
            except OSError as cleanup_exc:
                log_error(f"Failed to remove partial archive {archive_path}: {cleanup_exc}")
        raise ExportError(f"Failed to create zip file {plan.archive_name}.") from exc
    log_info(
        f"Wrote {len(plan.entries)} image(s) from {plan.group_count} group(s) "
        f"to {archive_path} ({human_readable_size(plan.total_size)})"
    )
    return archive_path
