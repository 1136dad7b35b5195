"""
Module: session
Purpose: Stateful workspace holding the committed group snapshot, busy flags and previews.
"""

from __future__ import annotations

import threading
from typing import List, Optional

from . import exporter
from .config import NamingConfig
from .exceptions import InputError
from .importer import ImportResult, InputFile, collect_images
from .models.exportplan import ExportPlan
from .models.payload import ImagePayload
from .previews import PreviewHandle, PreviewRegistry
from .store import GroupStore
from .utils import log_info, log_warning

BUILDING = "building"
EXPORTING_ALL = "exporting-all"
EXPORTING_GROUP = "exporting-group:"


class Session:
    """
    One user's organizing workspace.

    The committed GroupStore snapshot can be read at any time. Mutations
    compute the next snapshot in full and commit it in one assignment, then
    release the previews of items that left the store. Building and
    exporting are guarded by busy flags; a duplicate trigger is rejected
    (returns None) instead of queued.
    """

    def __init__(self, config: Optional[NamingConfig] = None):
        self.config = config or NamingConfig()
        self.previews = PreviewRegistry(width=self.config.thumbnail_width)
        self.pending: List[ImagePayload] = []
        self.last_error: Optional[str] = None
        self._store = GroupStore()
        self._busy: set[str] = set()
        self._lock = threading.Lock()

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------ state
    @property
    def store(self) -> GroupStore:
        return self._store

    @property
    def busy_flags(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._busy)

    @property
    def is_building(self) -> bool:
        return BUILDING in self.busy_flags

    @property
    def is_exporting(self) -> bool:
        return any(flag.startswith("exporting") for flag in self.busy_flags)

    @property
    def exporting_group(self) -> Optional[str]:
        for flag in self.busy_flags:
            if flag.startswith(EXPORTING_GROUP):
                return flag[len(EXPORTING_GROUP):]
        return None

    def _try_claim(self, flag: str, conflict_prefix: str) -> bool:
        with self._lock:
            if any(held.startswith(conflict_prefix) for held in self._busy):
                return False
            self._busy.add(flag)
            return True

    def _release_flag(self, flag: str) -> None:
        with self._lock:
            self._busy.discard(flag)

    def _replace_store(self, store: GroupStore) -> None:
        self.previews.release_all()
        self._store = store
        for items in store.values():
            for item in items:
                self.previews.acquire(item)

    def _commit(self, store: GroupStore) -> GroupStore:
        if store is self._store:
            return store
        previous_ids = self._store.item_ids()
        current_ids = store.item_ids()
        self._store = store
        for item_id in previous_ids - current_ids:
            self.previews.release(item_id)
        for item_id in current_ids - previous_ids:
            location = store.find_item(item_id)
            if location is not None:
                key, index = location
                self.previews.acquire(store[key][index])
        return store

    # --------------------------------------------------------------- building
    def load_inputs(self, inputs: List[InputFile]) -> Optional[ImportResult]:
        """
        Replace the pending batch with images found in `inputs`.

        Clears the current organization (and its previews) first. Archive
        failures are recorded in the result and in last_error; images from
        the other inputs are still kept.

        Raises:
            InputError: If no input files were given.
        """
        if not inputs:
            raise InputError("Please select some images first.")
        if not self._try_claim(BUILDING, BUILDING):
            log_warning("Ignoring import request while another build is running")
            return None
        try:
            self._replace_store(GroupStore())
            self.pending = []
            self.last_error = None
            result = collect_images(inputs)
            self.pending = list(result.images)
            self.last_error = result.error_message
            return result
        finally:
            self._release_flag(BUILDING)

    def organize(self) -> Optional[GroupStore]:
        """
        Build a fresh snapshot from the pending images (full replace).

        Raises:
            InputError: If no images are pending.
        """
        if not self.pending:
            raise InputError("Please select some images first.")
        if not self._try_claim(BUILDING, BUILDING):
            log_warning("Ignoring organize request while another build is running")
            return None
        try:
            self._replace_store(GroupStore.organize(self.pending))
            log_info(
                f"Organized {self._store.total_items()} image(s) into {len(self._store)} group(s)"
            )
            return self._store
        finally:
            self._release_flag(BUILDING)

    # -------------------------------------------------------------- mutations
    def duplicate_item(self, key: str, index: int) -> GroupStore:
        return self._commit(self._store.duplicate_item(key, index))

    def delete_item(self, key: str, item_id: str) -> GroupStore:
        return self._commit(self._store.delete_item(key, item_id))

    def delete_group(self, key: str) -> GroupStore:
        return self._commit(self._store.delete_group(key))

    def rename_or_merge_group(self, old_key: str, new_key: str) -> GroupStore:
        return self._commit(self._store.rename_or_merge_group(old_key, new_key))

    def reorder_within_group(self, key: str, from_index: int, to_index: int) -> GroupStore:
        return self._commit(self._store.reorder_within_group(key, from_index, to_index))

    def move_across_groups(
        self, source_key: str, source_index: int, target_key: str, target_index: int
    ) -> GroupStore:
        return self._commit(
            self._store.move_across_groups(source_key, source_index, target_key, target_index)
        )

    def merge_groups(self, source_key: str, target_key: str) -> GroupStore:
        return self._commit(self._store.merge_groups(source_key, target_key))

    def set_item_prefix(self, key: str, item_id: str, prefix: Optional[str]) -> GroupStore:
        return self._commit(self._store.set_item_prefix(key, item_id, prefix))

    def set_default_prefix(self, prefix: str) -> None:
        self.config.default_prefix = prefix

    # --------------------------------------------------------------- previews
    def preview(self, item_id: str) -> Optional[PreviewHandle]:
        return self.previews.get(item_id)

    def preview_cycle(self, key: str, index: int, step: int) -> Optional[int]:
        """Index reached by stepping through a group's previews, wrapping at both ends."""
        items = self._store.get(key)
        if not items:
            return None
        return (index + step) % len(items)

    # ---------------------------------------------------------------- export
    def plan(self, group_key: Optional[str] = None) -> ExportPlan:
        return exporter.plan_export(self._store, self.config, group_key)

    def export_all(self, destination_dir: str) -> Optional[str]:
        """
        Write every group to organized_images.zip in destination_dir.

        Returns:
            Archive path, or None when the store is empty or an export is
            already running.

        Raises:
            ExportError: If writing fails; the store is left untouched.
        """
        if not self._store:
            return None
        if not self._try_claim(EXPORTING_ALL, "exporting"):
            log_warning("Ignoring export request while another export is running")
            return None
        try:
            return exporter.write_archive(self.plan(), destination_dir)
        finally:
            self._release_flag(EXPORTING_ALL)

    def export_group(self, key: str, destination_dir: str) -> Optional[str]:
        """
        Write one group to "<key>.zip" as a flat archive.

        Returns:
            Archive path, or None when the group is missing or an export is
            already running.

        Raises:
            ExportError: If writing fails.
        """
        if key not in self._store:
            return None
        flag = f"{EXPORTING_GROUP}{key}"
        if not self._try_claim(flag, "exporting"):
            log_warning(f"Ignoring export request for '{key}' while another export is running")
            return None
        try:
            return exporter.write_archive(self.plan(key), destination_dir)
        finally:
            self._release_flag(flag)

    # --------------------------------------------------------------- teardown
    def close(self) -> None:
        released = self.previews.release_all()
        self._store = GroupStore()
        self.pending = []
        if released:
            log_info(f"Released {released} preview handle(s)")
