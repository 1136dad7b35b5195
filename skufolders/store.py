"""
Module: store
Purpose: Immutable snapshot of named, ordered image groups and its mutations.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from .keys import group_key_for
from .models.item import Item, new_item_id
from .models.payload import ImagePayload

IdFactory = Callable[[], str]
Group = Tuple[Item, ...]


class GroupStore(Mapping):
    """
    Ordered mapping of group key -> tuple of Items.

    A GroupStore is never mutated after construction. Every operation
    returns a new snapshot, or this same snapshot when the operation does
    not apply (missing group, missing item, out-of-range index).
    Groups are never empty and an item id appears in exactly one group.
    """

    __slots__ = ("_groups",)

    def __init__(self, groups: Optional[Iterable[Tuple[str, Iterable[Item]]]] = None):
        built: Dict[str, Group] = {}
        for key, items in groups or ():
            items = tuple(items)
            if items:
                built[key] = items
        self._groups = built

    @classmethod
    def _from_dict(cls, groups: Dict[str, Group]) -> "GroupStore":
        store = cls.__new__(cls)
        store._groups = {key: items for key, items in groups.items() if items}
        return store

    # ------------------------------------------------------------------ reading
    def __getitem__(self, key: str) -> Group:
        return self._groups[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._groups)

    def __len__(self) -> int:
        return len(self._groups)

    def __repr__(self) -> str:
        summary = ", ".join(f"{key!r}: {len(items)}" for key, items in self._groups.items())
        return f"GroupStore({{{summary}}})"

    def total_items(self) -> int:
        return sum(len(items) for items in self._groups.values())

    def item_ids(self) -> set[str]:
        return {item.id for items in self._groups.values() for item in items}

    def find_item(self, item_id: str) -> Optional[Tuple[str, int]]:
        """Return (group key, index) of an item id, or None."""
        for key, items in self._groups.items():
            for index, item in enumerate(items):
                if item.id == item_id:
                    return key, index
        return None

    def filenames(self) -> Dict[str, List[str]]:
        return {key: [item.filename for item in items] for key, items in self._groups.items()}

    # ------------------------------------------------------------- construction
    @classmethod
    def organize(
        cls,
        payloads: Iterable[ImagePayload],
        id_factory: IdFactory = new_item_id,
    ) -> "GroupStore":
        """
        Bucket payloads into groups keyed by their derived SKU/name.

        Args:
            payloads: Images in input order.
            id_factory: Callable producing fresh item ids.

        Returns:
            New GroupStore with groups in first-seen key order and items in
            input order. Empty input yields an empty store.
        """
        buckets: Dict[str, List[Item]] = {}
        for payload in payloads:
            key = group_key_for(payload.filename)
            buckets.setdefault(key, []).append(Item(id=id_factory(), payload=payload))
        return cls._from_dict({key: tuple(items) for key, items in buckets.items()})

    # ---------------------------------------------------------------- mutations
    def duplicate_item(self, key: str, index: int, id_factory: IdFactory = new_item_id) -> "GroupStore":
        """
        Insert a copy of the item at `index` right after it. The copy gets
        a new id and shares the payload and prefix override.
        """
        items = self._groups.get(key)
        if items is None or not 0 <= index < len(items):
            return self
        copy = replace(items[index], id=id_factory())
        groups = dict(self._groups)
        groups[key] = items[: index + 1] + (copy,) + items[index + 1 :]
        return self._from_dict(groups)

    def delete_item(self, key: str, item_id: str) -> "GroupStore":
        items = self._groups.get(key)
        if items is None:
            return self
        remaining = tuple(item for item in items if item.id != item_id)
        if len(remaining) == len(items):
            return self
        groups = dict(self._groups)
        if remaining:
            groups[key] = remaining
        else:
            del groups[key]
        return self._from_dict(groups)

    def delete_group(self, key: str) -> "GroupStore":
        if key not in self._groups:
            return self
        groups = dict(self._groups)
        del groups[key]
        return self._from_dict(groups)

    def rename_or_merge_group(self, old_key: str, new_key: str) -> "GroupStore":
        """
        Rename a group, or merge it into an existing group of the new name.

        Args:
            old_key: Group to rename.
            new_key: Target name; surrounding whitespace is ignored.

        Returns:
            Snapshot where `old_key` is gone and `new_key` holds its items.
            A rename keeps the group's position. When `new_key` already
            exists, the old items are appended after its own items.
        """
        new_key = (new_key or "").strip()
        if not new_key or new_key == old_key or old_key not in self._groups:
            return self
        moved = self._groups[old_key]
        if new_key in self._groups:
            groups = dict(self._groups)
            del groups[old_key]
            groups[new_key] = groups[new_key] + moved
            return self._from_dict(groups)
        renamed = {
            (new_key if key == old_key else key): items
            for key, items in self._groups.items()
        }
        return self._from_dict(renamed)

    def reorder_within_group(self, key: str, from_index: int, to_index: int) -> "GroupStore":
        """
        Move the item at `from_index` to `to_index` inside one group.
        `to_index` is clamped to the group length, so len() appends.
        """
        items = self._groups.get(key)
        if items is None or not 0 <= from_index < len(items) or to_index < 0:
            return self
        reordered = list(items)
        moved = reordered.pop(from_index)
        reordered.insert(min(to_index, len(reordered)), moved)
        groups = dict(self._groups)
        groups[key] = tuple(reordered)
        return self._from_dict(groups)

    def move_across_groups(
        self,
        source_key: str,
        source_index: int,
        target_key: str,
        target_index: int,
    ) -> "GroupStore":
        """
        Transfer one item between groups.

        The source group disappears when emptied; a missing target group is
        created at the end of the group order. Moving within the same group
        is a reorder.
        """
        if source_key == target_key:
            return self.reorder_within_group(source_key, source_index, target_index)
        source = self._groups.get(source_key)
        if source is None or not 0 <= source_index < len(source) or target_index < 0:
            return self
        moved = source[source_index]
        target = list(self._groups.get(target_key, ()))
        target.insert(min(target_index, len(target)), moved)
        groups = dict(self._groups)
        remaining = source[:source_index] + source[source_index + 1 :]
        if remaining:
            groups[source_key] = remaining
        else:
            del groups[source_key]
        groups[target_key] = tuple(target)
        return self._from_dict(groups)

    def merge_groups(self, source_key: str, target_key: str) -> "GroupStore":
        """Append every source item to the target and drop the source group."""
        if source_key == target_key:
            return self
        if source_key not in self._groups or target_key not in self._groups:
            return self
        groups = dict(self._groups)
        moved = groups.pop(source_key)
        groups[target_key] = groups[target_key] + moved
        return self._from_dict(groups)

    def set_item_prefix(self, key: str, item_id: str, prefix: Optional[str]) -> "GroupStore":
        """
        Set an item's prefix override to exactly `prefix`.
        An empty string is a real override; None restores the global default.
        """
        items = self._groups.get(key)
        if items is None:
            return self
        updated = []
        found = False
        for item in items:
            if item.id == item_id:
                item = replace(item, prefix_override=prefix)
                found = True
            updated.append(item)
        if not found:
            return self
        groups = dict(self._groups)
        groups[key] = tuple(updated)
        return self._from_dict(groups)
