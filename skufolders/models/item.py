"""
Module: item
Purpose: Dataclass representing one organized image.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

from .payload import ImagePayload


def new_item_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Item:
    """
    One image unit inside a group.

    prefix_override is None when the global default prefix applies. Any
    string, including "", replaces the default at export time.
    """

    id: str
    payload: ImagePayload
    prefix_override: Optional[str] = None

    @property
    def filename(self) -> str:
        return self.payload.filename
