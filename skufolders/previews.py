"""
Module: previews
Purpose: Per-item preview thumbnails and their explicit lifecycle.
"""

import io
from typing import Dict, Optional

from PIL import Image

from .config import DEFAULT_THUMBNAIL_WIDTH
from .exceptions import PreviewError, PreviewReleasedError
from .models.item import Item
from .utils import log_error, log_warning


class PreviewHandle:
    """
    Displayable reference for one item. The thumbnail is rendered on first
    use and dropped on release; a released handle cannot render again.
    """

    def __init__(self, item: Item, width: int):
        self.item_id = item.id
        self._payload = item.payload
        self._width = width
        self._thumbnail: Optional[bytes] = None
        self.released = False

    def thumbnail(self) -> bytes:
        """
        Return PNG bytes scaled to fit the configured width.

        Raises:
            PreviewReleasedError: If the handle was released.
            PreviewError: If the image cannot be decoded.
        """
        if self.released:
            raise PreviewReleasedError(f"Preview for item {self.item_id} was released")
        if self._thumbnail is None:
            self._thumbnail = render_thumbnail(self._payload.data, self._width, self._payload.filename)
        return self._thumbnail

    def release(self) -> None:
        self._thumbnail = None
        self.released = True


def render_thumbnail(data: bytes, width: int, label: str = "image") -> bytes:
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.thumbnail((width, width * 4), Image.Resampling.LANCZOS)
            if img.mode not in ("RGB", "RGBA", "L", "LA"):
                img = img.convert("RGBA")
            buffer = io.BytesIO()
            img.save(buffer, format="PNG")
            return buffer.getvalue()
    except Image.DecompressionBombError as exc:
        log_warning(f"Skipped preview for '{label}' due to decompression-bomb protection ({exc}).")
        raise PreviewError(f"Decompression bomb detected for {label}") from exc
    except Exception as exc:
        log_error(f"Failed to render preview for {label}: {exc}")
        raise PreviewError(f"Failed to render preview for {label}") from exc


class PreviewRegistry:
    """
    Owns one PreviewHandle per live item id.

    Handles are acquired when an item enters the session and must be
    released when it leaves, either individually or on a full replace.
    """

    def __init__(self, width: int = DEFAULT_THUMBNAIL_WIDTH):
        self.width = width
        self._handles: Dict[str, PreviewHandle] = {}

    def acquire(self, item: Item) -> PreviewHandle:
        handle = self._handles.get(item.id)
        if handle is None:
            handle = PreviewHandle(item, self.width)
            self._handles[item.id] = handle
        return handle

    def get(self, item_id: str) -> Optional[PreviewHandle]:
        return self._handles.get(item_id)

    def release(self, item_id: str) -> bool:
        handle = self._handles.pop(item_id, None)
        if handle is None:
            return False
        handle.release()
        return True

    def release_all(self) -> int:
        count = len(self._handles)
        for handle in self._handles.values():
            handle.release()
        self._handles.clear()
        return count

    def live_ids(self) -> set[str]:
        return set(self._handles)

    def __len__(self) -> int:
        return len(self._handles)
