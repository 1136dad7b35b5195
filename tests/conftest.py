import io

import pytest
from PIL import Image

from skufolders.models.payload import ImagePayload


@pytest.fixture(autouse=True)
def isolated_artifacts(tmp_path, monkeypatch):
    # Log and manifest files are written under ./artifacts.
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SKUFOLDERS_PREFIX", raising=False)
    monkeypatch.delenv("SKUFOLDERS_THUMB_WIDTH", raising=False)
    monkeypatch.delenv("SKUFOLDERS_THEME", raising=False)


def png_bytes(color: str = "red", size: tuple[int, int] = (400, 200)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=color).save(buffer, format="PNG")
    return buffer.getvalue()


def make_payload(filename: str, data: bytes | None = None, content_type: str = "image/jpeg") -> ImagePayload:
    return ImagePayload(filename=filename, data=data if data is not None else filename.encode(), content_type=content_type)
