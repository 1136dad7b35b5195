import io
import os
import zipfile

import pytest

from skufolders import importer
from skufolders.exceptions import ArchiveDecodeError, InputError
from skufolders.models.payload import ImagePayload


def zip_input(name: str, entries: dict[str, bytes], content_type: str = "application/zip") -> ImagePayload:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for entry_name, data in entries.items():
            if entry_name.endswith("/"):
                zf.writestr(zipfile.ZipInfo(entry_name), b"")
            else:
                zf.writestr(entry_name, data)
    return ImagePayload(filename=name, data=buffer.getvalue(), content_type=content_type)


def image_input(name: str, data: bytes = b"img", content_type: str = "image/jpeg") -> ImagePayload:
    return ImagePayload(filename=name, data=data, content_type=content_type)


def test_archive_detection_by_type_or_extension():
    assert importer.is_archive(ImagePayload("batch.ZIP", b"", ""))
    assert importer.is_archive(ImagePayload("batch", b"", "application/x-zip-compressed"))
    assert not importer.is_archive(ImagePayload("photo.jpg", b"", "image/jpeg"))


def test_extract_images_from_zip_filters_by_extension():
    archive = zip_input(
        "batch.zip",
        {
            "folder/": b"",
            "folder/shoe-1.JPG": b"one",
            "nested/deep/shoe-2.webp": b"two",
            "notes.txt": b"ignore",
            "logo.svg": b"ignore",
            "anim.gif": b"gif",
        },
    )
    images = importer.extract_images_from_zip(archive)
    assert [image.filename for image in images] == ["shoe-1.JPG", "shoe-2.webp", "anim.gif"]
    assert images[0].data == b"one"
    assert images[0].content_type == "image/jpeg"
    assert images[1].content_type == "image/webp"


def test_extract_images_from_corrupt_zip_raises():
    broken = ImagePayload("broken.zip", b"not a zip at all", "application/zip")
    with pytest.raises(ArchiveDecodeError, match="Failed to read broken.zip"):
        importer.extract_images_from_zip(broken)


def test_collect_images_orders_direct_images_before_archive_contents():
    inputs = [
        zip_input("batch.zip", {"z-1.png": b"z1", "z-2.png": b"z2"}),
        image_input("direct.jpg"),
        ImagePayload("readme.txt", b"text", "text/plain"),
        image_input("second.png", content_type="image/png"),
    ]
    result = importer.collect_images(inputs)
    assert [image.filename for image in result.images] == ["direct.jpg", "second.png", "z-1.png", "z-2.png"]
    assert result.errors == []
    assert result.error_message is None


def test_collect_images_isolates_archive_failures():
    inputs = [
        ImagePayload("bad-one.zip", b"junk", "application/zip"),
        zip_input("good.zip", {"ok.jpg": b"ok"}),
        ImagePayload("bad-two.zip", b"more junk", "application/zip"),
        image_input("direct.jpg"),
    ]
    result = importer.collect_images(inputs)
    assert [image.filename for image in result.images] == ["direct.jpg", "ok.jpg"]
    assert len(result.errors) == 2
    assert result.error_message.startswith("Some files failed to process: ")
    assert "bad-one.zip" in result.error_message
    assert "bad-two.zip" in result.error_message
    assert "; " in result.error_message


def test_collect_images_with_only_rejected_inputs():
    result = importer.collect_images([ImagePayload("a.txt", b"x", "text/plain")])
    assert result.images == []
    assert result.errors == []


def test_read_input_paths_walks_directories_sorted(tmp_path):
    root = tmp_path / "photos"
    (root / "sub").mkdir(parents=True)
    (root / "b.jpg").write_bytes(b"b")
    (root / "a.png").write_bytes(b"a")
    (root / "sub" / "c.webp").write_bytes(b"c")
    single = tmp_path / "lone.gif"
    single.write_bytes(b"g")

    inputs = importer.read_input_paths([str(root), str(single)])

    assert [item.filename for item in inputs] == ["a.png", "b.jpg", "c.webp", "lone.gif"]
    assert inputs[0].content_type == "image/png"
    assert inputs[3].data == b"g"


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="Symlinks unsupported on this platform")
def test_read_input_paths_skips_symlinks(tmp_path):
    root = tmp_path / "photos"
    root.mkdir()
    real = tmp_path / "real.jpg"
    real.write_bytes(b"r")
    os.symlink(real, root / "link.jpg")
    (root / "kept.jpg").write_bytes(b"k")
    assert [item.filename for item in importer.read_input_paths([str(root)])] == ["kept.jpg"]


def test_read_input_paths_missing_path(tmp_path):
    with pytest.raises(InputError, match="Path does not exist"):
        importer.read_input_paths([str(tmp_path / "nope")])


def test_read_input_paths_requires_paths():
    with pytest.raises(InputError):
        importer.read_input_paths([])
