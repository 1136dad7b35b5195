import pytest

from skufolders import utils
from skufolders.exceptions import SkuFoldersError


def test_osc8_link_format():
    link = utils.osc8_link("/tmp/file", "Label")
    assert link.startswith("\033]8;;file:///tmp/file\aLabel\033]8;;\a")
    # default label falls back to path
    default_link = utils.osc8_link("/tmp/other")
    assert "/tmp/other" in default_link
    assert "Label" not in default_link


@pytest.mark.parametrize(
    "size, expected",
    [(0, "0 B"), (1023, "1023 B"), (2048, "2.00 KB"), (5 * 1024**2, "5.00 MB"), (3 * 1024**3, "3.00 GB")],
)
def test_human_readable_size(size, expected):
    assert utils.human_readable_size(size) == expected


def test_ensure_directory_creates_nested(tmp_path):
    target = tmp_path / "a" / "b"
    utils.ensure_directory(str(target))
    assert target.is_dir()


def test_ensure_directory_failure_raises(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(SkuFoldersError):
        utils.ensure_directory(str(blocker / "child"))
