import hashlib
import json

from skufolders import reporting, utils
from skufolders.config import NamingConfig
from skufolders.exporter import plan_export
from skufolders.store import GroupStore

from conftest import make_payload


def test_log_file_name_constant():
    assert reporting.LOG_FILE_NAME == "artifacts/skufolders.log"


def test_write_log_prefixes_levels(tmp_path):
    outfile = tmp_path / "logs" / "run.log"
    reporting.write_log(["[WARNING] careful", "plain entry"], outfile=str(outfile))
    lines = outfile.read_text().splitlines()
    assert lines[0].endswith("[WARNING] careful")
    assert lines[1].endswith("[INFO] plain entry")


def test_log_helpers_write_to_artifacts(tmp_path):
    path = reporting.ensure_log_initialized()
    utils.log_error("broken archive")
    utils.log_info("exported")
    content = (tmp_path / "artifacts" / "skufolders.log").read_text()
    assert path == str(tmp_path / "artifacts" / "skufolders.log")
    assert "[ERROR] broken archive" in content
    assert "[INFO] exported" in content


def test_write_export_manifest(tmp_path):
    store = GroupStore.organize([make_payload("a-1.jpg", b"abc"), make_payload("b.jpg", b"de")])
    plan = plan_export(store, NamingConfig(default_prefix="eci"))
    manifest = reporting.write_export_manifest(plan, str(tmp_path / "out" / "manifest.json"))

    payload = json.loads(open(manifest, encoding="utf-8").read())
    assert payload["schema_version"] == "1.0"
    assert payload["archive_name"] == "organized_images.zip"
    assert payload["group_count"] == 2
    assert payload["total_size"] == 5
    assert payload["entries"][0] == {
        "path": "a/1-eci-a-1.jpg",
        "source_filename": "a-1.jpg",
        "size": 3,
        "sha256": hashlib.sha256(b"abc").hexdigest(),
    }
